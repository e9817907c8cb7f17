from prometheus_client import Counter

PRICE_LOOKUPS = Counter(
    "gn_price_lookups_total",
    "Price cache lookups by instrument and outcome",
    ["instrument", "outcome"],
)
PRICE_UPSTREAM_FAILURES = Counter(
    "gn_price_upstream_failures_total",
    "Failed upstream price fetches",
    ["instrument"],
)
AUTH_FAILURES = Counter(
    "gn_auth_failures_total",
    "Session verification failures by operation",
    ["operation"],
)
PRICE_STORAGE_FAILURES = Counter(
    "gn_price_storage_failures_total",
    "Failed reads and writes of stored quotes",
    ["instrument", "operation"],
)
