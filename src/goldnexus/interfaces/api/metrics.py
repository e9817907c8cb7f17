# src/goldnexus/interfaces/api/metrics.py
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from fastapi import APIRouter, Request, Response

router = APIRouter(prefix="/metrics", tags=["metrics"])

REQUESTS = Counter("gn_requests_total", "API requests by method and status code", ["method", "status"])
LATENCY = Histogram(
    "gn_request_latency_seconds",
    "API request latency by route template",
    ["route"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)


def route_label(request: Request) -> str:
    """Route template (`/api/users/me`), not the raw path, to keep label cardinality bounded."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


@router.get("", include_in_schema=False)
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
