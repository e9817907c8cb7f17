# src/goldnexus/infrastructure/pricing/swissquote.py
"""
Client for Swissquote's public forex/metals quote feed.

The feed returns one entry per (platform, server) pair, each with a list of
spread profiles. The ask of the first spread profile on the configured
platform/server is used as the instrument's price.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx

log = logging.getLogger(__name__)


def instrument_path(instrument_id: str) -> str:
    """'XAU_USD' -> 'XAU/USD'."""
    base, sep, quote = instrument_id.strip().upper().partition("_")
    if not sep or not base or not quote:
        raise ValueError(f"Instrument id must look like BASE_QUOTE, got '{instrument_id}'")
    return f"{base}/{quote}"


class SwissquoteClient:
    """
    Fetches ask prices. Every failure is logged and reported as None; callers
    decide what "unavailable" means for them.
    """
    DEFAULT_BASE_URL = "https://forex-data-feed.swissquote.com"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        platform: str = "SwissquoteLtd",
        server: str = "Live5",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.platform = platform
        self.server = server
        self.timeout = timeout
        self._transport = transport

    def _url(self, instrument_id: str) -> str:
        return f"{self.base_url}/public-quotes/bboquotes/instrument/{instrument_path(instrument_id)}"

    def extract_ask(self, data: Any) -> Optional[Decimal]:
        """Pick the ask of the configured platform/server out of a feed response."""
        if not isinstance(data, list):
            log.warning("Swissquote response is not a list: %r", type(data).__name__)
            return None

        for entry in data:
            if not isinstance(entry, dict):
                continue
            topo = entry.get("topo") or {}
            if topo.get("platform") != self.platform or topo.get("server") != self.server:
                continue
            profiles = entry.get("spreadProfilePrices") or []
            if not profiles:
                return None
            try:
                ask = Decimal(str(profiles[0]["ask"]))
            except (KeyError, TypeError, InvalidOperation):
                log.warning("Malformed spread profile from Swissquote: %r", profiles[0])
                return None
            if not ask.is_finite() or ask <= 0:
                log.warning("Swissquote returned a non-positive ask: %s", ask)
                return None
            return ask

        log.warning("No %s/%s entry in Swissquote response.", self.platform, self.server)
        return None

    async def get_ask(self, instrument_id: str) -> Optional[Decimal]:
        try:
            url = self._url(instrument_id)
        except ValueError as e:
            log.error(str(e))
            return None

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, headers={"Cache-Control": "no-cache"})
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            log.error("Swissquote request failed for %s with status %s", instrument_id, e.response.status_code)
            return None
        except (httpx.HTTPError, ValueError) as e:
            log.error("Swissquote fetch failed for %s: %s", instrument_id, e)
            return None

        price = self.extract_ask(data)
        if price is not None:
            log.debug("Swissquote ask for %s: %s", instrument_id, price)
        return price
