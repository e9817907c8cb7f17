# src/goldnexus/application/services/price_cache.py
"""
Staleness-gated read-through cache over the upstream price feed.

A stored quote younger than the TTL is served as-is. An older (or missing)
quote triggers one upstream fetch; on success the record is rewritten, on
failure the stored record is served unchanged. Only when there is nothing
stored and the feed fails does a lookup raise `UpstreamUnavailable`. A storage
error is handled like a feed failure. Database work runs in a worker thread.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Awaitable, Callable, ContextManager, Dict, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from goldnexus.domain.entities import PriceQuote, QuoteLookup, QuoteOutcome
from goldnexus.domain.errors import UnknownInstrument, UpstreamUnavailable
from goldnexus.infrastructure.db.repository import PriceQuoteRepository
from goldnexus.infrastructure.db.uow import session_scope
from goldnexus.infrastructure.monitoring.metrics import PRICE_LOOKUPS, PRICE_STORAGE_FAILURES, PRICE_UPSTREAM_FAILURES

log = logging.getLogger(__name__)

PriceFetcher = Callable[[], Awaitable[Optional[Decimal]]]

DEFAULT_TTL = timedelta(hours=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PriceCache:
    """
    :param fetchers: upstream fetch strategy per instrument id. A fetcher returns
        the new price, or None when the feed could not provide one.
    :param repo_class: repository bound to a session, exposing get/upsert.
    :param session_factory: context manager yielding a transactional session.
    :param single_flight: collapse concurrent refreshes of one instrument onto a
        single in-flight fetch.
    """

    def __init__(
        self,
        fetchers: Mapping[str, PriceFetcher],
        repo_class: type = PriceQuoteRepository,
        session_factory: Callable[[], ContextManager] = session_scope,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utcnow,
        single_flight: bool = False,
    ):
        self.fetchers = dict(fetchers)
        self.repo_class = repo_class
        self.session_factory = session_factory
        self.ttl = ttl
        self.clock = clock
        self.single_flight = single_flight
        self._in_flight: Dict[str, asyncio.Future] = {}

    def is_stale(self, quote: Optional[PriceQuote], now: datetime) -> bool:
        return quote is None or now - quote.updated_at > self.ttl

    async def get_quote(self, instrument_id: str, force_refresh: bool = False) -> PriceQuote:
        return (await self.lookup(instrument_id, force_refresh=force_refresh)).quote

    async def lookup(self, instrument_id: str, force_refresh: bool = False) -> QuoteLookup:
        if instrument_id not in self.fetchers:
            raise UnknownInstrument(instrument_id)

        try:
            # Sync DB access runs off the event loop.
            existing = await asyncio.to_thread(self._load, instrument_id)
        except SQLAlchemyError as e:
            log.error("Could not read stored price for %s: %s", instrument_id, e)
            PRICE_STORAGE_FAILURES.labels(instrument_id, "read").inc()
            raise UpstreamUnavailable(instrument_id) from None

        if not force_refresh and not self.is_stale(existing, self.clock()):
            PRICE_LOOKUPS.labels(instrument_id, QuoteOutcome.FRESH.value).inc()
            return QuoteLookup(existing, QuoteOutcome.FRESH)

        if self.single_flight:
            result = await self._shared_refresh(instrument_id, existing)
        else:
            result = await self._refresh(instrument_id, existing)
        PRICE_LOOKUPS.labels(instrument_id, result.outcome.value).inc()
        return result

    def _load(self, instrument_id: str) -> Optional[PriceQuote]:
        with self.session_factory() as session:
            return self.repo_class(session).get(instrument_id)

    def _store(self, quote: PriceQuote) -> PriceQuote:
        with self.session_factory() as session:
            return self.repo_class(session).upsert(quote)

    async def _fetch(self, instrument_id: str) -> Optional[Decimal]:
        try:
            price = await self.fetchers[instrument_id]()
        except Exception as e:
            log.error("Upstream fetch for %s raised: %s", instrument_id, e, exc_info=True)
            return None
        if price is None:
            return None
        try:
            price = Decimal(str(price))
        except ArithmeticError:
            log.error("Upstream returned a non-numeric price for %s: %r", instrument_id, price)
            return None
        if not price.is_finite() or price <= 0:
            log.error("Upstream returned an unusable price for %s: %s", instrument_id, price)
            return None
        return price

    def _fall_back(self, instrument_id: str, existing: Optional[PriceQuote]) -> QuoteLookup:
        if existing is None:
            raise UpstreamUnavailable(instrument_id)
        log.warning("Serving stored %s price from %s.", instrument_id, existing.updated_at)
        return QuoteLookup(existing, QuoteOutcome.STALE)

    async def _refresh(self, instrument_id: str, existing: Optional[PriceQuote]) -> QuoteLookup:
        log.info("Price for %s is stale. Fetching from upstream...", instrument_id)
        new_price = await self._fetch(instrument_id)

        if new_price is None:
            PRICE_UPSTREAM_FAILURES.labels(instrument_id).inc()
            return self._fall_back(instrument_id, existing)

        quote = PriceQuote(
            instrument_id=instrument_id,
            current_price=new_price,
            previous_price=existing.current_price if existing else new_price,
            updated_at=self.clock(),
        )
        try:
            saved = await asyncio.to_thread(self._store, quote)
        except SQLAlchemyError as e:
            log.error("Could not store new %s price %s: %s", instrument_id, new_price, e)
            PRICE_STORAGE_FAILURES.labels(instrument_id, "write").inc()
            return self._fall_back(instrument_id, existing)
        log.info("Updated %s price: %s (previous %s)", instrument_id, saved.current_price, saved.previous_price)
        return QuoteLookup(saved, QuoteOutcome.REFRESHED)

    async def _shared_refresh(self, instrument_id: str, existing: Optional[PriceQuote]) -> QuoteLookup:
        pending = self._in_flight.get(instrument_id)
        if pending is not None:
            log.debug("Joining in-flight refresh for %s", instrument_id)
            return await asyncio.shield(pending)

        future = asyncio.get_running_loop().create_future()
        self._in_flight[instrument_id] = future
        try:
            result = await self._refresh(instrument_id, existing)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved so an unawaited failure is not reported at GC time.
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            self._in_flight.pop(instrument_id, None)
