# src/goldnexus/interfaces/api/routers/gold_price.py
"""
Gold price endpoints: a read-through GET for the storefront ticker and a
secret-protected POST for the scheduled refresh job.
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from goldnexus.application.services import PriceCache
from goldnexus.config import settings
from goldnexus.domain.errors import UnknownInstrument, UpstreamUnavailable
from goldnexus.interfaces.api.deps import get_price_cache
from goldnexus.interfaces.api.schemas import PriceQuoteOut, PriceRefreshOut

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/gold-price", tags=["Gold Price"])


def _matches(candidate: Optional[str], secret: str) -> bool:
    if candidate is None:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), secret.encode("utf-8"))


def require_cron_secret(
    x_cron_secret: Optional[str] = Header(default=None),
    x_vercel_cron_secret: Optional[str] = Header(default=None),
    authorization: Optional[str] = Header(default=None),
) -> bool:
    """
    Accepts `X-Cron-Secret: <secret>`, Vercel's `X-Vercel-Cron-Secret: <secret>`
    or `Authorization: Bearer <secret>`.
    """
    secret = settings.CRON_SECRET
    if not secret:
        log.error("[CRON] CRON_SECRET environment variable is not set. Denying request.")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Configuration error")

    bearer = None
    if authorization and authorization.startswith("Bearer "):
        bearer = authorization[len("Bearer "):]

    # Evaluate every candidate so the response time does not depend on which header matched.
    checks = [_matches(candidate, secret) for candidate in (x_cron_secret, x_vercel_cron_secret, bearer)]
    if not any(checks):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return True


@router.get("", response_model=PriceQuoteOut, response_model_by_alias=True)
async def get_gold_price(
    instrument: Optional[str] = Query(default=None),
    cache: PriceCache = Depends(get_price_cache),
):
    instrument_id = (instrument or settings.GOLD_INSTRUMENT_ID).upper()
    try:
        quote = await cache.get_quote(instrument_id)
    except UnknownInstrument as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except UpstreamUnavailable:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Gold price data not available.")
    return PriceQuoteOut.from_quote(quote)


@router.post("/update", response_model=PriceRefreshOut, response_model_by_alias=True)
async def update_gold_price(
    _: bool = Depends(require_cron_secret),
    cache: PriceCache = Depends(get_price_cache),
):
    log.info("[CRON] Authorized request received. Fetching new gold price...")
    try:
        result = await cache.lookup(settings.GOLD_INSTRUMENT_ID, force_refresh=True)
    except UpstreamUnavailable:
        log.error("[CRON] Gold price feed failed and no stored price exists.")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to update gold price data.")

    if result.refreshed:
        message = "Gold price updated successfully"
    else:
        message = "Gold price feed unavailable; serving last known price"
        log.warning("[CRON] %s", message)
    return PriceRefreshOut(message=message, refreshed=result.refreshed, price=PriceQuoteOut.from_quote(result.quote))
