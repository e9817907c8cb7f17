# File: src/goldnexus/boot.py
"""
Composition root: builds the services the API resolves from `app.state.services`.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from goldnexus.config import Settings, settings as default_settings
from goldnexus.application.services import PriceCache, SessionManager
from goldnexus.infrastructure.db.repository import PriceQuoteRepository, UserRepository, lookup_user_role
from goldnexus.infrastructure.pricing.swissquote import SwissquoteClient
from goldnexus.interfaces.api.security.auth import JwtKeys, get_jwt_keys
from goldnexus.interfaces.api.security.cookies import build_cookie_transport

log = logging.getLogger(__name__)


def build_price_fetchers(client: SwissquoteClient, instrument_ids) -> Dict[str, Any]:
    """One upstream fetch strategy per configured instrument."""
    def _fetcher(instrument_id: str):
        async def fetch():
            return await client.get_ask(instrument_id)
        return fetch
    return {instrument_id: _fetcher(instrument_id) for instrument_id in instrument_ids}


def build_services(cfg: Settings = default_settings, keys: Optional[JwtKeys] = None) -> Dict[str, Any]:
    """Build and wire all application services."""
    log.info("Building application services...")
    services: Dict[str, Any] = {}

    try:
        services["user_repo_class"] = UserRepository
        services["price_repo_class"] = PriceQuoteRepository

        swissquote = SwissquoteClient(
            base_url=cfg.SWISSQUOTE_BASE_URL,
            platform=cfg.SWISSQUOTE_PLATFORM,
            server=cfg.SWISSQUOTE_SERVER,
            timeout=cfg.SWISSQUOTE_TIMEOUT_SECONDS,
        )
        services["price_client"] = swissquote
        services["price_cache"] = PriceCache(
            fetchers=build_price_fetchers(swissquote, [cfg.GOLD_INSTRUMENT_ID]),
            repo_class=PriceQuoteRepository,
            ttl=timedelta(seconds=cfg.PRICE_TTL_SECONDS),
            single_flight=cfg.PRICE_SINGLE_FLIGHT,
        )

        keys = keys or get_jwt_keys()
        services["session_manager"] = SessionManager(
            private_key=keys.private_key,
            public_key=keys.public_key,
            role_lookup=lookup_user_role,
            algorithm=cfg.JWT_ALG,
            access_ttl=timedelta(minutes=cfg.ACCESS_TOKEN_TTL_MINUTES),
            refresh_ttl=timedelta(days=cfg.REFRESH_TOKEN_TTL_DAYS),
        )
        services["cookie_transport"] = build_cookie_transport(cfg)

        log.info("All services built and wired successfully.")
        return services

    except Exception as e:
        log.critical(f"Service building failed: {e}", exc_info=True)
        raise
