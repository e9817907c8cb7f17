# src/goldnexus/infrastructure/http/auth_client.py
"""
HTTP client for the storefront API that carries the session cookies and applies
the caller-side renewal policy: on a 401, refresh the session once, retry the
original request once, and give up with `SessionExpired` if that still fails.
"""

import asyncio
import logging
from typing import Any, Optional

import httpx

from goldnexus.domain.errors import SessionExpired

log = logging.getLogger(__name__)


class AuthenticatedClient:
    REFRESH_PATH = "/api/auth/refresh"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        self._pending_refresh: Optional[asyncio.Task] = None

    async def __aenter__(self) -> "AuthenticatedClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    async def _do_refresh(self) -> bool:
        try:
            response = await self._client.post(self.REFRESH_PATH)
        except httpx.HTTPError as e:
            log.warning("Session refresh request failed: %s", e)
            return False
        if not response.is_success:
            log.info("Session refresh rejected with status %s", response.status_code)
        return response.is_success

    async def refresh_session(self) -> bool:
        """Refresh the session cookies; concurrent callers share one in-flight request."""
        task = self._pending_refresh
        if task is None:
            task = asyncio.ensure_future(self._do_refresh())
            self._pending_refresh = task

            def _clear(done: asyncio.Task) -> None:
                if self._pending_refresh is done:
                    self._pending_refresh = None

            task.add_done_callback(_clear)
        return await asyncio.shield(task)

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        response = await self._client.request(method, url, **kwargs)
        if response.status_code != httpx.codes.UNAUTHORIZED:
            return response

        if not await self.refresh_session():
            raise SessionExpired()

        retry = await self._client.request(method, url, **kwargs)
        if retry.status_code == httpx.codes.UNAUTHORIZED:
            raise SessionExpired()
        return retry

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)
