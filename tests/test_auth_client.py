import asyncio

import httpx
import pytest

from goldnexus.domain.errors import SessionExpired
from goldnexus.infrastructure.http.auth_client import AuthenticatedClient

pytestmark = pytest.mark.asyncio


class FakeStorefront:
    """Cookie-checking server: /orders needs a valid accessToken cookie."""

    def __init__(self, refresh_ok: bool = True, always_reject: bool = False, refresh_delay: float = 0.0):
        self.valid_access = {"access-0"}
        self.refresh_ok = refresh_ok
        self.always_reject = always_reject
        self.refresh_delay = refresh_delay
        self.refresh_calls = 0
        self.order_calls = 0

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/auth/refresh":
            self.refresh_calls += 1
            if self.refresh_delay:
                await asyncio.sleep(self.refresh_delay)
            if not self.refresh_ok:
                return httpx.Response(401, json={"error": "Invalid or expired refresh token"})
            token = f"access-{self.refresh_calls}"
            self.valid_access.add(token)
            return httpx.Response(
                200,
                json={"message": "Token refreshed successfully"},
                headers=[
                    ("set-cookie", f"accessToken={token}; Path=/; HttpOnly"),
                    ("set-cookie", f"refreshToken=refresh-{self.refresh_calls}; Path=/; HttpOnly"),
                ],
            )

        if request.url.path == "/orders":
            self.order_calls += 1
            cookie = request.headers.get("cookie", "")
            token = dict(
                part.strip().split("=", 1) for part in cookie.split(";") if "=" in part
            ).get("accessToken")
            if self.always_reject or token not in self.valid_access:
                return httpx.Response(401, json={"error": "Not authenticated"})
            return httpx.Response(200, json={"orders": [], "token": token})

        return httpx.Response(404)


def _client(server: FakeStorefront, access: str = "access-0") -> AuthenticatedClient:
    client = AuthenticatedClient("https://shop.test", transport=httpx.MockTransport(server))
    client.cookies.set("accessToken", access, domain="shop.test")
    client.cookies.set("refreshToken", "refresh-0", domain="shop.test")
    return client


async def test_successful_request_passes_through():
    server = FakeStorefront()
    async with _client(server) as client:
        response = await client.get("/orders")

    assert response.status_code == 200
    assert server.refresh_calls == 0
    assert server.order_calls == 1


async def test_unauthorized_request_is_refreshed_and_retried_once():
    server = FakeStorefront()
    async with _client(server, access="expired") as client:
        response = await client.get("/orders")

    assert response.status_code == 200
    assert response.json()["token"] == "access-1"
    assert server.refresh_calls == 1
    assert server.order_calls == 2


async def test_failed_refresh_raises_session_expired():
    server = FakeStorefront(refresh_ok=False)
    async with _client(server, access="expired") as client:
        with pytest.raises(SessionExpired) as exc_info:
            await client.get("/orders")

    assert str(exc_info.value) == "SESSION_EXPIRED"
    assert server.order_calls == 1


async def test_retry_still_unauthorized_raises_session_expired():
    server = FakeStorefront(always_reject=True)
    async with _client(server) as client:
        with pytest.raises(SessionExpired):
            await client.get("/orders")

    assert server.refresh_calls == 1
    assert server.order_calls == 2


async def test_non_401_errors_are_returned_untouched():
    server = FakeStorefront()
    async with _client(server) as client:
        response = await client.post("/missing")

    assert response.status_code == 404
    assert server.refresh_calls == 0


async def test_concurrent_401s_share_one_refresh():
    server = FakeStorefront(refresh_delay=0.05)
    async with _client(server, access="expired") as client:
        responses = await asyncio.gather(*(client.get("/orders") for _ in range(3)))

    assert [r.status_code for r in responses] == [200, 200, 200]
    assert server.refresh_calls == 1


async def test_refresh_network_error_raises_session_expired():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/auth/refresh":
            raise httpx.ConnectError("down", request=request)
        return httpx.Response(401)

    async with AuthenticatedClient("https://shop.test", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(SessionExpired):
            await client.get("/orders")
