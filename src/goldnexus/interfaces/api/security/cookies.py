# src/goldnexus/interfaces/api/security/cookies.py
"""
Cookie transport for session tokens. Exactly two cookies are used.
"""

from typing import Literal

from fastapi import Response

from goldnexus.config import Settings, settings as default_settings
from goldnexus.domain.entities import TokenPair

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

SameSite = Literal["strict", "lax"]


class CookieTransport:
    def __init__(self, access_max_age: int, refresh_max_age: int, secure: bool):
        self.access_max_age = access_max_age
        self.refresh_max_age = refresh_max_age
        self.secure = secure

    def _set(self, response: Response, name: str, value: str, max_age: int, same_site: SameSite):
        response.set_cookie(
            key=name,
            value=value,
            max_age=max_age,
            path="/",
            httponly=True,
            secure=self.secure,
            samesite=same_site,
        )

    def attach(self, response: Response, pair: TokenPair, same_site: SameSite = "strict") -> Response:
        """Set both session cookies, each living as long as its token."""
        self._set(response, ACCESS_COOKIE, pair.access_token, self.access_max_age, same_site)
        self._set(response, REFRESH_COOKIE, pair.refresh_token, self.refresh_max_age, same_site)
        return response

    def revoke_all(self, response: Response) -> Response:
        """Client-side logout: overwrite both cookies with empty, immediately expiring values."""
        self._set(response, ACCESS_COOKIE, "", 0, "strict")
        self._set(response, REFRESH_COOKIE, "", 0, "strict")
        return response


def build_cookie_transport(cfg: Settings = default_settings) -> CookieTransport:
    return CookieTransport(
        access_max_age=cfg.ACCESS_TOKEN_TTL_MINUTES * 60,
        refresh_max_age=cfg.REFRESH_TOKEN_TTL_DAYS * 24 * 60 * 60,
        secure=cfg.is_production,
    )
