# src/goldnexus/application/services/session_manager.py
"""
Dual-token session handling: a short-lived access token and a long-lived
refresh token, both RS256-signed JWTs.

A valid refresh token mints a completely new pair (rolling renewal). Nothing is
revoked server-side; a token stays valid until its own `exp`.
Every verification failure surfaces as the same `Unauthenticated` (or its
`RefreshRejected` subclass), whatever the underlying cause.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from jose import jwt, JWTError

from goldnexus.domain.entities import Role, TokenClaims, TokenPair, TokenType
from goldnexus.domain.errors import Forbidden, RefreshRejected, Unauthenticated
from goldnexus.infrastructure.monitoring.metrics import AUTH_FAILURES

log = logging.getLogger(__name__)

ACCESS_TOKEN_TTL = timedelta(minutes=15)
REFRESH_TOKEN_TTL = timedelta(days=30)

RoleLookup = Callable[[str], Optional[Role]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    def __init__(
        self,
        private_key: str,
        public_key: str,
        role_lookup: RoleLookup,
        algorithm: str = "RS256",
        access_ttl: timedelta = ACCESS_TOKEN_TTL,
        refresh_ttl: timedelta = REFRESH_TOKEN_TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        if access_ttl >= refresh_ttl:
            raise ValueError("Access token lifetime must be shorter than refresh token lifetime")
        self._private_key = private_key
        self._public_key = public_key
        self.role_lookup = role_lookup
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.clock = clock

    # --- Issuance ---

    def _sign(self, subject_id: str, role: Role, token_type: TokenType, now: datetime, ttl: timedelta) -> tuple[str, datetime]:
        expires_at = now + ttl
        payload = {
            "sub": subject_id,
            "role": role.value,
            "typ": token_type.value,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._private_key, algorithm=self.algorithm), expires_at

    def issue(self, subject_id: str, role: Role) -> TokenPair:
        # JWT timestamps are whole seconds; the reported expiries must match them.
        now = self.clock().replace(microsecond=0)
        access_token, access_exp = self._sign(subject_id, role, TokenType.ACCESS, now, self.access_ttl)
        refresh_token, refresh_exp = self._sign(subject_id, role, TokenType.REFRESH, now, self.refresh_ttl)
        log.debug("Issued session tokens for subject %s (%s)", subject_id, role.value)
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            access_expires_at=access_exp,
            refresh_expires_at=refresh_exp,
        )

    # --- Verification ---

    def _verify(self, token: Optional[str], expected_type: TokenType) -> TokenClaims:
        """Raises a bare Unauthenticated on every failure; callers re-label it."""
        if not token:
            raise Unauthenticated()
        try:
            payload: Dict[str, Any] = jwt.decode(
                token,
                self._public_key,
                algorithms=[self.algorithm],
                # exp is checked below against the injected clock.
                options={"verify_exp": False, "verify_aud": False},
            )
            claims = TokenClaims(
                subject_id=str(payload["sub"]),
                role=Role(payload["role"]),
                token_type=TokenType(payload["typ"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
                token_id=str(payload.get("jti", "")),
            )
        except (JWTError, KeyError, ValueError, TypeError, OverflowError) as e:
            log.debug("Token verification failed: %s", type(e).__name__)
            raise Unauthenticated() from None

        if not claims.subject_id or claims.token_type is not expected_type:
            raise Unauthenticated()
        if claims.expires_at <= self.clock():
            raise Unauthenticated()
        return claims

    def authenticate(self, access_token: Optional[str]) -> TokenClaims:
        try:
            return self._verify(access_token, TokenType.ACCESS)
        except Unauthenticated:
            AUTH_FAILURES.labels("authenticate").inc()
            raise

    def refresh(self, refresh_token: Optional[str]) -> TokenPair:
        try:
            claims = self._verify(refresh_token, TokenType.REFRESH)
        except Unauthenticated:
            AUTH_FAILURES.labels("refresh").inc()
            raise RefreshRejected() from None
        log.debug("Rotating session tokens for subject %s", claims.subject_id)
        return self.issue(claims.subject_id, claims.role)

    def authenticate_admin(self, access_token: Optional[str]) -> TokenClaims:
        claims = self.authenticate(access_token)
        if claims.role is not Role.ADMIN:
            AUTH_FAILURES.labels("authenticate_admin").inc()
            raise Forbidden()

        # The token can outlive a role downgrade or account deletion.
        current_role = self.role_lookup(claims.subject_id)
        if current_role is not Role.ADMIN:
            log.warning("Admin token for %s rejected: stored role is %s", claims.subject_id, current_role)
            AUTH_FAILURES.labels("authenticate_admin").inc()
            raise Forbidden("Admin user not found or role has changed")
        return claims
