# src/goldnexus/interfaces/api/deps.py

from __future__ import annotations
from fastapi import Cookie, HTTPException, Request, Depends, status
from typing import Optional

from goldnexus.application.services import PriceCache, SessionManager
from goldnexus.domain.entities import TokenClaims
from goldnexus.domain.errors import Forbidden, Unauthenticated
from goldnexus.interfaces.api.security.cookies import ACCESS_COOKIE, CookieTransport

# --- Service Dependencies ---

def _service(request: Request, name: str):
    services = request.app.state.services or {}
    service = services.get(name)
    if not service:
        raise HTTPException(status_code=503, detail=f"{name} is currently unavailable.")
    return service

def get_session_manager(request: Request) -> SessionManager:
    return _service(request, "session_manager")

def get_cookie_transport(request: Request) -> CookieTransport:
    return _service(request, "cookie_transport")

def get_price_cache(request: Request) -> PriceCache:
    return _service(request, "price_cache")

# --- Security & Auth Dependencies ---

def get_current_user(
    access_token: Optional[str] = Cookie(default=None, alias=ACCESS_COOKIE),
    sessions: SessionManager = Depends(get_session_manager),
) -> TokenClaims:
    try:
        return sessions.authenticate(access_token)
    except Unauthenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

def require_admin(
    access_token: Optional[str] = Cookie(default=None, alias=ACCESS_COOKIE),
    sessions: SessionManager = Depends(get_session_manager),
) -> TokenClaims:
    """
    Dependency for admin-only endpoints. Re-checks the stored role on every request.
    """
    try:
        return sessions.authenticate_admin(access_token)
    except Unauthenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    except Forbidden as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
