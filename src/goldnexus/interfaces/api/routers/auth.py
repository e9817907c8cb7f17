# src/goldnexus/interfaces/api/routers/auth.py
import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from goldnexus.application.services import SessionManager
from goldnexus.domain.errors import RefreshRejected
from goldnexus.infrastructure.db.base import get_session
from goldnexus.infrastructure.db.repository import UserRepository
from goldnexus.interfaces.api.deps import get_cookie_transport, get_session_manager
from goldnexus.interfaces.api.schemas import AuthOut, LoginIn, MessageOut, RegisterIn, UserOut
from goldnexus.interfaces.api.security import auth
from goldnexus.interfaces.api.security.cookies import REFRESH_COOKIE, CookieTransport

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _session_response(
    user,
    sessions: SessionManager,
    transport: CookieTransport,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    pair = sessions.issue(user.id, user.role)
    body = AuthOut(message="Authentication successful", user=UserOut.from_user(user))
    response = JSONResponse(body.model_dump(mode="json", by_alias=True), status_code=status_code)
    return transport.attach(response, pair, same_site="strict")


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=AuthOut)
def register_user(
    user_in: RegisterIn,
    db: Session = Depends(get_session),
    sessions: SessionManager = Depends(get_session_manager),
    transport: CookieTransport = Depends(get_cookie_transport),
):
    repo = UserRepository(db)
    if repo.find_by_email(user_in.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists",
        )
    user = repo.create(
        email=user_in.email,
        hashed_password=auth.hash_password(user_in.password),
        full_name=user_in.full_name,
        country=user_in.country,
        phone_number=user_in.phone_number,
    )
    db.commit()
    db.refresh(user)
    log.info("Registered user %s", user.id)
    return _session_response(user, sessions, transport, status_code=status.HTTP_201_CREATED)


@router.post("/login", response_model=AuthOut)
def login(
    form: LoginIn,
    db: Session = Depends(get_session),
    sessions: SessionManager = Depends(get_session_manager),
    transport: CookieTransport = Depends(get_cookie_transport),
):
    user = UserRepository(db).find_by_email(form.email)
    if not user or not auth.verify_password(form.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return _session_response(user, sessions, transport)


@router.post("/refresh", response_model=MessageOut)
def refresh_session(
    refresh_token: Optional[str] = Cookie(default=None, alias=REFRESH_COOKIE),
    sessions: SessionManager = Depends(get_session_manager),
    transport: CookieTransport = Depends(get_cookie_transport),
):
    if not refresh_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No refresh token provided")
    try:
        pair = sessions.refresh(refresh_token)
    except RefreshRejected as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

    response = JSONResponse({"message": "Token refreshed successfully"})
    return transport.attach(response, pair, same_site="lax")


@router.post("/logout", response_model=MessageOut)
def logout(transport: CookieTransport = Depends(get_cookie_transport)):
    response = JSONResponse({"message": "Logout successful"})
    return transport.revoke_all(response)
