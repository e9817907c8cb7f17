from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from goldnexus.domain.entities import TokenClaims
from goldnexus.infrastructure.db.base import get_session
from goldnexus.infrastructure.db.repository import UserRepository
from goldnexus.interfaces.api.deps import get_current_user, require_admin
from goldnexus.interfaces.api.schemas import UserOut

router = APIRouter(prefix="/api", tags=["Users"])


def _load_user(db: Session, user_id: str) -> UserOut:
    user = UserRepository(db).find_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserOut.from_user(user)


@router.get("/users/me", response_model=UserOut, response_model_by_alias=True)
def read_me(claims: TokenClaims = Depends(get_current_user), db: Session = Depends(get_session)):
    return _load_user(db, claims.subject_id)


@router.get("/admin/me", response_model=UserOut, response_model_by_alias=True)
def read_admin(claims: TokenClaims = Depends(require_admin), db: Session = Depends(get_session)):
    return _load_user(db, claims.subject_id)
