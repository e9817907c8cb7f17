# File: src/goldnexus/infrastructure/db/repository.py
"""
Repositories over the ORM models. Each repository is bound to one session;
callers own the transaction (see `uow.session_scope`).
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from goldnexus.domain.entities import PriceQuote, Role
from .models import GoldPrice, User
from .uow import session_scope

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back; stored values are always UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ==========================================================
# USER REPOSITORY
# ==========================================================
class UserRepository:
    """Repository for User accounts."""
    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.session.query(User).filter(User.id == user_id).first()

    def find_by_email(self, email: str) -> Optional[User]:
        return self.session.query(User).filter(User.email == email.strip().lower()).first()

    def create(
        self,
        email: str,
        hashed_password: str,
        full_name: str,
        country: Optional[str] = None,
        phone_number: Optional[str] = None,
        role: Role = Role.USER,
    ) -> User:
        logger.info("Creating new user for email=%s", email)
        user = User(
            email=email.strip().lower(),
            hashed_password=hashed_password,
            full_name=full_name,
            country=country,
            phone_number=phone_number,
            role=role,
        )
        self.session.add(user)
        self.session.flush()  # assigns the id
        return user

    def get_role(self, user_id: str) -> Optional[Role]:
        user = self.find_by_id(user_id)
        return user.role if user else None

    def set_role(self, user_id: str, role: Role) -> Optional[User]:
        user = self.find_by_id(user_id)
        if user is None:
            return None
        if user.role != role:
            logger.info("Changing role of user %s from %s to %s", user_id, user.role.value, role.value)
            user.role = role
            self.session.flush()
        return user


def lookup_user_role(user_id: str) -> Optional[Role]:
    """Current role of a user in storage, or None if the account no longer exists."""
    with session_scope() as session:
        return UserRepository(session).get_role(user_id)


# ==========================================================
# PRICE QUOTE REPOSITORY
# ==========================================================
class PriceQuoteRepository:
    """Repository for persisted instrument quotes."""
    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def _to_entity(row: GoldPrice) -> PriceQuote:
        return PriceQuote(
            instrument_id=row.id,
            current_price=Decimal(row.current_price),
            previous_price=Decimal(row.previous_price),
            updated_at=_as_utc(row.updated_at),
        )

    def get(self, instrument_id: str) -> Optional[PriceQuote]:
        row = self.session.get(GoldPrice, instrument_id)
        return self._to_entity(row) if row else None

    def upsert(self, quote: PriceQuote) -> PriceQuote:
        row = self.session.get(GoldPrice, quote.instrument_id)
        if row is None:
            row = GoldPrice(id=quote.instrument_id)
            self.session.add(row)
        row.current_price = quote.current_price
        row.previous_price = quote.previous_price
        row.updated_at = quote.updated_at
        self.session.flush()
        return self._to_entity(row)
