# src/goldnexus/infrastructure/db/models/auth.py
"""
SQLAlchemy ORM model for storefront accounts. The role column is the source of
truth the admin re-check reads at request time.
"""

import uuid

from sqlalchemy import Column, String, DateTime, Enum, func

from goldnexus.domain.entities import Role
from .base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(320), unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)

    full_name = Column(String, nullable=False)
    country = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)

    role = Column(Enum(Role), nullable=False, default=Role.USER, server_default=Role.USER.value)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
