# src/goldnexus/interfaces/api/schemas.py
from __future__ import annotations
from decimal import Decimal
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer
from pydantic.alias_generators import to_camel

from goldnexus.domain.entities import PriceQuote


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# --- Pricing ---

class PriceQuoteOut(CamelModel):
    instrument_id: str
    current_price: Decimal
    previous_price: Decimal
    change: Decimal
    change_percent: Decimal
    updated_at: datetime

    # Decimals go out as strings so no precision is lost in JSON.
    @field_serializer("current_price", "previous_price", "change")
    def _s_price(self, v: Decimal) -> str:
        return str(v.quantize(Decimal("0.01")))

    @field_serializer("change_percent")
    def _s_pct(self, v: Decimal) -> str:
        return str(v.quantize(Decimal("0.0001")))

    @classmethod
    def from_quote(cls, quote: PriceQuote) -> "PriceQuoteOut":
        return cls(
            instrument_id=quote.instrument_id,
            current_price=quote.current_price,
            previous_price=quote.previous_price,
            change=quote.change,
            change_percent=quote.change_percent,
            updated_at=quote.updated_at,
        )


class PriceRefreshOut(CamelModel):
    message: str
    refreshed: bool
    price: PriceQuoteOut


# --- Accounts ---

class RegisterIn(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=256)
    full_name: str = Field(min_length=1)
    country: str = Field(min_length=1)
    phone_number: str = Field(min_length=1)


class LoginIn(BaseModel):
    email: EmailStr
    password: str


class UserOut(CamelModel):
    id: str
    email: str
    full_name: str
    country: str | None = None
    phone_number: str | None = None
    role: str
    created_at: datetime | None = None

    @classmethod
    def from_user(cls, user) -> "UserOut":
        return cls(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            country=user.country,
            phone_number=user.phone_number,
            role=user.role.value,
            created_at=user.created_at,
        )


class AuthOut(BaseModel):
    message: str
    user: UserOut | None = None


class MessageOut(BaseModel):
    message: str
