# src/goldnexus/domain/entities.py
"""
Core entities shared by the price cache, the session manager and the API layer.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


# --- ENUMERATIONS ---

class Role(Enum):
    """Coarse permission tier carried in session tokens."""
    USER = "USER"
    ADMIN = "ADMIN"


class TokenType(Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class QuoteOutcome(Enum):
    """How a quote lookup was served."""
    FRESH = "FRESH"          # Within TTL, served from storage without an upstream call.
    REFRESHED = "REFRESHED"  # Stale or forced; upstream answered and the record was rewritten.
    STALE = "STALE"          # Upstream failed; the last known record was served unchanged.


# --- ENTITIES ---

@dataclass(frozen=True)
class PriceQuote:
    """
    Last known price of an instrument.

    `previous_price` is the price before the most recent successful update, so the
    pair gives the display delta. On the first fetch both prices are equal.
    """
    instrument_id: str
    current_price: Decimal
    previous_price: Decimal
    updated_at: datetime

    @property
    def change(self) -> Decimal:
        return self.current_price - self.previous_price

    @property
    def change_percent(self) -> Decimal:
        if self.previous_price == 0:
            return Decimal("0")
        return self.change / self.previous_price * 100


@dataclass(frozen=True)
class QuoteLookup:
    quote: PriceQuote
    outcome: QuoteOutcome

    @property
    def refreshed(self) -> bool:
        return self.outcome is QuoteOutcome.REFRESHED


@dataclass(frozen=True)
class TokenClaims:
    """Verified payload of a session token."""
    subject_id: str
    role: Role
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    token_id: str


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime
