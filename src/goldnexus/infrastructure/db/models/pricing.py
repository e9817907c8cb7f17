# src/goldnexus/infrastructure/db/models/pricing.py
from sqlalchemy import Column, String, Numeric, DateTime

from .base import Base


class GoldPrice(Base):
    """
    Persisted quote per instrument. `updated_at` is written explicitly by the
    price cache and only on a successful upstream fetch, so there is no onupdate.
    """
    __tablename__ = "gold_prices"

    id = Column(String(32), primary_key=True)  # instrument id, e.g. XAU_USD
    current_price = Column(Numeric(18, 4), nullable=False)
    previous_price = Column(Numeric(18, 4), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<GoldPrice(id={self.id}, current={self.current_price}, previous={self.previous_price})>"
