from datetime import datetime, timezone
from decimal import Decimal

import pytest

from goldnexus.domain.entities import PriceQuote, QuoteLookup, QuoteOutcome
from goldnexus.domain.errors import (
    GoldNexusError,
    RefreshRejected,
    Unauthenticated,
    UnknownInstrument,
    UpstreamUnavailable,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def test_quote_change_and_percent():
    quote = PriceQuote("XAU_USD", Decimal("2050.00"), Decimal("2000.00"), NOW)
    assert quote.change == Decimal("50.00")
    assert quote.change_percent == Decimal("2.5")


def test_first_quote_has_no_change():
    quote = PriceQuote("XAU_USD", Decimal("2000.00"), Decimal("2000.00"), NOW)
    assert quote.change == 0
    assert quote.change_percent == 0


def test_zero_previous_price_does_not_divide():
    quote = PriceQuote("XAU_USD", Decimal("10"), Decimal("0"), NOW)
    assert quote.change_percent == Decimal("0")


def test_lookup_refreshed_flag():
    quote = PriceQuote("XAU_USD", Decimal("1"), Decimal("1"), NOW)
    assert QuoteLookup(quote, QuoteOutcome.REFRESHED).refreshed
    assert not QuoteLookup(quote, QuoteOutcome.FRESH).refreshed
    assert not QuoteLookup(quote, QuoteOutcome.STALE).refreshed


def test_error_hierarchy():
    assert issubclass(RefreshRejected, Unauthenticated)
    assert issubclass(UnknownInstrument, ValueError)
    for error in (UnknownInstrument("X"), UpstreamUnavailable("X"), Unauthenticated()):
        assert isinstance(error, GoldNexusError)
    assert str(UnknownInstrument("XAG_USD")) == "Instrument 'XAG_USD' not found"


def test_quote_is_immutable():
    quote = PriceQuote("XAU_USD", Decimal("1"), Decimal("1"), NOW)
    with pytest.raises(AttributeError):
        quote.current_price = Decimal("2")
