# src/goldnexus/domain/errors.py
"""
Error kinds raised at the boundary of the price cache and the session manager.
Low-level failures (JWT library errors, network errors, parse errors) are turned
into one of these before they leave a component.
"""


class GoldNexusError(Exception):
    """Base class for all domain errors."""


# --- Pricing ---

class UpstreamUnavailable(GoldNexusError):
    """The price feed failed and there is no stored quote to fall back on."""

    def __init__(self, instrument_id: str):
        super().__init__(f"No price available for {instrument_id}")
        self.instrument_id = instrument_id


class UnknownInstrument(GoldNexusError, ValueError):
    """No upstream fetch strategy is configured for the instrument."""

    def __init__(self, instrument_id: str):
        super().__init__(f"Instrument '{instrument_id}' not found")
        self.instrument_id = instrument_id


# --- Sessions ---

class Unauthenticated(GoldNexusError):
    """Any token verification failure. The cause is not exposed."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class Forbidden(GoldNexusError):
    """The token verified but the subject lacks the required role."""

    def __init__(self, message: str = "Insufficient privileges"):
        super().__init__(message)


class RefreshRejected(Unauthenticated):
    """The refresh token failed verification; no new tokens were issued."""

    def __init__(self, message: str = "Invalid or expired refresh token"):
        super().__init__(message)


class SessionExpired(GoldNexusError):
    """Client side: refresh failed or the retried request was still unauthenticated."""

    def __init__(self, message: str = "SESSION_EXPIRED"):
        super().__init__(message)
