from .price_cache import PriceCache
from .session_manager import SessionManager

__all__ = [
    "PriceCache",
    "SessionManager",
]
