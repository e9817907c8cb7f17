"""
Makes the 'models' directory a package and ensures all ORM models are
registered on Base.metadata for Alembic and the application.
"""

from .base import Base
from .auth import User
from .pricing import GoldPrice

__all__ = [
    "Base",
    "User",
    "GoldPrice",
]
