# tests/conftest.py
"""
Fixtures and test setup for the Pytest suite.
"""

import os
from datetime import datetime, timedelta, timezone

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


def _generate_rsa_pem_pair() -> tuple[str, str]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


TEST_PRIVATE_KEY, TEST_PUBLIC_KEY = _generate_rsa_pem_pair()

# Set test environment variables BEFORE any application code is imported.
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["ENV"] = "test"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["JWT_PRIVATE_KEY"] = TEST_PRIVATE_KEY
os.environ["JWT_PUBLIC_KEY"] = TEST_PUBLIC_KEY

from goldnexus.infrastructure.db.base import engine
from goldnexus.infrastructure.db.models import Base, GoldPrice, User
from goldnexus.infrastructure.db.uow import session_scope


class FakeClock:
    """Deterministic clock; call it to read the time."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="session")
def rsa_keys() -> tuple[str, str]:
    return TEST_PRIVATE_KEY, TEST_PUBLIC_KEY


@pytest.fixture(scope="session")
def db_engine():
    """Creates the test schema once and removes the database file afterwards."""
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()
    if os.path.exists("./test.db"):
        os.remove("./test.db")


@pytest.fixture
def clean_db(db_engine):
    """Empties every table before the test runs."""
    with session_scope() as session:
        session.query(GoldPrice).delete()
        session.query(User).delete()
    yield db_engine
