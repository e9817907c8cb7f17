# src/goldnexus/infrastructure/db/base.py
"""
Database engine setup and session management.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from goldnexus.config import settings
from .models.base import Base  # noqa: F401  (re-exported for callers and Alembic)


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # SQLite connections are shared across the threadpool FastAPI runs sync endpoints on.
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_recycle": 3600}


def _normalize_url(url: str) -> str:
    url = (url or "").strip()
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    return url


DATABASE_URL = _normalize_url(settings.DATABASE_URL)

engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


# --- Dependency for FastAPI ---
def get_session():
    """
    Provide one session per request, closed afterwards. Endpoints commit explicitly.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
