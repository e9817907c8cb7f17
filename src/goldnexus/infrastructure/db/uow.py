# File: src/goldnexus/infrastructure/db/uow.py
"""
Unit of Work for code that runs outside a request-scoped session: the price
cache reads and rewrites quotes here, and the admin check reads the stored role.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session, scoped_session

from .base import SessionLocal, engine
from .models import Base

log = logging.getLogger(__name__)

# One session per thread; sync endpoints run on FastAPI's threadpool.
SessionScoped = scoped_session(SessionLocal)


def create_tables() -> None:
    """Create any missing tables. Migrations remain the way to change existing ones."""
    tables = ", ".join(sorted(Base.metadata.tables))
    log.info("Ensuring database tables exist: %s", tables)
    try:
        Base.metadata.create_all(engine)
    except Exception:
        log.critical("Could not create database tables on %s", engine.url.render_as_string(hide_password=True), exc_info=True)
        raise


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Yield the thread's session inside one transaction.

    The transaction commits when the block exits normally. Any exception rolls
    it back and is re-raised unchanged; the session is discarded either way.
    """
    session = SessionScoped()
    try:
        yield session
        session.commit()
    except Exception:
        log.warning("Rolling back unit of work", exc_info=True)
        session.rollback()
        raise
    finally:
        SessionScoped.remove()
