from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    """The base class for all SQLAlchemy ORM models."""
    pass
