"""
Declarative base shared by every ORM model.

Import models through app.models so that Base.metadata knows every table
before create_all() or alembic autogenerate runs.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass
