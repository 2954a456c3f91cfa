"""
Database session management - SQLAlchemy engine and session factory.
This module provides the database connection and session dependency for FastAPI.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings

# ---------------------------------------------------------------------------
# DATABASE ENGINE
# ---------------------------------------------------------------------------
# pool_pre_ping: check pooled connections before use (survives DB restarts).
# SQLite connections are shared with the notification worker threads, so the
# same-thread check is disabled for that backend only.
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=_connect_args,
)

# ---------------------------------------------------------------------------
# SESSION FACTORY
# ---------------------------------------------------------------------------
# autocommit=False: services call db.commit()/db.rollback() explicitly, which
# is what keeps event, membership and operation-log rows in one transaction.
# autoflush=False: rows are flushed only when a service asks for it.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    FastAPI dependency that provides one database session per request.

    Usage in a route:
        @router.get("/events")
        def list_events(db: Session = Depends(get_db)):
            ...

    The session is always closed (returned to the pool) after the request,
    even when the route raises.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
