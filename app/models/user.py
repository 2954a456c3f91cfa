"""
User model - a registered calendar user.
Users own events, are invited to other users' events and receive notifications.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(Base):
    """
    SQLAlchemy ORM model for the 'users' table.

    A user can:
    - Register and log in with email/password
    - Own events and be invited to events owned by others
    - Be found by display name (participant lookup, directory search)
    - As an admin, list accounts, enable or disable them and reset passwords
    """

    __tablename__ = "users"

    # ---------------------------------------------------------------------------
    # PRIMARY KEY
    # ---------------------------------------------------------------------------
    # Uuid maps to native UUID on PostgreSQL and CHAR(32) elsewhere (SQLite)
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # ---------------------------------------------------------------------------
    # CREDENTIALS
    # ---------------------------------------------------------------------------
    # email: login identifier, unique and indexed
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)

    # hashed_password: bcrypt hash, plaintext is never stored
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # ---------------------------------------------------------------------------
    # PROFILE
    # ---------------------------------------------------------------------------
    # display_name: shown to other users; participant keywords match against it
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)

    # avatar: URL of the profile picture (stored elsewhere)
    avatar: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # is_active: deactivated accounts cannot log in
    is_active: Mapped[bool] = mapped_column(default=True)

    # role: "admin" may manage other accounts; the first registered user is admin
    role: Mapped[str] = mapped_column(String(20), default=ROLE_USER, server_default=ROLE_USER)

    # ---------------------------------------------------------------------------
    # TIMESTAMPS
    # ---------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ---------------------------------------------------------------------------
    # RELATIONSHIPS
    # ---------------------------------------------------------------------------
    # events: events this user owns (deleting a user is not supported, so no cascade)
    events: Mapped[list["Event"]] = relationship("Event", back_populates="owner")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
