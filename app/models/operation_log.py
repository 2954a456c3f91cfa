"""
Operation log model - audit trail of event mutations.

One row per successful create, update or delete, written in the same
transaction as the change itself. `detail` holds the JSON form of a
CreateLogDetail / UpdateLogDetail / DeleteLogDetail.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class OperationLog(Base):
    __tablename__ = "operation_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # user_id: who performed the operation
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), index=True, nullable=False
    )

    # action: "create" | "update" | "delete"
    action: Mapped[str] = mapped_column(String(20), index=True, nullable=False)

    # target_title: event title at the time of the operation (survives deletion)
    target_title: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    detail: Mapped[str] = mapped_column(Text, nullable=False, default="{}")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), index=True, default=lambda: datetime.now(timezone.utc)
    )
