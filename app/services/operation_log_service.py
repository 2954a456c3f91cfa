"""
Operation Log Service - audit entries for event mutations.

Entries are appended inside the caller's transaction (no commit here), so
an event change and its log row are written or rolled back together.

The detail payload is a tagged variant serialized to JSON:
- {"kind": "create", "snapshot": {...}}
- {"kind": "update", "before": {...}, "after": {...}}
- {"kind": "delete", "snapshot": {...}}
"""

import logging
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Tuple, Union
from uuid import UUID

from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.event import Event
from app.models.operation_log import OperationLog
from app.utils.datetime_utils import as_utc

logger = logging.getLogger("smartcal.services.operation_log")


class EventSnapshot(BaseModel):
    """Event state at one point in time."""
    id: Optional[int] = None
    title: str
    type: str
    start_time: datetime
    end_time: datetime
    location: str = ""
    description: str = ""
    participant_ids: List[UUID] = Field(default_factory=list)

    @classmethod
    def from_event(cls, event: Event) -> "EventSnapshot":
        return cls(
            id=event.id,
            title=event.title,
            type=event.type,
            start_time=as_utc(event.start_time),
            end_time=as_utc(event.end_time),
            location=event.location or "",
            description=event.description or "",
            participant_ids=event.participant_ids,
        )


class CreateLogDetail(BaseModel):
    kind: Literal["create"] = "create"
    snapshot: EventSnapshot


class UpdateLogDetail(BaseModel):
    kind: Literal["update"] = "update"
    before: EventSnapshot
    after: EventSnapshot


class DeleteLogDetail(BaseModel):
    kind: Literal["delete"] = "delete"
    snapshot: EventSnapshot


LogDetail = Annotated[
    Union[CreateLogDetail, UpdateLogDetail, DeleteLogDetail],
    Field(discriminator="kind"),
]

_detail_adapter = TypeAdapter(LogDetail)


class OperationLogService:
    """Append and query operation log entries."""

    def append(self, db: Session, user_id: UUID, target_title: str, detail: LogDetail) -> OperationLog:
        """
        Stage a log row in the current transaction.

        The action column mirrors detail.kind.
        """
        entry = OperationLog(
            user_id=user_id,
            action=detail.kind,
            target_title=target_title,
            detail=detail.model_dump_json(),
        )
        db.add(entry)
        return entry

    def list_logs(
        self,
        db: Session,
        user_id: UUID,
        action: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Tuple[List[OperationLog], int]:
        """Newest-first page of the user's log entries, plus the total count."""
        stmt = select(OperationLog).where(OperationLog.user_id == user_id)
        if action:
            stmt = stmt.where(OperationLog.action == action)

        total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
        items = db.execute(
            stmt.order_by(OperationLog.created_at.desc(), OperationLog.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        ).scalars().all()
        return list(items), total

    def parse_detail(self, raw: str) -> Optional[LogDetail]:
        """Decode a stored detail payload; None if it is not a known variant."""
        try:
            return _detail_adapter.validate_json(raw or "")
        except ValidationError:
            logger.warning("Unreadable operation log detail", extra={"detail": (raw or "")[:100]})
            return None


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
operation_log_service = OperationLogService()
