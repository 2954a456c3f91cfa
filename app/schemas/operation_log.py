"""
Operation log schemas - history entries with their decoded detail.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from app.models.operation_log import OperationLog
from app.services.operation_log_service import LogDetail, operation_log_service
from app.utils.datetime_utils import as_utc


class OperationLogOut(BaseModel):
    """
    Example response item:
    {
        "id": 7,
        "action": "update",
        "target_title": "Design review",
        "detail": {"kind": "update", "before": {...}, "after": {...}},
        "created_at": "2024-06-01T08:00:00Z"
    }
    """
    id: int
    user_id: uuid.UUID
    action: str
    target_title: str
    detail: Optional[LogDetail] = None
    created_at: datetime

    @classmethod
    def from_log(cls, log: OperationLog) -> "OperationLogOut":
        return cls(
            id=log.id,
            user_id=log.user_id,
            action=log.action,
            target_title=log.target_title,
            detail=operation_log_service.parse_detail(log.detail),
            created_at=as_utc(log.created_at),
        )
