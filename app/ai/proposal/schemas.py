"""
Proposal Schemas - the typed intent extracted from a user's request.

A Proposal is produced by the normalizer from model output, or built
directly from a request body by the /events endpoints. Every field except
`action` is optional; None always means "not mentioned".
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from app.utils.datetime_utils import as_utc


# Largest value the events.id INTEGER column holds
MAX_EVENT_ID = 2**31 - 1


class ProposalAction(str, Enum):
    """What the user wants to do."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    UNKNOWN = "unknown"


class EventType(str, Enum):
    """Event categories."""
    WORK = "work"
    LIFE = "life"
    GROWTH = "growth"


class Proposal(BaseModel):
    """
    Structured calendar action.

    Field groups:
    - content (title, type, times, location, description, participants):
      the values to write
    - target (target_event_id, target_time, target_keywords): hints that
      locate an existing event for update/delete

    participant_keywords is what the user said; participant_ids is what the
    directory lookup made of it. participant_ids is None when no keywords
    were given and [] when keywords matched nobody.
    """

    action: ProposalAction = ProposalAction.UNKNOWN

    title: Optional[str] = None
    type: Optional[EventType] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    description: Optional[str] = None

    participant_keywords: Optional[List[str]] = None
    participant_ids: Optional[List[UUID]] = None

    target_event_id: Optional[int] = None
    target_time: Optional[datetime] = None
    target_keywords: Optional[List[str]] = None

    def has_target_hint(self) -> bool:
        """True when update/delete has something to locate the event with."""
        return (
            self.target_event_id is not None
            or self.target_time is not None
            or bool(self.target_keywords)
        )

    @property
    def needs_target(self) -> bool:
        return self.action in (ProposalAction.UPDATE, ProposalAction.DELETE)


class CandidateEvent(BaseModel):
    """Short projection of a stored event, offered when a reference is vague."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    start_time: datetime
    end_time: datetime
    location: str = ""

    @field_validator("start_time", "end_time")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return as_utc(value)
