"""
Event schemas - request bodies and responses for the /events endpoints.

Request bodies are converted to a Proposal and go through EventService,
the same executor the assistant uses.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.ai.proposal.schemas import EventType, Proposal, ProposalAction
from app.models.event import Event
from app.schemas.user import UserSummary
from app.utils.datetime_utils import as_utc


def _assume_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Naive timestamps from clients are taken as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class EventCreate(BaseModel):
    """
    Schema for POST /events.

    Example request body:
    {
        "title": "Design review",
        "type": "work",
        "start_time": "2024-06-01T15:00:00+08:00",
        "end_time": "2024-06-01T16:00:00+08:00",
        "location": "Room 4",
        "participant_ids": ["8f14e45f-ceea-467e-a8a2-6c6a5f3b1c9d"]
    }
    """
    title: str = Field(min_length=1, max_length=100)
    type: EventType = EventType.WORK
    start_time: datetime
    end_time: datetime
    location: str = Field(default="", max_length=200)
    description: str = Field(default="", max_length=500)
    participant_ids: List[uuid.UUID] = Field(default_factory=list)

    @field_validator("start_time", "end_time")
    @classmethod
    def _default_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _assume_utc(value)

    def to_proposal(self) -> Proposal:
        return Proposal(
            action=ProposalAction.CREATE,
            title=self.title,
            type=self.type,
            start_time=self.start_time,
            end_time=self.end_time,
            location=self.location,
            description=self.description,
            participant_ids=self.participant_ids,
        )


class EventUpdate(BaseModel):
    """
    Schema for PUT /events/{id}. Omitted (or null) fields are left unchanged.

    participant_ids replaces the invited users when present; [] removes all.
    """
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    type: Optional[EventType] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    participant_ids: Optional[List[uuid.UUID]] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _default_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _assume_utc(value)

    def to_proposal(self, event_id: int) -> Proposal:
        return Proposal(
            action=ProposalAction.UPDATE,
            title=self.title,
            type=self.type,
            start_time=self.start_time,
            end_time=self.end_time,
            location=self.location,
            description=self.description,
            participant_ids=self.participant_ids,
            target_event_id=event_id,
        )


class EventOut(BaseModel):
    """
    Event as seen by one viewer.

    is_creator: the viewer owns the event
    is_collaboration: the viewer was invited by someone else
    """
    id: int
    user_id: uuid.UUID
    title: str
    type: str
    start_time: datetime
    end_time: datetime
    location: str
    description: str
    created_at: datetime
    updated_at: datetime
    is_creator: bool
    is_collaboration: bool
    creator: Optional[UserSummary] = None
    participants: List[UserSummary] = Field(default_factory=list)

    @classmethod
    def from_event(cls, event: Event, viewer_id: uuid.UUID) -> "EventOut":
        is_creator = event.user_id == viewer_id
        participants = [UserSummary.model_validate(p.user) for p in event.participants]
        return cls(
            id=event.id,
            user_id=event.user_id,
            title=event.title,
            type=event.type,
            start_time=as_utc(event.start_time),
            end_time=as_utc(event.end_time),
            location=event.location or "",
            description=event.description or "",
            created_at=as_utc(event.created_at),
            updated_at=as_utc(event.updated_at),
            is_creator=is_creator,
            is_collaboration=not is_creator and viewer_id in event.participant_ids,
            creator=UserSummary.model_validate(event.owner) if event.owner else None,
            participants=participants,
        )
