"""
Assistant schemas - request/response bodies for /assistant/propose and /assistant/confirm.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.ai.proposal.schemas import MAX_EVENT_ID, CandidateEvent, Proposal
from app.services.assistant_result import ConfirmResult, ConfirmStatus, ProposeResult
from app.services.operation_log_service import EventSnapshot


class ProposeRequest(BaseModel):
    """
    Schema for POST /assistant/propose.

    Example request body:
    {
        "message": "Move tomorrow's design review to 4pm",
        "now": "2024-06-01T09:30:00+08:00"
    }

    now is optional: the client's current time, whose UTC offset is used to
    resolve "today", "tomorrow", "at 4pm". Server UTC time when omitted.
    """
    message: str = Field(min_length=1, max_length=1000)
    now: Optional[datetime] = None


class ProposeResponse(BaseModel):
    """
    Interpretation of a message.

    needs_confirm=True: show prompt_text and the candidates, then call
    /assistant/confirm with confirm_token. Otherwise prompt_text is a hint
    and nothing was stored.
    """
    intent: str
    prompt_text: str
    needs_confirm: bool
    proposal: Optional[Proposal] = None
    candidates: List[CandidateEvent] = Field(default_factory=list)
    confirm_token: Optional[str] = None

    @classmethod
    def from_result(cls, result: ProposeResult) -> "ProposeResponse":
        return cls(
            intent=result.intent,
            prompt_text=result.prompt_text,
            needs_confirm=result.needs_confirm,
            proposal=result.proposal,
            candidates=result.candidates,
            confirm_token=result.confirm_token,
        )


class ConfirmRequest(BaseModel):
    """
    Schema for POST /assistant/confirm.

    event_id picks one of the candidates when several events matched.
    """
    confirm_token: str = Field(min_length=1)
    event_id: Optional[int] = Field(default=None, ge=0, le=MAX_EVENT_ID)


class ConfirmResponse(BaseModel):
    """
    status:
    - success: event holds the created/updated/deleted event
    - need_confirm: pick one of candidates and confirm with the new confirm_token
    - error: result_text explains what went wrong
    """
    status: ConfirmStatus
    intent: str
    result_text: str
    event: Optional[EventSnapshot] = None
    candidates: List[CandidateEvent] = Field(default_factory=list)
    confirm_token: Optional[str] = None

    @classmethod
    def from_result(cls, result: ConfirmResult) -> "ConfirmResponse":
        return cls(
            status=result.status,
            intent=result.intent,
            result_text=result.result_text,
            event=result.event,
            candidates=result.candidates,
            confirm_token=result.confirm_token,
        )
