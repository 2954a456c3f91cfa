"""
Assistant Result Types - service-layer outcomes of propose and confirm.

Routers convert these to HTTP responses (app/schemas/assistant.py).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from app.ai.proposal.schemas import CandidateEvent, Proposal
from app.services.operation_log_service import EventSnapshot


class ConfirmStatus(str, Enum):
    """Outcome of a confirmation."""
    SUCCESS = "success"
    NEED_CONFIRM = "need_confirm"
    ERROR = "error"


@dataclass
class ProposeResult:
    """
    Result of interpreting one user message.

    Attributes:
        intent: "create" | "update" | "delete" | "unknown"
        prompt_text: What to show the user (confirmation question or hint)
        needs_confirm: True when confirm_token can be confirmed
        proposal: The interpreted action, when there is one
        candidates: Events the reference may point to (update/delete)
        confirm_token: Token for POST /assistant/confirm
    """
    intent: str
    prompt_text: str
    needs_confirm: bool = False
    proposal: Optional[Proposal] = None
    candidates: List[CandidateEvent] = field(default_factory=list)
    confirm_token: Optional[str] = None


@dataclass
class ConfirmResult:
    """
    Result of confirming a pending proposal.

    On NEED_CONFIRM, candidates lists the matching events and
    confirm_token is a fresh token for the same proposal; confirm again
    with one of the candidate ids.
    """
    status: ConfirmStatus
    intent: str
    result_text: str
    event: Optional[EventSnapshot] = None
    candidates: List[CandidateEvent] = field(default_factory=list)
    confirm_token: Optional[str] = None
