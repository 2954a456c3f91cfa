"""
Proposal Normalizer - turns raw model output into a validated Proposal.

Models are sloppy: answers arrive wrapped in ```json fences, with empty
strings for "unknown", ids as strings, duplicated names and timestamps
without offsets. The normalizer accepts all of that and degrades field by
field. A bad field becomes None; only an answer that is not a JSON object
at all is reported as not understood.

Example:
    normalizer = ProposalNormalizer(ParticipantResolver())
    result = normalizer.normalize('```json\\n{"action": "Create", ...}\\n```', db)
    result.proposal.action  # ProposalAction.CREATE
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from app.ai.prompts.proposal_prompts import MSG_NOT_UNDERSTOOD
from app.ai.proposal.schemas import MAX_EVENT_ID, EventType, Proposal, ProposalAction
from app.services.participant_resolver import ParticipantResolver
from app.utils.datetime_utils import parse_rfc3339

logger = logging.getLogger("smartcal.ai.normalizer")

FENCE = "```"

SUPPORTED_ACTIONS = {
    ProposalAction.CREATE.value,
    ProposalAction.UPDATE.value,
    ProposalAction.DELETE.value,
}


@dataclass
class NormalizeResult:
    """
    Outcome of normalization.

    message is set only when the answer could not be decoded; the proposal
    is then UNKNOWN and the message asks the user to rephrase.
    """
    proposal: Proposal
    message: Optional[str] = None

    @property
    def understood(self) -> bool:
        return self.message is None


def strip_code_fence(content: str) -> str:
    """
    Remove a surrounding ``` fence and its language tag.

    "```json\\n{...}\\n```" -> "{...}"
    """
    text = (content or "").strip()
    if text.startswith(FENCE):
        text = text[len(FENCE):]
        # Optional language tag on the opening line
        first_line, sep, rest = text.partition("\n")
        if sep and first_line.strip().isalpha():
            text = rest
        elif first_line.strip().lower().startswith("json"):
            text = first_line.strip()[4:] + sep + rest
        text = text.strip()
        if text.endswith(FENCE):
            text = text[: -len(FENCE)]
    return text.strip()


class ProposalNormalizer:
    """Decode, clean and validate a model answer."""

    def __init__(self, resolver: ParticipantResolver):
        self.resolver = resolver

    def normalize(self, content: str, db: Session) -> NormalizeResult:
        """
        Build a Proposal from model output.

        Never raises for malformed content. Participant keywords are resolved
        to user ids through the resolver, which needs the session.
        """
        payload = self._decode(content)
        if payload is None:
            logger.warning("Model answer is not a JSON object", extra={"content": (content or "")[:100]})
            return NormalizeResult(proposal=Proposal(action=ProposalAction.UNKNOWN), message=MSG_NOT_UNDERSTOOD)

        action = self._clean_str(payload.get("action"))
        action = action.lower() if action else ""
        if action not in SUPPORTED_ACTIONS:
            # Anything else collapses the whole proposal
            return NormalizeResult(proposal=Proposal(action=ProposalAction.UNKNOWN))

        keywords = self._clean_list(payload.get("participant_keywords"))

        proposal = Proposal(
            action=ProposalAction(action),
            title=self._clean_str(payload.get("title")),
            type=self._parse_type(payload.get("type")),
            start_time=parse_rfc3339(payload.get("start_time")),
            end_time=parse_rfc3339(payload.get("end_time")),
            location=self._clean_str(payload.get("location")),
            description=self._clean_str(payload.get("description")),
            participant_keywords=keywords,
            participant_ids=self.resolver.resolve(db, keywords) if keywords else None,
            target_event_id=self._parse_event_id(payload.get("event_id")),
            target_time=parse_rfc3339(payload.get("target_time")),
            target_keywords=self._clean_list(payload.get("target_keywords")),
        )

        logger.info(
            "Normalized proposal",
            extra={
                "action": proposal.action.value,
                "has_target": proposal.has_target_hint(),
                "participants": len(proposal.participant_ids or []),
            },
        )
        return NormalizeResult(proposal=proposal)

    # -------------------------------------------------------------------------
    # FIELD HELPERS
    # -------------------------------------------------------------------------

    def _decode(self, content: str) -> Optional[dict]:
        try:
            payload = json.loads(strip_code_fence(content))
        except (TypeError, ValueError):
            return None
        return payload if isinstance(payload, dict) else None

    def _clean_str(self, value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return None
        value = value.strip()
        return value or None

    def _clean_list(self, value: Any) -> Optional[List[str]]:
        """Trim items, drop empty/non-string ones, de-duplicate keeping order."""
        if not isinstance(value, list):
            return None
        items: List[str] = []
        for item in value:
            item = self._clean_str(item)
            if item and item not in items:
                items.append(item)
        return items or None

    def _parse_type(self, value: Any) -> Optional[EventType]:
        value = self._clean_str(value)
        if not value:
            return None
        try:
            return EventType(value.lower())
        except ValueError:
            return None

    def _parse_event_id(self, value: Any) -> Optional[int]:
        """Unsigned integer from a JSON number or numeric string, within the id column range."""
        if isinstance(value, bool):
            return None
        if not isinstance(value, int):
            value = self._clean_str(value)
            if not (value and value.isascii() and value.isdigit()):
                return None
            value = int(value)
        return value if 0 <= value <= MAX_EVENT_ID else None
