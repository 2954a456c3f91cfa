"""
Assistant Service - propose/confirm dialogue for natural-language calendar changes.

Propose (POST /assistant/propose):
    message ──► model ──► normalizer ──► Proposal
                                           │
              incomplete / unknown ◄───────┤ (hint, nothing stored)
                                           ▼
                     update/delete: candidate search
                       none ──► "no matching event"
                       one  ──► target_event_id filled in
                                           ▼
                         pending store ──► confirm_token

Confirm (POST /assistant/confirm):
    token ──► consume (once) ──► optional explicit event id ──► EventService
        success       applied event
        need_confirm  several matches; candidates + fresh token
        error         expired token, not found, invalid values

Model and storage failures are not turned into messages; they propagate as
AIProviderError / EventStorageError and the router answers 502 / 500.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.ai.monitoring import ai_metrics
from app.ai.prompts.proposal_prompts import (
    MSG_CONFIRM_EXPIRED,
    MSG_CREATE_NEEDS_DETAILS,
    MSG_DELETE_NEEDS_TARGET,
    MSG_NEED_EVENT_ID,
    MSG_NO_MATCH,
    MSG_UNSUPPORTED,
    MSG_UPDATE_NEEDS_TARGET,
    PROPOSAL_SYSTEM_PROMPT,
    PROPOSAL_USER_PROMPT,
)
from app.ai.proposal.normalizer import ProposalNormalizer
from app.ai.proposal.schemas import CandidateEvent, Proposal, ProposalAction
from app.ai.providers.base import AIProvider, AIProviderError, AIResponse
from app.models.event import Event
from app.models.user import User
from app.services.assistant_result import ConfirmResult, ConfirmStatus, ProposeResult
from app.services.candidate_matcher import CandidateMatcher
from app.services.event_errors import (
    AmbiguousTargetError,
    EventNotFoundError,
    EventValidationError,
)
from app.services.event_service import EventService
from app.services.operation_log_service import EventSnapshot
from app.services.pending_proposal_service import PendingProposalService

logger = logging.getLogger("smartcal.services.assistant")

DISPLAY_FORMAT = "%Y-%m-%d %H:%M"


class AssistantService:
    """
    Request-level control flow for the assistant.

    Args:
        provider: Model backend
        normalizer: Model output -> Proposal
        matcher: Candidate search for update/delete
        pending: Consume-once store bridging propose and confirm
        events: Executor applying confirmed proposals
        timeout_seconds: Upper bound for one model call
    """

    def __init__(
        self,
        provider: AIProvider,
        normalizer: ProposalNormalizer,
        matcher: CandidateMatcher,
        pending: PendingProposalService,
        events: EventService,
        timeout_seconds: float = 30,
    ):
        self.provider = provider
        self.normalizer = normalizer
        self.matcher = matcher
        self.pending = pending
        self.events = events
        self.timeout_seconds = timeout_seconds

    # -------------------------------------------------------------------------
    # PROPOSE
    # -------------------------------------------------------------------------

    async def propose(
        self,
        db: Session,
        owner: User,
        message: str,
        now: Optional[datetime] = None,
    ) -> ProposeResult:
        """
        Interpret `message` and, if it is actionable, store it for confirmation.

        Args:
            now: The user's current time; its UTC offset is the one relative
                dates are resolved in. Defaults to the server time in UTC.

        Raises:
            AIProviderError: the model call failed or timed out
        """
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        logger.info("Propose request", extra={"user_id": str(owner.id)[:8], "length": len(message)})

        response = await self._generate(
            PROPOSAL_USER_PROMPT.format(now=now.isoformat(timespec="seconds"), message=message)
        )

        result = self.normalizer.normalize(response.content, db)
        if not result.understood:
            return ProposeResult(intent=ProposalAction.UNKNOWN.value, prompt_text=result.message)

        proposal = result.proposal
        intent = proposal.action.value
        text, actionable = self._describe(proposal)
        if not actionable:
            return ProposeResult(intent=intent, prompt_text=text, proposal=proposal)

        candidates: List[CandidateEvent] = []
        if proposal.needs_target:
            try:
                found = self.matcher.find_candidates(db, owner.id, proposal)
            except EventNotFoundError:
                found = []
            if not found:
                return ProposeResult(intent=intent, prompt_text=MSG_NO_MATCH, proposal=proposal)

            candidates = self._project(found)
            if len(candidates) == 1 and proposal.target_event_id is None:
                proposal = proposal.model_copy(update={"target_event_id": candidates[0].id})

        pending = self.pending.store(owner.id, proposal, candidates)
        return ProposeResult(
            intent=intent,
            prompt_text=text,
            needs_confirm=True,
            proposal=proposal,
            candidates=candidates,
            confirm_token=pending.token,
        )

    # -------------------------------------------------------------------------
    # CONFIRM
    # -------------------------------------------------------------------------

    def confirm(
        self,
        db: Session,
        owner: User,
        token: str,
        explicit_target_id: Optional[int] = None,
    ) -> ConfirmResult:
        """
        Apply a pending proposal exactly once.

        explicit_target_id (the candidate the user picked) overrides any
        target id in the stored proposal. It must be one of the candidates
        offered for this token, otherwise the result is "no match".

        Raises:
            EventStorageError: the transaction failed
        """
        pending = self.pending.consume(token, owner.id)
        if pending is None:
            return ConfirmResult(
                status=ConfirmStatus.ERROR,
                intent=ProposalAction.UNKNOWN.value,
                result_text=MSG_CONFIRM_EXPIRED,
            )

        proposal = pending.proposal
        intent = proposal.action.value
        if explicit_target_id is not None and proposal.needs_target:
            if not pending.offers(explicit_target_id):
                logger.info(
                    "Picked event was not offered",
                    extra={"user_id": str(owner.id)[:8], "event_id": explicit_target_id},
                )
                return ConfirmResult(status=ConfirmStatus.ERROR, intent=intent, result_text=MSG_NO_MATCH)
            proposal = proposal.model_copy(update={"target_event_id": explicit_target_id})

        try:
            applied = self.events.apply(db, owner, proposal)
        except AmbiguousTargetError as e:
            candidates = self._project(e.candidates)
            fresh = self.pending.store(owner.id, proposal, candidates)
            return ConfirmResult(
                status=ConfirmStatus.NEED_CONFIRM,
                intent=intent,
                result_text=MSG_NEED_EVENT_ID,
                candidates=candidates,
                confirm_token=fresh.token,
            )
        except EventNotFoundError:
            return ConfirmResult(status=ConfirmStatus.ERROR, intent=intent, result_text=MSG_NO_MATCH)
        except EventValidationError as e:
            return ConfirmResult(status=ConfirmStatus.ERROR, intent=intent, result_text=str(e))

        snapshot = applied if isinstance(applied, EventSnapshot) else EventSnapshot.from_event(applied)
        return ConfirmResult(
            status=ConfirmStatus.SUCCESS,
            intent=intent,
            result_text=self._done_text(proposal.action, snapshot),
            event=snapshot,
        )

    # -------------------------------------------------------------------------
    # HELPERS
    # -------------------------------------------------------------------------

    async def _generate(self, prompt: str) -> AIResponse:
        start_time = time.time()
        try:
            response = await asyncio.wait_for(
                self.provider.generate_json(prompt, system_prompt=PROPOSAL_SYSTEM_PROMPT),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            latency_ms = (time.time() - start_time) * 1000
            ai_metrics.record_timeout(self.provider.provider_type.value, latency_ms)
            logger.error(f"Model call timed out after {self.timeout_seconds}s")
            raise AIProviderError("Model call timed out") from e

        ai_metrics.record(response)
        if not response.success:
            raise AIProviderError(response.error or "Model call failed")

        logger.info("Model answered", extra=response.to_dict())
        return response

    def _describe(self, proposal: Proposal) -> Tuple[str, bool]:
        """Confirmation question, or a hint when the proposal is not actionable."""
        if proposal.action == ProposalAction.CREATE:
            if not proposal.title or proposal.start_time is None or proposal.end_time is None:
                return MSG_CREATE_NEEDS_DETAILS, False
            text = (
                f"Create '{proposal.title}' on "
                f"{proposal.start_time.strftime(DISPLAY_FORMAT)}-{proposal.end_time.strftime('%H:%M')}"
            )
            if proposal.location:
                text += f" at {proposal.location}"
            return text + ". Confirm?", True

        if proposal.action == ProposalAction.UPDATE:
            if not proposal.has_target_hint():
                return MSG_UPDATE_NEEDS_TARGET, False
            text = "Update the event"
            if proposal.title:
                text += f", new title: {proposal.title}"
            if proposal.start_time:
                text += f", start: {proposal.start_time.isoformat()}"
            if proposal.end_time:
                text += f", end: {proposal.end_time.isoformat()}"
            return text + ". Confirm?", True

        if proposal.action == ProposalAction.DELETE:
            if not proposal.has_target_hint():
                return MSG_DELETE_NEEDS_TARGET, False
            return "Delete the event. Confirm?", True

        return MSG_UNSUPPORTED, False

    def _done_text(self, action: ProposalAction, event: EventSnapshot) -> str:
        if action == ProposalAction.CREATE:
            return (
                f"Created '{event.title}' "
                f"{event.start_time.strftime(DISPLAY_FORMAT)}-{event.end_time.strftime('%H:%M')}"
            )
        if action == ProposalAction.UPDATE:
            return f"Updated '{event.title}'"
        return f"Deleted '{event.title}'"

    def _project(self, events: List[Event]) -> List[CandidateEvent]:
        return [CandidateEvent.model_validate(event) for event in events]
