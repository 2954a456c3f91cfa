"""
Service container - wires the long-lived services once at start-up.

Built in the application lifespan and stored on app.state; routes reach it
through the dependencies in app.deps. Tests build their own container with
a fake provider and an inline executor.
"""

import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.orm import Session

from app.ai.proposal.normalizer import ProposalNormalizer
from app.ai.providers import AIProvider, AIProviderConfigError, build_provider
from app.core.config import Settings
from app.db.session import SessionLocal
from app.services.assistant_service import AssistantService
from app.services.candidate_matcher import CandidateMatcher
from app.services.event_service import EventService
from app.services.notification_service import DatabaseNotificationSink, NotificationDispatcher
from app.services.participant_resolver import ParticipantResolver
from app.services.pending_proposal_service import PendingProposalService

logger = logging.getLogger("smartcal.services.container")


@dataclass
class ServiceContainer:
    pending: PendingProposalService
    dispatcher: NotificationDispatcher
    events: EventService
    # None when no model provider is configured
    assistant: Optional[AssistantService] = None

    def shutdown(self) -> None:
        """Wait for queued notifications, then stop the workers."""
        self.dispatcher.shutdown(wait=True)


def build_container(
    settings: Settings,
    session_factory: Callable[[], Session] = SessionLocal,
    provider: Optional[AIProvider] = None,
    executor: Optional[Executor] = None,
) -> ServiceContainer:
    """
    Build every service from settings.

    Args:
        settings: Application settings
        session_factory: Sessions for background notification delivery
        provider: Model backend; built from settings when omitted
        executor: Notification executor; a thread pool when omitted
    """
    matcher = CandidateMatcher(limit=settings.CANDIDATE_LIMIT)
    pending = PendingProposalService(ttl_seconds=settings.PENDING_PROPOSAL_TTL_SECONDS)
    dispatcher = NotificationDispatcher(
        DatabaseNotificationSink(session_factory),
        max_workers=settings.NOTIFICATION_WORKERS,
        executor=executor,
    )
    events = EventService(matcher=matcher, dispatcher=dispatcher)

    if provider is None:
        try:
            provider = build_provider(settings)
        except AIProviderConfigError as e:
            logger.warning(f"Assistant disabled: {e}")

    assistant = None
    if provider is not None:
        assistant = AssistantService(
            provider=provider,
            normalizer=ProposalNormalizer(ParticipantResolver(settings.PARTICIPANT_MATCH_LIMIT)),
            matcher=matcher,
            pending=pending,
            events=events,
            timeout_seconds=settings.AI_REQUEST_TIMEOUT,
        )
        logger.info(f"Assistant enabled with provider: {provider.provider_type.value}")

    return ServiceContainer(pending=pending, dispatcher=dispatcher, events=events, assistant=assistant)
