"""
Candidate Matcher - finds the stored event an update/delete refers to.

References come in three forms, from most to least precise:
1. target_event_id: "cancel event 42"
2. target_time: "move today's meeting" -> every event overlapping that day
3. target_keywords: "the design review" -> title or description contains
   every keyword

2 and 3 combine (AND). Search is always scoped to the requesting owner.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.ai.proposal.schemas import MAX_EVENT_ID, Proposal
from app.core.config import settings
from app.models.event import Event
from app.services.event_errors import AmbiguousTargetError, EventNotFoundError
from app.services.participant_resolver import like_pattern
from app.utils.datetime_utils import day_bounds

logger = logging.getLogger("smartcal.services.matcher")


class CandidateMatcher:
    """Search and disambiguation policy for event references."""

    def __init__(self, limit: Optional[int] = None):
        self.limit = limit or settings.CANDIDATE_LIMIT

    def find_candidates(self, db: Session, owner_id: UUID, proposal: Proposal) -> List[Event]:
        """
        Return the owner's events matching the proposal's target hints.

        An explicit target_event_id returns exactly that event or raises
        EventNotFoundError (also when it belongs to someone else). Otherwise
        the result is ordered by start time, newest first, capped at
        CANDIDATE_LIMIT, and may be empty.
        """
        if proposal.target_event_id is not None:
            if not 0 <= proposal.target_event_id <= MAX_EVENT_ID:
                raise EventNotFoundError(f"Event {proposal.target_event_id} not found")
            event = db.execute(
                select(Event)
                .where(Event.id == proposal.target_event_id)
                .where(Event.user_id == owner_id)
            ).scalar_one_or_none()
            if event is None:
                raise EventNotFoundError(f"Event {proposal.target_event_id} not found")
            return [event]

        stmt = select(Event).where(Event.user_id == owner_id)

        if proposal.target_time is not None:
            # Overlap with the calendar day, in the offset the user spoke in
            day_start, day_end = day_bounds(proposal.target_time)
            stmt = stmt.where(Event.start_time < day_end, Event.end_time >= day_start)

        for keyword in proposal.target_keywords or []:
            pattern = like_pattern(keyword)
            stmt = stmt.where(
                or_(
                    Event.title.ilike(pattern, escape="\\"),
                    Event.description.ilike(pattern, escape="\\"),
                )
            )

        stmt = stmt.order_by(Event.start_time.desc(), Event.id.desc()).limit(self.limit)
        candidates = list(db.execute(stmt).scalars().all())

        logger.info(
            "Candidate search finished",
            extra={
                "user_id": str(owner_id)[:8],
                "target_time": proposal.target_time.isoformat() if proposal.target_time else None,
                "keywords": proposal.target_keywords,
                "found": len(candidates),
            },
        )
        return candidates

    def select_single(self, db: Session, owner_id: UUID, proposal: Proposal) -> Event:
        """
        Resolve the proposal to exactly one event.

        Raises:
            EventNotFoundError: nothing matches
            AmbiguousTargetError: more than one match and no explicit id
        """
        candidates = self.find_candidates(db, owner_id, proposal)
        if not candidates:
            raise EventNotFoundError("No matching event")
        if len(candidates) > 1:
            raise AmbiguousTargetError(candidates)
        return candidates[0]
