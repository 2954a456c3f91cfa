"""
Event Service - applies create/update/delete proposals to the event store.

This is the only code path that mutates events. Both the assistant (after
confirmation) and the plain /events endpoints call it, so validation,
ownership, audit logging and notifications are identical for both.

Every mutation follows the same shape:
1. Validate and resolve the target (no writes yet; update/delete without
   any target hint is rejected before the session is touched)
2. One transaction: event row + memberships + operation log
3. After commit: notify participants (fire-and-forget)

Storage failures roll the session back and raise EventStorageError.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.ai.proposal.schemas import MAX_EVENT_ID, EventType, Proposal, ProposalAction
from app.models.event import Event, EventParticipant
from app.models.user import User
from app.services.candidate_matcher import CandidateMatcher
from app.services.event_errors import (
    EventNotFoundError,
    EventPermissionError,
    EventStorageError,
    EventValidationError,
)
from app.services.notification_service import (
    NotificationDispatcher,
    NotificationType,
    cancelled_content,
    invitation_content,
    updated_content,
)
from app.services.operation_log_service import (
    CreateLogDetail,
    DeleteLogDetail,
    EventSnapshot,
    OperationLogService,
    UpdateLogDetail,
    operation_log_service,
)
from app.utils.datetime_utils import as_utc

logger = logging.getLogger("smartcal.services.events")

# Column limits (see app/models/event.py)
MAX_TITLE = 100
MAX_LOCATION = 200
MAX_DESCRIPTION = 500

DEFAULT_EVENT_TYPE = EventType.WORK


class EventService:
    """
    Action executor for calendar events.

    Args:
        matcher: Resolves update/delete references to a single event
        dispatcher: Delivers participant notifications after commit
        log_service: Appends audit entries inside the transaction
    """

    def __init__(
        self,
        matcher: CandidateMatcher,
        dispatcher: NotificationDispatcher,
        log_service: OperationLogService = operation_log_service,
    ):
        self.matcher = matcher
        self.dispatcher = dispatcher
        self.log_service = log_service

    # -------------------------------------------------------------------------
    # CREATE
    # -------------------------------------------------------------------------

    def create_event(self, db: Session, owner: User, proposal: Proposal) -> Event:
        """
        Create an event owned by `owner`.

        Requires title, start_time and end_time with end after start. Type
        defaults to "work". Participants become memberships, except the
        owner, who is never invited to their own event.

        Raises:
            EventValidationError: missing or inconsistent fields
            EventStorageError: the transaction failed
        """
        title = (proposal.title or "").strip()
        if not title or proposal.start_time is None or proposal.end_time is None:
            raise EventValidationError("An event needs a title, a start time and an end time")

        start_time, end_time = as_utc(proposal.start_time), as_utc(proposal.end_time)
        self._check_interval(start_time, end_time)
        self._check_lengths(title, proposal.location, proposal.description)

        participant_ids = self._membership_ids(db, proposal.participant_ids, owner.id)

        event = Event(
            user_id=owner.id,
            title=title,
            type=(proposal.type or DEFAULT_EVENT_TYPE).value,
            start_time=start_time,
            end_time=end_time,
            location=proposal.location or "",
            description=proposal.description or "",
        )
        event.participants = [EventParticipant(user_id=uid) for uid in participant_ids]

        try:
            db.add(event)
            db.flush()
            self.log_service.append(
                db, owner.id, event.title,
                CreateLogDetail(snapshot=EventSnapshot.from_event(event)),
            )
            db.commit()
        except SQLAlchemyError as e:
            self._rollback(db, "create", owner, e)

        db.refresh(event)
        logger.info(
            "Event created",
            extra={"user_id": str(owner.id)[:8], "event_id": event.id, "participants": len(participant_ids)},
        )

        self.dispatcher.dispatch(
            recipients=participant_ids,
            notification_type=NotificationType.INVITATION,
            content=invitation_content(self._display_name(owner), event.title),
            event_id=event.id,
            exclude=owner.id,
        )
        return event

    # -------------------------------------------------------------------------
    # UPDATE
    # -------------------------------------------------------------------------

    def update_event(
        self,
        db: Session,
        owner: User,
        proposal: Proposal,
        target: Optional[Event] = None,
    ) -> Event:
        """
        Apply the fields present in `proposal` to the target event.

        Without a pre-resolved `target` the event is located through the
        proposal's hints. Only non-None fields change. When only one side of
        the interval is given the other is kept, and the result must still
        have end after start. participant_ids, when not None, replaces the
        invited set.

        Returns the event unchanged (no log, no notification) when nothing
        is to be changed.

        Raises:
            EventValidationError: no target hint, or invalid new values
            EventNotFoundError / EventPermissionError: no such event for this owner
            AmbiguousTargetError: several events match the hints
            EventStorageError: the transaction failed
        """
        event = self._resolve_target(db, owner, proposal, target)

        changes: Dict[str, object] = {}
        for field in ("title", "location", "description"):
            value = getattr(proposal, field)
            if value is not None and value != getattr(event, field):
                changes[field] = value
        if "title" in changes and not str(changes["title"]).strip():
            raise EventValidationError("Title cannot be empty")
        if proposal.type is not None and proposal.type.value != event.type:
            changes["type"] = proposal.type.value

        if proposal.start_time is not None or proposal.end_time is not None:
            new_start = as_utc(proposal.start_time) if proposal.start_time else as_utc(event.start_time)
            new_end = as_utc(proposal.end_time) if proposal.end_time else as_utc(event.end_time)
            self._check_interval(new_start, new_end)
            if new_start != as_utc(event.start_time):
                changes["start_time"] = new_start
            if new_end != as_utc(event.end_time):
                changes["end_time"] = new_end

        self._check_lengths(changes.get("title"), changes.get("location"), changes.get("description"))

        replace_participants = proposal.participant_ids is not None
        if not changes and not replace_participants:
            logger.info("Event update is a no-op", extra={"user_id": str(owner.id)[:8], "event_id": event.id})
            return event

        before = EventSnapshot.from_event(event)
        new_ids = (
            self._membership_ids(db, proposal.participant_ids, owner.id)
            if replace_participants
            else list(before.participant_ids)
        )

        try:
            for field, value in changes.items():
                setattr(event, field, value)
            if replace_participants:
                self._replace_memberships(event, new_ids)
            db.flush()
            self.log_service.append(
                db, owner.id, event.title,
                UpdateLogDetail(before=before, after=EventSnapshot.from_event(event)),
            )
            db.commit()
        except SQLAlchemyError as e:
            self._rollback(db, "update", owner, e)

        db.refresh(event)
        logger.info(
            "Event updated",
            extra={"user_id": str(owner.id)[:8], "event_id": event.id, "fields": sorted(changes)},
        )

        # Current participants, newcomers included
        self.dispatcher.dispatch(
            recipients=event.participant_ids,
            notification_type=NotificationType.CHANGE,
            content=updated_content(event.title),
            event_id=event.id,
            exclude=owner.id,
        )
        return event

    # -------------------------------------------------------------------------
    # DELETE
    # -------------------------------------------------------------------------

    def delete_event(
        self,
        db: Session,
        owner: User,
        proposal: Proposal,
        target: Optional[Event] = None,
    ) -> EventSnapshot:
        """
        Delete the target event and its memberships.

        Participants are captured before deletion so they can be told the
        event was cancelled.

        Returns:
            Snapshot of the event as it was before deletion

        Raises:
            Same as update_event
        """
        event = self._resolve_target(db, owner, proposal, target)
        snapshot = EventSnapshot.from_event(event)

        try:
            for membership in list(event.participants):
                db.delete(membership)
            db.delete(event)
            self.log_service.append(db, owner.id, snapshot.title, DeleteLogDetail(snapshot=snapshot))
            db.commit()
        except SQLAlchemyError as e:
            self._rollback(db, "delete", owner, e)

        logger.info("Event deleted", extra={"user_id": str(owner.id)[:8], "event_id": snapshot.id})

        self.dispatcher.dispatch(
            recipients=snapshot.participant_ids,
            notification_type=NotificationType.CHANGE,
            content=cancelled_content(snapshot.title),
            event_id=snapshot.id,
            exclude=owner.id,
        )
        return snapshot

    # -------------------------------------------------------------------------
    # READ
    # -------------------------------------------------------------------------

    def get_event(self, db: Session, user: User, event_id: int) -> Event:
        """Event visible to `user` (owner or participant), else EventNotFoundError."""
        if not 0 <= event_id <= MAX_EVENT_ID:
            raise EventNotFoundError(f"Event {event_id} not found")
        event = db.execute(
            select(Event)
            .where(Event.id == event_id)
            .where(or_(Event.user_id == user.id, Event.id.in_(self._participating(user.id))))
        ).scalar_one_or_none()
        if event is None:
            raise EventNotFoundError(f"Event {event_id} not found")
        return event

    def list_events(
        self,
        db: Session,
        user: User,
        event_type: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Event]:
        """
        Events owned by or shared with `user`, earliest first.

        start/end select events overlapping [start, end].
        """
        stmt = select(Event).where(
            or_(Event.user_id == user.id, Event.id.in_(self._participating(user.id)))
        )
        if event_type:
            stmt = stmt.where(Event.type == event_type)
        if start is not None:
            stmt = stmt.where(Event.end_time >= as_utc(start))
        if end is not None:
            stmt = stmt.where(Event.start_time <= as_utc(end))

        return list(db.execute(stmt.order_by(Event.start_time.asc(), Event.id.asc())).scalars().all())

    # -------------------------------------------------------------------------
    # DISPATCH
    # -------------------------------------------------------------------------

    def apply(self, db: Session, owner: User, proposal: Proposal):
        """Run the executor matching proposal.action."""
        if proposal.action == ProposalAction.CREATE:
            return self.create_event(db, owner, proposal)
        if proposal.action == ProposalAction.UPDATE:
            return self.update_event(db, owner, proposal)
        if proposal.action == ProposalAction.DELETE:
            return self.delete_event(db, owner, proposal)
        raise EventValidationError(f"Unsupported action: {proposal.action.value}")

    # -------------------------------------------------------------------------
    # HELPERS
    # -------------------------------------------------------------------------

    def _resolve_target(
        self,
        db: Session,
        owner: User,
        proposal: Proposal,
        target: Optional[Event],
    ) -> Event:
        if target is None:
            # Must happen before any session access
            if not proposal.has_target_hint():
                raise EventValidationError("Tell me the event's time, some keywords or its id")
            target = self.matcher.select_single(db, owner.id, proposal)

        if target.user_id != owner.id:
            raise EventPermissionError(f"Event {target.id} not found")
        return target

    def _check_interval(self, start_time: datetime, end_time: datetime) -> None:
        if end_time <= start_time:
            raise EventValidationError("End time must be after start time")

    def _check_lengths(
        self,
        title: Optional[str],
        location: Optional[str],
        description: Optional[str],
    ) -> None:
        if title and len(title) > MAX_TITLE:
            raise EventValidationError(f"Title is longer than {MAX_TITLE} characters")
        if location and len(location) > MAX_LOCATION:
            raise EventValidationError(f"Location is longer than {MAX_LOCATION} characters")
        if description and len(description) > MAX_DESCRIPTION:
            raise EventValidationError(f"Description is longer than {MAX_DESCRIPTION} characters")

    def _membership_ids(
        self,
        db: Session,
        participant_ids: Optional[Iterable[UUID]],
        owner_id: UUID,
    ) -> List[UUID]:
        """De-duplicated participant ids without the owner; all must exist."""
        ids: List[UUID] = []
        for uid in participant_ids or []:
            if uid != owner_id and uid not in ids:
                ids.append(uid)
        if not ids:
            return ids

        known = set(db.execute(select(User.id).where(User.id.in_(ids))).scalars().all())
        unknown = [uid for uid in ids if uid not in known]
        if unknown:
            raise EventValidationError(f"Unknown participant: {unknown[0]}")
        return ids

    def _replace_memberships(self, event: Event, new_ids: List[UUID]) -> None:
        # Keep surviving rows so the (event_id, user_id) constraint never sees a duplicate
        wanted = set(new_ids)
        current = {p.user_id: p for p in event.participants}
        for uid, membership in current.items():
            if uid not in wanted:
                event.participants.remove(membership)
        for uid in new_ids:
            if uid not in current:
                event.participants.append(EventParticipant(user_id=uid))

    def _participating(self, user_id: UUID):
        return select(EventParticipant.event_id).where(EventParticipant.user_id == user_id)

    def _display_name(self, user: User) -> str:
        return user.display_name or user.email

    def _rollback(self, db: Session, action: str, owner: User, error: SQLAlchemyError) -> None:
        db.rollback()
        logger.error(
            f"Event {action} failed, transaction rolled back: {error}",
            exc_info=True,
            extra={"user_id": str(owner.id)[:8]},
        )
        raise EventStorageError(f"Could not {action} the event") from error
