"""
Tests for the Event Service (the action executor).

These tests verify:
- Create validation: required fields, end after start, lengths, participants
- The owner is never invited to their own event
- Partial updates, interval re-validation and no-op updates
- Participant replacement notifies added and kept participants differently
- Update/delete without any target hint fail before touching the session
- Only the owner may change an event
- Each mutation writes exactly one operation log entry in its transaction
- Storage failures roll back and raise EventStorageError
- Notification failures never fail the mutation
"""

import json
import uuid
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from app.ai.proposal.schemas import EventType, Proposal, ProposalAction
from app.models.event import Event, EventParticipant
from app.models.operation_log import OperationLog
from app.services.candidate_matcher import CandidateMatcher
from app.services.event_errors import (
    AmbiguousTargetError,
    EventNotFoundError,
    EventPermissionError,
    EventStorageError,
    EventValidationError,
)
from app.services.event_service import EventService
from app.services.notification_service import NotificationDispatcher, NotificationType
from app.utils.datetime_utils import as_utc
from conftest import InlineExecutor, RecordingSink, create_event, utc


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def events(sink):
    dispatcher = NotificationDispatcher(sink, executor=InlineExecutor())
    return EventService(matcher=CandidateMatcher(limit=5), dispatcher=dispatcher)


def create_proposal(**fields) -> Proposal:
    values = {
        "title": "Design review",
        "start_time": utc(2024, 6, 1, 15),
        "end_time": utc(2024, 6, 1, 16),
    }
    values.update(fields)
    return Proposal(action=ProposalAction.CREATE, **values)


def logs(db):
    return db.query(OperationLog).order_by(OperationLog.id).all()


# ---------------------------------------------------------------------------
# CREATE
# ---------------------------------------------------------------------------

class TestCreateEvent:
    """Tests for create_event."""

    def test_creates_event_with_log_and_invitations(self, db, events, sink, test_user, ann):
        event = events.create_event(db, test_user, create_proposal(participant_ids=[ann.id], location="Room 4"))

        assert event.id is not None
        assert event.user_id == test_user.id
        assert event.location == "Room 4"
        assert event.participant_ids == [ann.id]

        entries = logs(db)
        assert len(entries) == 1
        assert entries[0].action == "create"
        assert entries[0].target_title == "Design review"
        assert json.loads(entries[0].detail)["snapshot"]["id"] == event.id

        assert [(m.user_id, m.type) for m in sink.messages] == [(ann.id, NotificationType.INVITATION)]
        assert "Test User" in sink.messages[0].content

    def test_type_defaults_to_work(self, db, events, test_user):
        event = events.create_event(db, test_user, create_proposal())
        assert event.type == EventType.WORK.value

    def test_equal_times_are_rejected(self, db, events, test_user):
        """Should refuse a zero-length event and write nothing."""
        with pytest.raises(EventValidationError):
            events.create_event(
                db, test_user,
                create_proposal(start_time=utc(2024, 6, 1, 15), end_time=utc(2024, 6, 1, 15)),
            )

        assert db.query(Event).count() == 0
        assert logs(db) == []

    @pytest.mark.parametrize("missing", ["title", "start_time", "end_time"])
    def test_missing_required_field(self, db, events, test_user, missing):
        with pytest.raises(EventValidationError):
            events.create_event(db, test_user, create_proposal(**{missing: None}))

    def test_blank_title_is_rejected(self, db, events, test_user):
        with pytest.raises(EventValidationError):
            events.create_event(db, test_user, create_proposal(title="   "))

    def test_too_long_title_is_rejected(self, db, events, test_user):
        with pytest.raises(EventValidationError):
            events.create_event(db, test_user, create_proposal(title="x" * 101))

    def test_owner_is_never_a_participant(self, db, events, sink, test_user, ann):
        """Should drop the owner and duplicates from participant_ids."""
        event = events.create_event(
            db, test_user, create_proposal(participant_ids=[test_user.id, ann.id, ann.id])
        )

        assert event.participant_ids == [ann.id]
        assert [m.user_id for m in sink.messages] == [ann.id]

    def test_unknown_participant_is_rejected(self, db, events, test_user):
        with pytest.raises(EventValidationError):
            events.create_event(db, test_user, create_proposal(participant_ids=[uuid.uuid4()]))
        assert db.query(Event).count() == 0


# ---------------------------------------------------------------------------
# UPDATE
# ---------------------------------------------------------------------------

class TestUpdateEvent:
    """Tests for update_event."""

    @pytest.fixture
    def event(self, db, test_user, ann):
        return create_event(db, test_user, "Standup", utc(2024, 6, 1, 9), utc(2024, 6, 1, 10), participants=[ann])

    def test_partial_update_keeps_other_fields(self, db, events, test_user, event):
        updated = events.update_event(
            db, test_user,
            Proposal(action=ProposalAction.UPDATE, target_event_id=event.id, title="Daily standup"),
        )

        assert updated.title == "Daily standup"
        assert as_utc(updated.start_time) == utc(2024, 6, 1, 9)

        entry = logs(db)[0]
        detail = json.loads(entry.detail)
        assert entry.action == "update"
        assert detail["before"]["title"] == "Standup"
        assert detail["after"]["title"] == "Daily standup"

    def test_moving_start_past_end_is_rejected(self, db, events, test_user, event):
        """Should validate the combined interval when only one side changes."""
        with pytest.raises(EventValidationError):
            events.update_event(
                db, test_user,
                Proposal(action=ProposalAction.UPDATE, target_event_id=event.id, start_time=utc(2024, 6, 1, 11)),
            )
        assert logs(db) == []

    def test_moving_both_sides(self, db, events, test_user, event):
        updated = events.update_event(
            db, test_user,
            Proposal(
                action=ProposalAction.UPDATE,
                target_event_id=event.id,
                start_time=utc(2024, 6, 1, 16),
                end_time=utc(2024, 6, 1, 17),
            ),
        )
        assert as_utc(updated.end_time) == utc(2024, 6, 1, 17)

    def test_noop_update_writes_nothing(self, db, events, sink, test_user, event):
        """Should skip log and notifications when nothing would change."""
        events.update_event(
            db, test_user,
            Proposal(action=ProposalAction.UPDATE, target_event_id=event.id, title="Standup"),
        )

        assert logs(db) == []
        assert sink.messages == []

    def test_kept_participants_get_change_notice(self, db, events, sink, test_user, ann, event):
        events.update_event(
            db, test_user,
            Proposal(action=ProposalAction.UPDATE, target_event_id=event.id, location="Room 2"),
        )

        assert [(m.user_id, m.type) for m in sink.messages] == [(ann.id, NotificationType.CHANGE)]

    def test_replacing_participants(self, db, events, sink, test_user, ann, bob, event):
        """Should notify the current participants and drop the rest."""
        updated = events.update_event(
            db, test_user,
            Proposal(action=ProposalAction.UPDATE, target_event_id=event.id, participant_ids=[bob.id]),
        )

        assert updated.participant_ids == [bob.id]
        assert db.query(EventParticipant).filter(EventParticipant.user_id == ann.id).count() == 0
        assert [(m.user_id, m.type) for m in sink.messages] == [(bob.id, NotificationType.CHANGE)]

    def test_adding_participant_keeps_existing(self, db, events, sink, test_user, ann, bob, event):
        events.update_event(
            db, test_user,
            Proposal(action=ProposalAction.UPDATE, target_event_id=event.id, participant_ids=[ann.id, bob.id]),
        )

        received = {m.user_id: m.type for m in sink.messages}
        assert received == {bob.id: NotificationType.CHANGE, ann.id: NotificationType.CHANGE}

    def test_resolves_target_by_keywords(self, db, events, test_user, event):
        updated = events.update_event(
            db, test_user,
            Proposal(action=ProposalAction.UPDATE, target_keywords=["standup"], location="Room 9"),
        )
        assert updated.id == event.id
        assert updated.location == "Room 9"

    def test_ambiguous_keywords(self, db, events, test_user, event):
        create_event(db, test_user, "Standup", utc(2024, 6, 2, 9), utc(2024, 6, 2, 10))

        with pytest.raises(AmbiguousTargetError):
            events.update_event(
                db, test_user,
                Proposal(action=ProposalAction.UPDATE, target_keywords=["standup"], location="Room 9"),
            )

    def test_only_owner_may_update(self, db, events, ann, event):
        """A participant cannot change the event."""
        with pytest.raises(EventNotFoundError):
            events.update_event(
                db, ann,
                Proposal(action=ProposalAction.UPDATE, target_event_id=event.id, title="Mine now"),
            )

    def test_foreign_target_is_a_permission_error(self, db, events, ann, event):
        with pytest.raises(EventPermissionError):
            events.update_event(
                db, ann,
                Proposal(action=ProposalAction.UPDATE, title="Mine now"),
                target=event,
            )


# ---------------------------------------------------------------------------
# TARGET HINTS
# ---------------------------------------------------------------------------

class TestMissingTargetHint:
    """Update/delete with nothing to locate the event by."""

    @pytest.fixture
    def matcher(self):
        return MagicMock()

    @pytest.fixture
    def isolated_events(self, matcher):
        return EventService(matcher=matcher, dispatcher=MagicMock())

    def test_update_fails_before_session_access(self, isolated_events, matcher, test_user):
        db = MagicMock()

        with pytest.raises(EventValidationError):
            isolated_events.update_event(db, test_user, Proposal(action=ProposalAction.UPDATE, title="X"))

        assert db.mock_calls == []
        matcher.select_single.assert_not_called()

    def test_delete_fails_before_session_access(self, isolated_events, matcher, test_user):
        db = MagicMock()

        with pytest.raises(EventValidationError):
            isolated_events.delete_event(db, test_user, Proposal(action=ProposalAction.DELETE))

        assert db.mock_calls == []
        matcher.select_single.assert_not_called()


# ---------------------------------------------------------------------------
# DELETE
# ---------------------------------------------------------------------------

class TestDeleteEvent:
    """Tests for delete_event."""

    def test_deletes_event_memberships_and_notifies(self, db, events, sink, test_user, ann):
        event = create_event(db, test_user, "Offsite", utc(2024, 6, 5, 9), utc(2024, 6, 5, 17), participants=[ann])
        event_id = event.id

        snapshot = events.delete_event(
            db, test_user, Proposal(action=ProposalAction.DELETE, target_event_id=event_id)
        )

        assert snapshot.id == event_id
        assert snapshot.title == "Offsite"
        assert snapshot.participant_ids == [ann.id]
        assert db.query(Event).count() == 0
        assert db.query(EventParticipant).count() == 0

        entry = logs(db)[0]
        assert entry.action == "delete"
        assert entry.target_title == "Offsite"

        assert len(sink.messages) == 1
        assert sink.messages[0].user_id == ann.id
        assert sink.messages[0].type == NotificationType.CHANGE
        assert "cancelled" in sink.messages[0].content
        assert sink.messages[0].event_id == event_id

    def test_unknown_id(self, db, events, test_user):
        with pytest.raises(EventNotFoundError):
            events.delete_event(db, test_user, Proposal(action=ProposalAction.DELETE, target_event_id=404))


# ---------------------------------------------------------------------------
# READ
# ---------------------------------------------------------------------------

class TestReadEvents:
    """Tests for get_event and list_events."""

    def test_participant_can_read(self, db, events, test_user, ann):
        event = create_event(db, test_user, "Standup", utc(2024, 6, 1, 9), utc(2024, 6, 1, 10), participants=[ann])
        assert events.get_event(db, ann, event.id).id == event.id

    def test_stranger_cannot_read(self, db, events, test_user, bob):
        event = create_event(db, test_user, "Standup", utc(2024, 6, 1, 9), utc(2024, 6, 1, 10))
        with pytest.raises(EventNotFoundError):
            events.get_event(db, bob, event.id)

    def test_list_includes_shared_events_in_start_order(self, db, events, test_user, ann):
        shared = create_event(db, ann, "Ann's party", utc(2024, 6, 2, 18), utc(2024, 6, 2, 22), participants=[test_user])
        own = create_event(db, test_user, "Standup", utc(2024, 6, 1, 9), utc(2024, 6, 1, 10))
        create_event(db, ann, "Ann only", utc(2024, 6, 1, 12), utc(2024, 6, 1, 13))

        assert [e.id for e in events.list_events(db, test_user)] == [own.id, shared.id]

    def test_list_filters(self, db, events, test_user):
        work = create_event(db, test_user, "Standup", utc(2024, 6, 1, 9), utc(2024, 6, 1, 10))
        gym = create_event(db, test_user, "Gym", utc(2024, 6, 3, 18), utc(2024, 6, 3, 19), event_type="life")

        assert [e.id for e in events.list_events(db, test_user, event_type="life")] == [gym.id]
        assert [e.id for e in events.list_events(db, test_user, end=utc(2024, 6, 2))] == [work.id]
        assert [e.id for e in events.list_events(db, test_user, start=utc(2024, 6, 2))] == [gym.id]


# ---------------------------------------------------------------------------
# FAILURES
# ---------------------------------------------------------------------------

class TestFailures:
    """Storage and notification failures."""

    def test_storage_failure_rolls_back(self, db, events, sink, test_user, ann):
        with patch.object(db, "commit", side_effect=OperationalError("COMMIT", {}, Exception("disk full"))):
            with pytest.raises(EventStorageError):
                events.create_event(db, test_user, create_proposal(participant_ids=[ann.id]))

        assert db.query(Event).count() == 0
        assert logs(db) == []
        assert sink.messages == []

    def test_notification_failure_does_not_fail_create(self, db, test_user, ann):
        """Should keep the event and count the failed delivery."""
        dispatcher = NotificationDispatcher(RecordingSink(error=RuntimeError("smtp down")), executor=InlineExecutor())
        events = EventService(matcher=CandidateMatcher(limit=5), dispatcher=dispatcher)

        event = events.create_event(db, test_user, create_proposal(participant_ids=[ann.id]))

        assert db.query(Event).filter(Event.id == event.id).count() == 1
        assert dispatcher.metrics.to_dict() == {"batches": 1, "delivered": 0, "failed": 1}

    def test_apply_rejects_unknown_action(self, db, events, test_user):
        with pytest.raises(EventValidationError):
            events.apply(db, test_user, Proposal(action=ProposalAction.UNKNOWN))
