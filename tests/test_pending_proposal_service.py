"""
Tests for the Pending Proposal Service.

These tests verify:
- store() returns an opaque, unique token
- consume() succeeds once; a second consume finds nothing
- Tokens expire after the TTL
- A foreign user cannot consume (and does not destroy) a token
- Concurrent consumes of one token let exactly one through
- Stored proposals are isolated from later caller changes
- A pending proposal knows which candidates it offered
"""

import threading
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from app.ai.proposal.schemas import CandidateEvent, Proposal, ProposalAction
from app.services.pending_proposal_service import PendingProposalService, TOKEN_PREFIX


@pytest.fixture
def service():
    return PendingProposalService(ttl_seconds=600)


@pytest.fixture
def owner_id():
    return uuid.uuid4()


def create_proposal(**fields) -> Proposal:
    return Proposal(action=ProposalAction.CREATE, title="Lunch", **fields)


# ---------------------------------------------------------------------------
# STORE / CONSUME
# ---------------------------------------------------------------------------

class TestStoreAndConsume:
    """Basic lifecycle."""

    def test_store_returns_prefixed_unique_tokens(self, service, owner_id):
        first = service.store(owner_id, create_proposal())
        second = service.store(owner_id, create_proposal())

        assert first.token.startswith(TOKEN_PREFIX)
        assert first.token != second.token
        assert len(service) == 2

    def test_consume_returns_stored_proposal(self, service, owner_id):
        pending = service.store(owner_id, create_proposal())

        consumed = service.consume(pending.token, owner_id)

        assert consumed is not None
        assert consumed.proposal.title == "Lunch"
        assert consumed.owner_id == owner_id

    def test_second_consume_finds_nothing(self, service, owner_id):
        pending = service.store(owner_id, create_proposal())

        assert service.consume(pending.token, owner_id) is not None
        assert service.consume(pending.token, owner_id) is None

    def test_unknown_and_empty_tokens(self, service, owner_id):
        assert service.consume("c_missing", owner_id) is None
        assert service.consume("", owner_id) is None

    def test_foreign_user_cannot_consume(self, service, owner_id):
        """Should refuse the stranger and keep the token for its owner."""
        pending = service.store(owner_id, create_proposal())

        assert service.consume(pending.token, uuid.uuid4()) is None
        assert service.consume(pending.token, owner_id) is not None

    def test_proposal_is_copied_on_store(self, service, owner_id):
        """Should not see changes made to the proposal after store()."""
        proposal = create_proposal(target_keywords=["lunch"])
        pending = service.store(owner_id, proposal)

        proposal.title = "Changed"
        proposal.target_keywords.append("dinner")

        consumed = service.consume(pending.token, owner_id)
        assert consumed.proposal.title == "Lunch"
        assert consumed.proposal.target_keywords == ["lunch"]


    def test_offers_only_stored_candidates(self, service, owner_id):
        start = datetime(2024, 6, 1, 9, tzinfo=timezone.utc)
        candidate = CandidateEvent(id=7, title="Standup", start_time=start, end_time=start + timedelta(minutes=15))
        pending = service.store(owner_id, Proposal(action=ProposalAction.DELETE, target_keywords=["standup"]), [candidate])

        consumed = service.consume(pending.token, owner_id)

        assert consumed.offers(7) is True
        assert consumed.offers(8) is False

# ---------------------------------------------------------------------------
# EXPIRY
# ---------------------------------------------------------------------------

class TestExpiry:
    """TTL handling."""

    def test_expired_token_cannot_be_consumed(self, owner_id):
        service = PendingProposalService(ttl_seconds=60)
        pending = service.store(owner_id, create_proposal())

        later = datetime.now(timezone.utc) + timedelta(seconds=61)
        with patch("app.services.pending_proposal_service.datetime") as mock_datetime:
            mock_datetime.now.return_value = later
            assert service.consume(pending.token, owner_id) is None

    def test_is_expired(self, service, owner_id):
        pending = service.store(owner_id, create_proposal())

        assert pending.is_expired(pending.created_at) is False
        assert pending.is_expired(pending.expires_at) is True

    def test_cleanup_expired(self, owner_id):
        service = PendingProposalService(ttl_seconds=60)
        service.store(owner_id, create_proposal())
        service.store(owner_id, create_proposal())

        later = datetime.now(timezone.utc) + timedelta(seconds=61)
        with patch("app.services.pending_proposal_service.datetime") as mock_datetime:
            mock_datetime.now.return_value = later
            assert service.cleanup_expired() == 2
        assert len(service) == 0


# ---------------------------------------------------------------------------
# CONCURRENCY
# ---------------------------------------------------------------------------

class TestConcurrentConsume:
    """Racing confirmations."""

    def test_exactly_one_consumer_wins(self, service, owner_id):
        pending = service.store(owner_id, create_proposal())
        workers = 8
        barrier = threading.Barrier(workers)
        results = []
        results_lock = threading.Lock()

        def confirm():
            barrier.wait()
            outcome = service.consume(pending.token, owner_id)
            with results_lock:
                results.append(outcome)

        threads = [threading.Thread(target=confirm) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == workers
        assert sum(1 for r in results if r is not None) == 1
