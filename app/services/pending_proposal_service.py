"""
Pending Proposal Service - proposals waiting for the user's confirmation.

Propose and confirm are two separate HTTP requests. Between them the
proposal lives here, keyed by an opaque confirmation token:

1. POST /assistant/propose -> store() -> token returned to the client
2. POST /assistant/confirm with the token -> consume() -> executor applies it

Guarantees:
- consume() is a single check-and-delete under a lock, so a token is
  applied at most once even when two confirmations race.
- An unknown, already consumed, expired or foreign token all look the same
  ("not found").
- A token presented by another user is NOT removed; its owner can still
  confirm it.
- Entries expire after PENDING_PROPOSAL_TTL_SECONDS and are swept on every
  store/consume.

Storage is process-local; a restart drops pending proposals and the user
simply sends the request again.

Usage:
    service = PendingProposalService(ttl_seconds=600)
    pending = service.store(user.id, proposal, candidates)
    ...
    pending = service.consume(token, user.id)  # None if not confirmable
"""

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Dict, List, Optional
from uuid import UUID

from app.ai.proposal.schemas import CandidateEvent, Proposal

logger = logging.getLogger("smartcal.services.pending_proposal")

TOKEN_PREFIX = "c_"


@dataclass(frozen=True)
class PendingProposal:
    """A proposal awaiting confirmation. Never mutated after creation."""
    token: str
    owner_id: UUID
    proposal: Proposal
    candidates: List[CandidateEvent] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.now(timezone.utc)) >= self.expires_at

    def offers(self, event_id: int) -> bool:
        """True when event_id is one of the candidates shown to the user."""
        return any(candidate.id == event_id for candidate in self.candidates)


class PendingProposalService:
    """TTL-bounded, consume-once token -> proposal store."""

    def __init__(self, ttl_seconds: int = 600):
        self.ttl_seconds = ttl_seconds
        self._pending: Dict[str, PendingProposal] = {}
        self._lock = Lock()

    # -------------------------------------------------------------------------
    # CORE OPERATIONS
    # -------------------------------------------------------------------------

    def store(
        self,
        owner_id: UUID,
        proposal: Proposal,
        candidates: Optional[List[CandidateEvent]] = None,
    ) -> PendingProposal:
        """
        Store a proposal under a fresh token.

        The proposal is deep-copied so later changes by the caller cannot
        leak into what gets confirmed.
        """
        now = datetime.now(timezone.utc)
        pending = PendingProposal(
            token=self._new_token(),
            owner_id=owner_id,
            proposal=proposal.model_copy(deep=True),
            candidates=list(candidates or []),
            created_at=now,
            expires_at=now + timedelta(seconds=self.ttl_seconds),
        )

        with self._lock:
            self._sweep(now)
            self._pending[pending.token] = pending

        logger.info(
            "Stored pending proposal",
            extra={
                "user_id": str(owner_id)[:8],
                "action": proposal.action.value,
                "candidates": len(pending.candidates),
                "expires_in": self.ttl_seconds,
            },
        )
        return pending

    def consume(self, token: str, owner_id: UUID) -> Optional[PendingProposal]:
        """
        Take the proposal out of the store.

        Returns:
            The PendingProposal, or None when the token is unknown, already
            consumed, expired or owned by another user
        """
        if not token:
            return None

        now = datetime.now(timezone.utc)
        with self._lock:
            self._sweep(now)
            pending = self._pending.get(token)
            if pending is None or pending.owner_id != owner_id:
                pending = None
            else:
                del self._pending[token]

        if pending is None:
            logger.info("Pending proposal not found", extra={"user_id": str(owner_id)[:8]})
            return None

        logger.info(
            "Consumed pending proposal",
            extra={"user_id": str(owner_id)[:8], "action": pending.proposal.action.value},
        )
        return pending

    # -------------------------------------------------------------------------
    # CLEANUP
    # -------------------------------------------------------------------------

    def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns the number removed."""
        with self._lock:
            return self._sweep(datetime.now(timezone.utc))

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def _sweep(self, now: datetime) -> int:
        # Caller holds the lock
        expired = [token for token, p in self._pending.items() if p.is_expired(now)]
        for token in expired:
            del self._pending[token]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired pending proposals")
        return len(expired)

    def _new_token(self) -> str:
        return TOKEN_PREFIX + secrets.token_urlsafe(24)
