"""
Notification Service - in-app notifications for event participants.

Two halves:

1. Delivery (write side). After an event transaction commits, EventService
   hands the recipients to NotificationDispatcher, which delivers on a
   worker thread through a NotificationSink. Delivery is fire-and-forget:
   a failure is logged and counted, never raised to the request that
   caused it.

2. Inbox (read side). NotificationService lists, counts and marks a user's
   notifications for the /notifications endpoints.

Usage:
    dispatcher = NotificationDispatcher(DatabaseNotificationSink(SessionLocal))
    dispatcher.dispatch(
        recipients=[...],
        notification_type=NotificationType.INVITATION,
        content=invitation_content("Ann", "Design review"),
        event_id=event.id,
        exclude=owner.id,
    )
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from threading import Lock
from typing import Callable, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.models.notification import Notification

logger = logging.getLogger("smartcal.services.notifications")


class NotificationType(str, Enum):
    INVITATION = "invitation"
    CHANGE = "change"
    REMINDER = "reminder"


# ---------------------------------------------------------------------------
# CONTENT
# ---------------------------------------------------------------------------

def invitation_content(inviter_name: str, title: str) -> str:
    return f"{inviter_name} invited you to '{title}'"


def updated_content(title: str) -> str:
    return f"The event '{title}' you are attending has been updated"


def cancelled_content(title: str) -> str:
    return f"The event '{title}' you are attending has been cancelled"


def reminder_content(title: str, minutes: int) -> str:
    return f"Your event '{title}' starts in {minutes} minutes"


@dataclass(frozen=True)
class NotificationMessage:
    """One notification for one recipient."""
    user_id: UUID
    type: NotificationType
    content: str
    event_id: Optional[int] = None


# ---------------------------------------------------------------------------
# DELIVERY
# ---------------------------------------------------------------------------

class NotificationSink(ABC):
    """Where notifications end up."""

    @abstractmethod
    def deliver(self, messages: List[NotificationMessage]) -> None:
        """Persist/send all messages or raise."""


class DatabaseNotificationSink(NotificationSink):
    """
    Writes notifications to the notifications table.

    Runs on a worker thread, so it opens its own session per batch instead
    of reusing the request's session.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def deliver(self, messages: List[NotificationMessage]) -> None:
        db = self.session_factory()
        try:
            for message in messages:
                db.add(Notification(
                    user_id=message.user_id,
                    type=message.type.value,
                    content=message.content,
                    event_id=message.event_id,
                    is_read=False,
                ))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


class NotificationMetrics:
    """Thread-safe delivery counters."""

    def __init__(self):
        self._lock = Lock()
        self.batches = 0
        self.delivered = 0
        self.failed = 0

    def record_success(self, count: int) -> None:
        with self._lock:
            self.batches += 1
            self.delivered += count

    def record_failure(self) -> None:
        with self._lock:
            self.batches += 1
            self.failed += 1

    def to_dict(self) -> dict:
        with self._lock:
            return {"batches": self.batches, "delivered": self.delivered, "failed": self.failed}


class NotificationDispatcher:
    """
    Fire-and-forget fan-out of notifications.

    Args:
        sink: Delivery target
        max_workers: Worker threads when no executor is given
        executor: Custom executor (tests pass one that runs inline)
    """

    def __init__(
        self,
        sink: NotificationSink,
        max_workers: int = 2,
        executor: Optional[Executor] = None,
    ):
        self.sink = sink
        self.metrics = NotificationMetrics()
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="notify"
        )

    def dispatch(
        self,
        recipients: Iterable[UUID],
        notification_type: NotificationType,
        content: str,
        event_id: Optional[int] = None,
        exclude: Optional[UUID] = None,
    ) -> Optional[Future]:
        """
        Queue one notification per distinct recipient (minus `exclude`).

        Returns:
            The delivery future, or None when there was nobody to notify
        """
        messages: List[NotificationMessage] = []
        seen = set()
        for user_id in recipients:
            if user_id == exclude or user_id in seen:
                continue
            seen.add(user_id)
            messages.append(NotificationMessage(
                user_id=user_id,
                type=notification_type,
                content=content,
                event_id=event_id,
            ))

        if not messages:
            return None

        try:
            return self._executor.submit(self._deliver, messages)
        except RuntimeError as e:
            # Executor already shut down (application stopping)
            logger.error(f"Notification dispatch rejected: {e}")
            self.metrics.record_failure()
            return None

    def _deliver(self, messages: List[NotificationMessage]) -> None:
        try:
            self.sink.deliver(messages)
        except Exception as e:
            # Advisory only: the event change is already committed
            self.metrics.record_failure()
            logger.error(
                f"Notification delivery failed: {e}",
                exc_info=True,
                extra={"type": messages[0].type.value, "recipients": len(messages)},
            )
            return

        self.metrics.record_success(len(messages))
        logger.info(
            "Notifications delivered",
            extra={
                "type": messages[0].type.value,
                "event_id": messages[0].event_id,
                "recipients": len(messages),
            },
        )

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


# ---------------------------------------------------------------------------
# INBOX
# ---------------------------------------------------------------------------

class NotificationService:
    """Read/mark operations on a user's notifications."""

    def list_notifications(
        self,
        db: Session,
        user_id: UUID,
        is_read: Optional[bool] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Tuple[List[Notification], int]:
        """Newest-first page of notifications and the total count."""
        stmt = select(Notification).where(Notification.user_id == user_id)
        if is_read is not None:
            stmt = stmt.where(Notification.is_read.is_(is_read))

        total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
        items = db.execute(
            stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        ).scalars().all()
        return list(items), total

    def unread_count(self, db: Session, user_id: UUID) -> int:
        return db.execute(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        ).scalar_one()

    def mark_read(self, db: Session, user_id: UUID, notification_id: int) -> Optional[Notification]:
        """Mark one notification read. None if it does not belong to the user."""
        notification = db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
        ).scalar_one_or_none()
        if notification is None:
            return None

        if not notification.is_read:
            notification.is_read = True
            db.commit()
            db.refresh(notification)
        return notification

    def mark_all_read(self, db: Session, user_id: UUID) -> int:
        """Mark every unread notification read; returns how many changed."""
        result = db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        db.commit()
        return result.rowcount or 0


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
notification_service = NotificationService()
