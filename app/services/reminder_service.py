"""
Reminder Service - "your event starts soon" notifications.

Run periodically (scripts/send_reminders.py, e.g. from cron every minute).
Each run looks at events starting within the next REMINDER_LEAD_MINUTES and
creates one reminder per person involved (owner and participants). A
person is reminded at most once per event, so overlapping runs are safe.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.config import settings
from app.models.event import Event
from app.models.notification import Notification
from app.services.notification_service import NotificationType, reminder_content
from app.utils.datetime_utils import as_utc, utc_now

logger = logging.getLogger("smartcal.services.reminders")


def generate_reminder_notifications(
    db: Session,
    now: Optional[datetime] = None,
    lead_minutes: Optional[int] = None,
) -> int:
    """
    Create missing reminders for events starting in [now, now + lead].

    Returns:
        Number of notifications created

    Raises:
        SQLAlchemyError: after rolling the session back
    """
    now = as_utc(now) if now else utc_now()
    lead_minutes = lead_minutes or settings.REMINDER_LEAD_MINUTES
    window_end = now + timedelta(minutes=lead_minutes)

    events = db.execute(
        select(Event)
        .where(Event.start_time >= now, Event.start_time <= window_end)
        .options(selectinload(Event.participants))
    ).scalars().all()

    created = 0
    try:
        for event in events:
            recipients = [event.user_id]
            for uid in event.participant_ids:
                if uid not in recipients:
                    recipients.append(uid)

            already = set(db.execute(
                select(Notification.user_id).where(
                    Notification.type == NotificationType.REMINDER.value,
                    Notification.event_id == event.id,
                )
            ).scalars().all())

            for user_id in recipients:
                if user_id in already:
                    continue
                db.add(Notification(
                    user_id=user_id,
                    type=NotificationType.REMINDER.value,
                    content=reminder_content(event.title, lead_minutes),
                    event_id=event.id,
                    is_read=False,
                ))
                created += 1
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("Reminder generation failed", exc_info=True)
        raise

    logger.info("Reminders generated", extra={"events": len(events), "reminders_created": created})
    return created
