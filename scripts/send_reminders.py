#!/usr/bin/env python3
"""
Create reminder notifications for events starting soon.

Meant to be run every minute from cron or a scheduler:
    * * * * * cd /srv/smartcal && python scripts/send_reminders.py
"""
import argparse
import logging
import sys
from pathlib import Path

# Adjust path so imports resolve when running from project root
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from app.core.config import settings
from app.core.logging_config import configure_logging
from app.db.session import SessionLocal
from app.services.reminder_service import generate_reminder_notifications

logger = logging.getLogger("smartcal.scripts.reminders")


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--lead-minutes",
        type=int,
        default=settings.REMINDER_LEAD_MINUTES,
        help="remind about events starting within this many minutes",
    )
    args = parser.parse_args()

    configure_logging()
    db = SessionLocal()
    try:
        created = generate_reminder_notifications(db, lead_minutes=args.lead_minutes)
    finally:
        db.close()

    logger.info(f"Created {created} reminder notifications")
    return 0


if __name__ == "__main__":
    sys.exit(main())
