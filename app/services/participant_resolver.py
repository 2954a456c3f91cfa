"""
Participant Resolver - maps names the user mentioned to user ids.

"Lunch with Ann and Bob" gives participant_keywords ["Ann", "Bob"]; each
keyword is matched case-insensitively as a substring of users.display_name.
Matching is deliberately loose: a keyword may bring in up to
PARTICIPANT_MATCH_LIMIT users, and the user reviews the result before
confirming.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.user import User

logger = logging.getLogger("smartcal.services.participants")


def like_pattern(keyword: str) -> str:
    """Build a LIKE pattern matching keyword literally anywhere in a column."""
    escaped = keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ParticipantResolver:
    """Directory lookup by display name."""

    def __init__(self, match_limit: Optional[int] = None):
        self.match_limit = match_limit or settings.PARTICIPANT_MATCH_LIMIT

    def resolve(self, db: Session, keywords: Optional[List[str]]) -> List[UUID]:
        """
        Resolve keywords to a de-duplicated list of user ids.

        Keywords without a match contribute nothing. A failed lookup for one
        keyword is logged and counts as no match; the rest still resolve.

        Returns:
            User ids in first-seen order (may be empty)
        """
        resolved: List[UUID] = []
        seen = set()

        for keyword in keywords or []:
            stmt = (
                select(User.id)
                .where(User.is_active.is_(True))
                .where(User.display_name.ilike(like_pattern(keyword), escape="\\"))
                .order_by(User.display_name)
                .limit(self.match_limit)
            )
            try:
                ids = db.execute(stmt).scalars().all()
            except SQLAlchemyError as e:
                logger.warning(
                    f"Participant lookup failed: {e}",
                    extra={"keyword": keyword},
                )
                continue

            for user_id in ids:
                if user_id not in seen:
                    seen.add(user_id)
                    resolved.append(user_id)

        logger.debug(
            "Resolved participants",
            extra={"keywords": keywords, "matched": len(resolved)},
        )
        return resolved
