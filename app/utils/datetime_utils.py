"""
Datetime utilities shared by the normalizer, the matcher and the executor.

- parse_rfc3339: strict parser for model-produced timestamps
- as_utc: normalize any stored or parsed datetime to aware UTC
- day_bounds: calendar day [start, next start) around a timestamp
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

# Accepted layouts; both require an explicit offset ("Z" or "+08:00")
RFC3339_FORMATS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
)


def parse_rfc3339(value) -> Optional[datetime]:
    """
    Parse an RFC 3339 timestamp.

    Returns None for anything that is not a string in one of RFC3339_FORMATS
    (empty, naive, malformed, wrong type). Never raises.
    """
    if not isinstance(value, str):
        return None

    value = value.strip()
    if not value:
        return None

    for fmt in RFC3339_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Return value as an aware UTC datetime.

    SQLite drops the offset on the way back out, so naive values are taken to
    be UTC already (everything is written in UTC).
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def day_bounds(value: datetime) -> Tuple[datetime, datetime]:
    """
    Calendar day containing value, in value's own offset, as UTC bounds.

    Example:
        day_bounds(2024-06-01T10:00:00+08:00)
        -> (2024-05-31T16:00:00Z, 2024-06-01T16:00:00Z)
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    start = value.replace(hour=0, minute=0, second=0, microsecond=0)
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def utc_now() -> datetime:
    """Current time as aware UTC."""
    return datetime.now(timezone.utc)
