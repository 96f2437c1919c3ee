"""Date and time helpers.

The domain works exclusively with timezone-aware UTC datetimes. Storage
backends that drop tzinfo (SQLite) are normalized back through ``ensure_utc``.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime | None) -> datetime | None:
    """
    Normalize a datetime to aware UTC.

    Naive values are assumed to already be expressed in UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def is_future(value: datetime, reference: datetime | None = None) -> bool:
    """Check whether ``value`` lies strictly after ``reference`` (default: now)."""
    return ensure_utc(value) > (reference or utc_now())
