"""Datetime utilities for timezone-aware operations.

Avoids the deprecated `datetime.utcnow()` and provides the conversions
needed when projecting ISO timestamps onto legacy date columns.
"""

from datetime import date, datetime, timedelta, timezone


def utcnow() -> datetime:
    """Return current UTC time with timezone info.

    Returns:
        Current UTC datetime with tzinfo=timezone.utc
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Ensure a datetime object is timezone-aware and in UTC.

    If the datetime is naive (no tzinfo), it's assumed to be UTC.
    If the datetime has a different timezone, it's converted to UTC.

    Args:
        dt: A datetime object (naive or aware)

    Returns:
        Timezone-aware datetime in UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def add_milliseconds(dt: datetime, milliseconds: float) -> datetime:
    """Return ``dt`` shifted forward by a millisecond duration."""
    return dt + timedelta(milliseconds=milliseconds)


def date_part(dt: datetime) -> date:
    """Return the UTC calendar date of a datetime."""
    return ensure_utc(dt).date()


__all__ = [
    "add_milliseconds",
    "date_part",
    "ensure_utc",
    "utcnow",
]
