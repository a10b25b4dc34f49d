"""
Timezone utilities for consistent datetime handling.

All engine timestamps are timezone-aware UTC.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Get current datetime in UTC.

    Returns:
        datetime: Current time with tzinfo=UTC
    """
    return datetime.now(tz=timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """
    Attach UTC to a naive datetime (SQLite drops tzinfo on read).

    Args:
        dt: Datetime to normalize (can be naive or aware)

    Returns:
        datetime: Aware datetime in UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: datetime) -> str:
    """Format a datetime as ISO-8601 with millisecond precision and a Z suffix."""
    return ensure_aware(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")
