"""
UTC datetime utilities for consistent timezone handling.

Execution timestamps (started_at, completed_at) are always timezone-aware
UTC. Schedules evaluated in a workflow's own timezone convert from UTC
at the edge (see app.shared.utils.cron).
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of datetime.now() (naive, local timezone) or
    datetime.utcnow() (naive, deprecated in Python 3.12).

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Normalize a datetime read from storage to UTC.

    - None stays None
    - naive values are assumed to be UTC
    - aware values are converted to UTC

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
