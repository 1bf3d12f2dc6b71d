"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the service should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, datetime, timedelta

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at repository/persistence boundaries to normalize datetimes
    (SQLite hands back naive values for DateTime(timezone=True) columns).

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


def to_epoch_micros(dt: datetime | None) -> int:
    """
    Return microseconds since the Unix epoch for dt (0 for None).

    Integer form of a timestamp that survives a JWT round trip exactly.

    Args:
        dt: A datetime that may be naive (assumed UTC), aware, or None

    Returns:
        Microseconds since epoch, or 0
    """
    aware = ensure_utc(dt)
    if aware is None:
        return 0
    return (aware - _EPOCH) // timedelta(microseconds=1)
