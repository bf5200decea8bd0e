from datetime import datetime, timezone

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR


def hours_between(start_ms: int, end_ms: int) -> float:
    """Signed hours from start_ms to end_ms."""
    return (end_ms - start_ms) / MS_PER_HOUR


def hours_to_ms(hours: float) -> int:
    return int(round(hours * MS_PER_HOUR))


def minutes_to_ms(minutes: float) -> int:
    return int(round(minutes * MS_PER_MINUTE))


def ms_from_datetime(dt: datetime) -> int:
    """
    Convert an aware datetime to epoch milliseconds.
    Naive datetimes are rejected: the caller owns time-zone resolution.
    """
    if dt.tzinfo is None or dt.utcoffset() is None:
        raise ValueError(f"datetime must be timezone-aware (got naive {dt!r}).")
    return int(round(dt.timestamp() * 1000))


def datetime_from_ms(ms: int, tz=timezone.utc) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=tz)
