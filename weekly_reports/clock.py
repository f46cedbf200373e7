"""Clock helpers. All reporting dates use the UTC day boundary."""
from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime. Use this instead of datetime.now()."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Return today's calendar date at the UTC day boundary."""
    return utc_now().date()


def as_utc(dt: datetime) -> datetime:
    """Normalize a datetime to aware UTC.

    Naive datetimes are assumed to be UTC (that is how they are stored).
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
