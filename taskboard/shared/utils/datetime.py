"""UTC datetime helpers.

Every timestamp the API stores or compares is timezone-aware UTC; naive
values coming from clients are taken to be UTC already.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Return dt as aware UTC (naive -> tagged UTC, aware -> converted). None passes through."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
