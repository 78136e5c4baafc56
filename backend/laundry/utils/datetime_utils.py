"""Datetime utility functions."""

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from laundry.config import settings

# Store-local timezone (from config); counters roll over at local midnight
STORE_TIMEZONE = ZoneInfo(settings.timezone)


def to_store_timezone(dt: datetime | None) -> datetime | None:
    """Convert a datetime to the store timezone.

    Args:
        dt: Datetime to convert (can be None)

    Returns:
        Datetime in store timezone, or None if input was None
    """
    if dt is None:
        return None
    # Ensure datetime is timezone-aware (assume UTC if naive)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(STORE_TIMEZONE)


def store_today(now: datetime | None = None) -> date:
    """Calendar date at the store, used to scope the daily counters."""
    local = to_store_timezone(now or datetime.now(UTC))
    assert local is not None
    return local.date()
