"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from libs.common.datetime_utils import utc_now

    signed_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime.

    Always use this for timestamps in the database.
    """
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Some backends (SQLite) hand back naive datetimes for
    ``DateTime(timezone=True)`` columns; those are stored as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_date(moment: datetime, tz_name: str) -> date:
    """Calendar date of ``moment`` in the given IANA timezone."""
    return as_utc(moment).astimezone(ZoneInfo(tz_name)).date()


def local_day_bounds(day: date, tz_name: str) -> tuple[datetime, datetime]:
    """UTC ``[start, end)`` bounds of a calendar day in the given timezone."""
    tz = ZoneInfo(tz_name)
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def hours_between(earlier: datetime, later: Optional[datetime] = None) -> float:
    """Elapsed hours from ``earlier`` to ``later`` (defaults to now)."""
    later = later or utc_now()
    return (as_utc(later) - as_utc(earlier)).total_seconds() / 3600
