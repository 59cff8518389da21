# access_console/utils/time_utils.py
"""
Local-time helpers.
Operators pick a date and a time-of-day; both are interpreted in the
machine's local timezone, never UTC, so an evening entry is not shifted
onto the next calendar day.
"""

from datetime import date, datetime, time
from typing import Optional


def as_local(value: Optional[datetime]) -> Optional[datetime]:
    """Return an aware datetime in local time. Naive values are taken as local."""
    if value is None:
        return None
    return value.astimezone()


def combine_local(day: date, time_of_day: time) -> datetime:
    """Combine a picked date and time-of-day into an aware local datetime."""
    return datetime.combine(day, time_of_day.replace(tzinfo=None)).astimezone()


def local_today() -> date:
    return datetime.now().astimezone().date()


def month_key(day: date) -> str:
    """YYYY-MM, the month format the backend's monthly stats expect."""
    return f"{day.year:04d}-{day.month:02d}"


def same_month(day: Optional[date], reference: date) -> bool:
    return day is not None and day.year == reference.year and day.month == reference.month
