"""
Calendar-day normalization for study logs

Every date that enters the gamification engine passes through
to_day_key(). A day key is a timezone-aware datetime at 00:00 UTC of the
calendar date it represents, so two entries are "the same day" exactly
when their keys are equal and day arithmetic is always whole days.

CRITICAL RULES:
- Never compare raw datetimes from different sources, compare day keys
- Naive datetimes are interpreted as UTC, never as local time
- Aware datetimes are converted to UTC before truncation
"""

import logging
from datetime import datetime, date, timedelta
from typing import Union
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

UTC = ZoneInfo("UTC")

DateLike = Union[date, datetime, str]


def now_utc() -> datetime:
    """
    Get current datetime in UTC (timezone-aware)

    Returns:
        Current datetime in UTC with timezone info
    """
    return datetime.now(UTC)


def to_day_key(value: DateLike) -> datetime:
    """
    Normalize a date-like value to midnight UTC of its calendar day

    Args:
        value: date, datetime (naive is treated as UTC) or ISO string
            ("YYYY-MM-DD" or a full ISO 8601 timestamp)

    Returns:
        Timezone-aware datetime at 00:00:00 UTC

    Raises:
        ValueError: If a string cannot be parsed as an ISO date
        TypeError: If value is not date-like
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid ISO date: '{value}'")

    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        else:
            value = value.astimezone(UTC)
        return datetime(value.year, value.month, value.day, tzinfo=UTC)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)

    raise TypeError(f"Cannot normalize {type(value).__name__} to a day key")


def is_day_key(value: datetime) -> bool:
    """Check whether a datetime is already a normalized day key"""
    return (
        isinstance(value, datetime)
        and value.tzinfo is not None
        and value.utcoffset() == timedelta(0)
        and value.hour == 0
        and value.minute == 0
        and value.second == 0
        and value.microsecond == 0
    )


def today_utc() -> datetime:
    """Get today's day key"""
    return to_day_key(now_utc())


def diff_in_days(earlier: DateLike, later: DateLike) -> int:
    """
    Whole days from `earlier` to `later` (negative if `later` comes first)

    Both arguments are normalized first, so the result is always an integer.
    """
    return (to_day_key(later) - to_day_key(earlier)).days


def add_days(value: DateLike, days: int) -> datetime:
    """Shift a day key by a number of calendar days"""
    return to_day_key(value) + timedelta(days=days)


def add_months(value: DateLike, months: int) -> datetime:
    """
    Shift a day key by calendar months, clamping the day to the month length

    Example: add_months(2024-03-31, -1) -> 2024-02-29
    """
    key = to_day_key(value)
    month_index = key.year * 12 + (key.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    next_month = datetime(year + (month // 12), (month % 12) + 1, 1, tzinfo=UTC)
    last_day = (next_month - timedelta(days=1)).day
    return datetime(year, month, min(key.day, last_day), tzinfo=UTC)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """
    Get the [start, end) day keys of a calendar month

    Raises:
        ValueError: If month is not in 1..12
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    start = datetime(year, month, 1, tzinfo=UTC)
    return start, add_months(start, 1)


def is_same_day(a: DateLike, b: DateLike) -> bool:
    """Two values fall on the same UTC calendar day"""
    return to_day_key(a) == to_day_key(b)


def format_day(value: DateLike) -> str:
    """Format a day key for display (e.g. '3/14/2024')"""
    key = to_day_key(value)
    return f"{key.month}/{key.day}/{key.year}"
