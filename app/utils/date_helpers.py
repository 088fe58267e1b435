"""
Utility functions for schedule date keys and display labels.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.utils.timestamps import ensure_utc, local_date


WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December"
]


def date_key(value: datetime, tz_name: str) -> str:
    """
    Schedule grouping key for an instant.

    Args:
        value: Match time (naive values are treated as UTC)
        tz_name: IANA name of the reference timezone

    Returns:
        Calendar date in the reference timezone as ``YYYY-MM-DD``

    Examples:
        >>> date_key(datetime(2025, 3, 1, 17, 0, tzinfo=timezone.utc), "Asia/Manila")
        "2025-03-02"
    """
    return local_date(value, tz_name).isoformat()


def format_match_date(match_date: date) -> str:
    """
    Format a date for schedule group headers.

    Examples:
        >>> format_match_date(date(2026, 2, 27))
        "Friday, 27 February 2026"
    """
    weekday = WEEKDAY_NAMES[match_date.weekday()]
    month = MONTH_NAMES[match_date.month - 1]

    return f"{weekday}, {match_date.day} {month} {match_date.year}"


def format_match_time(value: datetime, tz_name: str) -> str:
    """12-hour clock time in the reference timezone, e.g. "03:30 PM"."""
    return ensure_utc(value).astimezone(ZoneInfo(tz_name)).strftime("%I:%M %p")
