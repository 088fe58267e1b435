"""Utility functions."""

from app.utils.date_helpers import date_key, format_match_date, format_match_time
from app.utils.error_messages import get_error_message
from app.utils.sports import format_category_name, format_division
from app.utils.timestamps import ensure_utc, local_date, utcnow

__all__ = [
    "date_key",
    "format_match_date",
    "format_match_time",
    "get_error_message",
    "format_category_name",
    "format_division",
    "ensure_utc",
    "local_date",
    "utcnow",
]
