"""Schedule match grouping utilities."""

from collections import defaultdict
from datetime import date
from typing import Iterable

from app.schemas.schedule import ScheduleDateGroup, ScheduleMatch
from app.utils.date_helpers import date_key, format_match_date


def group_matches_by_date(
    matches: Iterable[ScheduleMatch],
    tz_name: str,
) -> list[ScheduleDateGroup]:
    """
    Group schedule matches by calendar date with formatted labels.

    Args:
        matches: Matches in display order; order within a day is preserved
        tz_name: Reference timezone the calendar date is taken in

    Returns:
        List of ScheduleDateGroup models, date keys ascending
    """
    grouped: dict[str, list[ScheduleMatch]] = defaultdict(list)

    for match in matches:
        if match.scheduled_at:
            grouped[date_key(match.scheduled_at, tz_name)].append(match)

    result = []
    for key in sorted(grouped.keys()):
        result.append(ScheduleDateGroup(
            date=key,
            date_label=format_match_date(date.fromisoformat(key)),
            matches=grouped[key],
        ))

    return result
