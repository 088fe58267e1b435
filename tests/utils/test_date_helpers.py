from datetime import date, datetime, timezone

from app.models import MatchStatus
from app.schemas.schedule import ScheduleMatch
from app.utils.date_helpers import date_key, format_match_date, format_match_time
from app.utils.match_grouping import group_matches_by_date
from app.utils.sports import format_category_name


def _match(match_id: int, scheduled_at: datetime) -> ScheduleMatch:
    return ScheduleMatch(
        id=match_id,
        name=f"Match {match_id}",
        scheduled_at=scheduled_at,
        best_of=1,
        status=MatchStatus.scheduled,
        stage_id=1,
        display_date="",
        display_time="",
    )


def test_date_key_uses_reference_timezone():
    late_utc = datetime(2025, 3, 1, 17, 0, tzinfo=timezone.utc)

    assert date_key(late_utc, "Asia/Manila") == "2025-03-02"
    assert date_key(late_utc, "UTC") == "2025-03-01"


def test_date_key_treats_naive_values_as_utc():
    assert date_key(datetime(2025, 3, 1, 17, 0), "Asia/Manila") == "2025-03-02"


def test_format_match_date_and_time():
    assert format_match_date(date(2026, 2, 27)) == "Friday, 27 February 2026"
    assert format_match_time(datetime(2026, 2, 27, 7, 30, tzinfo=timezone.utc), "Asia/Manila") == "03:30 PM"


def test_group_matches_by_date_keeps_order_within_day():
    matches = [
        _match(3, datetime(2026, 3, 2, 1, 0, tzinfo=timezone.utc)),
        _match(1, datetime(2026, 3, 1, 2, 0, tzinfo=timezone.utc)),
        _match(2, datetime(2026, 3, 1, 5, 0, tzinfo=timezone.utc)),
    ]

    groups = group_matches_by_date(matches, "Asia/Manila")

    assert [g.date for g in groups] == ["2026-03-01", "2026-03-02"]
    assert [m.id for m in groups[0].matches] == [1, 2]
    assert groups[1].date_label == "Monday, 2 March 2026"


def test_group_matches_by_date_empty():
    assert group_matches_by_date([], "Asia/Manila") == []


def test_format_category_name():
    assert format_category_name("men", "college") == "Men's College"
    assert format_category_name("women", "high_school") == "Women's High School"
    assert format_category_name("coed", "college") == "coed College"
