import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from app.models import MatchStatus
from app.schemas.schedule import ScheduleDirection, ScheduleFilters, ScheduleMatch, SchedulePage
from app.services.errors import FeedFetchError
from app.services.schedule_feed import HttpPageFetcher, ScheduleFeed, SessionPageFetcher
from app.utils.timestamps import utcnow

BASE = datetime(2026, 3, 1, 4, 0, tzinfo=timezone.utc)


def _match(match_id: int, hours: int) -> ScheduleMatch:
    return ScheduleMatch(
        id=match_id,
        name=f"Match {match_id}",
        scheduled_at=BASE + timedelta(hours=hours),
        best_of=1,
        status=MatchStatus.scheduled,
        stage_id=1,
        display_date="",
        display_time="",
    )


class FakeFetcher:
    """Serves pages from a fixed, sorted list of matches using index cursors."""

    def __init__(self, matches: list[ScheduleMatch], start: int):
        self.matches = matches
        self.start = start
        self.calls: list[tuple[ScheduleDirection, str | None]] = []
        self.gate: asyncio.Event | None = None
        self.fail = False

    async def __call__(self, direction, cursor, limit, filters) -> SchedulePage:
        self.calls.append((direction, cursor))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise FeedFetchError("boom")

        if direction == ScheduleDirection.future:
            begin = int(cursor) + 1 if cursor is not None else self.start
            end = min(begin + limit, len(self.matches))
        else:
            end = int(cursor)
            begin = max(end - limit, 0)

        return SchedulePage(
            matches=self.matches[begin:end],
            has_next_page=end < len(self.matches),
            has_previous_page=begin > 0,
            next_cursor=str(end - 1) if end < len(self.matches) else None,
            previous_cursor=str(begin) if begin > 0 else None,
            total_count=len(self.matches),
        )


@pytest.fixture
def ten_matches():
    return [_match(i, hours=i * 5 - 25) for i in range(1, 11)]


@pytest.mark.asyncio
class TestScheduleFeed:
    async def test_initial_load_then_both_directions(self, ten_matches):
        feed = ScheduleFeed(FakeFetcher(ten_matches, start=5), limit=2)

        await feed.load_initial()
        assert [m.id for m in feed.matches] == [6, 7]
        assert feed.has_next_page and feed.has_previous_page

        await feed.fetch_previous_page()
        await feed.fetch_next_page()

        assert [m.id for m in feed.matches] == [4, 5, 6, 7, 8, 9]
        assert feed.total_count == 10

    async def test_exhausted_direction_is_noop(self, ten_matches):
        fetcher = FakeFetcher(ten_matches, start=8)
        feed = ScheduleFeed(fetcher, limit=5)
        await feed.load_initial()

        assert feed.has_next_page is False
        assert await feed.fetch_next_page() is False
        assert len(fetcher.calls) == 1

    async def test_fetch_before_initial_load_is_noop(self, ten_matches):
        fetcher = FakeFetcher(ten_matches, start=0)
        feed = ScheduleFeed(fetcher)

        assert await feed.fetch_next_page() is False
        assert fetcher.calls == []

    async def test_one_fetch_in_flight_per_direction(self, ten_matches):
        fetcher = FakeFetcher(ten_matches, start=4)
        feed = ScheduleFeed(fetcher, limit=2)
        await feed.load_initial()

        fetcher.gate = asyncio.Event()
        first = feed.on_sentinel_visible(ScheduleDirection.future)
        second = feed.on_sentinel_visible(ScheduleDirection.future)
        backward = feed.on_sentinel_visible(ScheduleDirection.past)

        assert first is not None
        assert second is None
        assert backward is not None
        assert feed.is_loading(ScheduleDirection.future)

        fetcher.gate.set()
        await asyncio.gather(first, backward)

        assert not feed.is_loading(ScheduleDirection.future)
        assert [m.id for m in feed.matches] == [3, 4, 5, 6, 7, 8]

    async def test_closed_feed_discards_late_results(self, ten_matches):
        fetcher = FakeFetcher(ten_matches, start=4)
        feed = ScheduleFeed(fetcher, limit=2)
        await feed.load_initial()

        fetcher.gate = asyncio.Event()
        task = feed.on_sentinel_visible(ScheduleDirection.future)
        feed.close()
        fetcher.gate.set()

        assert await task is False
        assert [m.id for m in feed.matches] == [5, 6]

    async def test_failed_fetch_leaves_state_unchanged(self, ten_matches):
        fetcher = FakeFetcher(ten_matches, start=4)
        feed = ScheduleFeed(fetcher, limit=2)
        await feed.load_initial()

        fetcher.fail = True
        with pytest.raises(FeedFetchError):
            await feed.fetch_next_page()

        assert [m.id for m in feed.matches] == [5, 6]
        assert feed.has_next_page
        assert not feed.is_loading(ScheduleDirection.future)

        # Retrying with the same cursor succeeds
        fetcher.fail = False
        await feed.fetch_next_page()
        assert [m.id for m in feed.matches] == [5, 6, 7, 8]

    async def test_overlapping_pages_do_not_duplicate(self, ten_matches):
        feed = ScheduleFeed(FakeFetcher(ten_matches, start=4), limit=2)
        await feed.load_initial()

        feed._merge(SchedulePage(matches=ten_matches[3:7], total_count=10))

        assert [m.id for m in feed.matches] == [4, 5, 6, 7]

    async def test_rescheduled_match_moves(self, ten_matches):
        feed = ScheduleFeed(FakeFetcher(ten_matches, start=0), limit=3)
        await feed.load_initial()

        moved = ten_matches[0].model_copy(update={"scheduled_at": BASE + timedelta(days=30)})
        feed._merge(SchedulePage(matches=[moved], total_count=10))

        assert [m.id for m in feed.matches] == [2, 3, 1]

    async def test_grouped_by_date(self, ten_matches):
        feed = ScheduleFeed(FakeFetcher(ten_matches, start=0), limit=10, tz_name="Asia/Manila")
        await feed.load_initial()

        groups = feed.grouped_by_date()

        keys = [g.date for g in groups]
        assert keys == sorted(keys)
        assert sum(len(g.matches) for g in groups) == 10


@pytest.mark.asyncio
class TestPageFetchers:
    async def test_round_trip_through_database(
        self, test_session_maker, sample_stages, create_match
    ):
        now = utcnow()
        stage = sample_stages["group_stage"]
        created = []
        for hours in range(-7, 8, 2):
            created.append(
                await create_match(
                    stage,
                    status=MatchStatus.scheduled,
                    scheduled_at=now + timedelta(hours=hours),
                )
            )

        feed = ScheduleFeed(SessionPageFetcher(test_session_maker), limit=2)
        await feed.load_initial()
        while feed.has_previous_page:
            await feed.fetch_previous_page()
        while feed.has_next_page:
            await feed.fetch_next_page()

        ids = [m.id for m in feed.matches]
        keys = [(m.scheduled_at, m.id) for m in feed.matches]
        assert ids == [m.id for m in created]
        assert keys == sorted(set(keys))

    async def test_empty_season_through_database(self, test_session_maker):
        feed = ScheduleFeed(SessionPageFetcher(test_session_maker), ScheduleFilters(season_id=5))

        await feed.load_initial()

        assert feed.matches == []
        assert not feed.has_next_page
        assert not feed.has_previous_page

    async def test_http_fetcher_sends_filters_and_cursor(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured.update(request.url.params)
            page = SchedulePage(matches=[_match(1, 0)], total_count=1)
            return httpx.Response(200, json=page.model_dump(mode="json"))

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(handler), base_url="http://test"
        ) as client:
            fetch = HttpPageFetcher(client)
            page = await fetch(
                ScheduleDirection.past, "abc", 5, ScheduleFilters(sport_id=2, status=MatchStatus.completed)
            )

        assert [m.id for m in page.matches] == [1]
        assert captured == {
            "direction": "past",
            "limit": "5",
            "sport_id": "2",
            "status": "completed",
            "cursor": "abc",
        }

    async def test_http_fetcher_wraps_errors(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"detail": "down"})

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(handler), base_url="http://test"
        ) as client:
            with pytest.raises(FeedFetchError):
                await HttpPageFetcher(client)(ScheduleDirection.future, None, 5, ScheduleFilters())
