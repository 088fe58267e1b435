"""Client-side schedule feed state.

Pages fetched in either direction are merged into one ordered, duplicate-free
sequence: an arena of matches keyed by id plus a sorted ``(scheduled_at, id)``
index. At most one fetch per direction is in flight at a time.
"""

import asyncio
import bisect
import logging
from datetime import datetime
from typing import Awaitable, Callable

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.config import get_settings
from app.schemas.schedule import (
    ScheduleDateGroup,
    ScheduleDirection,
    ScheduleFilters,
    ScheduleMatch,
    SchedulePage,
)
from app.services.errors import FeedFetchError, InvalidCursor
from app.services.schedule import get_schedule_page
from app.utils.match_grouping import group_matches_by_date
from app.utils.timestamps import ensure_utc

logger = logging.getLogger(__name__)

PageFetcher = Callable[
    [ScheduleDirection, str | None, int, ScheduleFilters],
    Awaitable[SchedulePage],
]

# Transient transport errors; a page request is safe to replay
RETRYABLE_EXCEPTIONS = (
    httpx.ConnectTimeout,
    httpx.ReadTimeout,
    httpx.ConnectError,
    httpx.RemoteProtocolError,
)


class HttpPageFetcher:
    """Fetch schedule pages from the HTTP API."""

    def __init__(self, client: httpx.AsyncClient, path: str = "/api/v1/schedule"):
        self.client = client
        self.path = path

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _get(self, params: dict) -> httpx.Response:
        response = await self.client.get(self.path, params=params)
        response.raise_for_status()
        return response

    async def __call__(
        self,
        direction: ScheduleDirection,
        cursor: str | None,
        limit: int,
        filters: ScheduleFilters,
    ) -> SchedulePage:
        params = {"direction": direction.value, "limit": limit}
        params.update(filters.model_dump(mode="json", exclude_none=True))
        if cursor:
            params["cursor"] = cursor

        try:
            response = await self._get(params)
            return SchedulePage.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            raise FeedFetchError(
                f"Schedule {direction.value} page request failed: {exc}",
                direction=direction.value,
                cursor=cursor,
            ) from exc


class SessionPageFetcher:
    """Fetch schedule pages straight from the database."""

    def __init__(self, session_maker: async_sessionmaker):
        self.session_maker = session_maker

    async def __call__(
        self,
        direction: ScheduleDirection,
        cursor: str | None,
        limit: int,
        filters: ScheduleFilters,
    ) -> SchedulePage:
        try:
            async with self.session_maker() as db:
                return await get_schedule_page(db, direction, limit, filters, cursor)
        except (SQLAlchemyError, InvalidCursor) as exc:
            raise FeedFetchError(
                f"Schedule {direction.value} page query failed: {exc}",
                direction=direction.value,
                cursor=cursor,
            ) from exc


class ScheduleFeed:
    def __init__(
        self,
        fetch_page: PageFetcher,
        filters: ScheduleFilters | None = None,
        limit: int | None = None,
        tz_name: str | None = None,
    ):
        settings = get_settings()
        self.fetch_page = fetch_page
        self.filters = filters or ScheduleFilters()
        self.limit = limit or settings.schedule_default_limit
        self.tz_name = tz_name or settings.schedule_timezone

        self._matches: dict[int, ScheduleMatch] = {}
        self._index: list[tuple[datetime, int]] = []
        self._cursors: dict[ScheduleDirection, str | None] = {d: None for d in ScheduleDirection}
        self._has_more: dict[ScheduleDirection, bool] = {d: False for d in ScheduleDirection}
        self._loading: dict[ScheduleDirection, bool] = {d: False for d in ScheduleDirection}
        self._tasks: set[asyncio.Task] = set()
        self.total_count = 0
        self.initialized = False
        self.closed = False

    # State

    @property
    def matches(self) -> list[ScheduleMatch]:
        return [self._matches[match_id] for _, match_id in self._index]

    @property
    def has_next_page(self) -> bool:
        return self._has_more[ScheduleDirection.future]

    @property
    def has_previous_page(self) -> bool:
        return self._has_more[ScheduleDirection.past]

    def is_loading(self, direction: ScheduleDirection) -> bool:
        return self._loading[direction]

    def grouped_by_date(self) -> list[ScheduleDateGroup]:
        return group_matches_by_date(self.matches, self.tz_name)

    # Fetching

    async def load_initial(self) -> bool:
        """Load the page starting at now; sets up both directions."""
        if self.closed or self._loading[ScheduleDirection.future]:
            return False

        self._loading[ScheduleDirection.future] = True
        try:
            page = await self.fetch_page(ScheduleDirection.future, None, self.limit, self.filters)
        finally:
            self._loading[ScheduleDirection.future] = False

        if self.closed:
            logger.debug("Schedule feed closed, discarding initial page")
            return False

        self._merge(page)
        self._cursors[ScheduleDirection.future] = page.next_cursor
        self._cursors[ScheduleDirection.past] = page.previous_cursor
        self._has_more[ScheduleDirection.future] = page.has_next_page
        self._has_more[ScheduleDirection.past] = page.has_previous_page
        self.initialized = True
        return True

    async def fetch_next_page(self) -> bool:
        """Extend forward from the last loaded match. No-op when exhausted."""
        if not self._begin(ScheduleDirection.future):
            return False
        return await self._run(ScheduleDirection.future)

    async def fetch_previous_page(self) -> bool:
        """Extend backward from the first loaded match. No-op when exhausted."""
        if not self._begin(ScheduleDirection.past):
            return False
        return await self._run(ScheduleDirection.past)

    def on_sentinel_visible(self, direction: ScheduleDirection) -> asyncio.Task | None:
        """Start a background fetch when the edge of the list scrolls into view."""
        if not self._begin(direction):
            return None

        task = asyncio.create_task(self._run(direction))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def close(self) -> None:
        self.closed = True

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning("Schedule feed background fetch failed: %s", task.exception())

    def _begin(self, direction: ScheduleDirection) -> bool:
        if self.closed or not self.initialized:
            return False
        if self._loading[direction] or not self._has_more[direction]:
            return False
        self._loading[direction] = True
        return True

    async def _run(self, direction: ScheduleDirection) -> bool:
        try:
            page = await self.fetch_page(
                direction, self._cursors[direction], self.limit, self.filters
            )
        finally:
            self._loading[direction] = False

        if self.closed:
            logger.debug("Schedule feed closed, discarding %s page", direction.value)
            return False

        self._merge(page)
        if direction == ScheduleDirection.future:
            self._cursors[direction] = page.next_cursor
            self._has_more[direction] = page.has_next_page
        else:
            self._cursors[direction] = page.previous_cursor
            self._has_more[direction] = page.has_previous_page
        return True

    def _merge(self, page: SchedulePage) -> None:
        for match in page.matches:
            key = (ensure_utc(match.scheduled_at), match.id)
            existing = self._matches.get(match.id)
            if existing is not None:
                old_key = (ensure_utc(existing.scheduled_at), existing.id)
                position = bisect.bisect_left(self._index, old_key)
                if position < len(self._index) and self._index[position] == old_key:
                    del self._index[position]
            self._matches[match.id] = match
            bisect.insort(self._index, key)
        self.total_count = page.total_count
