"""Schedule feed endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.api.errors import http_error
from app.config import get_settings
from app.models import MatchStatus
from app.schemas.schedule import (
    ScheduleByDateResponse,
    ScheduleDirection,
    ScheduleFilters,
    SchedulePage,
)
from app.services.errors import LeagueError
from app.services.schedule import get_schedule_by_date, get_schedule_page

router = APIRouter(prefix="/schedule", tags=["schedule"])

settings = get_settings()


def schedule_filters(
    season_id: int | None = Query(default=None),
    sport_id: int | None = Query(default=None),
    sport_category_id: int | None = Query(default=None),
    stage_id: int | None = Query(default=None),
    status: MatchStatus | None = Query(default=None),
    date_from: datetime | None = Query(default=None, description="Inclusive lower bound (ISO 8601)"),
    date_to: datetime | None = Query(default=None, description="Inclusive upper bound (ISO 8601)"),
    search: str | None = Query(default=None, min_length=1, description="Search match name and description"),
) -> ScheduleFilters:
    return ScheduleFilters(
        season_id=season_id,
        sport_id=sport_id,
        sport_category_id=sport_category_id,
        stage_id=stage_id,
        status=status,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )


@router.get("", response_model=SchedulePage)
async def get_schedule(
    direction: ScheduleDirection = Query(default=ScheduleDirection.future),
    limit: int = Query(default=settings.schedule_default_limit, ge=1, le=settings.schedule_max_limit),
    cursor: str | None = Query(default=None, description="Opaque cursor from a previous page"),
    filters: ScheduleFilters = Depends(schedule_filters),
    db: AsyncSession = Depends(get_db),
):
    """
    One page of matches ordered by scheduled time.

    Without a cursor, ``future`` starts at the current time and ``past`` ends
    just before it. Pass ``next_cursor`` with ``direction=future`` to continue
    forward, ``previous_cursor`` with ``direction=past`` to continue backward.
    """
    try:
        return await get_schedule_page(db, direction, limit, filters, cursor)
    except LeagueError as exc:
        raise http_error(exc) from exc


@router.get("/by-date", response_model=ScheduleByDateResponse)
async def get_schedule_grouped(
    filters: ScheduleFilters = Depends(schedule_filters),
    db: AsyncSession = Depends(get_db),
):
    """All matches passing the filters, grouped by date in the league timezone."""
    return await get_schedule_by_date(db, filters)
