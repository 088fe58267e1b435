"""Standings page: navigation plus the selected stage's view."""

from fastapi import APIRouter, Depends, Query
from fastapi_cache.decorator import cache
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.api.errors import http_error
from app.caching import STANDINGS_PAGE_NAMESPACE
from app.schemas.standings import StandingsResponse
from app.services.errors import LeagueError
from app.services.navigation import get_current_season, get_standings

router = APIRouter(prefix="/standings", tags=["standings"])


@router.get("", response_model=StandingsResponse)
@cache(namespace=STANDINGS_PAGE_NAMESPACE)
async def get_standings_page(
    sport_id: int = Query(...),
    sport_category_id: int = Query(...),
    season_id: int | None = Query(default=None, description="Defaults to the current season"),
    stage_id: int | None = Query(default=None, description="Defaults to the first stage"),
    db: AsyncSession = Depends(get_db),
):
    try:
        if season_id is None:
            season_id = (await get_current_season(db)).id
        return await get_standings(db, season_id, sport_id, sport_category_id, stage_id)
    except LeagueError as exc:
        raise http_error(exc) from exc
