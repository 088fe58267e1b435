"""Season navigation endpoints: list, current season, sports, categories."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.api.errors import http_error
from app.models import Season
from app.schemas.season import (
    CategoryListResponse,
    SeasonListResponse,
    SeasonResponse,
    SportListResponse,
)
from app.schemas.standings import SportBrief
from app.services.errors import LeagueError
from app.services.navigation import (
    build_category_brief,
    get_current_season,
    list_season_sports,
    list_seasons,
    list_sport_categories,
)

router = APIRouter(prefix="/seasons", tags=["seasons"])


def _build_season_response(s: Season, current_id: int | None) -> SeasonResponse:
    return SeasonResponse(
        id=s.id,
        name=s.name,
        start_at=s.start_at,
        end_at=s.end_at,
        is_current=s.id == current_id,
    )


async def _current_season_id(db: AsyncSession) -> int | None:
    try:
        season = await get_current_season(db)
    except LeagueError:
        return None
    return season.id


@router.get("", response_model=SeasonListResponse)
async def get_seasons(db: AsyncSession = Depends(get_db)):
    """Get all seasons, most recent first."""
    seasons = await list_seasons(db)
    current_id = await _current_season_id(db)
    items = [_build_season_response(s, current_id) for s in seasons]
    return SeasonListResponse(items=items, total=len(items))


@router.get("/current", response_model=SeasonResponse)
async def get_current(db: AsyncSession = Depends(get_db)):
    try:
        season = await get_current_season(db)
    except LeagueError as exc:
        raise http_error(exc) from exc
    return _build_season_response(season, season.id)


@router.get("/{season_id}/sports", response_model=SportListResponse)
async def get_season_sports(season_id: int, db: AsyncSession = Depends(get_db)):
    """Sports that have at least one stage in the season."""
    try:
        sports = await list_season_sports(db, season_id)
    except LeagueError as exc:
        raise http_error(exc) from exc
    items = [SportBrief.model_validate(s) for s in sports]
    return SportListResponse(items=items, total=len(items))


@router.get("/{season_id}/sports/{sport_id}/categories", response_model=CategoryListResponse)
async def get_sport_categories(
    season_id: int,
    sport_id: int,
    db: AsyncSession = Depends(get_db),
):
    try:
        categories = await list_sport_categories(db, season_id, sport_id)
    except LeagueError as exc:
        raise http_error(exc) from exc
    items = [build_category_brief(c) for c in categories]
    return CategoryListResponse(items=items, total=len(items))
