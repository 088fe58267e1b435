"""Stage standings endpoints: group tables, brackets, play-ins."""

from fastapi import APIRouter, Depends, Query, status
from fastapi_cache.decorator import cache
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.api.errors import http_error
from app.caching import STANDINGS_NAMESPACE, invalidate_stage_standings
from app.schemas.standings import (
    BracketStandings,
    GoalsMode,
    GroupStageStandings,
    PlayinsStandings,
    ScoringRule,
    StandingsView,
)
from app.services.bracket import get_bracket_standings
from app.services.errors import LeagueError
from app.services.playins import list_playins
from app.services.stage_matches import get_stage_or_raise
from app.services.stage_views import get_stage_view
from app.services.standings import compute_group_standings, default_scoring_rule

router = APIRouter(prefix="/stages", tags=["stages"])


def _scoring_rule(win: int | None, draw: int | None, loss: int | None) -> ScoringRule:
    default = default_scoring_rule()
    return ScoringRule(
        win=default.win if win is None else win,
        draw=default.draw if draw is None else draw,
        loss=default.loss if loss is None else loss,
    )


@router.get("/{stage_id}/standings", response_model=StandingsView)
@cache(namespace=STANDINGS_NAMESPACE)
async def get_stage_standings(stage_id: int, db: AsyncSession = Depends(get_db)):
    """
    Standings view for any stage.

    The shape depends on the stage's competition phase, see ``view_type``:
    group tables, play-in list or bracket.
    """
    try:
        return await get_stage_view(db, stage_id)
    except LeagueError as exc:
        raise http_error(exc) from exc


@router.get("/{stage_id}/group-standings", response_model=GroupStageStandings)
@cache(namespace=STANDINGS_NAMESPACE)
async def get_group_standings(
    stage_id: int,
    win: int | None = Query(default=None, ge=0, description="Points for a win"),
    draw: int | None = Query(default=None, ge=0, description="Points for a draw"),
    loss: int | None = Query(default=None, ge=0, description="Points for a loss"),
    goals_mode: GoalsMode | None = Query(default=None, description="games, points or match_score"),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await compute_group_standings(
            db, stage_id, _scoring_rule(win, draw, loss), goals_mode
        )
    except LeagueError as exc:
        raise http_error(exc) from exc


@router.get("/{stage_id}/bracket", response_model=BracketStandings)
@cache(namespace=STANDINGS_NAMESPACE)
async def get_bracket(stage_id: int, db: AsyncSession = Depends(get_db)):
    try:
        return await get_bracket_standings(db, stage_id)
    except LeagueError as exc:
        raise http_error(exc) from exc


@router.get("/{stage_id}/playins", response_model=PlayinsStandings)
@cache(namespace=STANDINGS_NAMESPACE)
async def get_playins(stage_id: int, db: AsyncSession = Depends(get_db)):
    try:
        return await list_playins(db, stage_id)
    except LeagueError as exc:
        raise http_error(exc) from exc


@router.post("/{stage_id}/standings/invalidate", status_code=status.HTTP_204_NO_CONTENT)
async def invalidate_standings(stage_id: int, db: AsyncSession = Depends(get_db)):
    """Drop cached standings of a stage after its results changed."""
    try:
        await get_stage_or_raise(db, stage_id)
    except LeagueError as exc:
        raise http_error(exc) from exc
    await invalidate_stage_standings(stage_id)
