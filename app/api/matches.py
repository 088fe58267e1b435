"""Match endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.api.errors import http_error
from app.models import Match
from app.schemas.standings import MatchOutcomeResponse, ParticipantTally
from app.services.errors import LeagueError, MatchNotFound
from app.services.outcome import resolve_outcome
from app.services.stage_matches import build_team_brief, match_load_options

router = APIRouter(prefix="/matches", tags=["matches"])


@router.get("/{match_id}/outcome", response_model=MatchOutcomeResponse)
async def get_match_outcome(match_id: int, db: AsyncSession = Depends(get_db)):
    """Winner and game tally derived from the match's game scores."""
    result = await db.execute(
        select(Match).where(Match.id == match_id).options(*match_load_options())
    )
    match = result.scalar_one_or_none()

    try:
        if match is None:
            raise MatchNotFound(f"Match {match_id} not found", match_id=match_id)
        outcome = resolve_outcome(match)
    except LeagueError as exc:
        raise http_error(exc) from exc

    winner = next(
        (p for p in match.participants if p.id == outcome.winner_participant_id), None
    )
    return MatchOutcomeResponse(
        match_id=match.id,
        status=outcome.status,
        winner=build_team_brief(winner),
        is_draw=outcome.is_draw,
        decided_games=outcome.decided_games,
        best_of=match.best_of,
        participants=[
            ParticipantTally(
                participant_id=p.id,
                team_id=p.team_id,
                games_won=outcome.game_wins.get(p.id, 0),
                points_scored=outcome.points_scored.get(p.id),
            )
            for p in match.participants
        ],
    )
