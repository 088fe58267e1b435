"""Loading a stage and its matches with everything the views need."""

from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models import (
    CompetitionStage,
    CompetitionStageKind,
    Game,
    Match,
    MatchParticipant,
    MatchStatus,
    SchoolTeam,
)
from app.schemas.standings import BracketTeam
from app.services.errors import StageNotFound, WrongStageKind


def match_load_options():
    """Eager-load participants (with team and school) and game scores."""
    return (
        selectinload(Match.participants)
        .selectinload(MatchParticipant.team)
        .selectinload(SchoolTeam.school),
        selectinload(Match.games).selectinload(Game.scores),
    )


async def get_stage_or_raise(db: AsyncSession, stage_id: int) -> CompetitionStage:
    result = await db.execute(select(CompetitionStage).where(CompetitionStage.id == stage_id))
    stage = result.scalar_one_or_none()
    if stage is None:
        raise StageNotFound(f"Stage {stage_id} not found", stage_id=stage_id)
    return stage


def ensure_stage_kind(stage: CompetitionStage, kinds: Iterable[CompetitionStageKind]) -> None:
    allowed = set(kinds)
    if stage.competition_stage not in allowed:
        expected = ", ".join(sorted(kind.value for kind in allowed))
        raise WrongStageKind(
            f"Stage {stage.id} is {stage.competition_stage.value}, expected {expected}",
            stage_id=stage.id,
            competition_stage=stage.competition_stage.value,
        )


async def load_stage_matches(
    db: AsyncSession,
    stage_id: int,
    statuses: Iterable[MatchStatus] | None = None,
) -> list[Match]:
    query = (
        select(Match)
        .where(Match.stage_id == stage_id)
        .options(*match_load_options())
        .order_by(Match.scheduled_at, Match.id)
    )
    if statuses is not None:
        query = query.where(Match.status.in_(list(statuses)))

    result = await db.execute(query)
    return list(result.scalars().all())


def build_team_brief(participant: MatchParticipant | None) -> BracketTeam | None:
    if participant is None:
        return None

    team = participant.team
    school = team.school if team else None
    return BracketTeam(
        team_id=participant.team_id,
        team_name=team.name if team else str(participant.team_id),
        school_name=school.name if school else None,
        school_abbreviation=school.abbreviation if school else None,
        school_logo_url=school.logo_url if school else None,
        score=participant.match_score,
    )
