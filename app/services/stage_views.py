"""Pick the standings view for a stage from its competition phase."""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import CompetitionStage, CompetitionStageKind, Match
from app.schemas.standings import GoalsMode, ScoringRule
from app.services.bracket import build_bracket
from app.services.playins import build_playins
from app.services.stage_matches import get_stage_or_raise, load_stage_matches
from app.services.standings import aggregate_group_standings


def build_stage_view(
    stage: CompetitionStage,
    matches: list[Match],
    scoring_rule: ScoringRule | None = None,
    goals_mode: GoalsMode | None = None,
):
    kind = stage.competition_stage
    if kind == CompetitionStageKind.group_stage:
        return aggregate_group_standings(stage, matches, scoring_rule, goals_mode)
    if kind == CompetitionStageKind.playins:
        return build_playins(stage, matches)
    return build_bracket(stage, matches)


async def get_stage_view(
    db: AsyncSession,
    stage_id: int,
    scoring_rule: ScoringRule | None = None,
    goals_mode: GoalsMode | None = None,
):
    """GroupStageStandings, PlayinsStandings or BracketStandings for a stage."""
    stage = await get_stage_or_raise(db, stage_id)
    matches = await load_stage_matches(db, stage_id)
    return build_stage_view(stage, matches, scoring_rule, goals_mode)
