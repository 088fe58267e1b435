"""Play-ins: a flat, ordered list of single-elimination qualifier matches."""

from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import CompetitionStage, CompetitionStageKind, Match
from app.schemas.standings import PlayinMatch, PlayinsStandings
from app.services.outcome import resolve_outcomes
from app.services.stage_matches import (
    build_team_brief,
    ensure_stage_kind,
    get_stage_or_raise,
    load_stage_matches,
)


def _playin_order(match: Match):
    scheduled = match.scheduled_at
    if scheduled is not None and scheduled.tzinfo is None:
        scheduled = scheduled.replace(tzinfo=timezone.utc)
    # scheduled_at ascending with nulls last, then round, position, id
    return (
        scheduled is None,
        scheduled or datetime.min.replace(tzinfo=timezone.utc),
        match.round if match.round is not None else 0,
        match.position if match.position is not None else 0,
        match.id,
    )


def build_playins(stage: CompetitionStage, matches: Iterable[Match]) -> PlayinsStandings:
    ordered = sorted(matches, key=_playin_order)
    outcomes, errors = resolve_outcomes(ordered)

    entries = []
    for match in ordered:
        participants = list(match.participants)
        outcome = outcomes.get(match.id)
        winner = None
        if outcome is not None and outcome.winner_participant_id is not None:
            winner = next(p for p in participants if p.id == outcome.winner_participant_id)

        error = errors.get(match.id)
        entries.append(
            PlayinMatch(
                match_id=match.id,
                match_name=match.name,
                team1=build_team_brief(participants[0]) if len(participants) > 0 else None,
                team2=build_team_brief(participants[1]) if len(participants) > 1 else None,
                winner=build_team_brief(winner),
                match_status=outcome.status if outcome else match.status,
                scheduled_at=match.scheduled_at,
                venue=match.venue,
                round=match.round,
                outcome_error=error.code if error else None,
            )
        )

    return PlayinsStandings(
        stage_id=stage.id,
        stage_name=stage.name,
        competition_stage=stage.competition_stage,
        matches=entries,
    )


async def list_playins(db: AsyncSession, stage_id: int) -> PlayinsStandings:
    stage = await get_stage_or_raise(db, stage_id)
    ensure_stage_kind(stage, [CompetitionStageKind.playins])

    matches = await load_stage_matches(db, stage_id)
    return build_playins(stage, matches)
