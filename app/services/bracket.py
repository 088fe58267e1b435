"""Elimination bracket for playoffs and finals stages."""

import logging
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import BRACKET_STAGE_KINDS, CompetitionStage, Match, MatchParticipant
from app.schemas.standings import BracketNode, BracketStandings, BracketTeam
from app.services.outcome import MatchOutcome, resolve_outcomes
from app.services.stage_matches import (
    build_team_brief,
    ensure_stage_kind,
    get_stage_or_raise,
    load_stage_matches,
)

logger = logging.getLogger(__name__)

_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


def _schedule_key(match: Match):
    scheduled = match.scheduled_at
    if scheduled is not None and scheduled.tzinfo is None:
        scheduled = scheduled.replace(tzinfo=timezone.utc)
    return (scheduled or _FAR_FUTURE, match.id)


def assign_slots(matches: Iterable[Match]) -> dict[int, tuple[int, int]]:
    """Map match id -> (round, position).

    Matches without a round or position are appended to round 1 in
    scheduled order, after any positioned round 1 matches.
    """
    slots: dict[int, tuple[int, int]] = {}
    unplaced: list[Match] = []

    for match in matches:
        if match.round is None or match.position is None:
            unplaced.append(match)
        else:
            slots[match.id] = (match.round, match.position)

    next_position = max((p for r, p in slots.values() if r == 1), default=0) + 1
    for match in sorted(unplaced, key=_schedule_key):
        slots[match.id] = (1, next_position)
        next_position += 1

    return slots


def link_feeders(
    matches: Iterable[Match],
    slots: dict[int, tuple[int, int]],
) -> dict[int, list[int]]:
    """Map match id -> ids of the matches whose winners advance into it.

    Uses ``advances_to_match_id`` when stored, otherwise the slot in the next
    round at ``ceil(position / 2)``. Feeders are ordered by slot, so the first
    fills team1 and the second team2.
    """
    by_slot = {slot: match_id for match_id, slot in slots.items()}
    feeders: dict[int, list[int]] = {match_id: [] for match_id in slots}

    for match in matches:
        target = match.advances_to_match_id
        if target is None:
            round_number, position = slots[match.id]
            target = by_slot.get((round_number + 1, (position + 1) // 2))
        if target is None or target not in feeders:
            continue
        feeders[target].append(match.id)

    for target, feeder_ids in feeders.items():
        feeder_ids.sort(key=lambda match_id: (slots[match_id], match_id))
        if len(feeder_ids) > 2:
            logger.warning("Bracket match %s has %s feeders, using the first two", target, len(feeder_ids))
            del feeder_ids[2:]

    return feeders


def _winner_participant(match: Match, outcome: MatchOutcome | None) -> MatchParticipant | None:
    if outcome is None or outcome.winner_participant_id is None:
        return None
    for participant in match.participants:
        if participant.id == outcome.winner_participant_id:
            return participant
    return None


def _threaded_team(winner: MatchParticipant, match: Match) -> BracketTeam:
    """A feeder's winner shown in the next match, with that match's score."""
    for participant in match.participants:
        if participant.team_id == winner.team_id:
            return build_team_brief(participant)

    brief = build_team_brief(winner)
    return brief.model_copy(update={"score": None})


def build_bracket(stage: CompetitionStage, matches: Iterable[Match]) -> BracketStandings:
    matches = list(matches)
    by_id = {match.id: match for match in matches}
    outcomes, errors = resolve_outcomes(matches)
    slots = assign_slots(matches)
    feeders = link_feeders(matches, slots)

    targets = {fid: target for target, fids in feeders.items() for fid in fids}
    winners = {match.id: _winner_participant(match, outcomes.get(match.id)) for match in matches}

    nodes = []
    for match_id in sorted(slots, key=lambda mid: (slots[mid], mid)):
        match = by_id[match_id]
        round_number, position = slots[match_id]
        feeder_ids = feeders[match_id]
        own = list(match.participants)

        team1 = team2 = None
        if not feeder_ids:
            team1 = build_team_brief(own[0]) if len(own) > 0 else None
            team2 = build_team_brief(own[1]) if len(own) > 1 else None
        elif all(winners[fid] is not None for fid in feeder_ids):
            threaded = [winners[fid] for fid in feeder_ids]
            team1 = _threaded_team(threaded[0], match)
            if len(threaded) > 1:
                team2 = _threaded_team(threaded[1], match)
            else:
                # Bye: the other side is whoever was entered directly
                other = next((p for p in own if p.team_id != threaded[0].team_id), None)
                team2 = build_team_brief(other)

        error = errors.get(match_id)
        nodes.append(
            BracketNode(
                match_id=match.id,
                match_name=match.name,
                round=round_number,
                position=position,
                team1=team1,
                team2=team2,
                winner=build_team_brief(winners[match_id]),
                match_status=outcomes[match_id].status if match_id in outcomes else match.status,
                scheduled_at=match.scheduled_at,
                venue=match.venue,
                advances_to_match_id=targets.get(match_id, match.advances_to_match_id),
                feeder_match_ids=feeder_ids,
                outcome_error=error.code if error else None,
            )
        )

    return BracketStandings(
        stage_id=stage.id,
        stage_name=stage.name,
        competition_stage=stage.competition_stage,
        bracket=nodes,
    )


async def get_bracket_standings(db: AsyncSession, stage_id: int) -> BracketStandings:
    stage = await get_stage_or_raise(db, stage_id)
    ensure_stage_kind(stage, BRACKET_STAGE_KINDS)

    matches = await load_stage_matches(db, stage_id)
    return build_bracket(stage, matches)
