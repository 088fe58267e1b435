"""Group stage standings: fold completed matches into ranked tables."""

import logging
from collections import defaultdict
from typing import Callable, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.models import CompetitionStage, CompetitionStageKind, Match, MatchParticipant, MatchStatus
from app.schemas.standings import (
    GoalsMode,
    GroupStageStandings,
    GroupTable,
    ScoringRule,
    StandingsEntry,
    UnresolvedMatch,
)
from app.services.outcome import MatchOutcome, resolve_outcomes
from app.services.stage_matches import ensure_stage_kind, get_stage_or_raise, load_stage_matches

logger = logging.getLogger(__name__)

GroupKey = Callable[[Match], str | None]


def default_scoring_rule() -> ScoringRule:
    settings = get_settings()
    return ScoringRule(
        win=settings.standings_win_points,
        draw=settings.standings_draw_points,
        loss=settings.standings_loss_points,
    )


def default_goals_mode() -> GoalsMode:
    return GoalsMode(get_settings().standings_goals_mode)


def _group_by_match_name(match: Match) -> str | None:
    return match.group_name


def _goals(outcome: MatchOutcome, participant: MatchParticipant, mode: GoalsMode) -> int:
    if mode == GoalsMode.games:
        return outcome.game_wins.get(participant.id, 0)
    if mode == GoalsMode.points:
        return outcome.points_scored.get(participant.id) or 0
    return participant.match_score or 0


def _new_entry(participant: MatchParticipant) -> dict:
    team = participant.team
    school = team.school if team else None
    return {
        "team_id": participant.team_id,
        "team_name": team.name if team else None,
        "school_name": school.name if school else None,
        "school_abbreviation": school.abbreviation if school else None,
        "school_logo_url": school.logo_url if school else None,
        "matches_played": 0,
        "wins": 0,
        "losses": 0,
        "draws": 0,
        "goals_for": 0,
        "goals_against": 0,
        "goal_difference": 0,
        "points": 0,
        "position": 0,
    }


def _criteria(entry: dict) -> tuple[int, int, int]:
    return (entry["points"], entry["goal_difference"], entry["goals_for"])


def rank_entries(entries: list[dict], head_to_head: dict[tuple[int, int], int]) -> list[dict]:
    """Order entries and assign positions in place.

    Sort by points, goal difference, goals for (all descending). A tie of
    exactly two teams is broken by head-to-head wins. Remaining ties are
    ordered by team id and share a position.
    """
    ordered = sorted(entries, key=lambda e: (tuple(-v for v in _criteria(e)), e["team_id"]))

    # Split into clusters with identical criteria
    clusters: list[list[dict]] = []
    for entry in ordered:
        if clusters and _criteria(clusters[-1][0]) == _criteria(entry):
            clusters[-1].append(entry)
        else:
            clusters.append([entry])

    ranked: list[dict] = []
    for cluster in clusters:
        start = len(ranked) + 1
        if len(cluster) == 1:
            cluster[0]["position"] = start
            ranked.extend(cluster)
            continue

        if len(cluster) == 2:
            first, second = cluster
            first_wins = head_to_head.get((first["team_id"], second["team_id"]), 0)
            second_wins = head_to_head.get((second["team_id"], first["team_id"]), 0)
            if first_wins != second_wins:
                if second_wins > first_wins:
                    first, second = second, first
                first["position"] = start
                second["position"] = start + 1
                ranked.extend([first, second])
                continue

        for entry in cluster:
            entry["position"] = start
        ranked.extend(cluster)

    return ranked


def aggregate_group_standings(
    stage: CompetitionStage,
    matches: Iterable[Match],
    scoring_rule: ScoringRule | None = None,
    goals_mode: GoalsMode | None = None,
    group_key: GroupKey | None = None,
) -> GroupStageStandings:
    """Compute ranked tables for a group stage from its matches.

    Only completed matches count. Matches whose outcome can't be resolved are
    listed in ``unresolved`` and skipped; their teams still appear.
    """
    scoring_rule = scoring_rule or default_scoring_rule()
    goals_mode = goals_mode or default_goals_mode()
    group_key = group_key or _group_by_match_name

    completed = [m for m in matches if m.status == MatchStatus.completed]
    outcomes, errors = resolve_outcomes(completed)

    group_stats: dict[str | None, dict[int, dict]] = defaultdict(dict)
    head_to_head: dict[str | None, dict[tuple[int, int], int]] = defaultdict(lambda: defaultdict(int))
    unresolved: list[UnresolvedMatch] = []

    for match in sorted(completed, key=lambda m: m.id):
        key = group_key(match)
        team_stats = group_stats[key]
        for participant in match.participants:
            if participant.team_id not in team_stats:
                team_stats[participant.team_id] = _new_entry(participant)

        if match.id in errors:
            exc = errors[match.id]
            unresolved.append(
                UnresolvedMatch(
                    match_id=match.id,
                    match_name=match.name,
                    error_code=exc.code,
                    message=exc.message,
                )
            )
            continue

        outcome = outcomes[match.id]
        first, second = match.participants
        first_goals = _goals(outcome, first, goals_mode)
        second_goals = _goals(outcome, second, goals_mode)

        for participant, scored, conceded in (
            (first, first_goals, second_goals),
            (second, second_goals, first_goals),
        ):
            stats = team_stats[participant.team_id]
            stats["matches_played"] += 1
            stats["goals_for"] += scored
            stats["goals_against"] += conceded
            stats["goal_difference"] = stats["goals_for"] - stats["goals_against"]

            if outcome.is_draw:
                stats["draws"] += 1
                stats["points"] += scoring_rule.draw
            elif outcome.winner_participant_id == participant.id:
                stats["wins"] += 1
                stats["points"] += scoring_rule.win
            else:
                stats["losses"] += 1
                stats["points"] += scoring_rule.loss

        if not outcome.is_draw:
            loser = second if outcome.winner_participant_id == first.id else first
            head_to_head[key][(outcome.winner_team_id, loser.team_id)] += 1

    groups = []
    for key in sorted(group_stats.keys(), key=lambda k: (k is not None, k or "")):
        ranked = rank_entries(list(group_stats[key].values()), head_to_head[key])
        groups.append(
            GroupTable(
                group_name=key,
                teams=[StandingsEntry(**entry) for entry in ranked],
            )
        )

    if unresolved:
        logger.warning(
            "Stage %s standings computed with %s unresolved matches",
            stage.id,
            len(unresolved),
        )

    return GroupStageStandings(
        stage_id=stage.id,
        stage_name=stage.name,
        competition_stage=stage.competition_stage,
        groups=groups,
        unresolved=unresolved,
    )


async def compute_group_standings(
    db: AsyncSession,
    stage_id: int,
    scoring_rule: ScoringRule | None = None,
    goals_mode: GoalsMode | None = None,
) -> GroupStageStandings:
    """Load a group stage's completed matches and rank them.

    Raises:
        StageNotFound: no stage with this id
        WrongStageKind: the stage is not a group stage
    """
    stage = await get_stage_or_raise(db, stage_id)
    ensure_stage_kind(stage, [CompetitionStageKind.group_stage])

    matches = await load_stage_matches(db, stage_id, statuses=[MatchStatus.completed])
    return aggregate_group_standings(stage, matches, scoring_rule, goals_mode)
