"""Match outcome resolution from per-game scores (best-of-N)."""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from app.models import LOCKED_STATUSES, Match, MatchStatus
from app.services.errors import (
    IncompleteData,
    IndeterminateOutcome,
    InvalidBestOf,
    LeagueError,
    TiedGameScore,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchOutcome:
    match_id: int | None
    status: MatchStatus
    winner_participant_id: int | None = None
    winner_team_id: int | None = None
    is_draw: bool = False
    decided_games: int = 0
    # participant id -> games won / points scored in the counted games
    game_wins: dict[int, int] = field(default_factory=dict)
    points_scored: dict[int, int] = field(default_factory=dict)

    @property
    def is_decided(self) -> bool:
        return self.winner_participant_id is not None or self.is_draw


def _resolve_from_match_scores(match: Match) -> MatchOutcome:
    """Single-game matches entered as a final score only, without Game rows."""
    first, second = match.participants
    scores = {first.id: first.match_score, second.id: second.match_score}
    wins = {first.id: 0, second.id: 0}

    if first.match_score == second.match_score:
        return MatchOutcome(
            match_id=match.id,
            status=MatchStatus.completed,
            is_draw=True,
            game_wins=wins,
            points_scored=scores,
        )

    winner = first if first.match_score > second.match_score else second
    wins[winner.id] = 1
    return MatchOutcome(
        match_id=match.id,
        status=MatchStatus.completed,
        winner_participant_id=winner.id,
        winner_team_id=winner.team_id,
        decided_games=1,
        game_wins=wins,
        points_scored=scores,
    )


def resolve_outcome(match: Match) -> MatchOutcome:
    """Derive winner and status of a two-participant match from its games.

    Each game with both scores recorded awards one game win to the strictly
    higher score; the first participant to reach ``ceil(best_of / 2)`` wins
    takes the match. Games after that point are ignored.

    Raises:
        InvalidBestOf: best_of is not positive
        TiedGameScore: a counted game has equal scores
        IndeterminateOutcome: all best_of games decided without a winner
        IncompleteData: status is completed but the games don't decide it
    """
    if match.best_of is None or match.best_of <= 0:
        raise InvalidBestOf(
            f"Match {match.id} has invalid best_of {match.best_of!r}", match_id=match.id
        )

    if match.status in LOCKED_STATUSES:
        return MatchOutcome(match_id=match.id, status=match.status)

    participants = list(match.participants)
    if len(participants) != 2:
        if match.status == MatchStatus.completed:
            raise IncompleteData(
                f"Match {match.id} is completed but has {len(participants)} participants",
                match_id=match.id,
            )
        return MatchOutcome(match_id=match.id, status=match.status)

    first, second = participants
    games = sorted(match.games, key=lambda g: g.game_number)

    if (
        not games
        and match.best_of == 1
        and match.status == MatchStatus.completed
        and first.match_score is not None
        and second.match_score is not None
    ):
        return _resolve_from_match_scores(match)

    threshold = match.games_to_win
    wins = {first.id: 0, second.id: 0}
    points = {first.id: 0, second.id: 0}
    decided = 0
    winner = None

    for game in games:
        if game.game_number > match.best_of:
            break
        scores = {s.match_participant_id: s.score for s in game.scores}
        if first.id not in scores or second.id not in scores:
            continue

        first_score = scores[first.id]
        second_score = scores[second.id]
        if first_score == second_score:
            raise TiedGameScore(
                f"Game {game.game_number} of match {match.id} is tied {first_score}-{second_score}",
                match_id=match.id,
                game_number=game.game_number,
            )

        decided += 1
        points[first.id] += first_score
        points[second.id] += second_score
        game_winner = first if first_score > second_score else second
        wins[game_winner.id] += 1
        if wins[game_winner.id] >= threshold:
            winner = game_winner
            break

    if winner is not None:
        return MatchOutcome(
            match_id=match.id,
            status=MatchStatus.completed,
            winner_participant_id=winner.id,
            winner_team_id=winner.team_id,
            decided_games=decided,
            game_wins=wins,
            points_scored=points,
        )

    if decided >= match.best_of:
        raise IndeterminateOutcome(
            f"Match {match.id}: {decided} games played without reaching {threshold} wins",
            match_id=match.id,
        )

    if match.status == MatchStatus.completed:
        raise IncompleteData(
            f"Match {match.id} is completed but only {decided} of {threshold} required games are decided",
            match_id=match.id,
        )

    status = MatchStatus.in_progress if decided else match.status
    return MatchOutcome(
        match_id=match.id,
        status=status,
        decided_games=decided,
        game_wins=wins,
        points_scored=points,
    )


def resolve_outcomes(
    matches: Iterable[Match],
) -> tuple[dict[int, MatchOutcome], dict[int, LeagueError]]:
    """Resolve many matches, collecting per-match errors instead of raising."""
    outcomes: dict[int, MatchOutcome] = {}
    errors: dict[int, LeagueError] = {}

    for match in matches:
        try:
            outcomes[match.id] = resolve_outcome(match)
        except (IndeterminateOutcome, IncompleteData, InvalidBestOf) as exc:
            logger.warning("Match %s outcome unresolved (%s): %s", match.id, exc.code, exc)
            errors[match.id] = exc

    return outcomes, errors
