"""Domain errors raised by the standings and schedule engine.

Each error carries a stable ``code`` so API handlers and views can report it
without depending on the exception class.
"""


class LeagueError(Exception):
    code = "league_error"

    def __init__(self, message: str | None = None, **context):
        self.context = context
        super().__init__(message or self.code)

    @property
    def message(self) -> str:
        return str(self)


# Write-time validation


class InvalidBestOf(LeagueError):
    code = "invalid_best_of"


class NegativeScore(LeagueError):
    code = "negative_score"


# Aggregation-time errors


class IndeterminateOutcome(LeagueError):
    """Game data cannot produce a winner."""
    code = "indeterminate_outcome"


class TiedGameScore(IndeterminateOutcome):
    """A single game ended level, which is not a valid completed game."""
    code = "tied_game_score"


class IncompleteData(LeagueError):
    """Match is marked completed but the recorded scores don't decide it."""
    code = "incomplete_data"


# Lookup errors


class StageNotFound(LeagueError):
    code = "stage_not_found"


class WrongStageKind(LeagueError):
    code = "wrong_stage_kind"


class MatchNotFound(LeagueError):
    code = "match_not_found"


class SeasonNotFound(LeagueError):
    code = "season_not_found"


# Schedule feed


class InvalidCursor(LeagueError):
    code = "invalid_cursor"


class FeedFetchError(LeagueError):
    """A schedule page could not be fetched; nothing from it was applied."""
    code = "feed_fetch_failed"
