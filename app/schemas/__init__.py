from app.schemas.season import (
    SeasonResponse,
    SeasonListResponse,
    SportListResponse,
    CategoryListResponse,
)
from app.schemas.standings import (
    GoalsMode,
    ScoringRule,
    StandingsEntry,
    GroupStageStandings,
    BracketStandings,
    PlayinsStandings,
    StandingsView,
    StandingsResponse,
    MatchOutcomeResponse,
)
from app.schemas.schedule import (
    ScheduleDirection,
    ScheduleFilters,
    ScheduleMatch,
    SchedulePage,
    ScheduleByDateResponse,
)

__all__ = [
    "SeasonResponse",
    "SeasonListResponse",
    "SportListResponse",
    "CategoryListResponse",
    "GoalsMode",
    "ScoringRule",
    "StandingsEntry",
    "GroupStageStandings",
    "BracketStandings",
    "PlayinsStandings",
    "StandingsView",
    "StandingsResponse",
    "MatchOutcomeResponse",
    "ScheduleDirection",
    "ScheduleFilters",
    "ScheduleMatch",
    "SchedulePage",
    "ScheduleByDateResponse",
]
