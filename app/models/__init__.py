from app.models.season import Season
from app.models.sport import Sport, SportCategory, SportDivision, SportLevel
from app.models.stage import (
    BRACKET_STAGE_KINDS,
    STAGE_PRECEDENCE,
    CompetitionStage,
    CompetitionStageKind,
)
from app.models.school import School, SchoolTeam
from app.models.match import LOCKED_STATUSES, Match, MatchStatus
from app.models.match_participant import MatchParticipant
from app.models.game import Game
from app.models.game_score import GameScore

__all__ = [
    "Season",
    "Sport",
    "SportCategory",
    "SportDivision",
    "SportLevel",
    "CompetitionStage",
    "CompetitionStageKind",
    "STAGE_PRECEDENCE",
    "BRACKET_STAGE_KINDS",
    "School",
    "SchoolTeam",
    "Match",
    "MatchStatus",
    "LOCKED_STATUSES",
    "MatchParticipant",
    "Game",
    "GameScore",
]
