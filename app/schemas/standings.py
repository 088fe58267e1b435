import enum
from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from app.models import CompetitionStageKind, MatchStatus


class GoalsMode(str, enum.Enum):
    """What goals_for / goals_against accumulate in a group table."""
    games = "games"  # games won in each match
    points = "points"  # points scored across the counted games
    match_score = "match_score"  # participant's cumulative match_score


class ScoringRule(BaseModel):
    win: int = 3
    draw: int = 1
    loss: int = 0


class BracketTeam(BaseModel):
    team_id: int
    team_name: str
    school_name: str | None = None
    school_abbreviation: str | None = None
    school_logo_url: str | None = None
    score: int | None = None


class StandingsEntry(BaseModel):
    team_id: int
    team_name: str | None = None
    school_name: str | None = None
    school_abbreviation: str | None = None
    school_logo_url: str | None = None

    matches_played: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0

    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0

    points: int = 0
    position: int = 0


class GroupTable(BaseModel):
    group_name: str | None = None
    teams: list[StandingsEntry]


class UnresolvedMatch(BaseModel):
    """A match left out of a view because its result can't be derived."""
    match_id: int
    match_name: str | None = None
    error_code: str
    message: str


class GroupStageStandings(BaseModel):
    view_type: Literal["group_stage"] = "group_stage"
    stage_id: int
    stage_name: str
    competition_stage: CompetitionStageKind
    groups: list[GroupTable]
    unresolved: list[UnresolvedMatch] = []


class BracketNode(BaseModel):
    match_id: int
    match_name: str
    round: int
    position: int
    team1: BracketTeam | None = None
    team2: BracketTeam | None = None
    winner: BracketTeam | None = None
    match_status: MatchStatus
    scheduled_at: datetime | None = None
    venue: str | None = None
    advances_to_match_id: int | None = None
    feeder_match_ids: list[int] = []
    outcome_error: str | None = None


class BracketStandings(BaseModel):
    view_type: Literal["bracket"] = "bracket"
    stage_id: int
    stage_name: str
    competition_stage: CompetitionStageKind
    bracket: list[BracketNode]


class PlayinMatch(BaseModel):
    match_id: int
    match_name: str
    team1: BracketTeam | None = None
    team2: BracketTeam | None = None
    winner: BracketTeam | None = None
    match_status: MatchStatus
    scheduled_at: datetime | None = None
    venue: str | None = None
    round: int | None = None
    outcome_error: str | None = None


class PlayinsStandings(BaseModel):
    view_type: Literal["playins"] = "playins"
    stage_id: int
    stage_name: str
    competition_stage: CompetitionStageKind
    matches: list[PlayinMatch]


StandingsView = Annotated[
    Union[GroupStageStandings, BracketStandings, PlayinsStandings],
    Field(discriminator="view_type"),
]


# Navigation

class SeasonBrief(BaseModel):
    id: int
    name: str
    start_at: str
    end_at: str


class SportBrief(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class CategoryBrief(BaseModel):
    id: int
    division: str
    levels: str
    display_name: str


class StandingsStage(BaseModel):
    id: int
    name: str
    competition_stage: CompetitionStageKind
    order: int


class StandingsNavigation(BaseModel):
    season: SeasonBrief
    sport: SportBrief
    category: CategoryBrief
    stages: list[StandingsStage]


class StandingsResponse(BaseModel):
    navigation: StandingsNavigation
    standings: StandingsView


# Single match outcome

class ParticipantTally(BaseModel):
    participant_id: int
    team_id: int
    games_won: int = 0
    points_scored: int | None = None


class MatchOutcomeResponse(BaseModel):
    match_id: int
    status: MatchStatus
    winner: BracketTeam | None = None
    is_draw: bool = False
    decided_games: int = 0
    best_of: int
    participants: list[ParticipantTally] = []
