import enum
from datetime import datetime

from pydantic import BaseModel

from app.models import CompetitionStageKind, MatchStatus


class ScheduleDirection(str, enum.Enum):
    future = "future"
    past = "past"


class ScheduleFilters(BaseModel):
    season_id: int | None = None
    sport_id: int | None = None
    sport_category_id: int | None = None
    stage_id: int | None = None
    status: MatchStatus | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    search: str | None = None


class ScheduleTeam(BaseModel):
    participant_id: int
    team_id: int
    team_name: str | None = None
    school_name: str | None = None
    school_abbreviation: str | None = None
    school_logo_url: str | None = None
    match_score: int | None = None


class ScheduleMatch(BaseModel):
    id: int
    name: str
    description: str | None = None
    venue: str | None = None
    scheduled_at: datetime
    start_at: datetime | None = None
    end_at: datetime | None = None
    best_of: int
    status: MatchStatus

    stage_id: int
    stage_name: str | None = None
    competition_stage: CompetitionStageKind | None = None
    season_id: int | None = None
    sport_category_id: int | None = None
    sport_name: str | None = None
    category_name: str | None = None

    participants: list[ScheduleTeam] = []

    # Presentation helpers, computed in the reference timezone
    display_date: str
    display_time: str
    is_today: bool = False
    is_past: bool = False
    is_upcoming: bool = False


class SchedulePage(BaseModel):
    matches: list[ScheduleMatch]
    has_next_page: bool = False
    has_previous_page: bool = False
    next_cursor: str | None = None
    previous_cursor: str | None = None
    total_count: int = 0


class ScheduleDateGroup(BaseModel):
    date: str  # YYYY-MM-DD
    date_label: str
    matches: list[ScheduleMatch]


class ScheduleByDateResponse(BaseModel):
    groups: list[ScheduleDateGroup]
    total_matches: int
