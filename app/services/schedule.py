"""Schedule feed: keyset-paginated, time-ordered matches in both directions."""

import base64
import json
import logging
from datetime import datetime

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import get_settings
from app.models import CompetitionStage, Match, MatchParticipant, SchoolTeam, SportCategory
from app.schemas.schedule import (
    ScheduleByDateResponse,
    ScheduleDirection,
    ScheduleFilters,
    ScheduleMatch,
    SchedulePage,
    ScheduleTeam,
)
from app.services.errors import InvalidCursor
from app.utils.date_helpers import format_match_date, format_match_time
from app.utils.match_grouping import group_matches_by_date
from app.utils.sports import format_category_name
from app.utils.timestamps import ensure_utc, local_date, utcnow

logger = logging.getLogger(__name__)

CursorKey = tuple[datetime, int]


def encode_cursor(scheduled_at: datetime, match_id: int) -> str:
    payload = json.dumps({"t": ensure_utc(scheduled_at).isoformat(), "id": match_id})
    return base64.urlsafe_b64encode(payload.encode()).decode().rstrip("=")


def decode_cursor(cursor: str) -> CursorKey:
    """Inverse of encode_cursor.

    Raises:
        InvalidCursor: the token is not one produced by encode_cursor
    """
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded.encode()))
        return ensure_utc(datetime.fromisoformat(payload["t"])), int(payload["id"])
    except (ValueError, KeyError, TypeError) as exc:
        raise InvalidCursor(f"Malformed cursor {cursor!r}", cursor=cursor) from exc


def _after(key: CursorKey):
    scheduled_at, match_id = key
    return or_(
        Match.scheduled_at > scheduled_at,
        and_(Match.scheduled_at == scheduled_at, Match.id > match_id),
    )


def _before(key: CursorKey):
    scheduled_at, match_id = key
    return or_(
        Match.scheduled_at < scheduled_at,
        and_(Match.scheduled_at == scheduled_at, Match.id < match_id),
    )


def apply_filters(query, filters: ScheduleFilters):
    """Restrict a Match query to scheduled matches passing the filters."""
    query = query.where(Match.scheduled_at.isnot(None))

    if filters.season_id is not None or filters.sport_id is not None or filters.sport_category_id is not None:
        query = query.join(CompetitionStage, CompetitionStage.id == Match.stage_id)
        if filters.season_id is not None:
            query = query.where(CompetitionStage.season_id == filters.season_id)
        if filters.sport_category_id is not None:
            query = query.where(CompetitionStage.sport_category_id == filters.sport_category_id)
        if filters.sport_id is not None:
            query = query.join(SportCategory, SportCategory.id == CompetitionStage.sport_category_id)
            query = query.where(SportCategory.sport_id == filters.sport_id)

    if filters.stage_id is not None:
        query = query.where(Match.stage_id == filters.stage_id)
    if filters.status is not None:
        query = query.where(Match.status == filters.status)
    if filters.date_from is not None:
        query = query.where(Match.scheduled_at >= ensure_utc(filters.date_from))
    if filters.date_to is not None:
        query = query.where(Match.scheduled_at <= ensure_utc(filters.date_to))
    if filters.search and filters.search.strip():
        pattern = f"%{filters.search.strip()}%"
        query = query.where(or_(Match.name.ilike(pattern), Match.description.ilike(pattern)))

    return query


def schedule_load_options():
    return (
        selectinload(Match.participants)
        .selectinload(MatchParticipant.team)
        .selectinload(SchoolTeam.school),
        selectinload(Match.stage)
        .selectinload(CompetitionStage.sport_category)
        .selectinload(SportCategory.sport),
    )


def build_schedule_match(match: Match, now: datetime, tz_name: str) -> ScheduleMatch:
    scheduled_at = ensure_utc(match.scheduled_at)
    match_day = local_date(scheduled_at, tz_name)
    today = local_date(now, tz_name)

    stage = match.stage
    category = stage.sport_category if stage else None
    sport = category.sport if category else None

    participants = []
    for participant in match.participants:
        team = participant.team
        school = team.school if team else None
        participants.append(
            ScheduleTeam(
                participant_id=participant.id,
                team_id=participant.team_id,
                team_name=team.name if team else None,
                school_name=school.name if school else None,
                school_abbreviation=school.abbreviation if school else None,
                school_logo_url=school.logo_url if school else None,
                match_score=participant.match_score,
            )
        )

    return ScheduleMatch(
        id=match.id,
        name=match.name,
        description=match.description,
        venue=match.venue,
        scheduled_at=scheduled_at,
        start_at=ensure_utc(match.start_at) if match.start_at else None,
        end_at=ensure_utc(match.end_at) if match.end_at else None,
        best_of=match.best_of,
        status=match.status,
        stage_id=match.stage_id,
        stage_name=stage.name if stage else None,
        competition_stage=stage.competition_stage if stage else None,
        season_id=stage.season_id if stage else None,
        sport_category_id=stage.sport_category_id if stage else None,
        sport_name=sport.name if sport else None,
        category_name=format_category_name(category.division, category.levels) if category else None,
        participants=participants,
        display_date=format_match_date(match_day),
        display_time=format_match_time(scheduled_at, tz_name),
        is_today=match_day == today,
        is_past=match_day < today,
        is_upcoming=match_day > today,
    )


async def _exists(db: AsyncSession, filters: ScheduleFilters, condition) -> bool:
    query = apply_filters(select(Match.id), filters).where(condition).limit(1)
    result = await db.execute(query)
    return result.first() is not None


async def count_schedule_matches(db: AsyncSession, filters: ScheduleFilters) -> int:
    query = select(func.count()).select_from(apply_filters(select(Match.id), filters).subquery())
    result = await db.execute(query)
    return result.scalar_one()


def clamp_limit(limit: int | None) -> int:
    settings = get_settings()
    if limit is None:
        return settings.schedule_default_limit
    return max(1, min(limit, settings.schedule_max_limit))


async def get_schedule_page(
    db: AsyncSession,
    direction: ScheduleDirection,
    limit: int | None = None,
    filters: ScheduleFilters | None = None,
    cursor: str | None = None,
    now: datetime | None = None,
) -> SchedulePage:
    """One page of the schedule, always returned in ascending time order.

    ``future`` pages hold the matches strictly after the cursor, ``past`` pages
    the matches strictly before it. Without a cursor the boundary is ``now``:
    future pages start at now, past pages end just before it.

    Raises:
        InvalidCursor: the cursor can't be decoded
    """
    settings = get_settings()
    filters = filters or ScheduleFilters()
    limit = clamp_limit(limit)
    now = ensure_utc(now or utcnow())
    boundary: CursorKey = decode_cursor(cursor) if cursor else (now, 0)

    query = apply_filters(select(Match), filters).options(*schedule_load_options())
    if direction == ScheduleDirection.future:
        query = query.where(_after(boundary)).order_by(Match.scheduled_at.asc(), Match.id.asc())
    else:
        query = query.where(_before(boundary)).order_by(Match.scheduled_at.desc(), Match.id.desc())

    result = await db.execute(query.limit(limit + 1))
    rows = list(result.scalars().all())
    has_more = len(rows) > limit
    rows = rows[:limit]
    if direction == ScheduleDirection.past:
        rows.reverse()

    first_key = (ensure_utc(rows[0].scheduled_at), rows[0].id) if rows else boundary
    last_key = (ensure_utc(rows[-1].scheduled_at), rows[-1].id) if rows else boundary

    if direction == ScheduleDirection.future:
        has_next_page = has_more
        has_previous_page = await _exists(db, filters, _before(first_key))
    else:
        has_previous_page = has_more
        has_next_page = await _exists(db, filters, _after(last_key))

    total_count = await count_schedule_matches(db, filters)

    logger.debug(
        "Schedule page %s limit=%s returned %s of %s matches",
        direction.value,
        limit,
        len(rows),
        total_count,
    )

    return SchedulePage(
        matches=[build_schedule_match(m, now, settings.schedule_timezone) for m in rows],
        has_next_page=has_next_page,
        has_previous_page=has_previous_page,
        next_cursor=encode_cursor(*last_key) if has_next_page else None,
        previous_cursor=encode_cursor(*first_key) if has_previous_page else None,
        total_count=total_count,
    )


async def get_schedule_by_date(
    db: AsyncSession,
    filters: ScheduleFilters | None = None,
    now: datetime | None = None,
) -> ScheduleByDateResponse:
    """Whole filtered schedule grouped by calendar date in the reference timezone."""
    settings = get_settings()
    filters = filters or ScheduleFilters()
    now = ensure_utc(now or utcnow())

    query = (
        apply_filters(select(Match), filters)
        .options(*schedule_load_options())
        .order_by(Match.scheduled_at.asc(), Match.id.asc())
    )
    result = await db.execute(query)
    matches = [build_schedule_match(m, now, settings.schedule_timezone) for m in result.scalars().all()]

    return ScheduleByDateResponse(
        groups=group_matches_by_date(matches, settings.schedule_timezone),
        total_matches=len(matches),
    )
