"""Season -> sport -> category -> stage discovery for the standings page."""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import get_settings
from app.models import CompetitionStage, Season, Sport, SportCategory
from app.schemas.standings import (
    CategoryBrief,
    GoalsMode,
    ScoringRule,
    SeasonBrief,
    SportBrief,
    StandingsNavigation,
    StandingsResponse,
    StandingsStage,
)
from app.services.errors import SeasonNotFound, StageNotFound
from app.services.stage_matches import load_stage_matches
from app.services.stage_views import build_stage_view
from app.utils.error_messages import get_error_message
from app.utils.sports import format_category_name
from app.utils.timestamps import local_date, utcnow

logger = logging.getLogger(__name__)


def _today() -> date:
    return local_date(utcnow(), get_settings().schedule_timezone)


async def get_season_or_raise(db: AsyncSession, season_id: int) -> Season:
    result = await db.execute(select(Season).where(Season.id == season_id))
    season = result.scalar_one_or_none()
    if season is None:
        raise SeasonNotFound(f"Season {season_id} not found", season_id=season_id)
    return season


async def get_current_season(db: AsyncSession, today: date | None = None) -> Season:
    """Season whose date range contains today.

    Falls back to the configured ``current_season_id`` and then to the most
    recent season.
    """
    today = today or _today()
    result = await db.execute(
        select(Season)
        .where(Season.start_at <= today, Season.end_at >= today)
        .order_by(Season.start_at.desc(), Season.id.desc())
    )
    season = result.scalars().first()
    if season is not None:
        return season

    settings = get_settings()
    if settings.current_season_id is not None:
        result = await db.execute(select(Season).where(Season.id == settings.current_season_id))
        season = result.scalar_one_or_none()
        if season is not None:
            return season
        logger.warning("Configured current season %s does not exist", settings.current_season_id)

    result = await db.execute(select(Season).order_by(Season.start_at.desc(), Season.id.desc()))
    season = result.scalars().first()
    if season is None:
        raise SeasonNotFound("No seasons exist")
    return season


async def list_seasons(db: AsyncSession) -> list[Season]:
    result = await db.execute(select(Season).order_by(Season.start_at.desc(), Season.id.desc()))
    return list(result.scalars().all())


async def list_season_sports(db: AsyncSession, season_id: int) -> list[Sport]:
    """Sports with at least one stage in the season."""
    await get_season_or_raise(db, season_id)
    result = await db.execute(
        select(Sport)
        .join(SportCategory, SportCategory.sport_id == Sport.id)
        .join(CompetitionStage, CompetitionStage.sport_category_id == SportCategory.id)
        .where(CompetitionStage.season_id == season_id)
        .distinct()
        .order_by(Sport.name, Sport.id)
    )
    return list(result.scalars().all())


async def list_sport_categories(
    db: AsyncSession, season_id: int, sport_id: int
) -> list[SportCategory]:
    """Categories of a sport with at least one stage in the season."""
    await get_season_or_raise(db, season_id)
    result = await db.execute(
        select(SportCategory)
        .join(CompetitionStage, CompetitionStage.sport_category_id == SportCategory.id)
        .where(
            SportCategory.sport_id == sport_id,
            CompetitionStage.season_id == season_id,
        )
        .distinct()
        .order_by(SportCategory.division, SportCategory.levels, SportCategory.id)
    )
    return list(result.scalars().all())


async def list_category_stages(
    db: AsyncSession, season_id: int, sport_category_id: int
) -> list[CompetitionStage]:
    result = await db.execute(
        select(CompetitionStage)
        .where(
            CompetitionStage.season_id == season_id,
            CompetitionStage.sport_category_id == sport_category_id,
        )
    )
    # Equal order_index falls back to stage kind precedence
    return sorted(
        result.scalars().all(),
        key=lambda s: (s.order_index, s.competition_stage.precedence, s.id),
    )


def build_category_brief(category: SportCategory) -> CategoryBrief:
    return CategoryBrief(
        id=category.id,
        division=category.division.value,
        levels=category.levels.value,
        display_name=format_category_name(category.division, category.levels),
    )


def build_season_brief(season: Season) -> SeasonBrief:
    return SeasonBrief(
        id=season.id,
        name=season.name,
        start_at=season.start_at.isoformat(),
        end_at=season.end_at.isoformat(),
    )


async def get_standings_navigation(
    db: AsyncSession,
    season_id: int,
    sport_id: int,
    sport_category_id: int,
) -> tuple[StandingsNavigation, list[CompetitionStage]]:
    season = await get_season_or_raise(db, season_id)

    result = await db.execute(
        select(SportCategory)
        .where(SportCategory.id == sport_category_id, SportCategory.sport_id == sport_id)
        .options(selectinload(SportCategory.sport))
    )
    category = result.scalar_one_or_none()
    stages = await list_category_stages(db, season_id, sport_category_id) if category else []
    if category is None or not stages:
        raise StageNotFound(
            get_error_message("no_stages_found"),
            season_id=season_id,
            sport_id=sport_id,
            sport_category_id=sport_category_id,
        )

    navigation = StandingsNavigation(
        season=build_season_brief(season),
        sport=SportBrief.model_validate(category.sport),
        category=build_category_brief(category),
        stages=[
            StandingsStage(
                id=stage.id,
                name=stage.name,
                competition_stage=stage.competition_stage,
                order=stage.order_index,
            )
            for stage in stages
        ],
    )
    return navigation, stages


async def get_standings(
    db: AsyncSession,
    season_id: int,
    sport_id: int,
    sport_category_id: int,
    stage_id: int | None = None,
    scoring_rule: ScoringRule | None = None,
    goals_mode: GoalsMode | None = None,
) -> StandingsResponse:
    """Navigation plus the view of the selected stage.

    Without ``stage_id`` the first stage by ``order_index`` is shown.
    """
    navigation, stages = await get_standings_navigation(
        db, season_id, sport_id, sport_category_id
    )

    if stage_id is None:
        stage = stages[0]
    else:
        stage = next((s for s in stages if s.id == stage_id), None)
        if stage is None:
            raise StageNotFound(
                f"Stage {stage_id} is not part of this season and category",
                stage_id=stage_id,
            )

    matches = await load_stage_matches(db, stage.id)
    view = build_stage_view(stage, matches, scoring_rule, goals_mode)
    return StandingsResponse(navigation=navigation, standings=view)
