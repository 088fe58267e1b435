import pytest
from datetime import date, timedelta
from typing import AsyncGenerator

from fastapi_cache import FastAPICache
from fastapi_cache.backends.inmemory import InMemoryBackend
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import Base
from app.api.deps import get_db  # Import from where routes actually use it
from app.models import (
    CompetitionStage,
    CompetitionStageKind,
    Game,
    GameScore,
    Match,
    MatchParticipant,
    MatchStatus,
    School,
    SchoolTeam,
    Season,
    Sport,
    SportCategory,
    SportDivision,
    SportLevel,
)


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# Note: Using pytest-asyncio's built-in event_loop fixture (asyncio_mode = auto)


@pytest.fixture(autouse=True)
def disabled_cache():
    """Cached endpoints need an initialized FastAPICache; keep it switched off."""
    FastAPICache.reset()
    FastAPICache.init(InMemoryBackend(), prefix="test", enable=False)
    yield
    FastAPICache.reset()


@pytest.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
def test_session_maker(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest.fixture(scope="function")
async def test_session(test_session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with test_session_maker() as session:
        yield session


@pytest.fixture(scope="function")
async def client(test_session) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with overridden database dependency."""

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# --- In-memory builders (no database) ---

def build_match(
    match_id: int,
    games=(),
    *,
    best_of: int = 3,
    status: MatchStatus = MatchStatus.completed,
    team_ids=(11, 12),
    match_scores=(None, None),
    **kwargs,
) -> Match:
    """Transient Match with two participants and per-game scores.

    Participant ids are ``match_id * 10 + 1`` and ``match_id * 10 + 2``.
    """
    participant_ids = (match_id * 10 + 1, match_id * 10 + 2)
    participants = [
        MatchParticipant(id=pid, match_id=match_id, team_id=team_id, match_score=score)
        for pid, team_id, score in zip(participant_ids, team_ids, match_scores)
    ]
    match = Match(
        id=match_id,
        name=kwargs.pop("name", f"Match {match_id}"),
        venue=kwargs.pop("venue", "Main Gym"),
        best_of=best_of,
        status=status,
        participants=participants,
        **kwargs,
    )
    for number, (first, second) in enumerate(games, start=1):
        match.games.append(
            Game(
                id=match_id * 100 + number,
                game_number=number,
                scores=[
                    GameScore(match_participant_id=participant_ids[0], score=first),
                    GameScore(match_participant_id=participant_ids[1], score=second),
                ],
            )
        )
    return match


@pytest.fixture
def make_match():
    return build_match


@pytest.fixture
def make_stage():
    def _make(kind: CompetitionStageKind, stage_id: int = 1, name: str | None = None):
        return CompetitionStage(
            id=stage_id,
            season_id=5,
            sport_category_id=1,
            name=name or kind.value.replace("_", " ").title(),
            competition_stage=kind,
            order_index=0,
        )

    return _make


# --- Data Fixtures ---

@pytest.fixture
async def sample_season(test_session) -> Season:
    """A season whose range contains today."""
    today = date.today()
    season = Season(
        id=5,
        start_at=today - timedelta(days=100),
        end_at=today + timedelta(days=200),
    )
    test_session.add(season)
    await test_session.commit()
    await test_session.refresh(season)
    return season


@pytest.fixture
async def sample_category(test_session) -> SportCategory:
    """Men's College Basketball."""
    sport = Sport(id=1, name="Basketball")
    category = SportCategory(
        id=1,
        sport=sport,
        division=SportDivision.men,
        levels=SportLevel.college,
    )
    test_session.add_all([sport, category])
    await test_session.commit()
    return category


@pytest.fixture
async def sample_teams(test_session) -> list[SchoolTeam]:
    """Four school teams, ids 11-14."""
    schools = [
        School(id=1, name="University of San Carlos", abbreviation="USC"),
        School(id=2, name="University of Cebu", abbreviation="UC"),
        School(id=3, name="Southwestern University", abbreviation="SWU"),
        School(id=4, name="Cebu Institute of Technology", abbreviation="CIT"),
    ]
    teams = [
        SchoolTeam(id=11, name="USC Warriors", school=schools[0]),
        SchoolTeam(id=12, name="UC Webmasters", school=schools[1]),
        SchoolTeam(id=13, name="SWU Cobras", school=schools[2]),
        SchoolTeam(id=14, name="CIT Wildcats", school=schools[3]),
    ]
    test_session.add_all(schools + teams)
    await test_session.commit()
    return teams


@pytest.fixture
async def sample_stages(test_session, sample_season, sample_category) -> dict[str, CompetitionStage]:
    """One stage of each kind in the sample season and category."""
    stages = {
        "group_stage": CompetitionStage(
            id=1, name="Eliminations", competition_stage=CompetitionStageKind.group_stage, order_index=0,
        ),
        "playins": CompetitionStage(
            id=2, name="Play-ins", competition_stage=CompetitionStageKind.playins, order_index=1,
        ),
        "playoffs": CompetitionStage(
            id=3, name="Playoffs", competition_stage=CompetitionStageKind.playoffs, order_index=2,
        ),
        "finals": CompetitionStage(
            id=4, name="Finals", competition_stage=CompetitionStageKind.finals, order_index=3,
        ),
    }
    for stage in stages.values():
        stage.season = sample_season
        stage.sport_category = sample_category
    test_session.add_all(stages.values())
    await test_session.commit()
    return stages


@pytest.fixture
def create_match(test_session, sample_teams):
    """Persist a two-team match with its games; returns an async factory."""
    teams = {team.id: team for team in sample_teams}

    async def _create(
        stage: CompetitionStage,
        team_ids=(11, 12),
        games=(),
        *,
        best_of: int = 1,
        status: MatchStatus = MatchStatus.completed,
        match_scores=(None, None),
        **kwargs,
    ) -> Match:
        participants = [
            MatchParticipant(team=teams[team_id], match_score=score)
            for team_id, score in zip(team_ids, match_scores)
        ]
        default_name = " vs ".join(teams[team_id].school.abbreviation for team_id in team_ids)
        match = Match(
            stage=stage,
            name=kwargs.pop("name", default_name),
            venue=kwargs.pop("venue", "Cebu Coliseum"),
            best_of=best_of,
            status=status,
            participants=participants,
            **kwargs,
        )
        for number, (first, second) in enumerate(games, start=1):
            match.games.append(
                Game(
                    game_number=number,
                    scores=[
                        GameScore(match_participant=participants[0], score=first),
                        GameScore(match_participant=participants[1], score=second),
                    ],
                )
            )
        test_session.add(match)
        await test_session.commit()
        return match

    return _create
