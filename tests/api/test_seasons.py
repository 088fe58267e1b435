import pytest
from datetime import date
from httpx import AsyncClient

from app.models import CompetitionStage, CompetitionStageKind, Season


@pytest.mark.asyncio
class TestSeasonsAPI:
    """Tests for /api/v1/seasons endpoints."""

    async def test_get_seasons_empty(self, client: AsyncClient):
        response = await client.get("/api/v1/seasons")
        assert response.status_code == 200
        data = response.json()
        assert data["items"] == []
        assert data["total"] == 0

    async def test_get_seasons_marks_current(self, client: AsyncClient, test_session, sample_season):
        test_session.add(Season(id=4, start_at=date(2019, 6, 1), end_at=date(2020, 3, 31)))
        await test_session.commit()

        response = await client.get("/api/v1/seasons")
        assert response.status_code == 200
        items = response.json()["items"]
        assert [s["id"] for s in items] == [5, 4]
        assert items[0]["is_current"] is True
        assert items[1]["is_current"] is False
        assert items[1]["name"] == "2019-2020"

    async def test_get_current_season(self, client: AsyncClient, sample_season):
        response = await client.get("/api/v1/seasons/current")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == 5
        assert data["name"] == f"{sample_season.start_at.year}-{sample_season.end_at.year}"

    async def test_current_season_falls_back_to_latest(self, client: AsyncClient, test_session):
        test_session.add_all([
            Season(id=1, start_at=date(2018, 6, 1), end_at=date(2019, 3, 31)),
            Season(id=2, start_at=date(2019, 6, 1), end_at=date(2020, 3, 31)),
        ])
        await test_session.commit()

        response = await client.get("/api/v1/seasons/current")
        assert response.status_code == 200
        assert response.json()["id"] == 2

    async def test_current_season_not_found(self, client: AsyncClient):
        response = await client.get("/api/v1/seasons/current")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "season_not_found"

    async def test_get_season_sports(self, client: AsyncClient, sample_stages):
        response = await client.get("/api/v1/seasons/5/sports")
        assert response.status_code == 200
        data = response.json()
        assert data["items"] == [{"id": 1, "name": "Basketball"}]

    async def test_get_sport_categories(self, client: AsyncClient, sample_stages):
        response = await client.get("/api/v1/seasons/5/sports/1/categories")
        assert response.status_code == 200
        items = response.json()["items"]
        assert len(items) == 1
        assert items[0]["display_name"] == "Men's College"
        assert items[0]["division"] == "men"

    async def test_sports_for_unknown_season(self, client: AsyncClient):
        response = await client.get("/api/v1/seasons/999/sports")
        assert response.status_code == 404


@pytest.mark.asyncio
class TestStandingsPageAPI:
    """Tests for /api/v1/standings."""

    async def test_defaults_to_first_stage(self, client: AsyncClient, sample_stages, create_match):
        await create_match(sample_stages["group_stage"], (11, 12), [(21, 10)])

        response = await client.get(
            "/api/v1/standings", params={"sport_id": 1, "sport_category_id": 1}
        )
        assert response.status_code == 200
        data = response.json()
        navigation = data["navigation"]
        assert navigation["season"]["id"] == 5
        assert navigation["sport"]["name"] == "Basketball"
        assert navigation["category"]["display_name"] == "Men's College"
        assert [s["competition_stage"] for s in navigation["stages"]] == [
            "group_stage", "playins", "playoffs", "finals",
        ]
        assert data["standings"]["view_type"] == "group_stage"
        assert data["standings"]["groups"][0]["teams"][0]["team_id"] == 11

    async def test_selected_stage(self, client: AsyncClient, sample_stages):
        response = await client.get(
            "/api/v1/standings",
            params={"season_id": 5, "sport_id": 1, "sport_category_id": 1, "stage_id": 4},
        )
        assert response.status_code == 200
        standings = response.json()["standings"]
        assert standings["view_type"] == "bracket"
        assert standings["stage_name"] == "Finals"

    async def test_stage_from_other_category(self, client: AsyncClient, sample_stages):
        response = await client.get(
            "/api/v1/standings",
            params={"season_id": 5, "sport_id": 1, "sport_category_id": 1, "stage_id": 99},
        )
        assert response.status_code == 404

    async def test_no_stages(self, client: AsyncClient, sample_stages):
        response = await client.get(
            "/api/v1/standings",
            params={"season_id": 5, "sport_id": 2, "sport_category_id": 1},
        )
        assert response.status_code == 404
        assert response.json()["detail"]["detail"] == "No stages found for the specified filters."

    async def test_equal_order_index_uses_stage_kind(
        self, client: AsyncClient, test_session, sample_category, sample_season
    ):
        test_session.add_all([
            CompetitionStage(id=7, season_id=5, sport_category_id=1, name="Finals",
                             competition_stage=CompetitionStageKind.finals, order_index=0),
            CompetitionStage(id=8, season_id=5, sport_category_id=1, name="Eliminations",
                             competition_stage=CompetitionStageKind.group_stage, order_index=0),
        ])
        await test_session.commit()

        response = await client.get(
            "/api/v1/standings", params={"sport_id": 1, "sport_category_id": 1}
        )
        assert response.status_code == 200
        assert [s["id"] for s in response.json()["navigation"]["stages"]] == [8, 7]
