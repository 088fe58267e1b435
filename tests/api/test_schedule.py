import pytest
from datetime import timedelta
from httpx import AsyncClient

from app.models import MatchStatus
from app.utils.timestamps import utcnow


@pytest.fixture
async def upcoming(sample_stages, create_match):
    now = utcnow()
    stage = sample_stages["group_stage"]
    matches = []
    for hours in (-30, -3, 3, 30, 54):
        matches.append(
            await create_match(
                stage,
                status=MatchStatus.scheduled if hours > 0 else MatchStatus.completed,
                match_scores=(None, None) if hours > 0 else (80, 75),
                scheduled_at=now + timedelta(hours=hours),
            )
        )
    return matches


@pytest.mark.asyncio
class TestScheduleAPI:
    """Tests for /api/v1/schedule endpoints."""

    async def test_empty_season(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/schedule", params={"direction": "future", "limit": 20, "season_id": 5}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["matches"] == []
        assert data["has_next_page"] is False
        assert data["has_previous_page"] is False

    async def test_future_then_next_page(self, client: AsyncClient, upcoming):
        response = await client.get("/api/v1/schedule", params={"limit": 2})
        assert response.status_code == 200
        data = response.json()
        assert [m["id"] for m in data["matches"]] == [upcoming[2].id, upcoming[3].id]
        assert data["has_next_page"] is True
        assert data["has_previous_page"] is True
        assert data["total_count"] == 5

        response = await client.get(
            "/api/v1/schedule", params={"limit": 2, "cursor": data["next_cursor"]}
        )
        data = response.json()
        assert [m["id"] for m in data["matches"]] == [upcoming[4].id]
        assert data["has_next_page"] is False
        assert data["next_cursor"] is None

    async def test_past_direction(self, client: AsyncClient, upcoming):
        response = await client.get("/api/v1/schedule", params={"direction": "past"})
        assert response.status_code == 200
        data = response.json()
        assert [m["id"] for m in data["matches"]] == [upcoming[0].id, upcoming[1].id]
        assert data["matches"][0]["participants"][0]["match_score"] == 80
        assert data["has_previous_page"] is False

    async def test_filter_by_stage(self, client: AsyncClient, upcoming):
        response = await client.get("/api/v1/schedule", params={"stage_id": 3})
        assert response.status_code == 200
        assert response.json()["total_count"] == 0

    async def test_invalid_cursor(self, client: AsyncClient):
        response = await client.get("/api/v1/schedule", params={"cursor": "%%%"})
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "invalid_cursor"

    async def test_limit_validation(self, client: AsyncClient):
        response = await client.get("/api/v1/schedule", params={"limit": 0})
        assert response.status_code == 422

    async def test_by_date(self, client: AsyncClient, upcoming):
        response = await client.get("/api/v1/schedule/by-date")
        assert response.status_code == 200
        data = response.json()
        assert data["total_matches"] == 5
        dates = [group["date"] for group in data["groups"]]
        assert dates == sorted(dates)
        ids = [m["id"] for group in data["groups"] for m in group["matches"]]
        assert ids == [m.id for m in upcoming]
