"""
Tests for Season and Standings Endpoints
========================================

Tests for:
- GET /api/v1/seasons
- GET /api/v1/seasons/active
- GET /api/v1/standings
"""

import pytest
from httpx import AsyncClient
from uuid import uuid4


@pytest.mark.asyncio
async def test_list_seasons(client: AsyncClient, seeded_db):
    response = await client.get("/api/v1/seasons")
    assert response.status_code == 200

    data = response.json()
    assert [s["name"] for s in data] == ["2025-26", "2024-25"]


@pytest.mark.asyncio
async def test_active_season(client: AsyncClient, seeded_db):
    response = await client.get("/api/v1/seasons/active")
    assert response.status_code == 200

    data = response.json()
    assert data["id"] == str(seeded_db.test_data["seasons"]["active"])
    assert data["is_active"] is True
    assert data["end_date"] == "2026-05-31"


@pytest.mark.asyncio
async def test_no_active_season(client: AsyncClient):
    response = await client.get("/api/v1/seasons/active")
    assert response.status_code == 404

    response = await client.get("/api/v1/standings")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_standings_for_active_season(client: AsyncClient, seeded_db):
    """Test the ranked table and its tie-breaks."""
    response = await client.get("/api/v1/standings")
    assert response.status_code == 200

    data = response.json()
    assert data["season"]["name"] == "2025-26"

    # The scheduled match and the one without a score are left out
    assert data["excluded_matches"] == 2

    rows = data["rows"]
    assert [r["team_name"] for r in rows] == ["Harbour Rovers", "Northgate United", "Millbrook Athletic"]
    assert [r["position"] for r in rows] == [1, 2, 3]
    assert [r["points"] for r in rows] == [3, 1, 1]

    harbour = rows[0]
    assert harbour["matches_played"] == 1
    assert harbour["goals_for"] == 2
    assert harbour["goal_difference"] == 2

    # Overturned records do not count
    assert rows[2]["fair_play_points"] == 5


@pytest.mark.asyncio
async def test_standings_limit(client: AsyncClient, seeded_db):
    response = await client.get("/api/v1/standings", params={"limit": 1})
    assert response.status_code == 200
    assert len(response.json()["rows"]) == 1


@pytest.mark.asyncio
async def test_standings_for_explicit_season(client: AsyncClient, seeded_db):
    """The closed season has no teams registered."""
    season_id = seeded_db.test_data["seasons"]["previous"]
    response = await client.get("/api/v1/standings", params={"season_id": str(season_id)})
    assert response.status_code == 200

    data = response.json()
    assert data["season"]["is_active"] is False
    assert data["rows"] == []


@pytest.mark.asyncio
async def test_standings_unknown_season(client: AsyncClient, seeded_db):
    response = await client.get("/api/v1/standings", params={"season_id": str(uuid4())})
    assert response.status_code == 404
