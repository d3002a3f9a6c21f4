"""
Tests for Team Endpoints
========================

Tests for:
- GET /api/v1/teams
- GET /api/v1/teams/{team_id}
"""

import pytest
from httpx import AsyncClient
from uuid import uuid4


@pytest.mark.asyncio
async def test_get_team_not_found(client: AsyncClient):
    response = await client.get(f"/api/v1/teams/{uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_teams(client: AsyncClient, seeded_db):
    season_id = seeded_db.test_data["seasons"]["active"]
    response = await client.get("/api/v1/teams", params={"season_id": str(season_id)})
    assert response.status_code == 200

    assert [t["name"] for t in response.json()] == [
        "Harbour Rovers", "Millbrook Athletic", "Northgate United"
    ]


@pytest.mark.asyncio
async def test_get_team_detail(client: AsyncClient, seeded_db):
    """Team detail carries squad, table row and transfer activity."""
    team_id = seeded_db.test_data["teams"]["harbour"]
    response = await client.get(f"/api/v1/teams/{team_id}")
    assert response.status_code == 200

    data = response.json()
    assert data["name"] == "Harbour Rovers"
    assert data["manager"] == "Ines Calder"
    assert data["season"]["name"] == "2025-26"

    assert data["squad_count"] == 1
    assert data["squad"][0]["name"] == "Ana Costa"

    # Same row the standings endpoint shows
    assert data["standing"]["position"] == 1
    assert data["standing"]["points"] == 3

    assert len(data["recent_transfers_in"]) == 1
    assert data["recent_transfers_out"] == []


@pytest.mark.asyncio
async def test_team_standing_matches_standings(client: AsyncClient, seeded_db):
    table = (await client.get("/api/v1/standings")).json()["rows"]

    for row in table:
        detail = (await client.get(f"/api/v1/teams/{row['team_id']}")).json()
        assert detail["standing"] == row
