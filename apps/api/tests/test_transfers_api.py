"""
Tests for Transfer History Endpoints
====================================

Tests for:
- GET /api/v1/transfers
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_list_transfers(client: AsyncClient, seeded_db):
    response = await client.get("/api/v1/transfers")
    assert response.status_code == 200

    data = response.json()
    assert len(data) == 1
    row = data[0]
    assert row["player_name"] == "Ana Costa"
    assert row["from_team_name"] is None
    assert row["to_team_name"] == "Harbour Rovers"
    assert row["season_name"] == "2025-26"
    assert row["transfer_type"] == "registration"
    assert row["direction"] == "incoming"


@pytest.mark.asyncio
async def test_filter_by_team(client: AsyncClient, seeded_db):
    harbour = seeded_db.test_data["teams"]["harbour"]
    millbrook = seeded_db.test_data["teams"]["millbrook"]

    response = await client.get("/api/v1/transfers", params={"team_id": str(harbour)})
    assert len(response.json()) == 1

    response = await client.get("/api/v1/transfers", params={"team_id": str(millbrook)})
    assert response.json() == []


@pytest.mark.asyncio
async def test_filter_free_agents_and_all(client: AsyncClient, seeded_db):
    response = await client.get("/api/v1/transfers", params={"team_id": "free-agents"})
    assert len(response.json()) == 1

    response = await client.get("/api/v1/transfers", params={"team_id": "all"})
    assert len(response.json()) == 1


@pytest.mark.asyncio
async def test_filter_by_player(client: AsyncClient, seeded_db):
    response = await client.get(
        "/api/v1/transfers", params={"player_id": str(seeded_db.test_data["players"]["ben"])}
    )
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_invalid_team_filter(client: AsyncClient, seeded_db):
    response = await client.get("/api/v1/transfers", params={"team_id": "not-a-team"})
    assert response.status_code == 422
