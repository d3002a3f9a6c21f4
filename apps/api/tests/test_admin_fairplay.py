"""
Tests for Admin Fair Play and Match Endpoints
=============================================

Tests for:
- POST /api/v1/admin/fairplay
- PATCH /api/v1/admin/fairplay/{record_id}
- POST /api/v1/admin/matches/{match_id}/result
"""

import pytest
from httpx import AsyncClient
from uuid import uuid4


async def table_row(client: AsyncClient, team_name: str) -> dict:
    rows = (await client.get("/api/v1/standings")).json()["rows"]
    return next(r for r in rows if r["team_name"] == team_name)


@pytest.mark.asyncio
async def test_create_fair_play_record(client: AsyncClient, seeded_db, admin_headers):
    team_id = seeded_db.test_data["teams"]["northgate"]
    player_id = seeded_db.test_data["players"]["eva"]

    response = await client.post(
        "/api/v1/admin/fairplay",
        json={
            "team_id": str(team_id),
            "player_id": str(player_id),
            "action_type": "violent_conduct",
            "points": 10,
            "description": "Red card for striking an opponent"
        },
        headers=admin_headers
    )
    assert response.status_code == 201

    data = response.json()
    assert data["status"] == "active"
    assert data["season_id"] == str(seeded_db.test_data["seasons"]["active"])
    assert data["original_points"] is None

    row = await table_row(client, "Northgate United")
    assert row["fair_play_points"] == 10


@pytest.mark.asyncio
async def test_create_team_level_penalty(client: AsyncClient, seeded_db, admin_headers):
    response = await client.post(
        "/api/v1/admin/fairplay",
        json={
            "team_id": str(seeded_db.test_data["teams"]["harbour"]),
            "action_type": "crowd_trouble",
            "description": "Pitch invasion"
        },
        headers=admin_headers
    )
    assert response.status_code == 201
    assert response.json()["player_id"] is None
    assert response.json()["points"] == 5


@pytest.mark.asyncio
async def test_create_fair_play_validation(client: AsyncClient, seeded_db, admin_headers):
    team_id = seeded_db.test_data["teams"]["harbour"]

    response = await client.post(
        "/api/v1/admin/fairplay",
        json={"team_id": str(team_id), "action_type": "other", "points": 0, "description": "x"},
        headers=admin_headers
    )
    assert response.status_code == 422

    response = await client.post(
        "/api/v1/admin/fairplay",
        json={"team_id": str(uuid4()), "action_type": "other", "description": "x"},
        headers=admin_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reduce_keeps_original_points(client: AsyncClient, seeded_db, admin_headers):
    record_id = seeded_db.test_data["fair_play"]["booking"]

    response = await client.patch(
        f"/api/v1/admin/fairplay/{record_id}",
        json={"status": "reduced", "points": 2},
        headers=admin_headers
    )
    assert response.status_code == 200

    data = response.json()
    assert data["points"] == 2
    assert data["original_points"] == 5

    # A second reduction keeps the first original value
    response = await client.patch(
        f"/api/v1/admin/fairplay/{record_id}",
        json={"points": 1},
        headers=admin_headers
    )
    assert response.json()["original_points"] == 5

    # Reduced records still count at their new points
    row = await table_row(client, "Millbrook Athletic")
    assert row["fair_play_points"] == 1


@pytest.mark.asyncio
async def test_appeal_stops_counting(client: AsyncClient, seeded_db, admin_headers):
    record_id = seeded_db.test_data["fair_play"]["booking"]

    response = await client.patch(
        f"/api/v1/admin/fairplay/{record_id}",
        json={"status": "appealed", "appeal_notes": "Referee report disputed"},
        headers=admin_headers
    )
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "appealed"
    assert data["appeal_date"] is not None
    assert data["appeal_notes"] == "Referee report disputed"

    row = await table_row(client, "Millbrook Athletic")
    assert row["fair_play_points"] == 0


@pytest.mark.asyncio
async def test_update_unknown_record(client: AsyncClient, seeded_db, admin_headers):
    response = await client.patch(
        f"/api/v1/admin/fairplay/{uuid4()}",
        json={"status": "overturned"},
        headers=admin_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_record_match_result(client: AsyncClient, seeded_db, admin_headers):
    """A completed score feeds straight into the table."""
    match_id = seeded_db.test_data["matches"]["northgate_harbour"]

    response = await client.post(
        f"/api/v1/admin/matches/{match_id}/result",
        json={"home_score": 0, "away_score": 2},
        headers=admin_headers
    )
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "completed"
    assert (data["home_score"], data["away_score"]) == (0, 2)

    standings = (await client.get("/api/v1/standings")).json()
    assert standings["excluded_matches"] == 1
    assert standings["rows"][0]["team_name"] == "Harbour Rovers"
    assert standings["rows"][0]["points"] == 6


@pytest.mark.asyncio
async def test_record_match_result_validation(client: AsyncClient, seeded_db, admin_headers):
    match_id = seeded_db.test_data["matches"]["northgate_harbour"]

    response = await client.post(
        f"/api/v1/admin/matches/{match_id}/result",
        json={"home_score": -1, "away_score": 2},
        headers=admin_headers
    )
    assert response.status_code == 422

    response = await client.post(
        f"/api/v1/admin/matches/{uuid4()}/result",
        json={"home_score": 1, "away_score": 2},
        headers=admin_headers
    )
    assert response.status_code == 404
