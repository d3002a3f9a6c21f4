"""
Tests for Health Endpoints
==========================

Tests for:
- GET /health
- GET /ready
- GET /live
- GET /
- Rate limiting middleware
"""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from app import middleware
from app.middleware import InMemoryRateLimiter, RateLimitMiddleware


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test health check endpoint."""
    response = await client.get("/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "healthy"
    assert "version" in data
    assert "timestamp" in data
    assert "environment" in data


@pytest.mark.asyncio
async def test_ready_without_active_season(client: AsyncClient):
    """Ready only needs the database; the missing season is reported."""
    response = await client.get("/ready")
    assert response.status_code == 200

    data = response.json()
    assert data["ready"] is True
    assert data["checks"]["database"] is True
    assert data["checks"]["active_season"] is False


@pytest.mark.asyncio
async def test_ready_with_active_season(client: AsyncClient, seeded_db):
    response = await client.get("/ready")
    assert response.status_code == 200
    assert response.json()["checks"]["active_season"] is True


@pytest.mark.asyncio
async def test_live_check(client: AsyncClient):
    """Test liveness probe endpoint."""
    response = await client.get("/live")
    assert response.status_code == 200
    assert response.json()["alive"] is True


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient):
    """Test root endpoint returns API info."""
    response = await client.get("/")
    assert response.status_code == 200

    data = response.json()
    assert data["name"] == "LeagueHub API"
    assert "version" in data
    assert "docs" in data
    assert "standings" in data["api"]


def test_rate_limiter_window():
    limiter = InMemoryRateLimiter(requests_per_window=2, burst_limit=5, window_seconds=60)

    assert limiter.is_allowed("client") == (True, 1)
    assert limiter.is_allowed("client") == (True, 0)
    assert limiter.is_allowed("client") == (False, 0)

    # Other clients have their own window
    assert limiter.is_allowed("other")[0] is True


def test_rate_limiter_forgets_idle_clients(monkeypatch):
    clock = [1000.0]
    monkeypatch.setattr(middleware.time, "time", lambda: clock[0])
    limiter = InMemoryRateLimiter(requests_per_window=5, burst_limit=10, window_seconds=60)

    limiter.is_allowed("idle")
    clock[0] += 30
    limiter.is_allowed("busy")
    assert set(limiter._requests) == {"idle", "busy"}

    # Two windows later the idle client is dropped on the next request
    clock[0] += 100
    limiter.is_allowed("busy")
    assert set(limiter._requests) == {"busy"}


@pytest.mark.asyncio
async def test_rate_limit_middleware_returns_429():
    limited = FastAPI()
    limited.add_middleware(RateLimitMiddleware, requests_per_window=1, burst_limit=1, window_seconds=30)

    @limited.get("/ping")
    async def ping():
        return {"pong": True}

    transport = ASGITransport(app=limited)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        first = await ac.get("/ping")
        second = await ac.get("/ping")

    assert first.status_code == 200
    assert first.headers["X-RateLimit-Limit"] == "1"
    assert second.status_code == 429
    assert second.headers["Retry-After"] == "30"
    assert second.json()["detail"]["error"] == "rate_limit_exceeded"
