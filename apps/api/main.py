"""
LeagueHub API
=============
League tables, squads and transfer history for a sports league.

Main FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from app.config import settings, configure_logging
from app.database import engine, check_database_connection
from app.middleware import setup_middleware
from app.routers import (
    health_router,
    seasons_router,
    standings_router,
    teams_router,
    players_router,
    transfers_router,
    admin_router,
)

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("LeagueHub API starting up...")
    await check_database_connection()
    logger.info("Database connection verified")
    yield
    logger.info("LeagueHub API shutting down...")
    await engine.dispose()


# OpenAPI tags metadata for better documentation
tags_metadata = [
    {
        "name": "Health",
        "description": "Health check and status endpoints",
    },
    {
        "name": "Seasons",
        "description": "Seasons and the active season",
    },
    {
        "name": "Standings",
        "description": "League table with tie-breaks",
    },
    {
        "name": "Teams",
        "description": "Team profiles, squads, and transfer activity",
    },
    {
        "name": "Players",
        "description": "Player profiles, contracts, and transfer eligibility",
    },
    {
        "name": "Transfers",
        "description": "Append-only transfer history",
    },
    {
        "name": "Admin",
        "description": "Admin-only endpoints (requires API key)",
    },
]


app = FastAPI(
    title="LeagueHub API",
    description="""
## League tables and transfer history

- **Standings**: one ranking for every surface - points, goal difference,
  goals for, goals against, head-to-head, fair-play points, name
- **Transfers**: every change of team is recorded once and never edited
- **Contracts**: seasonal contracts lock a player until the season ends

### Authentication

Public endpoints require no authentication.
Admin endpoints require `X-API-Key` header.
""",
    version=settings.api_version,
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=tags_metadata,
)

# CORS, rate limiting and request logging
setup_middleware(app)


# Include routers
# Health endpoints at root level
app.include_router(health_router)

# API v1 endpoints
app.include_router(seasons_router, prefix="/api/v1")
app.include_router(standings_router, prefix="/api/v1")
app.include_router(teams_router, prefix="/api/v1")
app.include_router(players_router, prefix="/api/v1")
app.include_router(transfers_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/", response_class=ORJSONResponse)
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "LeagueHub API",
        "version": settings.api_version,
        "docs": "/docs",
        "health": "/health",
        "api": {
            "seasons": "/api/v1/seasons",
            "standings": "/api/v1/standings?season_id=",
            "teams": "/api/v1/teams/{team_id}",
            "players": "/api/v1/players/{player_id}",
            "transfers": "/api/v1/transfers?team_id=",
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
