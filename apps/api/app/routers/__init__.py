"""
LeagueHub API Routers
=====================

All API routers for the LeagueHub API.
"""

from app.routers.health import router as health_router
from app.routers.seasons import router as seasons_router
from app.routers.standings import router as standings_router
from app.routers.teams import router as teams_router
from app.routers.players import router as players_router
from app.routers.transfers import router as transfers_router
from app.routers.admin import router as admin_router

__all__ = [
    "health_router",
    "seasons_router",
    "standings_router",
    "teams_router",
    "players_router",
    "transfers_router",
    "admin_router",
]
