"""
Seasons Router
==============

Season listing and the active season.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db, get_active_season
from app.models import Season
from app.schemas import SeasonRead

router = APIRouter(prefix="/seasons", tags=["Seasons"])


@router.get("", response_model=List[SeasonRead])
async def list_seasons(db: AsyncSession = Depends(get_db)) -> List[SeasonRead]:
    """All seasons, most recent first."""
    result = await db.execute(select(Season).order_by(Season.start_date.desc()))
    return [SeasonRead.model_validate(s) for s in result.scalars().all()]


@router.get("/active", response_model=SeasonRead)
async def get_current_season(season: Season = Depends(get_active_season)) -> SeasonRead:
    """The active season. 404 when none is flagged active."""
    return SeasonRead.model_validate(season)
