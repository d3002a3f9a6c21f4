"""
Standings Router
================

The league table for a season.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db
from app.schemas import SeasonBrief, StandingsResponse
from app.services import (
    NoActiveSeasonError, NotFoundError, get_season_standings, standing_row
)

router = APIRouter(prefix="/standings", tags=["Standings"])


@router.get("", response_model=StandingsResponse)
async def get_standings(
    season_id: Optional[UUID] = Query(None, description="Season; defaults to the active season"),
    limit: Optional[int] = Query(None, ge=1, le=100, description="Return only the top N rows"),
    db: AsyncSession = Depends(get_db)
) -> StandingsResponse:
    """
    Ranked league table.

    Ordering: points, goal difference, goals for, goals against (fewer
    first), head-to-head, fair-play points (fewer first), team name.
    Only completed matches with both scores count; `excluded_matches`
    reports how many of the season's matches were left out.
    """
    try:
        table = await get_season_standings(db, season_id)
    except (NotFoundError, NoActiveSeasonError) as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    rows = [standing_row(s, table.teams.get(s.team.id)) for s in table.standings]
    if limit:
        rows = rows[:limit]

    return StandingsResponse(
        season=SeasonBrief.model_validate(table.season),
        rows=rows,
        excluded_matches=table.excluded_matches,
    )
