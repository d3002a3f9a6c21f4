"""
Teams Router
============

Team-related endpoints including:
- Team listing per season
- Team detail with squad and table position
- Transfer activity
"""

from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.dependencies import get_db
from app.models import Team, Player, Transfer
from app.schemas import TeamRead, TeamDetail, PlayerBrief, SeasonBrief
from app.services import (
    get_season_standings, standing_row, transfer_load_options, transfer_read
)

router = APIRouter(prefix="/teams", tags=["Teams"])


@router.get("", response_model=List[TeamRead])
async def list_teams(
    season_id: Optional[UUID] = Query(None, description="Only teams registered for this season"),
    db: AsyncSession = Depends(get_db)
) -> List[TeamRead]:
    """Teams ordered by name."""
    stmt = select(Team).order_by(Team.name)
    if season_id is not None:
        stmt = stmt.where(Team.season_id == season_id)
    result = await db.execute(stmt)
    return [TeamRead.model_validate(t) for t in result.scalars().all()]


@router.get("/{team_id}", response_model=TeamDetail)
async def get_team(
    team_id: UUID,
    db: AsyncSession = Depends(get_db)
) -> TeamDetail:
    """
    Get detailed team information.

    Returns:
    - Basic team profile and season
    - Current squad
    - The team's row in its season's standings
    - Recent transfers in/out
    """
    stmt = (
        select(Team)
        .options(selectinload(Team.season))
        .where(Team.id == team_id)
    )
    result = await db.execute(stmt)
    team = result.scalar_one_or_none()

    if not team:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Team {team_id} not found"
        )

    # Squad: players whose current team is this one (loanees included)
    squad_stmt = (
        select(Player)
        .where(Player.current_team_id == team_id)
        .order_by(Player.jersey_number, Player.name)
    )
    squad_result = await db.execute(squad_stmt)
    squad = [PlayerBrief.model_validate(p) for p in squad_result.scalars().all()]

    # Table position from the season's standings
    table = await get_season_standings(db, team.season_id)
    standing = None
    for s in table.standings:
        if s.team.id == team.id:
            standing = standing_row(s, team)
            break

    limit = settings.recent_transfers_limit
    transfer_options = transfer_load_options()

    transfers_in_result = await db.execute(
        select(Transfer)
        .options(*transfer_options)
        .where(Transfer.to_team_id == team_id)
        .order_by(Transfer.transfer_date.desc())
        .limit(limit)
    )
    recent_transfers_in = [transfer_read(t) for t in transfers_in_result.scalars().all()]

    transfers_out_result = await db.execute(
        select(Transfer)
        .options(*transfer_options)
        .where(Transfer.from_team_id == team_id)
        .order_by(Transfer.transfer_date.desc())
        .limit(limit)
    )
    recent_transfers_out = [transfer_read(t) for t in transfers_out_result.scalars().all()]

    return TeamDetail(
        id=team.id,
        name=team.name,
        logo_url=team.logo_url,
        season_id=team.season_id,
        home_color=team.home_color,
        away_color=team.away_color,
        manager=team.manager,
        founded_year=team.founded_year,
        is_active=team.is_active,
        created_at=team.created_at,
        season=SeasonBrief.model_validate(team.season) if team.season else None,
        squad=squad,
        squad_count=len(squad),
        standing=standing,
        recent_transfers_in=recent_transfers_in,
        recent_transfers_out=recent_transfers_out,
    )
