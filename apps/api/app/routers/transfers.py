"""
Transfers Router
================

Public transfer history.
"""

from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db
from app.schemas import TransferRead
from app.services import FREE_AGENTS, list_transfers

router = APIRouter(prefix="/transfers", tags=["Transfers"])


def _parse_team_filter(team_id: Optional[str]):
    if team_id is None or team_id == "all":
        return None
    if team_id == FREE_AGENTS:
        return FREE_AGENTS
    try:
        return UUID(team_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"team_id must be a UUID, 'all' or '{FREE_AGENTS}'"
        )


@router.get("", response_model=List[TransferRead])
async def get_transfers(
    season_id: Optional[UUID] = Query(None, description="Filter by season"),
    player_id: Optional[UUID] = Query(None, description="Filter by player"),
    team_id: Optional[str] = Query(None, description="Team UUID (either side of the move) or 'free-agents'"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: AsyncSession = Depends(get_db)
) -> List[TransferRead]:
    """
    Transfer history, newest first.

    Each row carries a readable `description` and a `direction`:
    - `incoming` - joined a team from free agency
    - `outgoing` - released to free agency
    - `transfer` - moved between two teams (loans included)
    - `registration` - neither side set

    **Examples:**
    - `/transfers?team_id={id}` - Moves in and out of a team
    - `/transfers?team_id=free-agents` - Signings from and releases to free agency
    """
    return await list_transfers(
        db,
        season_id=season_id,
        player_id=player_id,
        team_id=_parse_team_filter(team_id),
        limit=limit,
    )
