"""
Players Router
==============

Player-related endpoints including:
- Player listing by team and contract status
- Player detail with contract, transfer eligibility and history
"""

from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, HTTPException, status
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.dependencies import get_db
from app.domain import ContractStatus
from app.models import Player
from app.schemas import (
    PlayerBrief, PlayerDetail, TeamBrief, ContractRead, EligibilityRead,
    LoanReturnRead
)
from app.services import get_pending_loan_return, list_transfers
from app.snapshots import player_snapshot
from app.transfers import check_transfer_eligibility

router = APIRouter(prefix="/players", tags=["Players"])


@router.get("", response_model=List[PlayerBrief])
async def list_players(
    team_id: Optional[UUID] = Query(None, description="Filter by current team"),
    contract_status: Optional[ContractStatus] = Query(None, description="free_agent, normal or seasonal"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db)
) -> List[PlayerBrief]:
    """
    List players by name.

    **Examples:**
    - `/players?team_id={id}` - A team's current squad
    - `/players?contract_status=free_agent` - Players available to sign
    """
    conditions = []
    if team_id:
        conditions.append(Player.current_team_id == team_id)
    if contract_status:
        conditions.append(Player.contract_status == contract_status)

    stmt = select(Player).order_by(Player.name).offset(offset).limit(limit)
    if conditions:
        stmt = stmt.where(and_(*conditions))

    result = await db.execute(stmt)
    return [PlayerBrief.model_validate(p) for p in result.scalars().all()]


@router.get("/{player_id}", response_model=PlayerDetail)
async def get_player(
    player_id: UUID,
    db: AsyncSession = Depends(get_db)
) -> PlayerDetail:
    """
    Get detailed player information.

    Returns:
    - Basic player profile
    - Current team and contract
    - Whether the contract currently allows a transfer, and until when not
    - Transfer history, newest first
    - Pending loan return, if the player is out on loan
    """
    stmt = (
        select(Player)
        .options(
            selectinload(Player.current_team),
            selectinload(Player.contract_team),
            selectinload(Player.contract_season),
        )
        .where(Player.id == player_id)
    )
    result = await db.execute(stmt)
    player = result.scalar_one_or_none()

    if not player:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Player {player_id} not found"
        )

    contract = None
    if player.contract_team_id and player.contract_type:
        contract = ContractRead(
            team_id=player.contract_team_id,
            team_name=player.contract_team.name if player.contract_team else None,
            season_id=player.contract_season_id,
            season_name=player.contract_season.name if player.contract_season else None,
            contract_type=player.contract_type,
            start_date=player.contract_start,
            end_date=player.contract_end,
            contract_value=player.contract_value,
        )

    eligibility = check_transfer_eligibility(player_snapshot(player))

    transfers = await list_transfers(db, player_id=player.id)
    pending = await get_pending_loan_return(db, player.id)

    return PlayerDetail(
        id=player.id,
        name=player.name,
        position=player.position,
        jersey_number=player.jersey_number,
        current_team_id=player.current_team_id,
        contract_status=player.contract_status,
        id_card_number=player.id_card_number,
        status=player.status,
        version=player.version,
        created_at=player.created_at,
        current_team=TeamBrief.model_validate(player.current_team) if player.current_team else None,
        contract=contract,
        eligibility=EligibilityRead(
            eligible=eligibility.eligible,
            reason=eligibility.reason.value if eligibility.reason else None,
            message=eligibility.message,
            locked_until=eligibility.locked_until,
        ),
        transfers=transfers,
        pending_loan_return=LoanReturnRead.model_validate(pending) if pending else None,
    )
