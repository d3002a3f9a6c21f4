"""
Admin Router
============

Admin-only endpoints for data management.
Protected by API key authentication.

Contract and loan endpoints go through the transfer lifecycle rules:
a rejected move answers 400 with the rejection reason, a move onto the
player's current team is a no-op, and a concurrent change to the same
player answers 409.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db, get_admin_api_key, get_active_season
from app.models import Season
from app.schemas import (
    AdminResponse, BackfillResponse, ContractSignRequest, FairPlayCreate,
    FairPlayRead, FairPlayUpdate, LoanRequest, LoanReturnRead, MatchRead,
    MatchResultRequest, PlayerBrief, RejectionDetail, TransferOutcomeResponse
)
from app import services
from app.services import ConcurrentModificationError, ContractChange, NoActiveSeasonError, NotFoundError
from app.transfers import TransferNoOp, TransferRejection

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(get_admin_api_key)]
)

logger = logging.getLogger(__name__)


def _not_found(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=str(e)
    )


def _conflict(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"Player was modified concurrently, retry the request: {e}"
    )


def _outcome_response(change: ContractChange, success_message: str) -> TransferOutcomeResponse:
    outcome = change.outcome

    if isinstance(outcome, TransferRejection):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=RejectionDetail(
                reason=outcome.reason.value,
                message=outcome.message,
                locked_until=outcome.locked_until,
            ).model_dump(mode="json")
        )

    if isinstance(outcome, TransferNoOp):
        return TransferOutcomeResponse(
            success=True,
            outcome="no_op",
            message=outcome.message,
            player=PlayerBrief.model_validate(change.player),
            transfer=None,
        )

    return TransferOutcomeResponse(
        success=True,
        outcome="loaned" if change.loan_return is not None else "transferred",
        message=success_message,
        player=PlayerBrief.model_validate(change.player),
        transfer=services.transfer_read(change.transfer),
        loan_return=LoanReturnRead.model_validate(change.loan_return) if change.loan_return else None,
    )


# =============================================================================
# CONTRACTS & LOANS
# =============================================================================

@router.post("/players/{player_id}/contract", response_model=TransferOutcomeResponse)
async def sign_player_contract(
    player_id: UUID,
    request: ContractSignRequest,
    season: Season = Depends(get_active_season),
    db: AsyncSession = Depends(get_db)
) -> TransferOutcomeResponse:
    """
    Sign a player to a team, or move them to a new one.

    **Requires API key authentication** via `X-API-Key` header.

    The contract is bound to the active season. A seasonal contract locks
    the player until that season ends.

    **Responses:**
    - `200` with `transfer` - the move was recorded
    - `200` with `transfer: null` - the player is already at that team
    - `400` - the move is not allowed (`reason`, `message`, `locked_until`)
    - `409` - the player changed concurrently
    """
    try:
        change = await services.sign_contract(
            db,
            player_id,
            request.team_id,
            season,
            contract_type=request.contract_type,
            start_date=request.start_date,
            end_date=request.end_date,
            contract_value=request.contract_value,
            fee=request.fee,
            notes=request.notes,
        )
    except NotFoundError as e:
        raise _not_found(e)
    except ConcurrentModificationError as e:
        raise _conflict(e)

    return _outcome_response(change, "Contract signed")


@router.delete("/players/{player_id}/contract", response_model=TransferOutcomeResponse)
async def release_player_contract(
    player_id: UUID,
    notes: Optional[str] = Query(None, max_length=500),
    season: Season = Depends(get_active_season),
    db: AsyncSession = Depends(get_db)
) -> TransferOutcomeResponse:
    """
    Release a player to free agency.

    **Requires API key authentication** via `X-API-Key` header.

    This is the administrative release: it is allowed even while a
    seasonal contract is locked. Pending loan returns are cancelled.
    """
    try:
        change = await services.release_player(db, player_id, season, notes=notes)
    except NotFoundError as e:
        raise _not_found(e)
    except ConcurrentModificationError as e:
        raise _conflict(e)

    return _outcome_response(change, "Player released to free agency")


@router.post("/players/{player_id}/loan", response_model=TransferOutcomeResponse)
async def loan_player(
    player_id: UUID,
    request: LoanRequest,
    season: Season = Depends(get_active_season),
    db: AsyncSession = Depends(get_db)
) -> TransferOutcomeResponse:
    """
    Loan a player from their current team.

    **Requires API key authentication** via `X-API-Key` header.

    Loans ignore contract status. The return to the parent team is
    scheduled for `return_date` and carried out by the worker
    (`loans:return`).
    """
    try:
        change = await services.loan_player(
            db,
            player_id,
            request.loan_team_id,
            season,
            return_date=request.return_date,
            fee=request.fee,
            notes=request.notes,
        )
    except NotFoundError as e:
        raise _not_found(e)
    except ConcurrentModificationError as e:
        raise _conflict(e)

    return _outcome_response(change, f"Player loaned until {request.return_date.isoformat()}")


@router.post("/transfers/populate", response_model=BackfillResponse)
async def populate_transfers(
    season: Season = Depends(get_active_season),
    db: AsyncSession = Depends(get_db)
) -> BackfillResponse:
    """
    Create registration records for players who joined a team before
    transfer history was kept.

    **Requires API key authentication** via `X-API-Key` header.

    Safe to run repeatedly: players with any history are skipped.
    """
    result = await services.populate_registrations(db, season)
    return BackfillResponse(
        success=True,
        season_id=season.id,
        created=result.created,
        skipped_free_agents=result.skipped_free_agents,
        skipped_with_history=result.skipped_with_history,
    )


# =============================================================================
# MATCHES
# =============================================================================

@router.post("/matches/{match_id}/result", response_model=MatchRead)
async def record_match_result(
    match_id: UUID,
    request: MatchResultRequest,
    db: AsyncSession = Depends(get_db)
) -> MatchRead:
    """
    Record a final score and mark the match completed.

    **Requires API key authentication** via `X-API-Key` header.
    """
    try:
        match = await services.record_match_result(
            db, match_id, request.home_score, request.away_score, request.notes
        )
    except NotFoundError as e:
        raise _not_found(e)

    logger.info(f"Match {match_id} completed {request.home_score}-{request.away_score}")
    return MatchRead.model_validate(match)


# =============================================================================
# FAIR PLAY
# =============================================================================

@router.post(
    "/fairplay",
    response_model=FairPlayRead,
    status_code=status.HTTP_201_CREATED
)
async def create_fair_play_record(
    request: FairPlayCreate,
    db: AsyncSession = Depends(get_db)
) -> FairPlayRead:
    """
    Record a disciplinary action against a team.

    **Requires API key authentication** via `X-API-Key` header.

    **Example request:**
    ```json
    {
        "team_id": "uuid",
        "player_id": "uuid",
        "action_type": "violent_conduct",
        "points": 10,
        "description": "Red card for striking an opponent"
    }
    ```
    """
    try:
        season = await services.resolve_season(db, request.season_id)
        record = await services.create_fair_play_record(db, request, season)
    except (NotFoundError, NoActiveSeasonError) as e:
        raise _not_found(e)

    return FairPlayRead.model_validate(record)


@router.patch("/fairplay/{record_id}", response_model=FairPlayRead)
async def update_fair_play_record(
    record_id: UUID,
    request: FairPlayUpdate,
    db: AsyncSession = Depends(get_db)
) -> FairPlayRead:
    """
    Update a record's status, points or appeal notes.

    **Requires API key authentication** via `X-API-Key` header.

    Lowering points keeps the first original value in `original_points`.
    Appealed and overturned records stop counting toward standings;
    reduced records count at their new points.
    """
    try:
        record = await services.update_fair_play_record(db, record_id, request)
    except NotFoundError as e:
        raise _not_found(e)

    return FairPlayRead.model_validate(record)


@router.get("/status", response_model=AdminResponse)
async def admin_status(
    season: Season = Depends(get_active_season),
    db: AsyncSession = Depends(get_db),
) -> AdminResponse:
    """Confirm the API key and summarize what is stored."""
    return AdminResponse(
        success=True,
        message="Admin access confirmed",
        details={
            "active_season_id": str(season.id),
            "active_season": season.name,
            "counts": await services.count_rows(db),
        },
    )
