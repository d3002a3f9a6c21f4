"""
LeagueHub Business Logic Services
=================================

The persistence side of the two core components:
- Standings: the single code path that loads a season and ranks it
- Contracts and loans: read player, plan, write player + transfer atomically
- Registration backfill
- Match results and fair-play records

Players are loaded with SELECT ... FOR UPDATE and carry a version column,
so a write against a stale row fails with ConcurrentModificationError
instead of producing a second transfer from the same starting state.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Union
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from app.domain import ContractType, FairPlayStatus, LoanReturnStatus, MatchStatus
from app.models import FairPlayRecord, LoanReturn, Match, Player, Season, Team, Transfer
from app.schemas import FairPlayCreate, FairPlayUpdate, StandingRow, TransferRead
from app.snapshots import fair_play_entry, match_result, player_snapshot, season_ref, team_ref
from app.standings import TeamStanding, compute_standings, partition_matches
from app.transfers import (
    BackfillResult,
    LoanPlan,
    TransferDraft,
    TransferNoOp,
    TransferPlan,
    TransferRejection,
    describe_transfer,
    plan_loan,
    plan_registration_backfill,
    plan_transfer,
)

logger = logging.getLogger(__name__)


# =============================================================================
# ERRORS
# =============================================================================

class NotFoundError(Exception):
    """A referenced row does not exist."""


class NoActiveSeasonError(Exception):
    """No season is flagged active and none was requested explicitly."""


class ConcurrentModificationError(Exception):
    """The row changed between read and write."""


async def commit_changes(db: AsyncSession) -> None:
    """Commit, translating a stale versioned write into ConcurrentModificationError."""
    try:
        await db.commit()
    except StaleDataError as e:
        await db.rollback()
        raise ConcurrentModificationError(str(e)) from e
    except Exception:
        await db.rollback()
        raise


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# SEASONS
# =============================================================================

async def get_active_season(db: AsyncSession) -> Optional[Season]:
    """The active season. If several are flagged, the latest-starting wins."""
    stmt = (
        select(Season)
        .where(Season.is_active == True)
        .order_by(Season.start_date.desc())
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def resolve_season(db: AsyncSession, season_id: Optional[UUID] = None) -> Season:
    """The requested season, or the active one when no id is given."""
    if season_id is None:
        season = await get_active_season(db)
        if season is None:
            raise NoActiveSeasonError("No active season")
        return season

    season = await db.get(Season, season_id)
    if season is None:
        raise NotFoundError(f"Season {season_id} not found")
    return season


# =============================================================================
# STANDINGS SERVICE
# =============================================================================

@dataclass
class SeasonStandings:
    season: Season
    standings: List[TeamStanding]
    teams: Dict[UUID, Team]
    excluded_matches: int


async def get_season_standings(db: AsyncSession, season_id: Optional[UUID] = None) -> SeasonStandings:
    """
    Load a season's teams, matches and fair-play records and rank them.

    Every surface that shows a table position goes through here.
    """
    season = await resolve_season(db, season_id)

    teams_result = await db.execute(select(Team).where(Team.season_id == season.id))
    teams = list(teams_result.scalars().all())

    matches_result = await db.execute(select(Match).where(Match.season_id == season.id))
    matches = [match_result(m) for m in matches_result.scalars().all()]

    records_result = await db.execute(
        select(FairPlayRecord).where(FairPlayRecord.season_id == season.id)
    )
    records = [fair_play_entry(r) for r in records_result.scalars().all()]

    refs = [team_ref(t) for t in teams]
    _, excluded = partition_matches(refs, matches)
    standings = compute_standings(refs, matches, records)

    return SeasonStandings(
        season=season,
        standings=standings,
        teams={t.id: t for t in teams},
        excluded_matches=len(excluded),
    )


def standing_row(standing: TeamStanding, team: Optional[Team] = None) -> StandingRow:
    return StandingRow(
        position=standing.position,
        team_id=standing.team.id,
        team_name=standing.team.name,
        logo_url=team.logo_url if team else None,
        matches_played=standing.matches_played,
        wins=standing.wins,
        draws=standing.draws,
        losses=standing.losses,
        goals_for=standing.goals_for,
        goals_against=standing.goals_against,
        goal_difference=standing.goal_difference,
        fair_play_points=standing.fair_play_points,
        points=standing.points,
    )


# =============================================================================
# TRANSFER HISTORY
# =============================================================================

def transfer_load_options():
    return (
        selectinload(Transfer.from_team),
        selectinload(Transfer.to_team),
        selectinload(Transfer.season),
    )


def transfer_read(transfer: Transfer) -> TransferRead:
    """Requires from_team, to_team and season to be loaded."""
    from_name = transfer.from_team.name if transfer.from_team else None
    to_name = transfer.to_team.name if transfer.to_team else None
    description, direction = describe_transfer(transfer.player_name, from_name, to_name)
    return TransferRead(
        id=transfer.id,
        player_id=transfer.player_id,
        player_name=transfer.player_name,
        from_team_id=transfer.from_team_id,
        from_team_name=from_name,
        to_team_id=transfer.to_team_id,
        to_team_name=to_name,
        season_id=transfer.season_id,
        season_name=transfer.season.name if transfer.season else None,
        transfer_date=transfer.transfer_date,
        transfer_type=transfer.transfer_type,
        fee=transfer.fee,
        notes=transfer.notes or "",
        description=description,
        direction=direction,
    )


FREE_AGENTS = "free-agents"


async def list_transfers(
    db: AsyncSession,
    season_id: Optional[UUID] = None,
    player_id: Optional[UUID] = None,
    team_id: Union[UUID, str, None] = None,
    limit: Optional[int] = None,
) -> List[TransferRead]:
    """
    Transfer history, newest first.

    `team_id` matches either side of the move; the string "free-agents"
    selects moves from or to free agency.
    """
    conditions = []
    if season_id is not None:
        conditions.append(Transfer.season_id == season_id)
    if player_id is not None:
        conditions.append(Transfer.player_id == player_id)
    if team_id == FREE_AGENTS:
        conditions.append(or_(Transfer.from_team_id.is_(None), Transfer.to_team_id.is_(None)))
    elif team_id is not None:
        conditions.append(or_(Transfer.from_team_id == team_id, Transfer.to_team_id == team_id))

    stmt = (
        select(Transfer)
        .options(*transfer_load_options())
        .order_by(Transfer.transfer_date.desc(), Transfer.created_at.desc())
    )
    if conditions:
        stmt = stmt.where(and_(*conditions))
    if limit:
        stmt = stmt.limit(limit)

    result = await db.execute(stmt)
    return [transfer_read(t) for t in result.scalars().all()]


async def player_has_transfer_history(db: AsyncSession, player_id: UUID) -> bool:
    result = await db.execute(
        select(Transfer.id).where(Transfer.player_id == player_id).limit(1)
    )
    return result.first() is not None


def transfer_from_draft(draft: TransferDraft) -> Transfer:
    return Transfer(
        player_id=draft.player_id,
        player_name=draft.player_name,
        from_team_id=draft.from_team_id,
        to_team_id=draft.to_team_id,
        season_id=draft.season_id,
        transfer_date=draft.transfer_date,
        transfer_type=draft.transfer_type,
        fee=draft.fee,
        notes=draft.notes,
    )


async def _reload_transfer(db: AsyncSession, transfer_id: UUID) -> Transfer:
    stmt = (
        select(Transfer)
        .options(*transfer_load_options())
        .where(Transfer.id == transfer_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one()


# =============================================================================
# CONTRACTS & LOANS
# =============================================================================

@dataclass
class ContractChange:
    """What happened to a player. `transfer` is None unless a move was written."""
    player: Player
    outcome: Union[TransferPlan, TransferNoOp, TransferRejection, LoanPlan]
    transfer: Optional[Transfer] = None
    loan_return: Optional[LoanReturn] = None


async def load_player_for_update(db: AsyncSession, player_id: UUID) -> Player:
    stmt = (
        select(Player)
        .options(selectinload(Player.contract_season))
        .where(Player.id == player_id)
        .with_for_update()
    )
    result = await db.execute(stmt)
    player = result.scalar_one_or_none()
    if player is None:
        raise NotFoundError(f"Player {player_id} not found")
    return player


async def _require_team(db: AsyncSession, team_id: UUID) -> Team:
    team = await db.get(Team, team_id)
    if team is None:
        raise NotFoundError(f"Team {team_id} not found")
    return team


async def _cancel_pending_loan_returns(db: AsyncSession, player_id: UUID) -> int:
    """A permanent move or a release ends any loan the player was on."""
    pending = await db.execute(
        select(LoanReturn).where(
            and_(LoanReturn.player_id == player_id, LoanReturn.status == LoanReturnStatus.PENDING)
        )
    )
    cancelled = 0
    for loan_return in pending.scalars().all():
        loan_return.status = LoanReturnStatus.CANCELLED
        cancelled += 1
    if cancelled:
        logger.info(f"Cancelled {cancelled} pending loan return(s) for player {player_id}")
    return cancelled


async def sign_contract(
    db: AsyncSession,
    player_id: UUID,
    team_id: UUID,
    season: Season,
    *,
    contract_type: ContractType = ContractType.NORMAL,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    contract_value: Decimal = Decimal("0"),
    fee: Optional[Decimal] = None,
    notes: Optional[str] = None,
) -> ContractChange:
    """
    Put a player under contract with `team_id` for `season`.

    Writes one transfer and the new contract in a single commit when the
    move is allowed, and cancels any loan return still pending for the
    player. Rejections and no-ops leave the player untouched.
    """
    player = await load_player_for_update(db, player_id)
    await _require_team(db, team_id)

    outcome = plan_transfer(
        player_snapshot(player),
        team_id,
        season_ref(season),
        has_transfer_history=await player_has_transfer_history(db, player.id),
        contract_type=contract_type,
        fee=fee,
        notes=notes,
    )
    if not isinstance(outcome, TransferPlan):
        return ContractChange(player=player, outcome=outcome)

    transfer = transfer_from_draft(outcome.transfer)
    db.add(transfer)

    player.current_team_id = team_id
    player.contract_status = outcome.new_contract_status
    player.contract_team_id = team_id
    player.contract_season_id = season.id
    player.contract_type = contract_type
    player.contract_start = start_date or outcome.transfer.transfer_date.date()
    player.contract_end = end_date
    player.contract_value = contract_value

    await _cancel_pending_loan_returns(db, player.id)

    await commit_changes(db)
    logger.info(
        f"Player {player.id} moved {outcome.transfer.from_team_id} -> {team_id} "
        f"({outcome.transfer.transfer_type.value})"
    )

    await db.refresh(player)
    return ContractChange(player=player, outcome=outcome, transfer=await _reload_transfer(db, transfer.id))


async def release_player(
    db: AsyncSession,
    player_id: UUID,
    season: Season,
    *,
    notes: Optional[str] = None,
) -> ContractChange:
    """Release a player to free agency with the administrative override."""
    player = await load_player_for_update(db, player_id)

    outcome = plan_transfer(
        player_snapshot(player),
        None,
        season_ref(season),
        has_transfer_history=await player_has_transfer_history(db, player.id),
        release_override=True,
        notes=notes,
    )
    if not isinstance(outcome, TransferPlan):
        return ContractChange(player=player, outcome=outcome)

    transfer = transfer_from_draft(outcome.transfer)
    db.add(transfer)

    player.current_team_id = None
    player.contract_status = outcome.new_contract_status
    player.clear_contract()

    await _cancel_pending_loan_returns(db, player.id)

    await commit_changes(db)
    logger.info(f"Player {player.id} released from {outcome.transfer.from_team_id}")

    await db.refresh(player)
    return ContractChange(player=player, outcome=outcome, transfer=await _reload_transfer(db, transfer.id))


async def loan_player(
    db: AsyncSession,
    player_id: UUID,
    loan_team_id: UUID,
    season: Season,
    *,
    return_date: date,
    fee: Optional[Decimal] = None,
    notes: Optional[str] = None,
) -> ContractChange:
    """Loan a player out and schedule the return to the parent team."""
    player = await load_player_for_update(db, player_id)
    await _require_team(db, loan_team_id)

    outcome = plan_loan(
        player_snapshot(player),
        loan_team_id,
        season_ref(season),
        return_date=return_date,
        fee=fee,
        notes=notes,
    )
    if isinstance(outcome, TransferRejection):
        return ContractChange(player=player, outcome=outcome)

    transfer = transfer_from_draft(outcome.transfer)
    db.add(transfer)
    await db.flush()

    scheduled = outcome.scheduled_return
    loan_return = LoanReturn(
        player_id=scheduled.player_id,
        loan_transfer_id=transfer.id,
        parent_team_id=scheduled.parent_team_id,
        loan_team_id=scheduled.loan_team_id,
        season_id=scheduled.season_id,
        due_date=scheduled.due_date,
        status=LoanReturnStatus.PENDING,
    )
    db.add(loan_return)

    # The contract stays with the parent team
    player.current_team_id = loan_team_id

    await commit_changes(db)
    logger.info(f"Player {player.id} loaned to {loan_team_id} until {return_date.isoformat()}")

    await db.refresh(player)
    await db.refresh(loan_return)
    return ContractChange(
        player=player,
        outcome=outcome,
        transfer=await _reload_transfer(db, transfer.id),
        loan_return=loan_return,
    )


async def get_pending_loan_return(db: AsyncSession, player_id: UUID) -> Optional[LoanReturn]:
    stmt = (
        select(LoanReturn)
        .where(and_(LoanReturn.player_id == player_id, LoanReturn.status == LoanReturnStatus.PENDING))
        .order_by(LoanReturn.due_date)
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def count_rows(db: AsyncSession) -> Dict[str, int]:
    """Row counts per table, plus loan returns still waiting for the worker."""
    counts = {}
    for label, model in (
        ("seasons", Season),
        ("teams", Team),
        ("players", Player),
        ("matches", Match),
        ("fair_play_records", FairPlayRecord),
        ("transfers", Transfer),
    ):
        counts[label] = await db.scalar(select(func.count()).select_from(model))
    counts["pending_loan_returns"] = await db.scalar(
        select(func.count()).select_from(LoanReturn).where(LoanReturn.status == LoanReturnStatus.PENDING)
    )
    return counts


# =============================================================================
# REGISTRATION BACKFILL
# =============================================================================

async def populate_registrations(db: AsyncSession, season: Season) -> BackfillResult:
    """Create registration transfers for players with a team and no history."""
    players_result = await db.execute(
        select(Player).options(selectinload(Player.contract_season)).order_by(Player.name)
    )
    players = players_result.scalars().all()

    history_result = await db.execute(select(Transfer.player_id).distinct())
    with_history = set(history_result.scalars().all())

    result = plan_registration_backfill(
        [player_snapshot(p) for p in players], season_ref(season), with_history
    )
    for draft in result.drafts:
        db.add(transfer_from_draft(draft))

    await commit_changes(db)
    logger.info(
        f"Registration backfill for season {season.name}: created={result.created} "
        f"free_agents={result.skipped_free_agents} with_history={result.skipped_with_history}"
    )
    return result


# =============================================================================
# MATCH RESULTS
# =============================================================================

async def record_match_result(
    db: AsyncSession,
    match_id: UUID,
    home_score: int,
    away_score: int,
    notes: Optional[str] = None,
) -> Match:
    match = await db.get(Match, match_id)
    if match is None:
        raise NotFoundError(f"Match {match_id} not found")

    match.home_score = home_score
    match.away_score = away_score
    match.status = MatchStatus.COMPLETED
    if notes is not None:
        match.notes = notes

    await commit_changes(db)
    await db.refresh(match)
    return match


# =============================================================================
# FAIR PLAY
# =============================================================================

async def create_fair_play_record(
    db: AsyncSession,
    data: FairPlayCreate,
    season: Season,
) -> FairPlayRecord:
    await _require_team(db, data.team_id)
    if data.player_id is not None and await db.get(Player, data.player_id) is None:
        raise NotFoundError(f"Player {data.player_id} not found")

    record = FairPlayRecord(
        team_id=data.team_id,
        player_id=data.player_id,
        season_id=season.id,
        match_id=data.match_id,
        action_type=data.action_type,
        points=data.points,
        description=data.description,
        reference=data.reference,
        action_date=data.action_date or _utcnow(),
        status=FairPlayStatus.ACTIVE,
    )
    db.add(record)
    await commit_changes(db)
    await db.refresh(record)
    return record


async def update_fair_play_record(
    db: AsyncSession,
    record_id: UUID,
    data: FairPlayUpdate,
) -> FairPlayRecord:
    """
    Apply an appeal decision or a points change.

    The first time points are lowered the old value is kept in
    original_points. The first move to appealed stamps appeal_date.
    """
    record = await db.get(FairPlayRecord, record_id)
    if record is None:
        raise NotFoundError(f"Fair play record {record_id} not found")

    if data.points is not None and data.points != record.points:
        if data.points < record.points and record.original_points is None:
            record.original_points = record.points
        record.points = data.points

    if data.status is not None:
        if data.status == FairPlayStatus.APPEALED and record.appeal_date is None:
            record.appeal_date = _utcnow()
        record.status = data.status

    if data.appeal_notes is not None:
        record.appeal_notes = data.appeal_notes

    await commit_changes(db)
    await db.refresh(record)
    return record
