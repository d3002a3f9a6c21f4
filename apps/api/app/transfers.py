"""
Transfer Lifecycle Manager
==========================

Decides whether a player may change team and synthesizes the transfer
record that must be appended when they do. Pure computation over
snapshots: the caller persists the draft and applies the player update,
and only after a non-rejected plan.

Contract state machine:
- free_agent: may join any team at any time
- normal: may move mid-season
- seasonal: locked while the contracted season is active

Outcomes are typed results, never exceptions:
- TransferPlan: exactly one TransferDraft to persist
- TransferNoOp: nothing to do, nothing to persist
- TransferRejection: the move is not allowed, the player must not change
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Collection, Iterable, List, Optional, Union
from uuid import UUID

from app.domain import (
    ContractStatus,
    ContractType,
    PlayerSnapshot,
    SeasonRef,
    TransferType,
)

logger = logging.getLogger(__name__)


NOTE_INITIAL_REGISTRATION = "initial registration"
NOTE_FROM_FREE_AGENCY = "joined team from free agency"
NOTE_RELEASED = "released to free agency"
NOTE_BETWEEN_TEAMS = "transfer between teams"
NOTE_RETURNED_FROM_LOAN = "returned from loan"


class RejectionReason(str, enum.Enum):
    SEASONAL_LOCK_ACTIVE = "seasonal_lock_active"
    NO_PARENT_TEAM = "no_parent_team"
    SAME_TEAM = "same_team"
    INVALID_RETURN_DATE = "invalid_return_date"


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class TransferDraft:
    """A transfer record ready to be appended to the history."""
    player_id: UUID
    player_name: str
    from_team_id: Optional[UUID]
    to_team_id: Optional[UUID]
    season_id: UUID
    transfer_date: datetime
    transfer_type: TransferType
    fee: Optional[Decimal] = None
    notes: str = ""


@dataclass(frozen=True)
class TransferPlan:
    transfer: TransferDraft
    new_contract_status: ContractStatus

    @property
    def new_team_id(self) -> Optional[UUID]:
        return self.transfer.to_team_id


@dataclass(frozen=True)
class TransferNoOp:
    """The requested assignment is already in place."""
    player_id: UUID
    team_id: Optional[UUID]
    message: str = "Player is already assigned to this team"


@dataclass(frozen=True)
class TransferRejection:
    reason: RejectionReason
    message: str
    locked_until: Optional[date] = None


@dataclass(frozen=True)
class ScheduledReturn:
    """The reverse move that ends a loan."""
    player_id: UUID
    parent_team_id: UUID
    loan_team_id: UUID
    season_id: UUID
    due_date: date


@dataclass(frozen=True)
class LoanPlan:
    transfer: TransferDraft
    scheduled_return: ScheduledReturn


@dataclass(frozen=True)
class TransferEligibility:
    eligible: bool
    reason: Optional[RejectionReason] = None
    message: Optional[str] = None
    locked_until: Optional[date] = None


@dataclass
class BackfillResult:
    drafts: List[TransferDraft] = field(default_factory=list)
    skipped_free_agents: int = 0
    skipped_with_history: int = 0

    @property
    def created(self) -> int:
        return len(self.drafts)


TransferOutcome = Union[TransferPlan, TransferNoOp, TransferRejection]


# =============================================================================
# HELPERS
# =============================================================================

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _assert_consistent(player: PlayerSnapshot) -> None:
    assert (player.contract_status == ContractStatus.FREE_AGENT) == (player.current_team_id is None), (
        f"Player {player.id} has contract_status={player.contract_status.value} "
        f"but current_team_id={player.current_team_id}"
    )


def _join_notes(derived: str, extra: Optional[str]) -> str:
    if extra and extra.strip():
        return f"{derived}; {extra.strip()}"
    return derived


def _lock_message(locked_until: Optional[date]) -> str:
    if locked_until:
        return f"Cannot transfer: seasonal contract locked until {locked_until.isoformat()}"
    return "Cannot transfer: seasonal contract locked until season end"


# =============================================================================
# ELIGIBILITY
# =============================================================================

def check_transfer_eligibility(player: PlayerSnapshot) -> TransferEligibility:
    """
    Whether the player's contract currently allows a move.

    Only a seasonal contract whose season is still active locks a player.
    `locked_until` is the contract end date when set, else the season end.
    """
    _assert_consistent(player)

    if player.contract_status != ContractStatus.SEASONAL:
        return TransferEligibility(eligible=True)

    contract = player.current_contract
    if contract is None or not contract.season.is_active:
        return TransferEligibility(eligible=True)

    locked_until = contract.end_date or contract.season.end_date
    return TransferEligibility(
        eligible=False,
        reason=RejectionReason.SEASONAL_LOCK_ACTIVE,
        message=_lock_message(locked_until),
        locked_until=locked_until,
    )


# =============================================================================
# TEAM CHANGES
# =============================================================================

def classify_transfer(
    from_team_id: Optional[UUID],
    to_team_id: Optional[UUID],
    has_transfer_history: bool,
):
    """Return (transfer_type, derived_note) for a change of team."""
    if from_team_id is None:
        note = NOTE_FROM_FREE_AGENCY if has_transfer_history else NOTE_INITIAL_REGISTRATION
        return TransferType.REGISTRATION, note
    if to_team_id is None:
        return TransferType.RELEASE, NOTE_RELEASED
    return TransferType.TRANSFER, NOTE_BETWEEN_TEAMS


def plan_transfer(
    player: PlayerSnapshot,
    new_team_id: Optional[UUID],
    active_season: SeasonRef,
    *,
    has_transfer_history: bool,
    release_override: bool = False,
    contract_type: ContractType = ContractType.NORMAL,
    fee: Optional[Decimal] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> TransferOutcome:
    """
    Plan a change of the player's team assignment.

    A `new_team_id` of None releases the player to free agency.
    `release_override` lets an administrator release a seasonal player
    whose season is still active; it has no effect on moves to a team.
    """
    _assert_consistent(player)

    if new_team_id == player.current_team_id:
        return TransferNoOp(player_id=player.id, team_id=new_team_id)

    eligibility = check_transfer_eligibility(player)
    overridden = new_team_id is None and release_override
    if not eligibility.eligible and not overridden:
        logger.info(f"Transfer of player {player.id} rejected: {eligibility.reason.value}")
        return TransferRejection(
            reason=eligibility.reason,
            message=eligibility.message,
            locked_until=eligibility.locked_until,
        )

    transfer_type, derived_note = classify_transfer(
        player.current_team_id, new_team_id, has_transfer_history
    )

    draft = TransferDraft(
        player_id=player.id,
        player_name=player.name,
        from_team_id=player.current_team_id,
        to_team_id=new_team_id,
        season_id=active_season.id,
        transfer_date=now or _utcnow(),
        transfer_type=transfer_type,
        fee=fee,
        notes=_join_notes(derived_note, notes),
    )

    if new_team_id is None:
        new_status = ContractStatus.FREE_AGENT
    else:
        new_status = ContractStatus(ContractType(contract_type).value)

    return TransferPlan(transfer=draft, new_contract_status=new_status)


# =============================================================================
# LOANS
# =============================================================================

def plan_loan(
    player: PlayerSnapshot,
    loan_team_id: UUID,
    active_season: SeasonRef,
    *,
    return_date: date,
    fee: Optional[Decimal] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Union[LoanPlan, TransferRejection]:
    """
    Plan a loan from the player's current team to `loan_team_id`.

    Loans ignore contract status. The reverse move is returned as a
    ScheduledReturn for the caller to store and execute on `return_date`.
    """
    _assert_consistent(player)
    now = now or _utcnow()

    if player.current_team_id is None:
        return TransferRejection(
            reason=RejectionReason.NO_PARENT_TEAM,
            message="Cannot loan a free agent: player has no current team",
        )
    if loan_team_id == player.current_team_id:
        return TransferRejection(
            reason=RejectionReason.SAME_TEAM,
            message="Cannot loan a player to their current team",
        )
    if return_date <= now.date():
        return TransferRejection(
            reason=RejectionReason.INVALID_RETURN_DATE,
            message=f"Loan return date {return_date.isoformat()} must be after {now.date().isoformat()}",
        )

    draft = TransferDraft(
        player_id=player.id,
        player_name=player.name,
        from_team_id=player.current_team_id,
        to_team_id=loan_team_id,
        season_id=active_season.id,
        transfer_date=now,
        transfer_type=TransferType.LOAN,
        fee=fee,
        notes=_join_notes(f"loan until {return_date.isoformat()}", notes),
    )
    scheduled = ScheduledReturn(
        player_id=player.id,
        parent_team_id=player.current_team_id,
        loan_team_id=loan_team_id,
        season_id=active_season.id,
        due_date=return_date,
    )
    return LoanPlan(transfer=draft, scheduled_return=scheduled)


def plan_loan_return(
    player: PlayerSnapshot,
    scheduled_return: ScheduledReturn,
    active_season: SeasonRef,
    now: Optional[datetime] = None,
) -> Union[TransferPlan, TransferNoOp]:
    """
    Plan the reverse move that ends a loan.

    If the player has left the loan team since, the return is obsolete
    and a TransferNoOp comes back.
    """
    _assert_consistent(player)

    if player.current_team_id != scheduled_return.loan_team_id:
        return TransferNoOp(
            player_id=player.id,
            team_id=player.current_team_id,
            message="Player is no longer at the loan team",
        )

    draft = TransferDraft(
        player_id=player.id,
        player_name=player.name,
        from_team_id=scheduled_return.loan_team_id,
        to_team_id=scheduled_return.parent_team_id,
        season_id=active_season.id,
        transfer_date=now or _utcnow(),
        transfer_type=TransferType.LOAN,
        notes=NOTE_RETURNED_FROM_LOAN,
    )
    return TransferPlan(transfer=draft, new_contract_status=player.contract_status)


# =============================================================================
# BACKFILL
# =============================================================================

def plan_registration_backfill(
    players: Iterable[PlayerSnapshot],
    season: SeasonRef,
    players_with_history: Collection[UUID],
    now: Optional[datetime] = None,
) -> BackfillResult:
    """
    Registration records for players assigned to a team before transfer
    history was kept. Free agents and players with history are skipped.
    """
    now = now or _utcnow()
    result = BackfillResult()

    for player in players:
        _assert_consistent(player)
        if player.current_team_id is None:
            result.skipped_free_agents += 1
            continue
        if player.id in players_with_history:
            result.skipped_with_history += 1
            continue
        result.drafts.append(TransferDraft(
            player_id=player.id,
            player_name=player.name,
            from_team_id=None,
            to_team_id=player.current_team_id,
            season_id=season.id,
            transfer_date=now,
            transfer_type=TransferType.REGISTRATION,
            notes=NOTE_INITIAL_REGISTRATION,
        ))

    return result


# =============================================================================
# PRESENTATION
# =============================================================================

def describe_transfer(
    player_name: str,
    from_team_name: Optional[str],
    to_team_name: Optional[str],
):
    """Return (description, direction) for a transfer history row."""
    if from_team_name is None and to_team_name is not None:
        return f"{player_name} joined {to_team_name}", "incoming"
    if from_team_name is not None and to_team_name is None:
        return f"{player_name} released from {from_team_name}", "outgoing"
    if from_team_name is not None and to_team_name is not None:
        return f"{player_name} transferred from {from_team_name} to {to_team_name}", "transfer"
    return f"{player_name} registered as free agent", "registration"
