"""
Loan Returns
============

Moves loaned players back to their parent teams once the loan is due.

Each due return is handled in its own transaction:
- player still at the loan team: append a loan transfer back to the
  parent team and mark the return completed
- player moved on since, or was moved again after the loan: the return
  is obsolete and is cancelled
- player changed concurrently: left pending for the next run

Run with: python -m worker.cli loans:return
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from rich.console import Console
from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from app.domain import LoanReturnStatus
from app.models import LoanReturn, Player, Season, Transfer
from app.services import transfer_from_draft
from app.snapshots import player_snapshot, season_ref
from app.transfers import ScheduledReturn, TransferNoOp, plan_loan_return

from worker.config import settings
from worker.database import get_sync_session

console = Console()


def get_active_season(session: Session) -> Optional[Season]:
    return session.execute(
        select(Season)
        .where(Season.is_active == True)
        .order_by(Season.start_date.desc())
        .limit(1)
    ).scalar_one_or_none()


def due_loan_returns(session: Session, as_of: date, limit: Optional[int] = None) -> list:
    """Pending returns due on or before `as_of`, oldest first."""
    stmt = (
        select(LoanReturn)
        .where(and_(LoanReturn.status == LoanReturnStatus.PENDING, LoanReturn.due_date <= as_of))
        .order_by(LoanReturn.due_date, LoanReturn.created_at)
    )
    if limit:
        stmt = stmt.limit(limit)
    return list(session.execute(stmt).scalars().all())


def moved_since_loan(session: Session, loan_return: LoanReturn) -> bool:
    """True when any transfer for the player was written after the loan itself."""
    loan_transfer = session.get(Transfer, loan_return.loan_transfer_id)
    later = session.execute(
        select(func.count())
        .select_from(Transfer)
        .where(
            and_(
                Transfer.player_id == loan_return.player_id,
                Transfer.id != loan_transfer.id,
                Transfer.transfer_date > loan_transfer.transfer_date,
            )
        )
    ).scalar_one()
    return later > 0


def _cancel(session: Session, loan_return: LoanReturn, now: datetime) -> str:
    loan_return.status = LoanReturnStatus.CANCELLED
    loan_return.completed_at = now
    session.commit()
    return "cancelled"


def complete_loan_return(
    session: Session,
    loan_return: LoanReturn,
    now: Optional[datetime] = None,
) -> str:
    """
    Carry out one scheduled return and commit it.

    Returns "completed" or "cancelled".
    """
    now = now or datetime.now(timezone.utc)

    player = session.execute(
        select(Player)
        .options(selectinload(Player.contract_season))
        .where(Player.id == loan_return.player_id)
        .with_for_update()
    ).scalar_one()

    # A later move replaced the loan, even if it landed back at the loan team
    if moved_since_loan(session, loan_return):
        return _cancel(session, loan_return, now)

    season = get_active_season(session) or session.get(Season, loan_return.season_id)
    scheduled = ScheduledReturn(
        player_id=loan_return.player_id,
        parent_team_id=loan_return.parent_team_id,
        loan_team_id=loan_return.loan_team_id,
        season_id=loan_return.season_id,
        due_date=loan_return.due_date,
    )

    outcome = plan_loan_return(player_snapshot(player), scheduled, season_ref(season), now=now)

    if isinstance(outcome, TransferNoOp):
        return _cancel(session, loan_return, now)

    transfer = transfer_from_draft(outcome.transfer)
    session.add(transfer)
    session.flush()

    player.current_team_id = outcome.new_team_id
    player.contract_status = outcome.new_contract_status

    loan_return.status = LoanReturnStatus.COMPLETED
    loan_return.completed_at = now
    loan_return.return_transfer_id = transfer.id

    session.commit()
    return "completed"


def process_due_loan_returns(
    session: Session,
    as_of: Optional[date] = None,
    dry_run: bool = False,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Handle every pending return due on or before `as_of`.

    Safe to run repeatedly: finished returns are no longer pending.
    """
    as_of = as_of or date.today()

    stats = {
        "as_of": as_of.isoformat(),
        "due": 0,
        "completed": 0,
        "cancelled": 0,
        "conflicts": 0,
    }

    due = due_loan_returns(session, as_of, limit=settings.loan_return_batch_size)
    stats["due"] = len(due)

    if dry_run:
        for loan_return in due:
            console.print(
                f"  • would return player {loan_return.player_id} "
                f"(due {loan_return.due_date.isoformat()})"
            )
        return stats

    for loan_return in due:
        try:
            result = complete_loan_return(session, loan_return, now=now)
            stats[result] += 1
        except StaleDataError as e:
            session.rollback()
            stats["conflicts"] += 1
            console.print(f"[yellow]Player {loan_return.player_id} changed concurrently, retrying next run: {e}[/yellow]")

    return stats


def run_loan_returns(as_of: Optional[date] = None, dry_run: bool = False) -> Dict[str, Any]:
    """
    Return loaned players whose loans are due.

    Args:
        as_of: Treat returns due on or before this date as due (defaults to today)
        dry_run: List what would happen without writing

    Returns:
        dict with run stats
    """
    as_of = as_of or date.today()

    console.print("[bold blue]🔁 Processing loan returns...[/bold blue]")
    console.print(f"  • As of: {as_of.isoformat()}")
    if dry_run:
        console.print("  • [yellow]Dry run: nothing will be written[/yellow]")

    with get_sync_session() as session:
        stats = process_due_loan_returns(session, as_of=as_of, dry_run=dry_run)

    console.print(f"\n[bold green]✓ Loan returns done[/bold green]")
    console.print(f"  • Due: {stats['due']}")
    console.print(f"  • Completed: {stats['completed']}")
    console.print(f"  • Cancelled (player moved on): {stats['cancelled']}")
    if stats["conflicts"]:
        console.print(f"  • [yellow]Conflicts: {stats['conflicts']}[/yellow]")

    return stats
