"""
Registration Backfill
=====================

Writes a registration transfer for every player who is on a team but
has no transfer history, e.g. players imported before history was kept.

Run with: python -m worker.cli transfers:populate
"""

from typing import Any, Dict, Optional
from uuid import UUID

from rich.console import Console
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.models import Player, Season, Transfer
from app.services import transfer_from_draft
from app.snapshots import player_snapshot, season_ref
from app.transfers import plan_registration_backfill

from worker.database import get_sync_session
from worker.jobs.loans import get_active_season

console = Console()


def populate_registrations(session: Session, season: Season) -> Dict[str, Any]:
    players = session.execute(
        select(Player).options(selectinload(Player.contract_season)).order_by(Player.name)
    ).scalars().all()
    with_history = set(session.execute(select(Transfer.player_id).distinct()).scalars().all())

    result = plan_registration_backfill(
        [player_snapshot(p) for p in players], season_ref(season), with_history
    )
    for draft in result.drafts:
        session.add(transfer_from_draft(draft))
    session.commit()

    return {
        "season": season.name,
        "created": result.created,
        "skipped_free_agents": result.skipped_free_agents,
        "skipped_with_history": result.skipped_with_history,
    }


def run_registration_backfill(season_id: Optional[UUID] = None) -> Dict[str, Any]:
    """
    Backfill registration transfers into `season_id` (defaults to the active season).

    Returns:
        dict with counts, or an "error" key when no season can be resolved
    """
    console.print("[bold blue]📝 Backfilling registration transfers...[/bold blue]")

    with get_sync_session() as session:
        season = session.get(Season, season_id) if season_id else get_active_season(session)
        if season is None:
            console.print("[red]No season found. Pass --season-id or mark a season active.[/red]")
            return {"error": "season_not_found"}

        console.print(f"  • Season: {season.name}")
        stats = populate_registrations(session, season)

    console.print(f"\n[bold green]✓ Backfill done[/bold green]")
    console.print(f"  • Created: {stats['created']}")
    console.print(f"  • Skipped free agents: {stats['skipped_free_agents']}")
    console.print(f"  • Skipped with history: {stats['skipped_with_history']}")

    return stats
