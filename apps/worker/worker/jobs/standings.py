"""
League Table
============

Prints a season's standings using the same engine as the API.

Run with: python -m worker.cli standings:show
"""

from typing import List, Optional, Tuple
from uuid import UUID

from rich.console import Console
from rich.table import Table
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import FairPlayRecord, Match, Season, Team
from app.snapshots import fair_play_entry, match_result, team_ref
from app.standings import TeamStanding, compute_standings

from worker.database import get_sync_session
from worker.jobs.loans import get_active_season

console = Console()


def load_standings(session: Session, season: Season) -> List[TeamStanding]:
    teams = session.execute(select(Team).where(Team.season_id == season.id)).scalars().all()
    matches = session.execute(select(Match).where(Match.season_id == season.id)).scalars().all()
    records = session.execute(
        select(FairPlayRecord).where(FairPlayRecord.season_id == season.id)
    ).scalars().all()

    return compute_standings(
        [team_ref(t) for t in teams],
        [match_result(m) for m in matches],
        [fair_play_entry(r) for r in records],
    )


def standings_table(season: Season, standings: List[TeamStanding]) -> Table:
    table = Table(title=f"Standings {season.name}")
    table.add_column("#", justify="right", width=3)
    table.add_column("Team", style="cyan")
    table.add_column("P", justify="right")
    table.add_column("W", justify="right")
    table.add_column("D", justify="right")
    table.add_column("L", justify="right")
    table.add_column("GF", justify="right")
    table.add_column("GA", justify="right")
    table.add_column("GD", justify="right")
    table.add_column("FP", justify="right", style="yellow")
    table.add_column("Pts", justify="right", style="bold green")

    for s in standings:
        table.add_row(
            str(s.position),
            s.team.name,
            str(s.matches_played),
            str(s.wins),
            str(s.draws),
            str(s.losses),
            str(s.goals_for),
            str(s.goals_against),
            f"{s.goal_difference:+d}",
            str(s.fair_play_points),
            str(s.points),
        )
    return table


def run_standings_show(season_id: Optional[UUID] = None) -> Optional[Tuple[Season, List[TeamStanding]]]:
    """Print the table for `season_id` (defaults to the active season)."""
    with get_sync_session() as session:
        season = session.get(Season, season_id) if season_id else get_active_season(session)
        if season is None:
            console.print("[red]No season found. Pass --season-id or mark a season active.[/red]")
            return None

        standings = load_standings(session, season)

    if not standings:
        console.print(f"[yellow]No teams registered for {season.name}.[/yellow]")
    else:
        console.print(standings_table(season, standings))

    return season, standings
