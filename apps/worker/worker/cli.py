"""
LeagueHub Worker CLI
====================

Command-line interface for running worker jobs.

Usage:
    python -m worker.cli <command> [options]

Commands:
    loans:return                   Return loaned players whose loans are due
    transfers:populate             Backfill registration transfers
    standings:show                 Print the league table
    db:check                       Verify the database connection
    daily:run                      Run the daily pipeline

Examples:
    python -m worker.cli loans:return --as-of 2026-05-31 --dry-run
    python -m worker.cli transfers:populate
    python -m worker.cli standings:show --season-id <uuid>
    python -m worker.cli daily:run
"""

import sys
from datetime import date
from typing import Optional
from uuid import UUID

import click
from rich.console import Console

console = Console()


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse date string in ISO format."""
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Invalid date format: {value}. Use ISO format (YYYY-MM-DD)")


def parse_uuid(value: Optional[str]) -> Optional[UUID]:
    if value is None:
        return None
    try:
        return UUID(value)
    except ValueError:
        raise click.BadParameter(f"Invalid id: {value}")


@click.group()
@click.version_option(version="1.0.0")
def cli():
    """LeagueHub Worker - Background jobs for league and transfer data."""
    pass


# =============================================================================
# LOAN COMMANDS
# =============================================================================

@cli.command("loans:return")
@click.option("--as-of", type=str, default=None, help="Process returns due on or before this date (YYYY-MM-DD)")
@click.option("--dry-run", is_flag=True, help="List due returns without writing")
def cmd_loans_return(as_of: Optional[str], dry_run: bool):
    """Move loaned players back to their parent teams."""
    from worker.jobs.loans import run_loan_returns

    console.print("\n[bold]LeagueHub Worker - Loan Returns[/bold]\n")
    run_loan_returns(as_of=parse_date(as_of), dry_run=dry_run)


# =============================================================================
# TRANSFER COMMANDS
# =============================================================================

@cli.command("transfers:populate")
@click.option("--season-id", type=str, default=None, help="Season to record registrations in (defaults to active)")
def cmd_transfers_populate(season_id: Optional[str]):
    """Create registration transfers for players with a team and no history."""
    from worker.jobs.backfill import run_registration_backfill

    console.print("\n[bold]LeagueHub Worker - Registration Backfill[/bold]\n")
    stats = run_registration_backfill(season_id=parse_uuid(season_id))
    if "error" in stats:
        sys.exit(1)


# =============================================================================
# STANDINGS COMMANDS
# =============================================================================

@cli.command("standings:show")
@click.option("--season-id", type=str, default=None, help="Season to show (defaults to active)")
def cmd_standings_show(season_id: Optional[str]):
    """Print the league table."""
    from worker.jobs.standings import run_standings_show

    console.print("\n[bold]LeagueHub Worker - Standings[/bold]\n")
    if run_standings_show(season_id=parse_uuid(season_id)) is None:
        sys.exit(1)


# =============================================================================
# DATABASE COMMANDS
# =============================================================================

@cli.command("db:check")
def cmd_db_check():
    """Verify the database connection."""
    from worker.database import check_database_connection

    if check_database_connection():
        console.print("[green]✓ Database connection OK[/green]")
    else:
        sys.exit(1)


# =============================================================================
# DAILY RUN COMMAND
# =============================================================================

@cli.command("daily:run")
@click.option("--skip-loans", is_flag=True, help="Skip loan returns")
@click.option("--skip-backfill", is_flag=True, help="Skip registration backfill")
def cmd_daily_run(skip_loans: bool, skip_backfill: bool):
    """
    Run the daily pipeline:
    1. Return loaned players whose loans are due
    2. Backfill registration transfers
    3. Print the league table
    """
    from worker.jobs.loans import run_loan_returns
    from worker.jobs.backfill import run_registration_backfill
    from worker.jobs.standings import run_standings_show

    console.print("\n[bold]LeagueHub Worker - Daily Run[/bold]\n")

    if not skip_loans:
        run_loan_returns()
        console.print()

    if not skip_backfill:
        run_registration_backfill()
        console.print()

    run_standings_show()


if __name__ == "__main__":
    cli()
