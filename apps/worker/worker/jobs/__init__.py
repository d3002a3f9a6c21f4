"""
LeagueHub Worker Jobs
=====================

Individual job modules:
- loans: Return loaned players when their loans are due
- backfill: Registration transfers for players without history
- standings: League table printout
"""

from worker.jobs.loans import run_loan_returns, process_due_loan_returns
from worker.jobs.backfill import run_registration_backfill
from worker.jobs.standings import run_standings_show, load_standings

__all__ = [
    "run_loan_returns",
    "process_due_loan_returns",
    "run_registration_backfill",
    "run_standings_show",
    "load_standings",
]
