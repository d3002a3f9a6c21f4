"""
LeagueHub Worker Service
========================

Background job runner for:
- Returning loaned players to their parent teams
- Backfilling registration transfers
- Printing the league table
"""

__version__ = "1.0.0"
