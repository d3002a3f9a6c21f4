"""
Worker CLI Tests
================

Smoke tests for the click commands against the test database.
"""

from click.testing import CliRunner

from app.domain import LoanReturnStatus
from app.models import LoanReturn
from worker.cli import cli


class TestCli:
    """Tests for the worker commands."""

    def test_db_check(self, db_tables):
        result = CliRunner().invoke(cli, ["db:check"])
        assert result.exit_code == 0
        assert "Database connection OK" in result.output

    def test_loans_return_dry_run(self, session, league):
        result = CliRunner().invoke(cli, ["loans:return", "--as-of", "2026-03-01", "--dry-run"])

        assert result.exit_code == 0
        assert "Dry run" in result.output
        session.expire_all()
        assert session.get(LoanReturn, league["loan_return"]).status == LoanReturnStatus.PENDING

    def test_loans_return(self, session, league):
        result = CliRunner().invoke(cli, ["loans:return", "--as-of", "2026-03-01"])

        assert result.exit_code == 0
        session.expire_all()
        assert session.get(LoanReturn, league["loan_return"]).status == LoanReturnStatus.COMPLETED

    def test_loans_return_rejects_bad_date(self, db_tables):
        result = CliRunner().invoke(cli, ["loans:return", "--as-of", "first of march"])
        assert result.exit_code != 0

    def test_transfers_populate(self, session, league):
        result = CliRunner().invoke(cli, ["transfers:populate"])
        assert result.exit_code == 0
        assert "Backfill done" in result.output

    def test_standings_show(self, session, league):
        result = CliRunner().invoke(cli, ["standings:show"])
        assert result.exit_code == 0
        assert "Harbour Rovers" in result.output

    def test_standings_without_season(self, db_tables):
        result = CliRunner().invoke(cli, ["standings:show"])
        assert result.exit_code == 1
