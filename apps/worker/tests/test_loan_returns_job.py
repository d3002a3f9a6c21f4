"""
Loan Return Job Tests
=====================

These tests verify that due loans are returned exactly once, that
obsolete returns are cancelled without writing history, and that the
registration backfill and standings jobs read the shared models.
"""

from datetime import date, datetime, timezone

from sqlalchemy import func, select

from app.domain import ContractStatus, LoanReturnStatus, TransferType
from app.models import LoanReturn, Player, Team, Transfer
from worker.jobs.backfill import populate_registrations
from worker.jobs.loans import due_loan_returns, get_active_season, process_due_loan_returns
from worker.jobs.standings import load_standings

NOW = datetime(2026, 3, 2, 6, 0, tzinfo=timezone.utc)


def transfer_count(session) -> int:
    return session.scalar(select(func.count()).select_from(Transfer))


class TestDueLoanReturns:
    """Tests for selecting due returns."""

    def test_not_due_before_date(self, session, league):
        assert due_loan_returns(session, date(2026, 2, 28)) == []

    def test_due_on_date(self, session, league):
        due = due_loan_returns(session, date(2026, 3, 1))
        assert [r.id for r in due] == [league["loan_return"]]


class TestProcessLoanReturns:
    """Tests for carrying out returns."""

    def test_returns_player_to_parent(self, session, league):
        stats = process_due_loan_returns(session, as_of=date(2026, 3, 1), now=NOW)

        assert stats["due"] == 1
        assert stats["completed"] == 1

        player = session.get(Player, league["loanee"])
        assert player.current_team_id == league["parent"]
        assert player.contract_status == ContractStatus.NORMAL
        assert player.contract_team_id == league["parent"]

        loan_return = session.get(LoanReturn, league["loan_return"])
        assert loan_return.status == LoanReturnStatus.COMPLETED
        assert loan_return.return_transfer_id is not None

        transfer = session.get(Transfer, loan_return.return_transfer_id)
        assert transfer.from_team_id == league["loan_team"]
        assert transfer.to_team_id == league["parent"]
        assert transfer.transfer_type == TransferType.LOAN
        assert transfer.notes == "returned from loan"

    def test_second_run_does_nothing(self, session, league):
        process_due_loan_returns(session, as_of=date(2026, 3, 1), now=NOW)
        before = transfer_count(session)

        stats = process_due_loan_returns(session, as_of=date(2026, 3, 1), now=NOW)

        assert stats["due"] == 0
        assert transfer_count(session) == before

    def test_dry_run_writes_nothing(self, session, league):
        before = transfer_count(session)

        stats = process_due_loan_returns(session, as_of=date(2026, 3, 1), dry_run=True)

        assert stats["due"] == 1
        assert stats["completed"] == 0
        assert transfer_count(session) == before
        assert session.get(LoanReturn, league["loan_return"]).status == LoanReturnStatus.PENDING

    def test_player_who_moved_on_is_cancelled(self, session, league):
        """Player left the loan team since: no history is written."""
        third = Team(name="Northgate United", season_id=league["season"])
        session.add(third)
        session.flush()
        player = session.get(Player, league["loanee"])
        player.current_team_id = third.id
        session.commit()
        before = transfer_count(session)

        stats = process_due_loan_returns(session, as_of=date(2026, 3, 1), now=NOW)

        assert stats["cancelled"] == 1
        assert stats["completed"] == 0
        assert transfer_count(session) == before
        assert session.get(Player, league["loanee"]).current_team_id == third.id
        assert session.get(LoanReturn, league["loan_return"]).status == LoanReturnStatus.CANCELLED

    def test_permanent_moves_after_loan_cancel_return(self, session, league):
        """Signed elsewhere and then back to the loan team: no return to the parent."""
        third = Team(name="Northgate United", season_id=league["season"])
        session.add(third)
        session.flush()
        for day, (from_team, to_team) in enumerate(
            [(league["loan_team"], third.id), (third.id, league["loan_team"])], start=1
        ):
            session.add(Transfer(
                player_id=league["loanee"],
                player_name="Ana Costa",
                from_team_id=from_team,
                to_team_id=to_team,
                season_id=league["season"],
                transfer_date=datetime(2026, 2, day, tzinfo=timezone.utc),
                transfer_type=TransferType.TRANSFER,
                notes="transfer between teams"
            ))
        player = session.get(Player, league["loanee"])
        player.contract_team_id = league["loan_team"]
        session.commit()
        before = transfer_count(session)

        stats = process_due_loan_returns(session, as_of=date(2026, 3, 1), now=NOW)

        assert stats["cancelled"] == 1
        assert stats["completed"] == 0
        assert transfer_count(session) == before
        assert session.get(Player, league["loanee"]).current_team_id == league["loan_team"]
        assert session.get(LoanReturn, league["loan_return"]).status == LoanReturnStatus.CANCELLED


class TestBackfillAndStandings:
    """Tests for the backfill and standings jobs."""

    def test_backfill_skips_players_with_history(self, session, league):
        season = get_active_season(session)

        stats = populate_registrations(session, season)

        # The loanee already has a loan transfer
        assert stats["created"] == 1
        assert stats["skipped_with_history"] == 1
        assert stats["skipped_free_agents"] == 0

        stats = populate_registrations(session, season)
        assert stats["created"] == 0

    def test_standings(self, session, league):
        season = get_active_season(session)

        standings = load_standings(session, season)

        assert [s.team.name for s in standings] == ["Harbour Rovers", "Millbrook Athletic"]
        assert standings[0].points == 3
        assert standings[1].goals_for == 1
