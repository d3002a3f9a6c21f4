"""
Pytest Configuration for Worker Tests
======================================

Fixtures and configuration for testing the worker module.

Tests run against a throwaway SQLite file, set before the worker or the
shared API models are imported.
"""

import os
import sys
import tempfile
from pathlib import Path

_TEST_DB_DIR = tempfile.mkdtemp(prefix="leaguehub-worker-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'worker.db')}"

# Add worker and API packages to path
worker_path = Path(__file__).parent.parent
api_path = worker_path.parent / "api"
for path in (worker_path, api_path):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from app.database import Base
from app.domain import (
    ContractStatus, ContractType, LoanReturnStatus, MatchStatus, TransferType
)
from app.models import LoanReturn, Match, Player, Season, Team, Transfer
from worker.database import SyncSessionLocal, sync_engine


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires database)"
    )


@pytest.fixture
def db_tables():
    """Create the schema for one test and drop it afterwards."""
    Base.metadata.create_all(sync_engine)
    yield
    Base.metadata.drop_all(sync_engine)


@pytest.fixture
def session(db_tables):
    session = SyncSessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def league(session):
    """
    A season with two teams, a player out on loan and a finished match.

    Returns a dict of ids and the loan return row's id.
    """
    season = Season(
        id=uuid4(),
        name="2025-26",
        start_date=date(2025, 8, 1),
        end_date=date(2026, 5, 31),
        is_active=True
    )
    session.add(season)
    session.flush()

    parent = Team(id=uuid4(), name="Harbour Rovers", season_id=season.id)
    loan_team = Team(id=uuid4(), name="Millbrook Athletic", season_id=season.id)
    session.add_all([parent, loan_team])
    session.flush()

    loanee = Player(
        id=uuid4(),
        name="Ana Costa",
        id_card_number="LH-0001",
        current_team_id=loan_team.id,
        contract_status=ContractStatus.NORMAL,
        contract_team_id=parent.id,
        contract_season_id=season.id,
        contract_type=ContractType.NORMAL,
        contract_value=Decimal("1000")
    )
    unregistered = Player(
        id=uuid4(),
        name="Ben Walsh",
        id_card_number="LH-0002",
        current_team_id=parent.id,
        contract_status=ContractStatus.NORMAL,
        contract_team_id=parent.id,
        contract_season_id=season.id,
        contract_type=ContractType.NORMAL
    )
    session.add_all([loanee, unregistered])
    session.flush()

    loan = Transfer(
        id=uuid4(),
        player_id=loanee.id,
        player_name=loanee.name,
        from_team_id=parent.id,
        to_team_id=loan_team.id,
        season_id=season.id,
        transfer_date=datetime(2026, 1, 10, tzinfo=timezone.utc),
        transfer_type=TransferType.LOAN,
        notes="loan until 2026-03-01"
    )
    session.add(loan)
    session.flush()

    loan_return = LoanReturn(
        id=uuid4(),
        player_id=loanee.id,
        loan_transfer_id=loan.id,
        parent_team_id=parent.id,
        loan_team_id=loan_team.id,
        season_id=season.id,
        due_date=date(2026, 3, 1),
        status=LoanReturnStatus.PENDING
    )
    session.add(loan_return)

    session.add(Match(
        id=uuid4(),
        home_team_id=parent.id,
        away_team_id=loan_team.id,
        season_id=season.id,
        match_date=datetime(2025, 9, 6, 15, 0, tzinfo=timezone.utc),
        status=MatchStatus.COMPLETED,
        home_score=2,
        away_score=1
    ))
    session.commit()

    return {
        "season": season.id,
        "parent": parent.id,
        "loan_team": loan_team.id,
        "loanee": loanee.id,
        "unregistered": unregistered.id,
        "loan_return": loan_return.id,
    }
