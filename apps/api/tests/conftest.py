"""
Pytest Configuration and Fixtures
=================================

Shared fixtures for API tests.

Tests run against a throwaway SQLite file. The environment is set before
any app module is imported so the engine binds to it.
"""

import os
import tempfile

_TEST_DB_DIR = tempfile.mkdtemp(prefix="leaguehub-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")

from datetime import datetime, date, timezone
from decimal import Decimal
from typing import AsyncGenerator
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import Base, engine, async_session_factory
from app.domain import (
    ContractStatus, ContractType, FairPlayActionType, FairPlayStatus,
    MatchStatus, PlayerPosition, TransferType
)
from app.models import (
    Season, Team, Player, Match, FairPlayRecord, Transfer
)
from main import app


@pytest_asyncio.fixture(scope="function")
async def database() -> AsyncGenerator[None, None]:
    """Create the schema for one test and drop it afterwards."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def db_session(database) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with async_session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(database) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers() -> dict:
    return {"X-API-Key": settings.admin_api_key}


@pytest_asyncio.fixture(scope="function")
async def seeded_db(db_session: AsyncSession) -> AsyncSession:
    """
    Seed the database with test data.

    Creates:
    - 2 seasons (2025-26 active, 2024-25 closed)
    - 3 teams
    - 5 players:
        ana   normal contract at Harbour Rovers, has a registration transfer
        ben   seasonal contract at Millbrook Athletic, locked
        cal   free agent
        dan   seasonal contract at Northgate United from the closed season
        eva   normal contract at Northgate United, no transfer history
    - 4 matches: two completed, one scheduled, one completed without a score
    - 2 fair-play records against Millbrook (one overturned)

    Table: Harbour 3 pts, Northgate 1 pt, Millbrook 1 pt (worse goal difference).
    """
    previous = Season(
        id=uuid4(),
        name="2024-25",
        start_date=date(2024, 8, 1),
        end_date=date(2025, 5, 31),
        is_active=False
    )
    active = Season(
        id=uuid4(),
        name="2025-26",
        start_date=date(2025, 8, 1),
        end_date=date(2026, 5, 31),
        is_active=True
    )
    db_session.add_all([previous, active])
    await db_session.flush()

    harbour = Team(id=uuid4(), name="Harbour Rovers", season_id=active.id, manager="Ines Calder")
    millbrook = Team(id=uuid4(), name="Millbrook Athletic", season_id=active.id)
    northgate = Team(id=uuid4(), name="Northgate United", season_id=active.id)
    db_session.add_all([harbour, millbrook, northgate])
    await db_session.flush()

    ana = Player(
        id=uuid4(),
        name="Ana Costa",
        id_card_number="lh-0001",
        position=PlayerPosition.OUTFIELD_PLAYER,
        jersey_number=9,
        current_team_id=harbour.id,
        contract_status=ContractStatus.NORMAL,
        contract_team_id=harbour.id,
        contract_season_id=active.id,
        contract_type=ContractType.NORMAL,
        contract_start=date(2025, 8, 1),
        contract_value=Decimal("1200.00")
    )
    ben = Player(
        id=uuid4(),
        name="Ben Walsh",
        id_card_number="LH-0002",
        position=PlayerPosition.GOALKEEPER,
        jersey_number=1,
        current_team_id=millbrook.id,
        contract_status=ContractStatus.SEASONAL,
        contract_team_id=millbrook.id,
        contract_season_id=active.id,
        contract_type=ContractType.SEASONAL,
        contract_start=date(2025, 8, 1),
        contract_end=date(2026, 5, 31)
    )
    cal = Player(
        id=uuid4(),
        name="Cal Moreau",
        id_card_number="LH-0003",
        position=PlayerPosition.OUTFIELD_PLAYER,
        contract_status=ContractStatus.FREE_AGENT
    )
    dan = Player(
        id=uuid4(),
        name="Dan Petrov",
        id_card_number="LH-0004",
        position=PlayerPosition.OUTFIELD_PLAYER,
        jersey_number=4,
        current_team_id=northgate.id,
        contract_status=ContractStatus.SEASONAL,
        contract_team_id=northgate.id,
        contract_season_id=previous.id,
        contract_type=ContractType.SEASONAL,
        contract_start=date(2024, 8, 1),
        contract_end=date(2025, 5, 31)
    )
    eva = Player(
        id=uuid4(),
        name="Eva Lindqvist",
        id_card_number="LH-0005",
        position=PlayerPosition.OUTFIELD_PLAYER,
        jersey_number=7,
        current_team_id=northgate.id,
        contract_status=ContractStatus.NORMAL,
        contract_team_id=northgate.id,
        contract_season_id=active.id,
        contract_type=ContractType.NORMAL,
        contract_start=date(2025, 8, 1)
    )
    db_session.add_all([ana, ben, cal, dan, eva])
    await db_session.flush()

    registration = Transfer(
        id=uuid4(),
        player_id=ana.id,
        player_name=ana.name,
        from_team_id=None,
        to_team_id=harbour.id,
        season_id=active.id,
        transfer_date=datetime(2025, 8, 1, 12, 0, tzinfo=timezone.utc),
        transfer_type=TransferType.REGISTRATION,
        notes="initial registration"
    )
    db_session.add(registration)

    kickoff = datetime(2025, 9, 6, 15, 0, tzinfo=timezone.utc)
    harbour_millbrook = Match(
        id=uuid4(), home_team_id=harbour.id, away_team_id=millbrook.id, season_id=active.id,
        match_date=kickoff, status=MatchStatus.COMPLETED, home_score=2, away_score=0
    )
    millbrook_northgate = Match(
        id=uuid4(), home_team_id=millbrook.id, away_team_id=northgate.id, season_id=active.id,
        match_date=kickoff, status=MatchStatus.COMPLETED, home_score=1, away_score=1
    )
    northgate_harbour = Match(
        id=uuid4(), home_team_id=northgate.id, away_team_id=harbour.id, season_id=active.id,
        match_date=kickoff, status=MatchStatus.SCHEDULED
    )
    missing_score = Match(
        id=uuid4(), home_team_id=harbour.id, away_team_id=northgate.id, season_id=active.id,
        match_date=kickoff, status=MatchStatus.COMPLETED, home_score=3, away_score=None
    )
    db_session.add_all([harbour_millbrook, millbrook_northgate, northgate_harbour, missing_score])
    await db_session.flush()

    booking = FairPlayRecord(
        id=uuid4(), team_id=millbrook.id, player_id=ben.id, season_id=active.id,
        match_id=harbour_millbrook.id, action_type=FairPlayActionType.DISSENT_BY_WORD_ACTION,
        points=5, description="Dissent towards the referee", status=FairPlayStatus.ACTIVE
    )
    overturned = FairPlayRecord(
        id=uuid4(), team_id=millbrook.id, season_id=active.id,
        action_type=FairPlayActionType.ADMINISTRATIVE_BREACH,
        points=20, description="Late team sheet", status=FairPlayStatus.OVERTURNED
    )
    db_session.add_all([booking, overturned])
    await db_session.commit()

    # Store IDs for tests
    db_session.test_data = {
        "seasons": {"active": active.id, "previous": previous.id},
        "teams": {
            "harbour": harbour.id,
            "millbrook": millbrook.id,
            "northgate": northgate.id
        },
        "players": {
            "ana": ana.id,
            "ben": ben.id,
            "cal": cal.id,
            "dan": dan.id,
            "eva": eva.id
        },
        "matches": {
            "harbour_millbrook": harbour_millbrook.id,
            "northgate_harbour": northgate_harbour.id
        },
        "fair_play": {"booking": booking.id, "overturned": overturned.id},
        "transfers": {"ana_registration": registration.id}
    }

    return db_session
