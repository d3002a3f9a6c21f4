#!/usr/bin/env python3
"""
LeagueHub Seed Script
=====================

Seeds the database with demo data:
- 2 seasons (2025-26 active)
- 6 teams
- 24 players (4 free agents)
- A double round-robin, two thirds of it played
- A handful of fair-play records
- Registration transfers for every assigned player

Run with: python scripts/seed.py
"""

import asyncio
import random
import uuid
from datetime import datetime, date, timedelta, timezone
from decimal import Decimal
from itertools import permutations

from sqlalchemy import text

from app.database import async_session_maker, engine
from app.domain import (
    ContractStatus, ContractType, FairPlayActionType, FairPlayStatus,
    MatchStatus, PlayerPosition
)
from app.models import FairPlayRecord, Match, Player, Season, Team
from app import services


# =============================================================================
# SEED DATA DEFINITIONS
# =============================================================================

TEAMS_DATA = [
    {"name": "Harbour Rovers", "manager": "Ines Calder", "founded_year": 1921,
     "home_color": "#0B3D91", "away_color": "#FFFFFF"},
    {"name": "Millbrook Athletic", "manager": "Tomas Reyes", "founded_year": 1934,
     "home_color": "#C8102E", "away_color": "#000000"},
    {"name": "Northgate United", "manager": "Priya Anand", "founded_year": 1908,
     "home_color": "#006A4E", "away_color": "#F4F4F4"},
    {"name": "Eastfield Town", "manager": "Karl Weiss", "founded_year": 1952,
     "home_color": "#FFD100", "away_color": "#1D1D1B"},
    {"name": "Riverside FC", "manager": "Amara Okafor", "founded_year": 1899,
     "home_color": "#6CABDD", "away_color": "#1C2C5B"},
    {"name": "Old Quarry", "manager": "Lena Holm", "founded_year": 1976,
     "home_color": "#5B2C6F", "away_color": "#E5E5E5"},
]

FIRST_NAMES = [
    "Adam", "Bruno", "Caleb", "Dario", "Emil", "Felix", "Goran", "Hugo",
    "Ivan", "Jonas", "Kofi", "Luca", "Mateo", "Nils", "Omar", "Pavel",
    "Quinn", "Rafael", "Samir", "Theo", "Umar", "Viktor", "Wes", "Yusuf",
]
LAST_NAMES = [
    "Berg", "Costa", "Duarte", "Eriksen", "Fofana", "Gallo", "Haas", "Iqbal",
    "Janssen", "Kovac", "Lindqvist", "Moreau", "Nagy", "Oduya", "Petrov", "Quist",
    "Rossi", "Silva", "Tanaka", "Ueda", "Varga", "Walsh", "Yilmaz", "Zeller",
]

PLAYERS_PER_TEAM = 4
FREE_AGENT_COUNT = 4
PLAYED_SHARE = 2 / 3


def random_datetime_between(start: datetime, end: datetime) -> datetime:
    """Generate random datetime between two dates"""
    delta = end - start
    random_seconds = random.randint(0, int(delta.total_seconds()))
    return start + timedelta(seconds=random_seconds)


# =============================================================================
# SEEDING FUNCTIONS
# =============================================================================

async def seed_seasons(session) -> tuple[Season, Season]:
    """Seed last season and the active one"""
    previous = Season(
        id=uuid.uuid4(),
        name="2024-25",
        start_date=date(2024, 8, 1),
        end_date=date(2025, 5, 31),
        is_active=False,
        max_teams=6,
    )
    active = Season(
        id=uuid.uuid4(),
        name="2025-26",
        start_date=date(2025, 8, 1),
        end_date=date(2026, 5, 31),
        is_active=True,
        max_teams=6,
        registration_deadline=date(2025, 9, 1),
        description="Six-team double round-robin",
    )
    session.add_all([previous, active])
    await session.flush()
    print("✓ Seeded 2 seasons")
    return previous, active


async def seed_teams(session, season: Season) -> list[Team]:
    """Seed teams into the active season"""
    teams = []
    for data in TEAMS_DATA:
        team = Team(id=uuid.uuid4(), season_id=season.id, is_active=True, **data)
        session.add(team)
        teams.append(team)
    await session.flush()
    print(f"✓ Seeded {len(teams)} teams")
    return teams


async def seed_players(session, teams: list[Team], season: Season) -> list[Player]:
    """Seed players: a small squad per team plus a pool of free agents"""
    players = []
    names = [f"{first} {last}" for first, last in zip(FIRST_NAMES, LAST_NAMES)]

    for idx, name in enumerate(names):
        team_idx = idx // PLAYERS_PER_TEAM
        on_team = team_idx < len(teams)
        seasonal = on_team and idx % 5 == 0

        player = Player(
            id=uuid.uuid4(),
            name=name,
            id_card_number=f"LH{100000 + idx}",
            position=PlayerPosition.GOALKEEPER if idx % PLAYERS_PER_TEAM == 0 else PlayerPosition.OUTFIELD_PLAYER,
            jersey_number=(idx % PLAYERS_PER_TEAM) + 1 if on_team else None,
            current_team_id=teams[team_idx].id if on_team else None,
            contract_status=(
                ContractStatus.SEASONAL if seasonal
                else ContractStatus.NORMAL if on_team
                else ContractStatus.FREE_AGENT
            ),
        )
        if on_team:
            player.contract_team_id = teams[team_idx].id
            player.contract_season_id = season.id
            player.contract_type = ContractType.SEASONAL if seasonal else ContractType.NORMAL
            player.contract_start = season.start_date
            player.contract_end = season.end_date if seasonal else None
            player.contract_value = Decimal(random.randrange(5000, 50000, 500))
        session.add(player)
        players.append(player)

    await session.flush()
    print(f"✓ Seeded {len(players)} players ({FREE_AGENT_COUNT} free agents)")
    return players


async def seed_matches(session, teams: list[Team], season: Season) -> list[Match]:
    """Seed a double round-robin; the earlier fixtures are completed"""
    fixtures = list(permutations(teams, 2))
    random.shuffle(fixtures)
    played = int(len(fixtures) * PLAYED_SHARE)

    season_start = datetime.combine(season.start_date, datetime.min.time(), tzinfo=timezone.utc)
    matches = []
    for idx, (home, away) in enumerate(fixtures):
        match = Match(
            id=uuid.uuid4(),
            home_team_id=home.id,
            away_team_id=away.id,
            season_id=season.id,
            match_date=season_start + timedelta(days=7 * (idx // 3)),
            venue=f"{home.name} Ground",
        )
        if idx < played:
            match.status = MatchStatus.COMPLETED
            match.home_score = random.choices(range(6), weights=[25, 30, 22, 12, 7, 4])[0]
            match.away_score = random.choices(range(5), weights=[32, 33, 20, 10, 5])[0]
        else:
            match.status = MatchStatus.SCHEDULED
        session.add(match)
        matches.append(match)

    await session.flush()
    print(f"✓ Seeded {len(matches)} matches ({played} completed)")
    return matches


async def seed_fair_play(session, players: list[Player], matches: list[Match], season: Season) -> list[FairPlayRecord]:
    """Seed a few disciplinary records, one of them overturned on appeal"""
    records = []
    completed = [m for m in matches if m.status == MatchStatus.COMPLETED]
    assigned = [p for p in players if p.current_team_id is not None]

    for idx, player in enumerate(random.sample(assigned, 6)):
        action = random.choice([
            FairPlayActionType.SERIOUS_FOUL_PLAY,
            FairPlayActionType.DISSENT_BY_WORD_ACTION,
            FairPlayActionType.UNSPORTING_BEHAVIOR,
            FairPlayActionType.VIOLENT_CONDUCT,
        ])
        match = random.choice(completed)
        record = FairPlayRecord(
            id=uuid.uuid4(),
            team_id=player.current_team_id,
            player_id=player.id,
            season_id=season.id,
            match_id=match.id,
            action_type=action,
            points=random.choice([3, 5, 10]),
            description=f"{action.value.replace('_', ' ').capitalize()} by {player.name}",
            action_date=random_datetime_between(match.match_date, match.match_date + timedelta(hours=2)),
            status=FairPlayStatus.OVERTURNED if idx == 0 else FairPlayStatus.ACTIVE,
        )
        session.add(record)
        records.append(record)

    await session.flush()
    print(f"✓ Seeded {len(records)} fair-play records")
    return records


async def main():
    """Main seed function"""
    print("\n" + "="*60)
    print("LeagueHub Database Seeder")
    print("="*60 + "\n")

    async with async_session_maker() as session:
        try:
            # Clear existing data (in reverse order of dependencies)
            print("Clearing existing data...")
            await session.execute(text("TRUNCATE TABLE loan_returns, transfers, fair_play_records, "
                                       "matches, players, teams, seasons CASCADE"))
            print("✓ Cleared existing data\n")

            # Seed in order
            previous, active = await seed_seasons(session)
            teams = await seed_teams(session, active)
            players = await seed_players(session, teams, active)
            matches = await seed_matches(session, teams, active)
            records = await seed_fair_play(session, players, matches, active)

            # Commit all changes
            await session.commit()

            # Registration history for everyone already on a team
            backfill = await services.populate_registrations(session, active)

            print("\n" + "="*60)
            print("Seeding Complete!")
            print("="*60)
            print(f"""
Summary:
  - 2 seasons ({active.name} active)
  - {len(teams)} teams
  - {len(players)} players
  - {len(matches)} matches
  - {len(records)} fair-play records
  - {backfill.created} registration transfers
""")

        except Exception as e:
            await session.rollback()
            print(f"\n❌ Error during seeding: {e}")
            raise
        finally:
            await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
