"""
ORM row -> core snapshot conversion.

Shared by the API services and the worker jobs so both hand the core
exactly the same view of a row. Relationships used here must already be
loaded by the caller.
"""

from decimal import Decimal
from typing import Optional

from app.domain import (
    ContractTerms,
    ContractType,
    FairPlayEntry,
    MatchResult,
    PlayerSnapshot,
    SeasonRef,
    TeamRef,
)
from app.models import FairPlayRecord, Match, Player, Season, Team


def season_ref(season: Season) -> SeasonRef:
    return SeasonRef(
        id=season.id,
        name=season.name,
        is_active=bool(season.is_active),
        start_date=season.start_date,
        end_date=season.end_date,
    )


def team_ref(team: Team) -> TeamRef:
    return TeamRef(id=team.id, name=team.name, season_id=team.season_id)


def match_result(match: Match) -> MatchResult:
    return MatchResult(
        id=match.id,
        home_team_id=match.home_team_id,
        away_team_id=match.away_team_id,
        season_id=match.season_id,
        status=match.status,
        home_score=match.home_score,
        away_score=match.away_score,
        match_date=match.match_date,
    )


def fair_play_entry(record: FairPlayRecord) -> FairPlayEntry:
    return FairPlayEntry(
        team_id=record.team_id,
        points=record.points,
        status=record.status,
        season_id=record.season_id,
        player_id=record.player_id,
    )


def contract_terms(player: Player) -> Optional[ContractTerms]:
    """The player's current contract, or None when the columns are empty."""
    if player.contract_team_id is None or player.contract_season is None:
        return None
    return ContractTerms(
        team_id=player.contract_team_id,
        season=season_ref(player.contract_season),
        contract_type=player.contract_type or ContractType.NORMAL,
        start_date=player.contract_start,
        end_date=player.contract_end,
        contract_value=player.contract_value or Decimal("0"),
    )


def player_snapshot(player: Player) -> PlayerSnapshot:
    """Requires `contract_season` to be loaded."""
    return PlayerSnapshot(
        id=player.id,
        name=player.name,
        current_team_id=player.current_team_id,
        contract_status=player.contract_status,
        current_contract=contract_terms(player),
    )
