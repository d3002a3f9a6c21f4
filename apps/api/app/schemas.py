"""
LeagueHub API Schemas
=====================

Pydantic schemas for request/response validation:
- Reference data (Season, Team, Player, Match)
- Standings table rows
- Transfer history and contract/loan requests
- Fair-play records
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List, Dict, Any

from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict, model_validator

from app.domain import (
    ContractStatus, ContractType, FairPlayActionType, FairPlayStatus,
    LoanReturnStatus, MatchStatus, PlayerPosition, PlayerStatus, TransferType
)


# =============================================================================
# BASE SCHEMAS
# =============================================================================

class BaseSchema(BaseModel):
    """Base schema with common configuration."""
    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# HEALTH & STATUS
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: datetime
    database: str
    environment: str


class ReadyResponse(BaseModel):
    """Readiness probe response."""
    ready: bool
    checks: Dict[str, bool]


# =============================================================================
# SEASON SCHEMAS
# =============================================================================

class SeasonBrief(BaseSchema):
    id: UUID
    name: str
    is_active: bool


class SeasonRead(SeasonBrief):
    start_date: date
    end_date: date
    max_teams: int = 16
    registration_deadline: Optional[date] = None
    description: Optional[str] = None


# =============================================================================
# TEAM SCHEMAS
# =============================================================================

class TeamBrief(BaseSchema):
    """Minimal team info."""
    id: UUID
    name: str
    logo_url: Optional[str] = None


class TeamRead(TeamBrief):
    season_id: UUID
    home_color: Optional[str] = None
    away_color: Optional[str] = None
    manager: Optional[str] = None
    founded_year: Optional[int] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


# =============================================================================
# STANDINGS SCHEMAS
# =============================================================================

class StandingRow(BaseModel):
    """One row of the league table."""
    position: int
    team_id: UUID
    team_name: str
    logo_url: Optional[str] = None
    matches_played: int
    wins: int
    draws: int
    losses: int
    goals_for: int
    goals_against: int
    goal_difference: int
    fair_play_points: int
    points: int


class StandingsResponse(BaseModel):
    season: SeasonBrief
    rows: List[StandingRow]
    excluded_matches: int = 0


# =============================================================================
# TRANSFER SCHEMAS
# =============================================================================

class TransferRead(BaseModel):
    """A transfer history row with display fields resolved."""
    id: UUID
    player_id: UUID
    player_name: str
    from_team_id: Optional[UUID] = None
    from_team_name: Optional[str] = None
    to_team_id: Optional[UUID] = None
    to_team_name: Optional[str] = None
    season_id: UUID
    season_name: Optional[str] = None
    transfer_date: datetime
    transfer_type: TransferType
    fee: Optional[Decimal] = None
    notes: str = ""
    description: str
    direction: str  # incoming, outgoing, transfer, registration


class LoanReturnRead(BaseSchema):
    id: UUID
    player_id: UUID
    parent_team_id: UUID
    loan_team_id: UUID
    due_date: date
    status: LoanReturnStatus
    completed_at: Optional[datetime] = None
    return_transfer_id: Optional[UUID] = None


# =============================================================================
# PLAYER SCHEMAS
# =============================================================================

class PlayerBrief(BaseSchema):
    """Minimal player info for lists."""
    id: UUID
    name: str
    position: Optional[PlayerPosition] = None
    jersey_number: Optional[int] = None
    current_team_id: Optional[UUID] = None
    contract_status: ContractStatus


class PlayerRead(PlayerBrief):
    id_card_number: str
    status: PlayerStatus
    version: int
    created_at: Optional[datetime] = None


class ContractRead(BaseModel):
    team_id: UUID
    team_name: Optional[str] = None
    season_id: Optional[UUID] = None
    season_name: Optional[str] = None
    contract_type: ContractType
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    contract_value: Decimal = Decimal("0")


class EligibilityRead(BaseModel):
    eligible: bool
    reason: Optional[str] = None
    message: Optional[str] = None
    locked_until: Optional[date] = None


class PlayerDetail(PlayerRead):
    """Full player profile."""
    current_team: Optional[TeamBrief] = None
    contract: Optional[ContractRead] = None
    eligibility: EligibilityRead
    transfers: List[TransferRead] = []
    pending_loan_return: Optional[LoanReturnRead] = None


class TeamDetail(TeamRead):
    """Team profile with squad, table position and recent moves."""
    season: Optional[SeasonBrief] = None
    squad: List[PlayerBrief] = []
    squad_count: int = 0
    standing: Optional[StandingRow] = None
    recent_transfers_in: List[TransferRead] = []
    recent_transfers_out: List[TransferRead] = []


# =============================================================================
# MATCH SCHEMAS
# =============================================================================

class MatchRead(BaseSchema):
    id: UUID
    home_team_id: UUID
    away_team_id: UUID
    season_id: UUID
    match_date: datetime
    venue: Optional[str] = None
    round: Optional[str] = None
    status: MatchStatus
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    referee: Optional[str] = None
    notes: Optional[str] = None


class MatchResultRequest(BaseModel):
    """Final score for a match."""
    home_score: int = Field(..., ge=0)
    away_score: int = Field(..., ge=0)
    notes: Optional[str] = None


# =============================================================================
# CONTRACT / LOAN REQUESTS
# =============================================================================

class ContractSignRequest(BaseModel):
    """
    Sign a player to a team, or move them to a new one.

    **Example request:**
    ```json
    {
        "team_id": "uuid",
        "contract_type": "seasonal",
        "start_date": "2025-01-15",
        "end_date": "2025-06-30",
        "contract_value": 1500,
        "notes": "signed after trial"
    }
    ```
    """
    team_id: UUID
    contract_type: ContractType = ContractType.NORMAL
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    contract_value: Decimal = Field(Decimal("0"), ge=0)
    fee: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class LoanRequest(BaseModel):
    loan_team_id: UUID
    return_date: date
    fee: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=500)


class TransferOutcomeResponse(BaseModel):
    """Result of a contract or loan action. transfer is null for a no-op."""
    success: bool
    outcome: str  # transferred, no_op, loaned
    message: str
    player: PlayerBrief
    transfer: Optional[TransferRead] = None
    loan_return: Optional[LoanReturnRead] = None


class BackfillResponse(BaseModel):
    success: bool
    season_id: UUID
    created: int
    skipped_free_agents: int
    skipped_with_history: int


# =============================================================================
# FAIR PLAY SCHEMAS
# =============================================================================

class FairPlayCreate(BaseModel):
    """
    Record a disciplinary action against a team.

    Omit `player_id` for a team-level penalty. `season_id` defaults to the
    active season.
    """
    team_id: UUID
    player_id: Optional[UUID] = None
    season_id: Optional[UUID] = None
    match_id: Optional[UUID] = None
    action_type: FairPlayActionType
    points: int = Field(5, ge=1, le=100)
    description: str = Field(..., min_length=1, max_length=500)
    reference: Optional[str] = None
    action_date: Optional[datetime] = None


class FairPlayUpdate(BaseModel):
    status: Optional[FairPlayStatus] = None
    points: Optional[int] = Field(None, ge=1, le=100)
    appeal_notes: Optional[str] = None


class FairPlayRead(BaseSchema):
    id: UUID
    team_id: UUID
    player_id: Optional[UUID] = None
    season_id: UUID
    match_id: Optional[UUID] = None
    action_type: FairPlayActionType
    points: int
    description: str
    action_date: Optional[datetime] = None
    reference: Optional[str] = None
    status: FairPlayStatus
    appeal_date: Optional[datetime] = None
    appeal_notes: Optional[str] = None
    original_points: Optional[int] = None


# =============================================================================
# ADMIN SCHEMAS
# =============================================================================

class AdminResponse(BaseModel):
    """Generic admin operation response."""
    success: bool
    message: str
    details: Optional[Dict[str, Any]] = None


# =============================================================================
# ERROR SCHEMAS
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None


class RejectionDetail(BaseModel):
    """Body of a 400 response for a transfer that is not allowed."""
    reason: str
    message: str
    locked_until: Optional[date] = None
