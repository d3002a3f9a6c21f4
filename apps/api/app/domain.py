"""
LeagueHub Domain Types
======================

Enumerations and immutable snapshots shared by the ORM layer and the two
pure computation modules (standings, transfers).

Snapshots are built by the service layer from database rows and handed to
the core. Nothing in this module touches the database.
"""

import enum
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID


# =============================================================================
# ENUMS
# =============================================================================

class MatchStatus(str, enum.Enum):
    """Lifecycle of a fixture."""
    SCHEDULED = "scheduled"
    LIVE = "live"
    COMPLETED = "completed"
    POSTPONED = "postponed"
    CANCELLED = "cancelled"


class PlayerPosition(str, enum.Enum):
    GOALKEEPER = "Goalkeeper"
    OUTFIELD_PLAYER = "Outfield Player"


class PlayerStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    INJURED = "injured"
    SUSPENDED = "suspended"
    RETIRED = "retired"


class ContractStatus(str, enum.Enum):
    """Contract state of a player. FREE_AGENT iff the player has no team."""
    FREE_AGENT = "free_agent"
    NORMAL = "normal"
    SEASONAL = "seasonal"


class ContractType(str, enum.Enum):
    """Kinds of contract a team can offer."""
    NORMAL = "normal"
    SEASONAL = "seasonal"


class TransferType(str, enum.Enum):
    """Types of transfer records."""
    REGISTRATION = "registration"
    TRANSFER = "transfer"
    LOAN = "loan"
    RELEASE = "release"


class FairPlayActionType(str, enum.Enum):
    """Disciplinary categories."""
    VIOLENT_CONDUCT = "violent_conduct"
    SERIOUS_FOUL_PLAY = "serious_foul_play"
    OFFENSIVE_LANGUAGE = "offensive_language"
    DISSENT_BY_WORD_ACTION = "dissent_by_word_action"
    UNSPORTING_BEHAVIOR = "unsporting_behavior"
    REFEREE_ABUSE = "referee_abuse"
    CROWD_TROUBLE = "crowd_trouble"
    ADMINISTRATIVE_BREACH = "administrative_breach"
    MISCONDUCT_OFF_FIELD = "misconduct_off_field"
    SUSPENDED_PLAYER_PARTICIPATED = "suspended_player_participated"
    OTHER = "other"


class FairPlayStatus(str, enum.Enum):
    ACTIVE = "active"
    APPEALED = "appealed"
    OVERTURNED = "overturned"
    REDUCED = "reduced"


class LoanReturnStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Fair-play statuses whose points count against a team
COUNTED_FAIR_PLAY_STATUSES = frozenset({FairPlayStatus.ACTIVE, FairPlayStatus.REDUCED})


# =============================================================================
# SNAPSHOTS
# =============================================================================

@dataclass(frozen=True)
class SeasonRef:
    id: UUID
    name: str
    is_active: bool
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class TeamRef:
    id: UUID
    name: str
    season_id: Optional[UUID] = None


@dataclass(frozen=True)
class MatchResult:
    """A fixture as seen by the standings engine. Scores may be missing."""
    id: UUID
    home_team_id: Optional[UUID]
    away_team_id: Optional[UUID]
    season_id: Optional[UUID]
    status: MatchStatus
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    match_date: Optional[date] = None


@dataclass(frozen=True)
class FairPlayEntry:
    team_id: UUID
    points: int
    status: FairPlayStatus = FairPlayStatus.ACTIVE
    season_id: Optional[UUID] = None
    player_id: Optional[UUID] = None


@dataclass(frozen=True)
class ContractTerms:
    """The player's current contract."""
    team_id: UUID
    season: SeasonRef
    contract_type: ContractType = ContractType.NORMAL
    start_date: Optional[date] = None
    end_date: Optional[date] = None  # None = open-ended
    contract_value: Decimal = Decimal("0")


@dataclass(frozen=True)
class PlayerSnapshot:
    id: UUID
    name: str
    current_team_id: Optional[UUID]
    contract_status: ContractStatus
    current_contract: Optional[ContractTerms] = None

    @property
    def is_free_agent(self) -> bool:
        return self.current_team_id is None
