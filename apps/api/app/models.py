"""
LeagueHub Database Models
=========================

Reference data (seasons, teams, players, matches) is mutated by
administrative action. Two tables have stricter rules:

- transfers: append-only history. Rows are never updated or deleted,
  and player_id carries no foreign key so history outlives the player.
- loan_returns: scheduled reverse moves, a mutable work queue drained
  by the worker.

Players carry a version counter; concurrent writes against a stale row
fail instead of silently overwriting each other.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from sqlalchemy.sql import func

from app.database import Base
from app.domain import (
    ContractStatus,
    ContractType,
    FairPlayActionType,
    FairPlayStatus,
    LoanReturnStatus,
    MatchStatus,
    PlayerPosition,
    PlayerStatus,
    TransferType,
)


class ImmutableRecordError(Exception):
    """Raised when code tries to change or remove an append-only row."""


def _enum(enum_cls) -> Enum:
    # Store the lowercase values, matching the migration's enum types
    return Enum(
        enum_cls,
        name=enum_cls.__name__.lower(),
        values_callable=lambda members: [m.value for m in members],
    )


# =============================================================================
# REFERENCE DATA
# =============================================================================

class Season(Base):
    """League season. At most one should be active at a time."""
    __tablename__ = "seasons"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    max_teams: Mapped[int] = mapped_column(Integer, default=16)
    registration_deadline: Mapped[Optional[date]] = mapped_column(Date)
    description: Mapped[Optional[str]] = mapped_column(Text)

    # Metadata
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    teams: Mapped[list["Team"]] = relationship(back_populates="season")

    __table_args__ = (
        Index("ix_seasons_active", "is_active"),
        CheckConstraint("end_date >= start_date", name="ck_season_date_range"),
    )


class Team(Base):
    """A team registered for a season."""
    __tablename__ = "teams"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    season_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("seasons.id"), nullable=False)

    # Display
    logo_url: Mapped[Optional[str]] = mapped_column(String(500))
    home_color: Mapped[str] = mapped_column(String(7), default="#ffffff")  # Hex color
    away_color: Mapped[str] = mapped_column(String(7), default="#000000")
    manager: Mapped[Optional[str]] = mapped_column(String(255))
    founded_year: Mapped[Optional[int]] = mapped_column(Integer)

    # Metadata
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    season: Mapped["Season"] = relationship(back_populates="teams")
    players: Mapped[list["Player"]] = relationship(back_populates="current_team", foreign_keys="Player.current_team_id")

    __table_args__ = (
        Index("ix_teams_season", "season_id"),
    )


class Player(Base):
    """
    A registered player.

    contract_status is free_agent exactly when current_team_id is NULL.
    The contract_* columns hold the current contract, if any.
    """
    __tablename__ = "players"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Identity
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    id_card_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)

    # Playing profile
    position: Mapped[Optional[PlayerPosition]] = mapped_column(_enum(PlayerPosition))
    jersey_number: Mapped[Optional[int]] = mapped_column(Integer)
    status: Mapped[PlayerStatus] = mapped_column(_enum(PlayerStatus), default=PlayerStatus.ACTIVE, nullable=False)

    # Assignment
    current_team_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("teams.id"))
    contract_status: Mapped[ContractStatus] = mapped_column(
        _enum(ContractStatus), default=ContractStatus.FREE_AGENT, nullable=False
    )

    # Current contract
    contract_team_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("teams.id"))
    contract_season_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("seasons.id"))
    contract_type: Mapped[Optional[ContractType]] = mapped_column(_enum(ContractType))
    contract_start: Mapped[Optional[date]] = mapped_column(Date)
    contract_end: Mapped[Optional[date]] = mapped_column(Date)  # Null = open-ended
    contract_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))

    # Optimistic concurrency
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Metadata
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    current_team: Mapped[Optional["Team"]] = relationship(back_populates="players", foreign_keys=[current_team_id])
    contract_team: Mapped[Optional["Team"]] = relationship(foreign_keys=[contract_team_id])
    contract_season: Mapped[Optional["Season"]] = relationship(foreign_keys=[contract_season_id])

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_players_name", "name"),
        Index("ix_players_current_team", "current_team_id"),
        Index("ix_players_contract_status", "contract_status"),
        CheckConstraint(
            "jersey_number IS NULL OR (jersey_number >= 1 AND jersey_number <= 99)",
            name="ck_player_jersey_number_range"
        ),
        CheckConstraint(
            "(contract_status = 'free_agent') = (current_team_id IS NULL)",
            name="ck_player_free_agent_has_no_team"
        ),
    )

    @validates("id_card_number")
    def _normalize_id_card_number(self, key, value):
        return value.strip().upper() if value else value

    def clear_contract(self) -> None:
        self.contract_team_id = None
        self.contract_season_id = None
        self.contract_type = None
        self.contract_start = None
        self.contract_end = None
        self.contract_value = Decimal("0")


class Match(Base):
    """A fixture. Only completed matches with both scores count toward standings."""
    __tablename__ = "matches"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    home_team_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("teams.id"), nullable=False)
    away_team_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("teams.id"), nullable=False)
    season_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("seasons.id"), nullable=False)

    match_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    venue: Mapped[Optional[str]] = mapped_column(String(255))
    round: Mapped[str] = mapped_column(String(100), default="Regular Season")
    referee: Mapped[Optional[str]] = mapped_column(String(255))
    notes: Mapped[Optional[str]] = mapped_column(Text)

    status: Mapped[MatchStatus] = mapped_column(_enum(MatchStatus), default=MatchStatus.SCHEDULED, nullable=False)
    home_score: Mapped[Optional[int]] = mapped_column(Integer)
    away_score: Mapped[Optional[int]] = mapped_column(Integer)

    # Metadata
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    home_team: Mapped["Team"] = relationship(foreign_keys=[home_team_id])
    away_team: Mapped["Team"] = relationship(foreign_keys=[away_team_id])
    season: Mapped["Season"] = relationship(foreign_keys=[season_id])

    __table_args__ = (
        Index("ix_matches_season_status", "season_id", "status"),
        Index("ix_matches_home_team", "home_team_id"),
        Index("ix_matches_away_team", "away_team_id"),
        Index("ix_matches_date", "match_date"),
        CheckConstraint("home_score IS NULL OR home_score >= 0", name="ck_match_home_score_positive"),
        CheckConstraint("away_score IS NULL OR away_score >= 0", name="ck_match_away_score_positive"),
    )


# =============================================================================
# DISCIPLINE
# =============================================================================

class FairPlayRecord(Base):
    """
    Disciplinary points against a team (higher is worse).

    A null player_id is a team-level penalty. Overturned and appealed
    records do not count; reduced records count at their stored points,
    with the pre-reduction value kept in original_points.
    """
    __tablename__ = "fair_play_records"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    team_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("teams.id"), nullable=False)
    player_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("players.id", ondelete="SET NULL"))
    season_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("seasons.id"), nullable=False)
    match_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("matches.id", ondelete="SET NULL"))

    action_type: Mapped[FairPlayActionType] = mapped_column(_enum(FairPlayActionType), nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    action_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    reference: Mapped[Optional[str]] = mapped_column(String(255))

    # Appeal handling
    status: Mapped[FairPlayStatus] = mapped_column(_enum(FairPlayStatus), default=FairPlayStatus.ACTIVE, nullable=False)
    appeal_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    appeal_notes: Mapped[Optional[str]] = mapped_column(Text)
    original_points: Mapped[Optional[int]] = mapped_column(Integer)

    # Metadata
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    team: Mapped["Team"] = relationship(foreign_keys=[team_id])
    player: Mapped[Optional["Player"]] = relationship(foreign_keys=[player_id])

    __table_args__ = (
        Index("ix_fair_play_records_team_season", "team_id", "season_id"),
        Index("ix_fair_play_records_status", "status"),
        CheckConstraint("points >= 1 AND points <= 100", name="ck_fair_play_points_range"),
    )


# =============================================================================
# TRANSFER HISTORY
# =============================================================================

class Transfer(Base):
    """
    Append-only transfer history.

    Written once when a player's team assignment changes. There is no
    foreign key on player_id and the player's name is copied at write
    time, so history stays readable after a player is deleted.
    """
    __tablename__ = "transfers"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    player_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    player_name: Mapped[str] = mapped_column(String(100), nullable=False)
    from_team_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("teams.id"))  # Null = from free agency
    to_team_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("teams.id"))  # Null = released
    season_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("seasons.id"), nullable=False)

    transfer_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    transfer_type: Mapped[TransferType] = mapped_column(_enum(TransferType), nullable=False)
    fee: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2))
    notes: Mapped[str] = mapped_column(Text, default="")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    from_team: Mapped[Optional["Team"]] = relationship(foreign_keys=[from_team_id])
    to_team: Mapped[Optional["Team"]] = relationship(foreign_keys=[to_team_id])
    season: Mapped["Season"] = relationship(foreign_keys=[season_id])

    __table_args__ = (
        Index("ix_transfers_player", "player_id"),
        Index("ix_transfers_from_team", "from_team_id"),
        Index("ix_transfers_to_team", "to_team_id"),
        Index("ix_transfers_season", "season_id"),
        Index("ix_transfers_date", "transfer_date"),
    )


@event.listens_for(Transfer, "before_update")
def _refuse_transfer_update(mapper, connection, target: Transfer) -> None:
    raise ImmutableRecordError(f"Transfer {target.id} is append-only and cannot be updated")


@event.listens_for(Transfer, "before_delete")
def _refuse_transfer_delete(mapper, connection, target: Transfer) -> None:
    raise ImmutableRecordError(f"Transfer {target.id} is append-only and cannot be deleted")


class LoanReturn(Base):
    """A scheduled move back to the parent team at the end of a loan."""
    __tablename__ = "loan_returns"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    player_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("players.id", ondelete="CASCADE"), nullable=False)
    loan_transfer_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("transfers.id"), nullable=False)
    parent_team_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("teams.id"), nullable=False)
    loan_team_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("teams.id"), nullable=False)
    season_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("seasons.id"), nullable=False)

    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[LoanReturnStatus] = mapped_column(
        _enum(LoanReturnStatus), default=LoanReturnStatus.PENDING, nullable=False
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    return_transfer_id: Mapped[Optional[UUID]] = mapped_column(Uuid, ForeignKey("transfers.id"))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_loan_returns_due", "status", "due_date"),
        Index("ix_loan_returns_player", "player_id"),
    )
