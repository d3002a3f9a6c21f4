"""Initial schema

Revision ID: 001_initial_schema
Revises: 
Create Date: 2026-03-02

LeagueHub Database Schema
=========================

Reference data: seasons, teams, players, matches
Discipline: fair_play_records
History: transfers (append-only)
Work queue: loan_returns

Plus: a trigger refusing UPDATE and DELETE on transfers
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create enums first
    match_status_enum = postgresql.ENUM(
        'scheduled', 'live', 'completed', 'postponed', 'cancelled',
        name='matchstatus', create_type=False
    )
    match_status_enum.create(op.get_bind(), checkfirst=True)

    player_position_enum = postgresql.ENUM(
        'Goalkeeper', 'Outfield Player',
        name='playerposition', create_type=False
    )
    player_position_enum.create(op.get_bind(), checkfirst=True)

    player_status_enum = postgresql.ENUM(
        'active', 'inactive', 'injured', 'suspended', 'retired',
        name='playerstatus', create_type=False
    )
    player_status_enum.create(op.get_bind(), checkfirst=True)

    contract_status_enum = postgresql.ENUM(
        'free_agent', 'normal', 'seasonal',
        name='contractstatus', create_type=False
    )
    contract_status_enum.create(op.get_bind(), checkfirst=True)

    contract_type_enum = postgresql.ENUM('normal', 'seasonal', name='contracttype', create_type=False)
    contract_type_enum.create(op.get_bind(), checkfirst=True)

    transfer_type_enum = postgresql.ENUM(
        'registration', 'transfer', 'loan', 'release',
        name='transfertype', create_type=False
    )
    transfer_type_enum.create(op.get_bind(), checkfirst=True)

    fair_play_action_enum = postgresql.ENUM(
        'violent_conduct', 'serious_foul_play', 'offensive_language',
        'dissent_by_word_action', 'unsporting_behavior', 'referee_abuse',
        'crowd_trouble', 'administrative_breach', 'misconduct_off_field',
        'suspended_player_participated', 'other',
        name='fairplayactiontype', create_type=False
    )
    fair_play_action_enum.create(op.get_bind(), checkfirst=True)

    fair_play_status_enum = postgresql.ENUM(
        'active', 'appealed', 'overturned', 'reduced',
        name='fairplaystatus', create_type=False
    )
    fair_play_status_enum.create(op.get_bind(), checkfirst=True)

    loan_return_status_enum = postgresql.ENUM(
        'pending', 'completed', 'cancelled',
        name='loanreturnstatus', create_type=False
    )
    loan_return_status_enum.create(op.get_bind(), checkfirst=True)

    # =========================================================================
    # REFERENCE DATA
    # =========================================================================

    # Seasons table
    op.create_table(
        'seasons',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('max_teams', sa.Integer(), nullable=True, server_default='16'),
        sa.Column('registration_deadline', sa.Date(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('end_date >= start_date', name='ck_season_date_range')
    )
    op.create_index('ix_seasons_active', 'seasons', ['is_active'])

    # Teams table
    op.create_table(
        'teams',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('season_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('logo_url', sa.String(500), nullable=True),
        sa.Column('home_color', sa.String(7), nullable=True, server_default='#ffffff'),
        sa.Column('away_color', sa.String(7), nullable=True, server_default='#000000'),
        sa.Column('manager', sa.String(255), nullable=True),
        sa.Column('founded_year', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['season_id'], ['seasons.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', name='uq_team_name')
    )
    op.create_index('ix_teams_season', 'teams', ['season_id'])

    # Players table
    op.create_table(
        'players',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('id_card_number', sa.String(20), nullable=False),
        sa.Column('position', player_position_enum, nullable=True),
        sa.Column('jersey_number', sa.Integer(), nullable=True),
        sa.Column('status', player_status_enum, nullable=False, server_default='active'),
        sa.Column('current_team_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('contract_status', contract_status_enum, nullable=False, server_default='free_agent'),
        sa.Column('contract_team_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('contract_season_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('contract_type', contract_type_enum, nullable=True),
        sa.Column('contract_start', sa.Date(), nullable=True),
        sa.Column('contract_end', sa.Date(), nullable=True),
        sa.Column('contract_value', sa.Numeric(12, 2), nullable=True, server_default='0'),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['current_team_id'], ['teams.id']),
        sa.ForeignKeyConstraint(['contract_team_id'], ['teams.id']),
        sa.ForeignKeyConstraint(['contract_season_id'], ['seasons.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('id_card_number', name='uq_player_id_card_number'),
        sa.CheckConstraint(
            'jersey_number IS NULL OR (jersey_number >= 1 AND jersey_number <= 99)',
            name='ck_player_jersey_number_range'
        ),
        # A player has a team exactly when they are not a free agent
        sa.CheckConstraint(
            "(contract_status = 'free_agent') = (current_team_id IS NULL)",
            name='ck_player_free_agent_has_no_team'
        )
    )
    op.create_index('ix_players_name', 'players', ['name'])
    op.create_index('ix_players_current_team', 'players', ['current_team_id'])
    op.create_index('ix_players_contract_status', 'players', ['contract_status'])

    # Matches table
    op.create_table(
        'matches',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('home_team_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('away_team_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('season_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('match_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('venue', sa.String(255), nullable=True),
        sa.Column('round', sa.String(100), nullable=True, server_default='Regular Season'),
        sa.Column('referee', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', match_status_enum, nullable=False, server_default='scheduled'),
        sa.Column('home_score', sa.Integer(), nullable=True),
        sa.Column('away_score', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['home_team_id'], ['teams.id']),
        sa.ForeignKeyConstraint(['away_team_id'], ['teams.id']),
        sa.ForeignKeyConstraint(['season_id'], ['seasons.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('home_score IS NULL OR home_score >= 0', name='ck_match_home_score_positive'),
        sa.CheckConstraint('away_score IS NULL OR away_score >= 0', name='ck_match_away_score_positive')
    )
    op.create_index('ix_matches_season_status', 'matches', ['season_id', 'status'])
    op.create_index('ix_matches_home_team', 'matches', ['home_team_id'])
    op.create_index('ix_matches_away_team', 'matches', ['away_team_id'])
    op.create_index('ix_matches_date', 'matches', ['match_date'])

    # =========================================================================
    # DISCIPLINE
    # =========================================================================

    op.create_table(
        'fair_play_records',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('team_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('player_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('season_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('match_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('action_type', fair_play_action_enum, nullable=False),
        sa.Column('points', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('action_date', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('reference', sa.String(255), nullable=True),
        sa.Column('status', fair_play_status_enum, nullable=False, server_default='active'),
        sa.Column('appeal_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('appeal_notes', sa.Text(), nullable=True),
        sa.Column('original_points', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id']),
        sa.ForeignKeyConstraint(['player_id'], ['players.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['season_id'], ['seasons.id']),
        sa.ForeignKeyConstraint(['match_id'], ['matches.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('points >= 1 AND points <= 100', name='ck_fair_play_points_range')
    )
    op.create_index('ix_fair_play_records_team_season', 'fair_play_records', ['team_id', 'season_id'])
    op.create_index('ix_fair_play_records_status', 'fair_play_records', ['status'])

    # =========================================================================
    # TRANSFER HISTORY (APPEND-ONLY)
    # =========================================================================

    # No foreign key on player_id: history outlives the player
    op.create_table(
        'transfers',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('player_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('player_name', sa.String(100), nullable=False),
        sa.Column('from_team_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('to_team_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('season_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('transfer_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('transfer_type', transfer_type_enum, nullable=False),
        sa.Column('fee', sa.Numeric(12, 2), nullable=True),
        sa.Column('notes', sa.Text(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['from_team_id'], ['teams.id']),
        sa.ForeignKeyConstraint(['to_team_id'], ['teams.id']),
        sa.ForeignKeyConstraint(['season_id'], ['seasons.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_transfers_player', 'transfers', ['player_id'])
    op.create_index('ix_transfers_from_team', 'transfers', ['from_team_id'])
    op.create_index('ix_transfers_to_team', 'transfers', ['to_team_id'])
    op.create_index('ix_transfers_season', 'transfers', ['season_id'])
    op.create_index('ix_transfers_date', 'transfers', ['transfer_date'])

    op.execute("""
        CREATE OR REPLACE FUNCTION refuse_transfer_modification()
        RETURNS TRIGGER AS $$
        BEGIN
            RAISE EXCEPTION 'transfers is append-only (% refused)', TG_OP;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER transfers_append_only
        BEFORE UPDATE OR DELETE ON transfers
        FOR EACH ROW EXECUTE FUNCTION refuse_transfer_modification();
    """)

    # =========================================================================
    # LOAN RETURNS (WORK QUEUE)
    # =========================================================================

    op.create_table(
        'loan_returns',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('player_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('loan_transfer_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('parent_team_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('loan_team_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('season_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('status', loan_return_status_enum, nullable=False, server_default='pending'),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('return_transfer_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['player_id'], ['players.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['loan_transfer_id'], ['transfers.id']),
        sa.ForeignKeyConstraint(['parent_team_id'], ['teams.id']),
        sa.ForeignKeyConstraint(['loan_team_id'], ['teams.id']),
        sa.ForeignKeyConstraint(['season_id'], ['seasons.id']),
        sa.ForeignKeyConstraint(['return_transfer_id'], ['transfers.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_loan_returns_due', 'loan_returns', ['status', 'due_date'])
    op.create_index('ix_loan_returns_player', 'loan_returns', ['player_id'])


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS transfers_append_only ON transfers")
    op.execute("DROP FUNCTION IF EXISTS refuse_transfer_modification() CASCADE")

    # Drop tables in reverse order (respecting foreign keys)
    op.drop_table('loan_returns')
    op.drop_table('transfers')
    op.drop_table('fair_play_records')
    op.drop_table('matches')
    op.drop_table('players')
    op.drop_table('teams')
    op.drop_table('seasons')

    # Drop enums
    op.execute("DROP TYPE IF EXISTS loanreturnstatus")
    op.execute("DROP TYPE IF EXISTS fairplaystatus")
    op.execute("DROP TYPE IF EXISTS fairplayactiontype")
    op.execute("DROP TYPE IF EXISTS transfertype")
    op.execute("DROP TYPE IF EXISTS contracttype")
    op.execute("DROP TYPE IF EXISTS contractstatus")
    op.execute("DROP TYPE IF EXISTS playerstatus")
    op.execute("DROP TYPE IF EXISTS playerposition")
    op.execute("DROP TYPE IF EXISTS matchstatus")
