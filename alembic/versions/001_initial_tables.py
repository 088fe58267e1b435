"""Initial tables

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

sport_division = sa.Enum('men', 'women', 'mixed', name='sportdivision')
sport_level = sa.Enum('elementary', 'high_school', 'college', name='sportlevel')
competition_stage_kind = sa.Enum(
    'group_stage', 'playins', 'playoffs', 'finals', name='competitionstagekind'
)
match_status = sa.Enum(
    'scheduled', 'in_progress', 'completed', 'cancelled', 'postponed', name='matchstatus'
)


def upgrade() -> None:
    # Seasons
    op.create_table(
        'seasons',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('start_at', sa.Date(), nullable=False),
        sa.Column('end_at', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    # Sports
    op.create_table(
        'sports',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'sport_categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sport_id', sa.Integer(), nullable=False),
        sa.Column('division', sport_division, nullable=False),
        sa.Column('levels', sport_level, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['sport_id'], ['sports.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sport_categories_sport_id', 'sport_categories', ['sport_id'])

    # Competition stages
    op.create_table(
        'competition_stages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('season_id', sa.Integer(), nullable=False),
        sa.Column('sport_category_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('competition_stage', competition_stage_kind, nullable=False),
        sa.Column('order_index', sa.Integer(), server_default='0', nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['season_id'], ['seasons.id'], ),
        sa.ForeignKeyConstraint(['sport_category_id'], ['sport_categories.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_competition_stages_season_id', 'competition_stages', ['season_id'])
    op.create_index(
        'ix_competition_stages_sport_category_id', 'competition_stages', ['sport_category_id']
    )

    # Schools and teams
    op.create_table(
        'schools',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('abbreviation', sa.String(length=20), nullable=False),
        sa.Column('logo_url', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'school_teams',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('school_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['school_id'], ['schools.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_school_teams_school_id', 'school_teams', ['school_id'])

    # Matches
    op.create_table(
        'matches',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('stage_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('venue', sa.String(length=255), nullable=False),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('best_of', sa.Integer(), server_default='1', nullable=False),
        sa.Column('status', match_status, server_default='scheduled', nullable=False),
        sa.Column('group_name', sa.String(length=50), nullable=True),
        sa.Column('round', sa.Integer(), nullable=True),
        sa.Column('position', sa.Integer(), nullable=True),
        sa.Column('advances_to_match_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['stage_id'], ['competition_stages.id'], ),
        sa.ForeignKeyConstraint(['advances_to_match_id'], ['matches.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_matches_stage_id', 'matches', ['stage_id'])
    op.create_index('ix_matches_advances_to_match_id', 'matches', ['advances_to_match_id'])
    op.create_index('ix_matches_scheduled_at_id', 'matches', ['scheduled_at', 'id'])
    op.create_index('ix_matches_stage_round_position', 'matches', ['stage_id', 'round', 'position'])

    op.create_table(
        'match_participants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('match_id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.Column('match_score', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['match_id'], ['matches.id'], ),
        sa.ForeignKeyConstraint(['team_id'], ['school_teams.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('match_id', 'team_id', name='uq_match_participants_match_team')
    )
    op.create_index('ix_match_participants_match_id', 'match_participants', ['match_id'])
    op.create_index('ix_match_participants_team_id', 'match_participants', ['team_id'])

    # Games and per-participant game scores
    op.create_table(
        'games',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('match_id', sa.Integer(), nullable=False),
        sa.Column('game_number', sa.Integer(), nullable=False),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['match_id'], ['matches.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('match_id', 'game_number', name='uq_games_match_game_number')
    )
    op.create_index('ix_games_match_id', 'games', ['match_id'])

    op.create_table(
        'game_scores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('game_id', sa.Integer(), nullable=False),
        sa.Column('match_participant_id', sa.Integer(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['game_id'], ['games.id'], ),
        sa.ForeignKeyConstraint(['match_participant_id'], ['match_participants.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('game_id', 'match_participant_id', name='uq_game_scores_game_participant'),
        sa.CheckConstraint('score >= 0', name='ck_game_scores_score_non_negative')
    )
    op.create_index('ix_game_scores_game_id', 'game_scores', ['game_id'])
    op.create_index('ix_game_scores_match_participant_id', 'game_scores', ['match_participant_id'])


def downgrade() -> None:
    op.drop_table('game_scores')
    op.drop_table('games')
    op.drop_table('match_participants')
    op.drop_table('matches')
    op.drop_table('school_teams')
    op.drop_table('schools')
    op.drop_table('competition_stages')
    op.drop_table('sport_categories')
    op.drop_table('sports')
    op.drop_table('seasons')

    match_status.drop(op.get_bind(), checkfirst=True)
    competition_stage_kind.drop(op.get_bind(), checkfirst=True)
    sport_level.drop(op.get_bind(), checkfirst=True)
    sport_division.drop(op.get_bind(), checkfirst=True)
