"""create game_session and leaderboard_entry

Revision ID: 5c2a91d7e4b0
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2a91d7e4b0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'game_session' not in existing_tables:
        op.create_table(
            'game_session',
            sa.Column('id', sa.String(length=32), nullable=False),
            sa.Column('created_at_ms', sa.BigInteger(), nullable=False),
            sa.Column('deck', sa.Text(), nullable=False),
            sa.Column('revealed', sa.Text(), nullable=False),
            sa.Column('matched', sa.Text(), nullable=False),
            sa.Column('matched_count', sa.Integer(), nullable=False),
            sa.Column('move_count', sa.Integer(), nullable=False),
            sa.Column('completed', sa.Boolean(), nullable=False),
            sa.Column('completed_at_ms', sa.BigInteger(), nullable=True),
            sa.Column('last_move_at_ms', sa.BigInteger(), nullable=True),
            sa.Column('client_reported', sa.Boolean(), nullable=False),
            sa.Column('retired', sa.Boolean(), nullable=False),
            sa.Column('retired_at_ms', sa.BigInteger(), nullable=True),
            sa.Column('version_id', sa.Integer(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_game_session_retired', 'game_session', ['retired'])

    if 'leaderboard_entry' not in existing_tables:
        op.create_table(
            'leaderboard_entry',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('session_id', sa.String(length=32), nullable=False),
            sa.Column('name', sa.String(length=64), nullable=False),
            sa.Column('elapsed_ms', sa.BigInteger(), nullable=False),
            sa.Column('move_count', sa.Integer(), nullable=False),
            sa.Column('country', sa.String(length=16), nullable=False),
            sa.Column('submitted_at_ms', sa.BigInteger(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('session_id'),
        )
        op.create_index('ix_leaderboard_rank', 'leaderboard_entry', ['elapsed_ms', 'submitted_at_ms', 'id'])


def downgrade():
    op.drop_index('ix_leaderboard_rank', table_name='leaderboard_entry')
    op.drop_table('leaderboard_entry')
    op.drop_index('ix_game_session_retired', table_name='game_session')
    op.drop_table('game_session')
