"""001_initial_schema

Revision ID: 001
Revises:
Create Date: 2026-10-18 12:00:00.000000

Creates every table:
- Auth: users, refresh_tokens
- Catalog: tournaments, players, matches
- Personal lists: user_picks and the four ranking tables
- Forums: forums, threads, posts
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(with_updated: bool = True):
    columns = [sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())]
    if with_updated:
        columns.append(
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now())
        )
    return columns


def _ranking_table(name: str, short: str, entity: str, entity_table: str) -> None:
    """Create one ranking table: (user, entity, position) with per-user uniqueness."""
    op.create_table(
        name,
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column(entity, sa.Integer(), sa.ForeignKey(f'{entity_table}.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.UniqueConstraint('user_id', 'position', name=f'uq_top_{short}_user_position'),
        sa.UniqueConstraint('user_id', entity, name=f'uq_top_{short}_user_{entity.replace("_id", "")}'),
        sa.CheckConstraint('position >= 1', name=f'ck_top_{short}_position'),
    )


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('display_name', sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_users_email', 'users', ['email'])

    op.create_table(
        'refresh_tokens',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token_hash', sa.String(64), nullable=False, unique=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(with_updated=False),
    )
    op.create_index('idx_refresh_tokens_user', 'refresh_tokens', ['user_id'])
    op.create_index('idx_refresh_tokens_expires', 'refresh_tokens', ['expires_at'])

    op.create_table(
        'tournaments',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False, unique=True),
        sa.Column('is_grand_slam', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('idx_tournaments_name', 'tournaments', ['name'])

    op.create_table(
        'players',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False, unique=True),
        sa.Column('country_code', sa.String(3), nullable=False),
        *_timestamps(),
    )
    op.create_index('idx_players_name', 'players', ['name'])

    op.create_table(
        'matches',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('tournament_id', sa.Integer(), sa.ForeignKey('tournaments.id'), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('round', sa.String(50), nullable=False),
        sa.Column('is_final', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('best_of', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(50), nullable=False),
        sa.Column('player1_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=False),
        sa.Column('player2_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=False),
        sa.Column('score', sa.String(100), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('best_of IN (3, 5)', name='ck_matches_best_of'),
    )
    op.create_index('idx_matches_tournament', 'matches', ['tournament_id'])
    op.create_index('idx_matches_year', 'matches', ['year'])
    op.create_index('idx_matches_player1', 'matches', ['player1_id'])
    op.create_index('idx_matches_player2', 'matches', ['player2_id'])

    op.create_table(
        'user_picks',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('favorite_player_id', sa.Integer(), sa.ForeignKey('players.id', ondelete='SET NULL'), nullable=True),
        sa.Column('favorite_best_of5_match_id', sa.Integer(), sa.ForeignKey('matches.id', ondelete='SET NULL'), nullable=True),
        sa.Column('favorite_best_of3_match_id', sa.Integer(), sa.ForeignKey('matches.id', ondelete='SET NULL'), nullable=True),
        sa.Column('best_grand_slam_final_match_id', sa.Integer(), sa.ForeignKey('matches.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )

    _ranking_table('user_top10_best_of5_matches', 'bo5', 'match_id', 'matches')
    _ranking_table('user_top10_best_of3_matches', 'bo3', 'match_id', 'matches')
    _ranking_table('user_top10_players', 'players', 'player_id', 'players')
    _ranking_table('user_top5_grand_slam_finals', 'gsf', 'match_id', 'matches')

    op.create_table(
        'forums',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        *_timestamps(),
    )
    op.create_index('idx_forums_created_at', 'forums', ['created_at'])

    op.create_table(
        'threads',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('forum_id', sa.Integer(), sa.ForeignKey('forums.id', ondelete='CASCADE'), nullable=False),
        sa.Column('author_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('body', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_threads_forum', 'threads', ['forum_id'])

    op.create_table(
        'posts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('thread_id', sa.Integer(), sa.ForeignKey('threads.id', ondelete='CASCADE'), nullable=False),
        sa.Column('author_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('idx_posts_thread', 'posts', ['thread_id'])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    for table in (
        'posts',
        'threads',
        'forums',
        'user_top5_grand_slam_finals',
        'user_top10_players',
        'user_top10_best_of3_matches',
        'user_top10_best_of5_matches',
        'user_picks',
        'matches',
        'players',
        'tournaments',
        'refresh_tokens',
        'users',
    ):
        op.drop_table(table)
