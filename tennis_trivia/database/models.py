"""
SQLAlchemy ORM models for the tennis trivia community.
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from tennis_trivia.database.db import Base

# Match category eligible for the best-of-3 ranking and pick
MEN_SINGLES = "men_singles"


class User(Base):
    """User accounts with email/password authentication."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    display_name = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    refresh_tokens = relationship(
        "RefreshToken", back_populates="user", cascade="all, delete-orphan"
    )
    picks = relationship("UserPicks", back_populates="user", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (Index("idx_users_email", "email"),)


class RefreshToken(Base):
    """Hashed JWT refresh tokens for token rotation. The raw token is never stored."""

    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token_hash = Column(String(64), nullable=False, unique=True)  # SHA-256 hex digest
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="refresh_tokens")

    __table_args__ = (
        Index("idx_refresh_tokens_user", "user_id"),
        Index("idx_refresh_tokens_expires", "expires_at"),
    )


class Tournament(Base):
    """Tournaments (reference data)."""

    __tablename__ = "tournaments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    slug = Column(String(100), nullable=False, unique=True)
    is_grand_slam = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    matches = relationship("Match", back_populates="tournament")

    __table_args__ = (Index("idx_tournaments_name", "name"),)


class Player(Base):
    """Tennis players (reference data)."""

    __tablename__ = "players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    slug = Column(String(100), nullable=False, unique=True)
    country_code = Column(String(3), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("idx_players_name", "name"),)


class Match(Base):
    """Historic matches (immutable reference data)."""

    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tournament_id = Column(Integer, ForeignKey("tournaments.id"), nullable=False)
    year = Column(Integer, nullable=False)
    round = Column(String(50), nullable=False)  # e.g. "F", "SF", "R16"
    is_final = Column(Boolean, default=False, nullable=False)
    best_of = Column(Integer, nullable=False)
    category = Column(String(50), nullable=False)  # e.g. "men_singles"
    player1_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    player2_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    score = Column(String(100), nullable=False)
    title = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    tournament = relationship("Tournament", back_populates="matches")
    player1 = relationship("Player", foreign_keys=[player1_id])
    player2 = relationship("Player", foreign_keys=[player2_id])

    __table_args__ = (
        CheckConstraint("best_of IN (3, 5)", name="ck_matches_best_of"),
        Index("idx_matches_tournament", "tournament_id"),
        Index("idx_matches_year", "year"),
        Index("idx_matches_player1", "player1_id"),
        Index("idx_matches_player2", "player2_id"),
    )


class UserPicks(Base):
    """A user's favorite selections. At most one row per user, updated in place."""

    __tablename__ = "user_picks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    favorite_player_id = Column(Integer, ForeignKey("players.id", ondelete="SET NULL"), nullable=True)
    favorite_best_of5_match_id = Column(
        Integer, ForeignKey("matches.id", ondelete="SET NULL"), nullable=True
    )
    favorite_best_of3_match_id = Column(
        Integer, ForeignKey("matches.id", ondelete="SET NULL"), nullable=True
    )
    best_grand_slam_final_match_id = Column(
        Integer, ForeignKey("matches.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="picks")
    favorite_player = relationship("Player", foreign_keys=[favorite_player_id])
    favorite_best_of5_match = relationship("Match", foreign_keys=[favorite_best_of5_match_id])
    favorite_best_of3_match = relationship("Match", foreign_keys=[favorite_best_of3_match_id])
    best_grand_slam_final = relationship("Match", foreign_keys=[best_grand_slam_final_match_id])


class UserTopBestOf5Match(Base):
    """Position in a user's top-10 best-of-5 matches."""

    __tablename__ = "user_top10_best_of5_matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    match_id = Column(Integer, ForeignKey("matches.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)

    match = relationship("Match")

    __table_args__ = (
        UniqueConstraint("user_id", "position", name="uq_top_bo5_user_position"),
        UniqueConstraint("user_id", "match_id", name="uq_top_bo5_user_match"),
        CheckConstraint("position >= 1", name="ck_top_bo5_position"),
    )


class UserTopBestOf3Match(Base):
    """Position in a user's top-10 best-of-3 men's singles matches."""

    __tablename__ = "user_top10_best_of3_matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    match_id = Column(Integer, ForeignKey("matches.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)

    match = relationship("Match")

    __table_args__ = (
        UniqueConstraint("user_id", "position", name="uq_top_bo3_user_position"),
        UniqueConstraint("user_id", "match_id", name="uq_top_bo3_user_match"),
        CheckConstraint("position >= 1", name="ck_top_bo3_position"),
    )


class UserTopPlayer(Base):
    """Position in a user's top-10 players."""

    __tablename__ = "user_top10_players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    player_id = Column(Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)

    player = relationship("Player")

    __table_args__ = (
        UniqueConstraint("user_id", "position", name="uq_top_players_user_position"),
        UniqueConstraint("user_id", "player_id", name="uq_top_players_user_player"),
        CheckConstraint("position >= 1", name="ck_top_players_position"),
    )


class UserTopGrandSlamFinal(Base):
    """Position in a user's top-5 Grand Slam finals."""

    __tablename__ = "user_top5_grand_slam_finals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    match_id = Column(Integer, ForeignKey("matches.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)

    match = relationship("Match")

    __table_args__ = (
        UniqueConstraint("user_id", "position", name="uq_top_gsf_user_position"),
        UniqueConstraint("user_id", "match_id", name="uq_top_gsf_user_match"),
        CheckConstraint("position >= 1", name="ck_top_gsf_position"),
    )


class Forum(Base):
    """Discussion forums."""

    __tablename__ = "forums"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    creator = relationship("User", foreign_keys=[created_by])
    threads = relationship("Thread", back_populates="forum", cascade="all, delete-orphan")

    __table_args__ = (Index("idx_forums_created_at", "created_at"),)


class Thread(Base):
    """Threads within a forum."""

    __tablename__ = "threads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    forum_id = Column(Integer, ForeignKey("forums.id", ondelete="CASCADE"), nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    title = Column(String(300), nullable=False)
    body = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    forum = relationship("Forum", back_populates="threads")
    author = relationship("User", foreign_keys=[author_id])
    posts = relationship("Post", back_populates="thread", cascade="all, delete-orphan")

    __table_args__ = (Index("idx_threads_forum", "forum_id"),)


class Post(Base):
    """Posts within a thread."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    thread_id = Column(Integer, ForeignKey("threads.id", ondelete="CASCADE"), nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    thread = relationship("Thread", back_populates="posts")
    author = relationship("User", foreign_keys=[author_id])

    __table_args__ = (Index("idx_posts_thread", "thread_id"),)
