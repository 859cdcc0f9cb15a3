from learnhub.config import Base
from sqlalchemy import Column, Integer, String, JSON, DateTime, ForeignKey, Text, Float, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite drops tzinfo, so every column stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ActivityType(str, Enum):
    """Kinds of activity feed entries."""
    ACHIEVEMENT_EARNED = "achievement_earned"
    MODULE_COMPLETED = "module_completed"
    QUIZ_PASSED = "quiz_passed"
    CONTENT_COMPLETED = "content_completed"
    PROGRESS_UPDATE = "progress_update"
    GAME_PLAYED = "game_played"
    HIGH_SCORE = "high_score"
    LEVEL_UP = "level_up"
    LEARNING_PATH_STARTED = "learning_path_started"
    LEARNING_PATH_COMPLETED = "learning_path_completed"


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    username = Column(String, unique=True, index=True, nullable=True)
    hashed_password = Column(String)
    preferences = Column(JSON)

    # Gamification state. level is always experience // 100 + 1.
    experience = Column(Integer, default=0, nullable=False)
    level = Column(Integer, default=1, nullable=False)
    streak = Column(Integer, default=0, nullable=False)
    last_active_at = Column(DateTime, nullable=True)
    total_study_seconds = Column(Integer, default=0, nullable=False)
    achievements_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class ActivityFeed(Base):
    """Append-only record of gamification events, for display."""
    __tablename__ = "activity_feed"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    type = Column(SQLEnum(ActivityType), nullable=False, index=True)
    description = Column(Text, nullable=False)
    # "metadata" is reserved on declarative classes.
    event_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    user = relationship("User", backref="activity", foreign_keys=[user_id])


class GameStats(Base):
    __tablename__ = "game_stats"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, index=True, nullable=False)
    total_games = Column(Integer, default=0, nullable=False)
    games_won = Column(Integer, default=0, nullable=False)
    games_lost = Column(Integer, default=0, nullable=False)
    total_score = Column(Integer, default=0, nullable=False)
    average_score = Column(Float, default=0.0, nullable=False)
    best_score = Column(Integer, default=0, nullable=False)
    current_streak = Column(Integer, default=0, nullable=False)  # consecutive wins
    best_streak = Column(Integer, default=0, nullable=False)
    play_time = Column(Integer, default=0, nullable=False)  # seconds
    last_played_at = Column(DateTime, nullable=True)

    user = relationship("User", backref="game_stats", foreign_keys=[user_id])
