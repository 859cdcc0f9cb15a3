"""
Achievement catalog and per-user unlock rows.
"""

from learnhub.config import Base
from learnhub.models.models import utcnow
from sqlalchemy import Column, Integer, String, Text, Boolean, Float, DateTime, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
from enum import Enum


class MetricType(str, Enum):
    """Aggregates that achievement thresholds are compared against."""
    MODULES_COMPLETED = "modules_completed"
    STREAK_DAYS = "streak_days"
    SCORE_ACHIEVED = "score_achieved"
    GAMES_PLAYED = "games_played"
    WIN_STREAK = "win_streak"
    STUDY_TIME_MINUTES = "study_time_minutes"
    FRIENDS_ADDED = "friends_added"


class Achievement(Base):
    __tablename__ = "achievements"
    id = Column(Integer, primary_key=True, index=True)
    key = Column(String, unique=True, index=True, nullable=False)  # stable slug, e.g. "first-steps"
    title = Column(String, unique=True, index=True, nullable=False)
    description = Column(Text, nullable=False)
    icon = Column(String, nullable=True)
    badge_color = Column(String, nullable=True)
    points = Column(Integer, default=0, nullable=False)  # XP reward
    category = Column(String, nullable=False)
    metric = Column(SQLEnum(MetricType), nullable=False, index=True)
    target = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class UserAchievement(Base):
    """At most one row per (user, achievement); completed never flips back."""
    __tablename__ = "user_achievements"
    __table_args__ = (
        UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    achievement_id = Column(Integer, ForeignKey("achievements.id"), index=True, nullable=False)
    progress = Column(Float, default=0.0, nullable=False)  # 0-100
    completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", backref="user_achievements", foreign_keys=[user_id])
    achievement = relationship("Achievement", foreign_keys=[achievement_id])
