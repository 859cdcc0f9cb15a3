"""
Per-user, per-content-item progress rows.
"""

from learnhub.config import Base
from learnhub.models.models import utcnow
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
from enum import Enum


class ContentType(str, Enum):
    """Kinds of learning content a user can make progress on."""
    LESSON = "LESSON"
    QUIZ = "QUIZ"
    ASSIGNMENT = "ASSIGNMENT"
    MODULE = "MODULE"


class ProgressStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class ProgressRecord(Base):
    """
    One row per (user, content_type, content_id).

    attempt_count and time_spent only ever grow; completed_at is written once,
    on the first transition into COMPLETED.
    """
    __tablename__ = "progress_records"
    __table_args__ = (
        UniqueConstraint("user_id", "content_type", "content_id", name="uq_progress_user_content"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    content_type = Column(SQLEnum(ContentType), nullable=False)
    content_id = Column(String, nullable=False)
    status = Column(SQLEnum(ProgressStatus), default=ProgressStatus.NOT_STARTED, nullable=False, index=True)
    completion_percent = Column(Float, default=0.0, nullable=False)
    time_spent = Column(Integer, default=0, nullable=False)  # seconds
    score = Column(Float, nullable=True)
    max_score = Column(Float, nullable=True)
    attempt_count = Column(Integer, default=0, nullable=False)
    first_attempt_at = Column(DateTime, default=utcnow, nullable=False)
    last_attempt_at = Column(DateTime, default=utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", backref="progress_records", foreign_keys=[user_id])
