"""
Learning paths: ordered groups of MODULE content and per-user enrollment rows.
"""

from learnhub.config import Base
from learnhub.models.models import utcnow
from learnhub.models.progress import ProgressStatus
from sqlalchemy import Column, Integer, String, Text, Boolean, Float, DateTime, ForeignKey, JSON, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship


class LearningPath(Base):
    __tablename__ = "learning_paths"
    id = Column(Integer, primary_key=True, index=True)
    key = Column(String, unique=True, index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, default="General", nullable=False)
    difficulty = Column(String, default="BEGINNER", nullable=False)
    estimated_time = Column(Integer, default=0, nullable=False)  # minutes
    is_public = Column(Boolean, default=True, nullable=False)
    is_recommended = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    modules = relationship(
        "LearningPathModule",
        back_populates="learning_path",
        order_by="LearningPathModule.order",
        cascade="all, delete-orphan",
    )


class LearningPathModule(Base):
    """module_id is the content_id that MODULE progress submissions carry."""
    __tablename__ = "learning_path_modules"
    __table_args__ = (
        UniqueConstraint("learning_path_id", "module_id", name="uq_path_module"),
    )

    id = Column(Integer, primary_key=True, index=True)
    learning_path_id = Column(Integer, ForeignKey("learning_paths.id"), index=True, nullable=False)
    module_id = Column(String, index=True, nullable=False)
    title = Column(String, nullable=False)
    order = Column(Integer, nullable=False)
    is_required = Column(Boolean, default=True, nullable=False)
    estimated_time = Column(Integer, default=0, nullable=False)  # minutes

    learning_path = relationship("LearningPath", back_populates="modules")


class UserLearningPath(Base):
    """
    One enrollment per (user, path). completed_modules lists module ids in
    completion order and never shrinks; completed_at is set once, at 100%.
    """
    __tablename__ = "user_learning_paths"
    __table_args__ = (
        UniqueConstraint("user_id", "learning_path_id", name="uq_user_learning_path"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    learning_path_id = Column(Integer, ForeignKey("learning_paths.id"), index=True, nullable=False)
    status = Column(SQLEnum(ProgressStatus), default=ProgressStatus.IN_PROGRESS, nullable=False)
    progress = Column(Float, default=0.0, nullable=False)  # 0-100
    completed_modules = Column(JSON, default=list, nullable=False)
    current_module = Column(String, nullable=True)
    started_at = Column(DateTime, default=utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    user = relationship("User", backref="learning_paths", foreign_keys=[user_id])
    learning_path = relationship("LearningPath", foreign_keys=[learning_path_id])
