"""
Learning progress schemas: the progress update request/response and the
per-user progress summary.
"""

from typing import Optional

from pydantic import Field

from learnhub.models.progress import ContentType, ProgressStatus
from learnhub.schemas.base import CamelModel
from learnhub.schemas.learning_path_schemas import PathProgressResponse


class ProgressUpdateRequest(CamelModel):
    """
    One learning-activity submission. content_type and content_id are checked
    by the service so a missing key is reported as a 400, not a 422.
    """
    content_type: Optional[ContentType] = None
    content_id: Optional[str] = None
    progress_percent: float = Field(default=0.0, ge=0, le=100)
    time_spent: int = Field(default=0, ge=0)  # seconds
    score: Optional[float] = Field(default=None, ge=0)
    max_score: Optional[float] = Field(default=None, ge=0)
    completed: bool = False


class ProgressRecordResponse(CamelModel):
    id: int
    content_type: ContentType
    content_id: str
    status: ProgressStatus
    completion_percent: float
    time_spent: int
    score: Optional[float] = None
    max_score: Optional[float] = None
    attempt_count: int
    first_attempt_at: str
    last_attempt_at: str
    completed_at: Optional[str] = None  # ISO, set on first completion only


class UnlockedAchievementResponse(CamelModel):
    title: str
    xp_reward: int


class ProgressUpdateResponse(CamelModel):
    message: str
    progress: ProgressRecordResponse
    xp_earned: int
    achievement_xp: int
    level_up: bool
    new_achievements: list[UnlockedAchievementResponse]
    learning_paths: list[PathProgressResponse] = []
    streak_bonus: int
    level: int
    experience: int
    streak: int


class LevelProgressResponse(CamelModel):
    level: int
    xp_into_level: int
    xp_for_next_level: int
    percent: float


class ProgressSummaryResponse(CamelModel):
    """Totals for the dashboard: XP/level, streak, study time and recent attempts."""
    experience: int
    level: int
    level_progress: LevelProgressResponse
    streak: int
    total_study_minutes: int
    completed_count: int
    in_progress_count: int
    average_score: float  # percent over records with a max_score
    achievements_count: int
    recent: list[ProgressRecordResponse]
