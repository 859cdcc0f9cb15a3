"""
Learning path schemas: the catalog with per-user progress and enrollment.
"""

from typing import Optional

from learnhub.models.progress import ProgressStatus
from learnhub.schemas.base import CamelModel


class PathModuleResponse(CamelModel):
    id: str
    title: str
    order: int
    is_required: bool
    estimated_time: int  # minutes
    completed: bool


class LearningPathResponse(CamelModel):
    id: int
    key: str
    title: str
    description: Optional[str] = None
    category: str
    difficulty: str
    estimated_time: int  # minutes
    is_recommended: bool
    progress: float
    status: ProgressStatus
    completed_modules: int
    total_modules: int
    current_module: Optional[str] = None
    completed_at: Optional[str] = None
    enrolled: bool
    xp_reward: int
    modules: list[PathModuleResponse]


class LearningPathListResponse(CamelModel):
    learning_paths: list[LearningPathResponse]
    total: int


class EnrollRequest(CamelModel):
    learning_path_id: int


class EnrollResponse(CamelModel):
    message: str
    learning_path_id: int
    status: ProgressStatus
    progress: float
    xp_earned: int
    level_up: bool


class PathProgressResponse(CamelModel):
    """A path moved forward by the module completed in this request."""
    id: int
    title: str
    progress: float
    status: ProgressStatus
    path_completed: bool
