from typing import Any, Optional

from learnhub.models.models import ActivityType
from learnhub.schemas.base import CamelModel
from learnhub.schemas.progress_schemas import LevelProgressResponse


class ActivityResponse(CamelModel):
    id: int
    type: ActivityType
    description: str
    metadata: Optional[dict[str, Any]] = None
    created_at: str


class ActivityListResponse(CamelModel):
    activity: list[ActivityResponse]


class UserProfileResponse(CamelModel):
    id: int
    email: str
    username: Optional[str] = None
    display_name: str
    experience: int
    level: int
    level_progress: LevelProgressResponse
    streak: int
    last_active_at: Optional[str] = None
    total_study_minutes: int
    achievements_count: int
