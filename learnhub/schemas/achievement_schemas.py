"""
Achievement catalog and unlock-state schemas.
"""

from typing import Optional

from learnhub.models.achievement import MetricType
from learnhub.schemas.base import CamelModel


class AchievementResponse(CamelModel):
    id: int
    key: str
    title: str
    description: str
    icon: Optional[str] = None
    badge_color: Optional[str] = None
    points: int
    category: str
    metric: MetricType
    target: int


class AchievementListResponse(CamelModel):
    achievements: list[AchievementResponse]


class UserAchievementResponse(CamelModel):
    achievement: AchievementResponse
    progress: float
    completed: bool
    completed_at: Optional[str] = None


class UserAchievementListResponse(CamelModel):
    achievements: list[UserAchievementResponse]
    completed_count: int


class SeedAchievementsResponse(CamelModel):
    message: str
    count: int
