"""
Data models. Single import surface for DB entities and their enums.

Users and events (learnhub.models.models):
- User, ActivityFeed, ActivityType, GameStats

Progress (learnhub.models.progress):
- ProgressRecord, ContentType, ProgressStatus

Achievements (learnhub.models.achievement):
- Achievement, UserAchievement, MetricType

Learning paths (learnhub.models.learning_path):
- LearningPath, LearningPathModule, UserLearningPath
"""

from learnhub.models.models import (
    User,
    ActivityFeed,
    ActivityType,
    GameStats,
    utcnow,
)
from learnhub.models.progress import ProgressRecord, ContentType, ProgressStatus
from learnhub.models.achievement import Achievement, UserAchievement, MetricType
from learnhub.models.learning_path import LearningPath, LearningPathModule, UserLearningPath

__all__ = [
    "User",
    "ActivityFeed",
    "ActivityType",
    "GameStats",
    "utcnow",
    "ProgressRecord",
    "ContentType",
    "ProgressStatus",
    "Achievement",
    "UserAchievement",
    "MetricType",
    "LearningPath",
    "LearningPathModule",
    "UserLearningPath",
]
