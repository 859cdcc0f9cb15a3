"""
Common utility functions used across multiple routes.
"""

from datetime import datetime
from typing import Optional

from learnhub.models.achievement import Achievement, UserAchievement
from learnhub.models.models import ActivityFeed
from learnhub.models.progress import ProgressRecord
from learnhub.schemas.achievement_schemas import AchievementResponse, UserAchievementResponse
from learnhub.schemas.activity_schemas import ActivityResponse
from learnhub.schemas.progress_schemas import LevelProgressResponse, ProgressRecordResponse
from learnhub.schemas.user_schemas import User
from learnhub.services.xp_calculator import LevelProgress


def iso_format(dt: datetime) -> str:
    """Format datetime as ISO string with Z suffix."""
    return dt.isoformat() + "Z"


def iso_or_none(dt: Optional[datetime]) -> Optional[str]:
    return iso_format(dt) if dt is not None else None


def display_name(current_user: User) -> str:
    """Get display name from username, preferences or email."""
    if current_user.username:
        return current_user.username
    prefs = current_user.preferences or {}
    name = None
    if isinstance(prefs, dict):
        name = prefs.get("name") or prefs.get("full_name")
    if isinstance(name, str) and name.strip():
        return name.strip()
    # fallback: email prefix
    return current_user.email.split("@", 1)[0]


def level_progress_response(progress: LevelProgress) -> LevelProgressResponse:
    return LevelProgressResponse(
        level=progress.level,
        xp_into_level=progress.xp_into_level,
        xp_for_next_level=progress.xp_for_next_level,
        percent=progress.percent,
    )


def progress_record_response(record: ProgressRecord) -> ProgressRecordResponse:
    return ProgressRecordResponse(
        id=record.id,
        content_type=record.content_type,
        content_id=record.content_id,
        status=record.status,
        completion_percent=float(record.completion_percent or 0.0),
        time_spent=int(record.time_spent or 0),
        score=record.score,
        max_score=record.max_score,
        attempt_count=int(record.attempt_count or 0),
        first_attempt_at=iso_format(record.first_attempt_at),
        last_attempt_at=iso_format(record.last_attempt_at),
        completed_at=iso_or_none(record.completed_at),
    )


def achievement_response(achievement: Achievement) -> AchievementResponse:
    return AchievementResponse(
        id=achievement.id,
        key=achievement.key,
        title=achievement.title,
        description=achievement.description,
        icon=achievement.icon,
        badge_color=achievement.badge_color,
        points=achievement.points,
        category=achievement.category,
        metric=achievement.metric,
        target=achievement.target,
    )


def user_achievement_response(row: UserAchievement) -> UserAchievementResponse:
    return UserAchievementResponse(
        achievement=achievement_response(row.achievement),
        progress=float(row.progress or 0.0),
        completed=bool(row.completed),
        completed_at=iso_or_none(row.completed_at),
    )


def activity_response(entry: ActivityFeed) -> ActivityResponse:
    return ActivityResponse(
        id=entry.id,
        type=entry.type,
        description=entry.description,
        metadata=entry.event_metadata,
        created_at=iso_format(entry.created_at),
    )
