"""
User profile and activity feed endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from learnhub.config import get_db
from learnhub.models.models import ActivityType, User as DbUser
from learnhub.schemas.activity_schemas import ActivityListResponse, UserProfileResponse
from learnhub.schemas.user_schemas import User
from learnhub.services.activity_feed import MAX_FEED_PAGE, list_activity
from learnhub.services.xp_calculator import level_progress
from learnhub.utils.auth import get_current_user
from learnhub.utils.common import activity_response, display_name, iso_or_none, level_progress_response

user_routes = APIRouter()


@user_routes.get("/user/profile", response_model=UserProfileResponse)
async def get_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserProfileResponse:
    """XP, level, streak and totals for the current user."""
    user = db.query(DbUser).filter(DbUser.id == current_user.id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    experience = int(user.experience or 0)
    return UserProfileResponse(
        id=user.id,
        email=user.email,
        username=user.username,
        display_name=display_name(current_user),
        experience=experience,
        level=int(user.level),
        level_progress=level_progress_response(level_progress(experience)),
        streak=int(user.streak or 0),
        last_active_at=iso_or_none(user.last_active_at),
        total_study_minutes=int(user.total_study_seconds or 0) // 60,
        achievements_count=int(user.achievements_count or 0),
    )


@user_routes.get("/user/activity", response_model=ActivityListResponse)
async def get_activity(
    limit: int = Query(default=20, ge=1, le=MAX_FEED_PAGE),
    type: Optional[ActivityType] = Query(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ActivityListResponse:
    """
    Newest-first activity feed. Filter with e.g. ?type=achievement_earned.
    """
    entries = list_activity(db, current_user.id, limit=limit, activity_type=type)
    return ActivityListResponse(activity=[activity_response(e) for e in entries])
