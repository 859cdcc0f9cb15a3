"""
Achievement catalog endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from learnhub.config import get_db
from learnhub.models.achievement import Achievement, UserAchievement
from learnhub.schemas.achievement_schemas import (
    AchievementListResponse,
    SeedAchievementsResponse,
    UserAchievementListResponse,
    UserAchievementResponse,
)
from learnhub.schemas.user_schemas import User
from learnhub.services.achievement_evaluator import seed_achievements
from learnhub.utils.auth import get_current_user
from learnhub.utils.common import achievement_response, user_achievement_response
from learnhub.utils.logger import get_logger

logger = get_logger(__name__)

achievement_routes = APIRouter()


@achievement_routes.get("", response_model=AchievementListResponse)
async def list_achievements(db: Session = Depends(get_db)) -> AchievementListResponse:
    catalog = (
        db.query(Achievement)
        .order_by(Achievement.category.asc(), Achievement.target.asc(), Achievement.id.asc())
        .all()
    )
    return AchievementListResponse(achievements=[achievement_response(a) for a in catalog])


@achievement_routes.get("/me", response_model=UserAchievementListResponse)
async def my_achievements(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserAchievementListResponse:
    """
    The whole catalog with the current user's state. Achievements the user has
    never been tracked on are reported with progress 0.
    """
    tracked = {
        ua.achievement_id: ua
        for ua in db.query(UserAchievement).filter(UserAchievement.user_id == current_user.id).all()
    }
    catalog = (
        db.query(Achievement)
        .order_by(Achievement.category.asc(), Achievement.target.asc(), Achievement.id.asc())
        .all()
    )
    items: list[UserAchievementResponse] = []
    for achievement in catalog:
        row = tracked.get(achievement.id)
        if row is not None:
            items.append(user_achievement_response(row))
        else:
            items.append(
                UserAchievementResponse(
                    achievement=achievement_response(achievement),
                    progress=0.0,
                    completed=False,
                    completed_at=None,
                )
            )
    return UserAchievementListResponse(
        achievements=items,
        completed_count=sum(1 for i in items if i.completed),
    )


@achievement_routes.post("/seed", response_model=SeedAchievementsResponse)
async def seed(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SeedAchievementsResponse:
    """Insert any default achievement missing from the catalog. Safe to repeat."""
    try:
        created = seed_achievements(db)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("achievement seed requested by user_id=%s created=%s", current_user.id, created)
    return SeedAchievementsResponse(message="Achievements seeded successfully", count=created)
