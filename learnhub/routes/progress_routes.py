"""
Learning progress endpoints: record an activity submission and read the
user's progress summary.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from learnhub.config import get_db
from learnhub.schemas.learning_path_schemas import PathProgressResponse
from learnhub.schemas.progress_schemas import (
    ProgressSummaryResponse,
    ProgressUpdateRequest,
    ProgressUpdateResponse,
    UnlockedAchievementResponse,
)
from learnhub.schemas.user_schemas import User
from learnhub.services.errors import UserNotFound, ValidationFailed
from learnhub.services.progress_recorder import ProgressSubmission
from learnhub.services.progress_service import ProgressService
from learnhub.utils.auth import get_current_user
from learnhub.utils.common import level_progress_response, progress_record_response

progress_routes = APIRouter()


@progress_routes.post("/update", response_model=ProgressUpdateResponse)
async def update_progress(
    body: ProgressUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProgressUpdateResponse:
    """
    Record one learning activity. The base reward is paid on the first
    completion only, day bonuses on any completion;
    every achievement the new totals satisfy is unlocked in the same request.
    """
    submission = ProgressSubmission(
        content_type=body.content_type,
        content_id=body.content_id,
        progress_percent=body.progress_percent,
        time_spent=body.time_spent,
        score=body.score,
        max_score=body.max_score,
        completed=body.completed,
    )
    try:
        result = ProgressService(db).update_progress(current_user.id, submission)
    except ValidationFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except UserNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ProgressUpdateResponse(
        message="Progress updated successfully",
        progress=progress_record_response(result.record),
        xp_earned=result.xp_earned,
        achievement_xp=result.achievement_xp,
        level_up=result.level_up,
        new_achievements=[
            UnlockedAchievementResponse(title=a.title, xp_reward=a.xp_reward) for a in result.new_achievements
        ],
        learning_paths=[
            PathProgressResponse(
                id=p.learning_path_id,
                title=p.title,
                progress=p.progress,
                status=p.status,
                path_completed=p.path_completed,
            )
            for p in result.learning_paths
        ],
        streak_bonus=result.streak_bonus,
        level=result.level,
        experience=result.experience,
        streak=result.current_streak,
    )


@progress_routes.get("", response_model=ProgressSummaryResponse)
async def get_progress(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProgressSummaryResponse:
    try:
        summary = ProgressService(db).summary(current_user.id)
    except UserNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return ProgressSummaryResponse(
        experience=summary.experience,
        level=summary.level,
        level_progress=level_progress_response(summary.level_progress),
        streak=summary.streak,
        total_study_minutes=summary.total_study_minutes,
        completed_count=summary.completed_count,
        in_progress_count=summary.in_progress_count,
        average_score=summary.average_score,
        achievements_count=summary.achievements_count,
        recent=[progress_record_response(r) for r in summary.recent],
    )
