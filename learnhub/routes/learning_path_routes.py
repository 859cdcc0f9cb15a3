"""
Learning path endpoints: the path catalog (with the caller's progress when
logged in) and enrollment.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from learnhub.config import get_db
from learnhub.schemas.learning_path_schemas import (
    EnrollRequest,
    EnrollResponse,
    LearningPathListResponse,
    LearningPathResponse,
    PathModuleResponse,
)
from learnhub.schemas.user_schemas import User
from learnhub.services.errors import AlreadyEnrolled, LearningPathNotFound, UserNotFound
from learnhub.services.learning_paths import LearningPathService, LearningPathView
from learnhub.utils.auth import get_current_user, get_optional_user
from learnhub.utils.common import iso_or_none

learning_path_routes = APIRouter()


def _path_response(view: LearningPathView) -> LearningPathResponse:
    path = view.path
    return LearningPathResponse(
        id=path.id,
        key=path.key,
        title=path.title,
        description=path.description,
        category=path.category,
        difficulty=path.difficulty,
        estimated_time=int(path.estimated_time or 0),
        is_recommended=bool(path.is_recommended),
        progress=view.progress,
        status=view.status,
        completed_modules=view.completed_modules,
        total_modules=len(view.modules),
        current_module=view.enrollment.current_module if view.enrollment else None,
        completed_at=iso_or_none(view.enrollment.completed_at) if view.enrollment else None,
        enrolled=view.enrolled,
        xp_reward=view.xp_reward,
        modules=[
            PathModuleResponse(
                id=m.module_id,
                title=m.title,
                order=m.order,
                is_required=m.is_required,
                estimated_time=m.estimated_time,
                completed=m.completed,
            )
            for m in view.modules
        ],
    )


@learning_path_routes.get("", response_model=LearningPathListResponse)
async def list_learning_paths(
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> LearningPathListResponse:
    views = LearningPathService(db).list_paths(current_user.id if current_user else None)
    return LearningPathListResponse(
        learning_paths=[_path_response(v) for v in views],
        total=len(views),
    )


@learning_path_routes.post("/enroll", response_model=EnrollResponse)
async def enroll(
    body: EnrollRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> EnrollResponse:
    try:
        result = LearningPathService(db).enroll(current_user.id, body.learning_path_id)
    except LearningPathNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AlreadyEnrolled:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already enrolled in this learning path")
    except UserNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return EnrollResponse(
        message="Successfully enrolled in learning path",
        learning_path_id=result.enrollment.learning_path_id,
        status=result.enrollment.status,
        progress=float(result.enrollment.progress),
        xp_earned=result.xp_earned,
        level_up=result.level_up,
    )
