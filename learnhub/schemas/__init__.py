"""
API schemas package. Import from submodules or from this package.

Example:
    from learnhub.schemas import ProgressUpdateRequest, GameScoreResponse
    from learnhub.schemas.progress_schemas import ProgressUpdateRequest
"""

from learnhub.schemas.auth_schemas import (
    AuthTokenPayload,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RegisterRequest,
    RegisterResponse,
)
from learnhub.schemas.user_schemas import User
from learnhub.schemas.progress_schemas import (
    ProgressUpdateRequest,
    ProgressRecordResponse,
    UnlockedAchievementResponse,
    ProgressUpdateResponse,
    LevelProgressResponse,
    ProgressSummaryResponse,
)
from learnhub.schemas.achievement_schemas import (
    AchievementResponse,
    AchievementListResponse,
    UserAchievementResponse,
    UserAchievementListResponse,
    SeedAchievementsResponse,
)
from learnhub.schemas.game_schemas import (
    GameScoreRequest,
    GameStatsResponse,
    GameResultResponse,
    GameScoreResponse,
    RecentGameResponse,
    GameOverviewResponse,
)
from learnhub.schemas.learning_path_schemas import (
    PathModuleResponse,
    LearningPathResponse,
    LearningPathListResponse,
    EnrollRequest,
    EnrollResponse,
    PathProgressResponse,
)
from learnhub.schemas.activity_schemas import (
    ActivityResponse,
    ActivityListResponse,
    UserProfileResponse,
)

__all__ = [
    # auth
    "AuthTokenPayload",
    "LoginRequest",
    "LoginResponse",
    "LogoutResponse",
    "RegisterRequest",
    "RegisterResponse",
    # user
    "User",
    # progress
    "ProgressUpdateRequest",
    "ProgressRecordResponse",
    "UnlockedAchievementResponse",
    "ProgressUpdateResponse",
    "LevelProgressResponse",
    "ProgressSummaryResponse",
    # achievements
    "AchievementResponse",
    "AchievementListResponse",
    "UserAchievementResponse",
    "UserAchievementListResponse",
    "SeedAchievementsResponse",
    # games
    "GameScoreRequest",
    "GameStatsResponse",
    "GameResultResponse",
    "GameScoreResponse",
    "RecentGameResponse",
    "GameOverviewResponse",
    # learning paths
    "PathModuleResponse",
    "LearningPathResponse",
    "LearningPathListResponse",
    "EnrollRequest",
    "EnrollResponse",
    "PathProgressResponse",
    # activity
    "ActivityResponse",
    "ActivityListResponse",
    "UserProfileResponse",
]
