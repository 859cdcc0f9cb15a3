"""
Game score schemas.
"""

from typing import Any, Optional

from pydantic import Field

from learnhub.schemas.base import CamelModel
from learnhub.schemas.progress_schemas import UnlockedAchievementResponse


class GameScoreRequest(CamelModel):
    game_type: str = Field(min_length=1)
    score: int = Field(ge=0)
    max_score: int = Field(default=100, gt=0)
    won: bool = False
    time_spent: int = Field(default=0, ge=0)  # seconds
    metadata: dict[str, Any] = Field(default_factory=dict)


class GameStatsResponse(CamelModel):
    total_games: int = 0
    games_won: int = 0
    games_lost: int = 0
    total_score: int = 0
    average_score: float = 0.0
    best_score: int = 0
    current_streak: int = 0
    best_streak: int = 0
    play_time: int = 0


class GameResultResponse(CamelModel):
    game_type: str
    score: int
    max_score: int
    won: bool
    xp_earned: int
    level_up: bool
    new_personal_best: bool
    time_spent: int


class GameScoreResponse(CamelModel):
    message: str
    score: GameResultResponse
    stats: GameStatsResponse
    new_achievements: list[UnlockedAchievementResponse]
    total_xp_earned: int


class RecentGameResponse(CamelModel):
    id: int
    game_type: Optional[str] = None
    score: Optional[int] = None
    max_score: Optional[int] = None
    won: Optional[bool] = None
    xp_earned: Optional[int] = None
    played_at: str


class GameOverviewResponse(CamelModel):
    stats: GameStatsResponse
    global_rank: int
    recent_games: list[RecentGameResponse]
