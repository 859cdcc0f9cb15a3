"""
Learning-game endpoints: record a played game and read game stats.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from learnhub.config import get_db
from learnhub.models.models import GameStats
from learnhub.schemas.game_schemas import (
    GameOverviewResponse,
    GameResultResponse,
    GameScoreRequest,
    GameScoreResponse,
    GameStatsResponse,
    RecentGameResponse,
)
from learnhub.schemas.progress_schemas import UnlockedAchievementResponse
from learnhub.schemas.user_schemas import User
from learnhub.services.errors import UserNotFound, ValidationFailed
from learnhub.services.game_service import GameService, GameSubmission
from learnhub.utils.auth import get_current_user
from learnhub.utils.common import iso_format

game_routes = APIRouter()


def _stats_response(stats: Optional[GameStats]) -> GameStatsResponse:
    if stats is None:
        return GameStatsResponse()
    return GameStatsResponse(
        total_games=stats.total_games,
        games_won=stats.games_won,
        games_lost=stats.games_lost,
        total_score=stats.total_score,
        average_score=round(float(stats.average_score or 0.0), 2),
        best_score=stats.best_score,
        current_streak=stats.current_streak,
        best_streak=stats.best_streak,
        play_time=stats.play_time,
    )


@game_routes.post("/score", response_model=GameScoreResponse)
async def record_score(
    body: GameScoreRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GameScoreResponse:
    submission = GameSubmission(
        game_type=body.game_type,
        score=body.score,
        max_score=body.max_score,
        won=body.won,
        time_spent=body.time_spent,
        metadata=body.metadata,
    )
    try:
        result = GameService(db).record_score(current_user.id, submission)
    except ValidationFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except UserNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return GameScoreResponse(
        message="Game score recorded successfully",
        score=GameResultResponse(
            game_type=submission.game_type,
            score=submission.score,
            max_score=submission.max_score,
            won=submission.won,
            xp_earned=result.xp_earned,
            level_up=result.level_up,
            new_personal_best=result.new_personal_best,
            time_spent=submission.time_spent,
        ),
        stats=_stats_response(result.stats),
        new_achievements=[
            UnlockedAchievementResponse(title=a.title, xp_reward=a.xp_reward) for a in result.new_achievements
        ],
        total_xp_earned=result.total_xp_earned,
    )


@game_routes.get("/stats", response_model=GameOverviewResponse)
async def game_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GameOverviewResponse:
    overview = GameService(db).overview(current_user.id)
    return GameOverviewResponse(
        stats=_stats_response(overview.stats),
        global_rank=overview.global_rank,
        recent_games=[
            RecentGameResponse(
                id=g.id,
                game_type=g.game_type,
                score=g.score,
                max_score=g.max_score,
                won=g.won,
                xp_earned=g.xp_earned,
                played_at=iso_format(g.played_at),
            )
            for g in overview.recent_games
        ],
    )
