"""
Game score recorder: XP per played game, GameStats bookkeeping, and the
game-metric achievements (games_played, win_streak, score_achieved).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import case, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from learnhub.models.achievement import MetricType
from learnhub.models.models import ActivityFeed, ActivityType, GameStats, utcnow
from learnhub.services.achievement_evaluator import AchievementEvaluator, UnlockedAchievement
from learnhub.services.activity_feed import list_activity, record_activity
from learnhub.services.errors import ValidationFailed
from learnhub.services.experience_service import award_experience, lock_user
from learnhub.services.xp_calculator import level_for
from learnhub.utils.logger import get_logger, log_request

logger = get_logger(__name__)

SPEED_BONUS_SECONDS = 300
FALLBACK_GAME_XP = 20
RECENT_GAMES = 10


@dataclass(frozen=True)
class GameXpRule:
    base: int
    perfect_multiplier: float = 1.0
    speed_bonus: int = 0
    win_bonus: int = 0


GAME_XP_RULES: dict[str, GameXpRule] = {
    "PYTHON_QUIZ": GameXpRule(base=10, perfect_multiplier=2.0, speed_bonus=5, win_bonus=3),
    "AI_AGENT_BUILDER": GameXpRule(base=25),
    "MULTIMODAL_WORKSHOP": GameXpRule(base=30),
}


def game_xp(game_type: str, score: int, max_score: int, time_spent: int, won: bool) -> int:
    if score < 0 or time_spent < 0:
        raise ValidationFailed("score and timeSpent must be non-negative")
    if max_score <= 0:
        raise ValidationFailed("maxScore must be positive")

    rule = GAME_XP_RULES.get(game_type.upper())
    if rule is None:
        return int(score / max_score * FALLBACK_GAME_XP)

    xp = rule.base
    if score >= max_score:
        xp = int(xp * rule.perfect_multiplier)
    if 0 < time_spent < SPEED_BONUS_SECONDS:
        xp += rule.speed_bonus
    if won:
        xp += rule.win_bonus
    return xp


@dataclass(frozen=True)
class GameSubmission:
    game_type: str
    score: int
    max_score: int = 100
    won: bool = False
    time_spent: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class GameResult:
    submission: GameSubmission
    stats: GameStats
    xp_earned: int
    new_personal_best: bool
    previous_level: int
    level: int
    new_achievements: list[UnlockedAchievement] = field(default_factory=list)

    @property
    def achievement_xp(self) -> int:
        return sum(a.xp_reward for a in self.new_achievements)

    @property
    def total_xp_earned(self) -> int:
        return self.xp_earned + self.achievement_xp

    @property
    def level_up(self) -> bool:
        return self.level > self.previous_level


@dataclass(frozen=True)
class RecentGame:
    id: int
    game_type: Optional[str]
    score: Optional[int]
    max_score: Optional[int]
    won: Optional[bool]
    xp_earned: Optional[int]
    played_at: datetime

    @classmethod
    def from_activity(cls, entry: ActivityFeed) -> "RecentGame":
        meta = entry.event_metadata or {}
        return cls(
            id=entry.id,
            game_type=meta.get("gameType"),
            score=meta.get("score"),
            max_score=meta.get("maxScore"),
            won=meta.get("won"),
            xp_earned=meta.get("xpEarned"),
            played_at=entry.created_at,
        )


@dataclass(frozen=True)
class GameOverview:
    stats: Optional[GameStats]
    global_rank: int
    recent_games: list[RecentGame]


class GameService:
    def __init__(self, db: Session):
        self.db = db
        self.evaluator = AchievementEvaluator(db)

    def record_score(
        self,
        user_id: int,
        submission: GameSubmission,
        *,
        now: Optional[datetime] = None,
    ) -> GameResult:
        game_type = (submission.game_type or "").strip()
        if not game_type:
            raise ValidationFailed("Game type and score are required")
        xp = game_xp(game_type, submission.score, submission.max_score, submission.time_spent, submission.won)
        now = now or utcnow()

        with log_request(logger, "games.score", user_id=user_id, game_type=game_type):
            try:
                result = self._run(user_id, submission, game_type, xp, now)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        self.db.refresh(result.stats)
        return result

    def _run(self, user_id: int, sub: GameSubmission, game_type: str, xp: int, now: datetime) -> GameResult:
        user = lock_user(self.db, user_id)
        previous_level = level_for(int(user.experience or 0))

        stats = self._stats_row(user_id)
        previous_best = int(stats.best_score or 0)
        first_game = int(stats.total_games or 0) == 0
        self._apply_game(stats, sub, now)

        award_experience(self.db, user_id, xp)

        unlocked: list[UnlockedAchievement] = []
        unlocked += self.evaluator.evaluate(user_id, MetricType.GAMES_PLAYED, int(stats.total_games), now=now)
        unlocked += self.evaluator.evaluate(user_id, MetricType.WIN_STREAK, int(stats.current_streak), now=now)
        unlocked += self.evaluator.evaluate(user_id, MetricType.SCORE_ACHIEVED, sub.score, now=now)

        new_best = first_game or sub.score > previous_best
        self.db.refresh(user)
        result = GameResult(
            submission=sub,
            stats=stats,
            xp_earned=xp,
            new_personal_best=new_best,
            previous_level=previous_level,
            level=int(user.level),
            new_achievements=unlocked,
        )

        record_activity(
            self.db,
            user_id,
            ActivityType.GAME_PLAYED,
            f"Played {game_type} - Score: {sub.score}/{sub.max_score}",
            {
                "gameType": game_type,
                "score": sub.score,
                "maxScore": sub.max_score,
                "won": sub.won,
                "timeSpent": sub.time_spent,
                "xpEarned": xp,
                "achievementXp": result.achievement_xp,
                "levelUp": result.level_up,
                "achievements": [a.title for a in unlocked],
                "details": sub.metadata,
            },
        )
        if new_best:
            record_activity(
                self.db,
                user_id,
                ActivityType.HIGH_SCORE,
                f"New personal best in {game_type}: {sub.score} points!",
                {"gameType": game_type, "score": sub.score, "previousBest": previous_best},
            )
        if result.level_up:
            record_activity(
                self.db,
                user_id,
                ActivityType.LEVEL_UP,
                f"Reached level {result.level}",
                {"previousLevel": previous_level, "level": result.level, "experience": int(user.experience)},
            )
        logger.info(
            "game recorded user_id=%s game_type=%s score=%s/%s won=%s xp=%s achievements=%s",
            user_id, game_type, sub.score, sub.max_score, sub.won, xp, len(unlocked),
        )
        return result

    def _stats_row(self, user_id: int) -> GameStats:
        stats = self.db.query(GameStats).filter(GameStats.user_id == user_id).first()
        if stats is not None:
            return stats
        stats = GameStats(
            user_id=user_id,
            total_games=0,
            games_won=0,
            games_lost=0,
            total_score=0,
            average_score=0.0,
            best_score=0,
            current_streak=0,
            best_streak=0,
            play_time=0,
        )
        try:
            with self.db.begin_nested():
                self.db.add(stats)
        except IntegrityError:
            logger.debug("game stats row already present user_id=%s", user_id)
            stats = self.db.query(GameStats).filter(GameStats.user_id == user_id).one()
        return stats

    def _apply_game(self, stats: GameStats, sub: GameSubmission, now: datetime) -> None:
        won = 1 if sub.won else 0
        values = {
            "total_games": GameStats.total_games + 1,
            "games_won": GameStats.games_won + won,
            "games_lost": GameStats.games_lost + (1 - won),
            "total_score": GameStats.total_score + sub.score,
            "average_score": (GameStats.total_score + sub.score) * 1.0 / (GameStats.total_games + 1),
            "best_score": case((GameStats.best_score < sub.score, sub.score), else_=GameStats.best_score),
            "current_streak": GameStats.current_streak + 1 if sub.won else 0,
            "best_streak": (
                case(
                    (GameStats.best_streak < GameStats.current_streak + 1, GameStats.current_streak + 1),
                    else_=GameStats.best_streak,
                )
                if sub.won
                else GameStats.best_streak
            ),
            "play_time": GameStats.play_time + sub.time_spent,
            "last_played_at": now,
        }
        self.db.execute(
            update(GameStats)
            .where(GameStats.id == stats.id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        self.db.refresh(stats)

    def overview(self, user_id: int) -> GameOverview:
        stats = self.db.query(GameStats).filter(GameStats.user_id == user_id).first()
        my_total = int(stats.total_score) if stats is not None else 0
        ahead = (
            self.db.query(func.count(GameStats.id))
            .filter(GameStats.total_score > my_total)
            .scalar()
        ) or 0
        recent = list_activity(self.db, user_id, limit=RECENT_GAMES, activity_type=ActivityType.GAME_PLAYED)
        return GameOverview(
            stats=stats,
            global_rank=int(ahead) + 1,
            recent_games=[RecentGame.from_activity(entry) for entry in recent],
        )
