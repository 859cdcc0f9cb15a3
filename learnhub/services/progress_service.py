"""
Progress service: the per-request pipeline behind POST /progress/update.

Progress Recorder -> XP/Level Calculator (applied atomically) -> Achievement
Evaluator, all in one transaction. A completed MODULE also advances the
user's learning paths. A failure at any stage rolls back every stage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from learnhub.models.achievement import MetricType
from learnhub.models.models import ActivityType, User, utcnow
from learnhub.models.progress import ContentType, ProgressRecord, ProgressStatus
from learnhub.services.achievement_evaluator import AchievementEvaluator, UnlockedAchievement
from learnhub.services.activity_feed import record_activity
from learnhub.services.errors import UserNotFound
from learnhub.services.experience_service import (
    award_experience,
    increment_counters,
    lock_user,
    record_streak,
)
from learnhub.services.learning_paths import PathAdvance, roll_up_module
from learnhub.services.progress_recorder import ProgressRecorder, ProgressSubmission
from learnhub.services.xp_calculator import (
    ActivityContext,
    LevelProgress,
    StreakOutcome,
    XpAward,
    calculate_award,
    day_gap,
    evaluate_streak,
    level_for,
    level_progress,
)
from learnhub.utils.logger import get_logger, log_request

logger = get_logger(__name__)

RECENT_ATTEMPTS = 10


@dataclass
class ProgressUpdateResult:
    record: ProgressRecord
    award: XpAward
    streak: Optional[StreakOutcome]
    new_achievements: list[UnlockedAchievement] = field(default_factory=list)
    learning_paths: list[PathAdvance] = field(default_factory=list)
    previous_level: int = 1
    level: int = 1
    experience: int = 0
    current_streak: int = 0

    @property
    def xp_earned(self) -> int:
        return self.award.xp_awarded

    @property
    def achievement_xp(self) -> int:
        return sum(a.xp_reward for a in self.new_achievements)

    @property
    def streak_bonus(self) -> int:
        return self.award.streak_bonus

    @property
    def level_up(self) -> bool:
        return self.level > self.previous_level


@dataclass(frozen=True)
class ProgressSummary:
    experience: int
    level: int
    level_progress: LevelProgress
    streak: int
    total_study_minutes: int
    completed_count: int
    in_progress_count: int
    average_score: float
    achievements_count: int
    recent: list[ProgressRecord]


def _activity_for(content_type: ContentType, completed: bool) -> ActivityType:
    if not completed:
        return ActivityType.PROGRESS_UPDATE
    if content_type == ContentType.MODULE:
        return ActivityType.MODULE_COMPLETED
    if content_type == ContentType.QUIZ:
        return ActivityType.QUIZ_PASSED
    return ActivityType.CONTENT_COMPLETED


class ProgressService:
    """One instance per request; owns the commit/rollback of that request."""

    def __init__(self, db: Session):
        self.db = db
        self.recorder = ProgressRecorder(db)
        self.evaluator = AchievementEvaluator(db)

    def update_progress(
        self,
        user_id: int,
        submission: ProgressSubmission,
        *,
        now: Optional[datetime] = None,
    ) -> ProgressUpdateResult:
        sub = submission.validated()
        now = now or utcnow()
        with log_request(logger, "progress.update", user_id=user_id, content=f"{sub.content_type.value}:{sub.content_id}"):
            try:
                result = self._run(user_id, sub, now)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        self.db.refresh(result.record)
        return result

    def _run(self, user_id: int, sub: ProgressSubmission, now: datetime) -> ProgressUpdateResult:
        user = lock_user(self.db, user_id)
        previous_level = level_for(int(user.experience or 0))

        recorded = self.recorder.record(user_id, sub, now=now)

        streak: Optional[StreakOutcome] = None
        award = calculate_award(int(user.experience or 0), ActivityContext(sub.content_type, first_completion=False))
        unlocked: list[UnlockedAchievement] = []
        paths: list[PathAdvance] = []

        increment_counters(self.db, user_id, total_study_seconds=sub.time_spent)

        if sub.completed:
            # Streak and daily bonuses follow the day gap on any completion;
            # the base reward and perfect bonus only on the first one.
            streak = evaluate_streak(int(user.streak or 0), day_gap(user.last_active_at, now))
            record_streak(self.db, user_id, streak, now)
            award = calculate_award(
                int(user.experience or 0),
                ActivityContext(
                    content_type=sub.content_type,
                    first_completion=recorded.first_completion,
                    score=sub.score,
                    max_score=sub.max_score,
                    streak=streak,
                ),
            )
            award_experience(self.db, user_id, award.xp_awarded)

            if sub.content_type == ContentType.MODULE:
                paths = roll_up_module(self.db, user_id, sub.content_id, now)
            unlocked = self._evaluate_achievements(user_id, streak, now)
        elif sub.time_spent:
            unlocked = self._evaluate_study_time(user_id, now)

        record_activity(
            self.db,
            user_id,
            _activity_for(sub.content_type, sub.completed),
            (
                f"Completed {sub.content_type.value.lower()}: {sub.content_id}"
                if sub.completed
                else f"Updated progress: {sub.progress_percent:g}%"
            ),
            {
                "contentType": sub.content_type.value,
                "contentId": sub.content_id,
                "progressPercent": sub.progress_percent,
                "timeSpent": sub.time_spent,
                "score": sub.score,
                "maxScore": sub.max_score,
                "xpEarned": award.xp_awarded,
                "achievements": [a.title for a in unlocked],
            },
        )

        self.db.refresh(user)
        result = ProgressUpdateResult(
            record=recorded.record,
            award=award,
            streak=streak,
            new_achievements=unlocked,
            learning_paths=paths,
            previous_level=previous_level,
            level=int(user.level),
            experience=int(user.experience),
            current_streak=int(user.streak),
        )
        if result.level_up:
            record_activity(
                self.db,
                user_id,
                ActivityType.LEVEL_UP,
                f"Reached level {result.level}",
                {"previousLevel": previous_level, "level": result.level, "experience": result.experience},
            )
        logger.info(
            "progress recorded user_id=%s content=%s:%s status=%s attempts=%s xp=%s achievements=%s level=%s",
            user_id, sub.content_type.value, sub.content_id, recorded.record.status.value,
            recorded.record.attempt_count, award.xp_awarded, len(unlocked), result.level,
        )
        return result

    def _evaluate_achievements(self, user_id: int, streak: StreakOutcome, now: datetime) -> list[UnlockedAchievement]:
        completed = (
            self.db.query(func.count(ProgressRecord.id))
            .filter(ProgressRecord.user_id == user_id, ProgressRecord.status == ProgressStatus.COMPLETED)
            .scalar()
        ) or 0
        unlocked: list[UnlockedAchievement] = []
        unlocked += self.evaluator.evaluate(user_id, MetricType.MODULES_COMPLETED, int(completed), now=now)
        unlocked += self._evaluate_study_time(user_id, now)
        unlocked += self.evaluator.evaluate(user_id, MetricType.STREAK_DAYS, streak.streak, now=now)
        return unlocked

    def _evaluate_study_time(self, user_id: int, now: datetime) -> list[UnlockedAchievement]:
        study_seconds = self.db.query(User.total_study_seconds).filter(User.id == user_id).scalar() or 0
        return self.evaluator.evaluate(user_id, MetricType.STUDY_TIME_MINUTES, int(study_seconds) // 60, now=now)

    def summary(self, user_id: int) -> ProgressSummary:
        user = self.db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise UserNotFound(user_id)

        counts = dict(
            self.db.query(ProgressRecord.status, func.count(ProgressRecord.id))
            .filter(ProgressRecord.user_id == user_id)
            .group_by(ProgressRecord.status)
            .all()
        )
        scored = (
            self.db.query(ProgressRecord.score, ProgressRecord.max_score)
            .filter(
                ProgressRecord.user_id == user_id,
                ProgressRecord.score.is_not(None),
                ProgressRecord.max_score > 0,
            )
            .all()
        )
        average = round(sum(s / m * 100.0 for s, m in scored) / len(scored), 2) if scored else 0.0
        recent = (
            self.db.query(ProgressRecord)
            .filter(ProgressRecord.user_id == user_id)
            .order_by(ProgressRecord.last_attempt_at.desc(), ProgressRecord.id.desc())
            .limit(RECENT_ATTEMPTS)
            .all()
        )
        experience = int(user.experience or 0)
        return ProgressSummary(
            experience=experience,
            level=int(user.level),
            level_progress=level_progress(experience),
            streak=int(user.streak or 0),
            total_study_minutes=int(user.total_study_seconds or 0) // 60,
            completed_count=int(counts.get(ProgressStatus.COMPLETED, 0)),
            in_progress_count=int(counts.get(ProgressStatus.IN_PROGRESS, 0)),
            average_score=average,
            achievements_count=int(user.achievements_count or 0),
            recent=recent,
        )
