"""
Achievement evaluator: compares a caller-supplied metric value against the
catalog and unlocks every newly satisfied achievement exactly once per user.

The unique (user_id, achievement_id) constraint is the guard against
concurrent double unlocks: a losing insert raises IntegrityError inside its
SAVEPOINT and is treated as "already unlocked".
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from learnhub.models.achievement import Achievement, MetricType, UserAchievement
from learnhub.models.models import ActivityType, utcnow
from learnhub.services.achievement_catalog import DEFAULT_ACHIEVEMENTS, STARTER_ACHIEVEMENT_KEYS
from learnhub.services.activity_feed import record_activity
from learnhub.services.errors import ValidationFailed
from learnhub.services.experience_service import award_experience, increment_counters
from learnhub.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class UnlockedAchievement:
    achievement_id: int
    key: str
    title: str
    xp_reward: int


class AchievementEvaluator:
    """Runs inside the caller's transaction; never commits."""

    def __init__(self, db: Session):
        self.db = db

    def evaluate(
        self,
        user_id: int,
        metric: MetricType | str,
        value: int,
        *,
        now: Optional[datetime] = None,
    ) -> list[UnlockedAchievement]:
        """
        Unlock every achievement for metric whose target <= value that the
        user has not completed yet, in catalog order (target, then id). Each
        unlock awards its points as XP and appends an activity entry.
        """
        try:
            metric = MetricType(metric)
        except ValueError:
            raise ValidationFailed(f"Unknown metric: {metric}")
        if value is None or value < 0:
            raise ValidationFailed(f"Metric value must be non-negative, got {value}")
        now = now or utcnow()

        candidates = (
            self.db.query(Achievement)
            .filter(Achievement.metric == metric, Achievement.target <= value)
            .order_by(Achievement.target.asc(), Achievement.id.asc())
            .all()
        )
        self._update_partial_progress(user_id, metric, value)
        if not candidates:
            return []

        existing = {
            ua.achievement_id: ua
            for ua in self.db.query(UserAchievement).filter(
                UserAchievement.user_id == user_id,
                UserAchievement.achievement_id.in_([a.id for a in candidates]),
            )
        }

        unlocked: list[UnlockedAchievement] = []
        for achievement in candidates:
            current = existing.get(achievement.id)
            if current is not None and current.completed:
                continue
            if not self._claim(user_id, achievement, current, now):
                continue

            award_experience(self.db, user_id, int(achievement.points))
            increment_counters(self.db, user_id, achievements_count=1)
            record_activity(
                self.db,
                user_id,
                ActivityType.ACHIEVEMENT_EARNED,
                f"Earned achievement: {achievement.title}",
                {
                    "achievementId": achievement.id,
                    "key": achievement.key,
                    "title": achievement.title,
                    "xpReward": int(achievement.points),
                },
            )
            logger.info(
                "achievement unlocked user_id=%s key=%s metric=%s value=%s xp=%s",
                user_id, achievement.key, metric.value, value, achievement.points,
            )
            unlocked.append(
                UnlockedAchievement(
                    achievement_id=achievement.id,
                    key=achievement.key,
                    title=achievement.title,
                    xp_reward=int(achievement.points),
                )
            )
        return unlocked

    def _claim(
        self,
        user_id: int,
        achievement: Achievement,
        current: Optional[UserAchievement],
        now: datetime,
    ) -> bool:
        """True only for the caller whose write flipped the row to completed."""
        if current is not None:
            return self._complete_existing(current, now)
        try:
            with self.db.begin_nested():
                self.db.add(
                    UserAchievement(
                        user_id=user_id,
                        achievement_id=achievement.id,
                        progress=100.0,
                        completed=True,
                        completed_at=now,
                        created_at=now,
                    )
                )
        except IntegrityError:
            # Someone else inserted the row first. It may still be an
            # incomplete pre-seeded row, in which case the conditional update decides.
            logger.debug("user achievement already present user_id=%s key=%s", user_id, achievement.key)
            row = (
                self.db.query(UserAchievement)
                .filter(UserAchievement.user_id == user_id, UserAchievement.achievement_id == achievement.id)
                .first()
            )
            return row is not None and self._complete_existing(row, now)
        return True

    def _complete_existing(self, row: UserAchievement, now: datetime) -> bool:
        result = self.db.execute(
            update(UserAchievement)
            .where(UserAchievement.id == row.id, UserAchievement.completed.is_(False))
            .values(completed=True, progress=100.0, completed_at=now)
            .execution_options(synchronize_session=False)
        )
        self.db.expire(row)
        return result.rowcount == 1

    def _update_partial_progress(self, user_id: int, metric: MetricType, value: int) -> None:
        """Move progress on already-tracked, still-locked achievements of this metric."""
        rows = (
            self.db.query(UserAchievement, Achievement)
            .join(Achievement, Achievement.id == UserAchievement.achievement_id)
            .filter(
                UserAchievement.user_id == user_id,
                UserAchievement.completed.is_(False),
                Achievement.metric == metric,
                Achievement.target > value,
            )
            .all()
        )
        for ua, achievement in rows:
            ua.progress = max(float(ua.progress or 0.0), round(value * 100.0 / achievement.target, 2))
        if rows:
            self.db.flush()


def seed_achievements(db: Session) -> int:
    """Insert catalog rules missing from the table (matched by key). Returns how many were added."""
    present = {key for (key,) in db.query(Achievement.key).all()}
    created = 0
    for rule in DEFAULT_ACHIEVEMENTS:
        if rule.key in present:
            continue
        db.add(
            Achievement(
                key=rule.key,
                title=rule.title,
                description=rule.description,
                icon=rule.icon,
                badge_color=rule.badge_color,
                points=rule.points,
                category=rule.category,
                metric=rule.metric,
                target=rule.target,
            )
        )
        created += 1
    if created:
        db.flush()
        logger.info("achievement catalog seeded created=%s", created)
    return created


def seed_starter_achievements(db: Session, user_id: int) -> int:
    """Track the starter achievements (progress 0) for a newly registered user."""
    achievements = db.query(Achievement).filter(Achievement.key.in_(STARTER_ACHIEVEMENT_KEYS)).all()
    for achievement in achievements:
        db.add(UserAchievement(user_id=user_id, achievement_id=achievement.id, progress=0.0, completed=False))
    if achievements:
        db.flush()
    return len(achievements)
