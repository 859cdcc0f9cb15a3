"""
Storage-side application of XP and streak changes.

Every write here is a single UPDATE whose new values are computed by the
database from the stored ones, so two requests for the same user cannot lose
each other's award.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from learnhub.models.models import User
from learnhub.services.errors import InvalidXpInput, UserNotFound
from learnhub.services.xp_calculator import XP_PER_LEVEL, StreakOutcome, level_for
from learnhub.utils.logger import get_logger

logger = get_logger(__name__)

_COUNTERS = frozenset({"total_study_seconds", "achievements_count"})


@dataclass(frozen=True)
class ExperienceChange:
    previous_experience: int
    new_experience: int

    @property
    def previous_level(self) -> int:
        return level_for(self.previous_experience)

    @property
    def new_level(self) -> int:
        return level_for(self.new_experience)

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.previous_level


def lock_user(db: Session, user_id: int) -> User:
    """Load the user row with SELECT ... FOR UPDATE (a no-op on SQLite, which serializes writers)."""
    user = db.query(User).filter(User.id == user_id).with_for_update().first()
    if user is None:
        raise UserNotFound(user_id)
    return user


def current_experience(db: Session, user_id: int) -> int:
    value = db.execute(select(User.experience).where(User.id == user_id)).scalar_one_or_none()
    if value is None:
        raise UserNotFound(user_id)
    return int(value)


def award_experience(db: Session, user_id: int, xp: int) -> ExperienceChange:
    """Add xp to the user's experience and recompute level in one statement."""
    if xp < 0:
        raise InvalidXpInput(f"xp must be non-negative, got {xp}")
    if xp == 0:
        exp = current_experience(db, user_id)
        return ExperienceChange(exp, exp)

    stmt = (
        update(User)
        .where(User.id == user_id)
        .values(
            experience=User.experience + xp,
            level=(User.experience + xp) // XP_PER_LEVEL + 1,
        )
        .returning(User.experience)
        .execution_options(synchronize_session="fetch")
    )
    new_experience = db.execute(stmt).scalar_one_or_none()
    if new_experience is None:
        raise UserNotFound(user_id)
    change = ExperienceChange(int(new_experience) - xp, int(new_experience))
    logger.debug(
        "xp awarded user_id=%s xp=%s experience=%s level=%s",
        user_id, xp, change.new_experience, change.new_level,
    )
    return change


def increment_counters(db: Session, user_id: int, **deltas: int) -> None:
    """Atomic += on user counters, e.g. increment_counters(db, 1, total_study_seconds=90)."""
    unknown = set(deltas) - _COUNTERS
    if unknown:
        raise ValueError(f"not a user counter: {sorted(unknown)}")
    values = {name: getattr(User, name) + delta for name, delta in deltas.items() if delta}
    if not values:
        return
    db.execute(
        update(User)
        .where(User.id == user_id)
        .values(**values)
        .execution_options(synchronize_session="fetch")
    )


def record_streak(db: Session, user_id: int, outcome: StreakOutcome, now: datetime) -> None:
    """Persist a streak decision. Call with the user row locked (lock_user)."""
    db.execute(
        update(User)
        .where(User.id == user_id)
        .values(streak=outcome.streak, last_active_at=now)
        .execution_options(synchronize_session="fetch")
    )
