"""
XP and level arithmetic. Pure functions only: nothing here reads or writes the
database. experience_service applies the results atomically.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from learnhub.models.progress import ContentType
from learnhub.services.errors import InvalidXpInput

XP_PER_LEVEL = 100

BASE_REWARDS: dict[ContentType, int] = {
    ContentType.LESSON: 10,
    ContentType.QUIZ: 25,
    ContentType.ASSIGNMENT: 50,
    ContentType.MODULE: 100,
}

PERFECT_SCORE_BONUS = 15
STREAK_BONUS = 20
DAILY_LOGIN_BONUS = 5


def _require_non_negative(name: str, value: Optional[float]) -> None:
    if value is not None and value < 0:
        raise InvalidXpInput(f"{name} must be non-negative, got {value}")


def level_for(experience: int) -> int:
    """Fixed-width levels: 0-99 XP is level 1, 100-199 level 2, ..."""
    _require_non_negative("experience", experience)
    return experience // XP_PER_LEVEL + 1


@dataclass(frozen=True)
class LevelProgress:
    level: int
    xp_into_level: int
    xp_for_next_level: int
    percent: float


def level_progress(experience: int) -> LevelProgress:
    level = level_for(experience)
    into = experience % XP_PER_LEVEL
    return LevelProgress(
        level=level,
        xp_into_level=into,
        xp_for_next_level=XP_PER_LEVEL - into,
        percent=round(into * 100.0 / XP_PER_LEVEL, 2),
    )


def advance(current_experience: int, xp: int) -> tuple[int, int, bool]:
    """(new_experience, new_level, leveled_up) after adding xp."""
    _require_non_negative("experience", current_experience)
    _require_non_negative("xp", xp)
    new_experience = current_experience + xp
    new_level = level_for(new_experience)
    return new_experience, new_level, new_level > level_for(current_experience)


def base_reward(content_type: ContentType) -> int:
    return BASE_REWARDS[ContentType(content_type)]


def day_gap(last_active_at: Optional[datetime], now: datetime) -> Optional[int]:
    """
    Whole UTC calendar days between the previous activity and now.
    None when the user has no previous activity. Both values are naive UTC.
    """
    if last_active_at is None:
        return None
    return max(0, (now.date() - last_active_at.date()).days)


@dataclass(frozen=True)
class StreakOutcome:
    streak: int
    streak_bonus: int
    daily_bonus: int

    @property
    def new_day(self) -> bool:
        return self.daily_bonus > 0


def evaluate_streak(current_streak: int, gap: Optional[int]) -> StreakOutcome:
    """
    gap == 1 continues the streak and pays the streak bonus; a longer gap (or
    no previous activity) restarts it at 1. Same day changes nothing. Any new
    day pays the daily-login bonus.
    """
    _require_non_negative("streak", current_streak)
    if gap == 0:
        return StreakOutcome(streak=current_streak, streak_bonus=0, daily_bonus=0)
    if gap == 1:
        return StreakOutcome(streak=current_streak + 1, streak_bonus=STREAK_BONUS, daily_bonus=DAILY_LOGIN_BONUS)
    return StreakOutcome(streak=1, streak_bonus=0, daily_bonus=DAILY_LOGIN_BONUS)


@dataclass(frozen=True)
class ActivityContext:
    content_type: ContentType
    first_completion: bool
    score: Optional[float] = None
    max_score: Optional[float] = None
    streak: Optional[StreakOutcome] = None


@dataclass(frozen=True)
class XpAward:
    xp_awarded: int
    base_xp: int
    perfect_bonus: int
    streak_bonus: int
    daily_bonus: int
    new_experience: int
    new_level: int
    leveled_up: bool


def is_perfect_score(score: Optional[float], max_score: Optional[float]) -> bool:
    return score is not None and max_score is not None and max_score > 0 and score == max_score


def calculate_award(current_experience: int, context: ActivityContext) -> XpAward:
    """
    XP for one completed activity. The base reward for the content type and
    the perfect-score bonus (QUIZ only) are paid on a first completion; the
    streak and daily-login bonuses follow the day gap on any completion.
    """
    _require_non_negative("experience", current_experience)
    _require_non_negative("score", context.score)
    _require_non_negative("max_score", context.max_score)

    base = 0
    perfect = 0
    if context.first_completion:
        base = base_reward(context.content_type)
        if ContentType(context.content_type) == ContentType.QUIZ and is_perfect_score(context.score, context.max_score):
            perfect = PERFECT_SCORE_BONUS
    streak_bonus = context.streak.streak_bonus if context.streak else 0
    daily_bonus = context.streak.daily_bonus if context.streak else 0

    xp = base + perfect + streak_bonus + daily_bonus
    new_experience, new_level, leveled_up = advance(current_experience, xp)
    return XpAward(
        xp_awarded=xp,
        base_xp=base,
        perfect_bonus=perfect,
        streak_bonus=streak_bonus,
        daily_bonus=daily_bonus,
        new_experience=new_experience,
        new_level=new_level,
        leveled_up=leveled_up,
    )
