"""Unit tests for XP and level arithmetic (pure functions, no DB)."""
from datetime import datetime

import pytest

from learnhub.models.progress import ContentType
from learnhub.services.errors import InvalidXpInput, ValidationFailed
from learnhub.services.xp_calculator import (
    DAILY_LOGIN_BONUS,
    PERFECT_SCORE_BONUS,
    STREAK_BONUS,
    ActivityContext,
    StreakOutcome,
    advance,
    base_reward,
    calculate_award,
    day_gap,
    evaluate_streak,
    is_perfect_score,
    level_for,
    level_progress,
)


@pytest.mark.unit
class TestLevels:
    @pytest.mark.parametrize(
        "experience,level",
        [(0, 1), (99, 1), (100, 2), (199, 2), (200, 3), (1050, 11)],
    )
    def test_level_is_experience_div_100_plus_one(self, experience, level):
        assert level_for(experience) == level

    def test_negative_experience_rejected(self):
        with pytest.raises(InvalidXpInput):
            level_for(-1)

    def test_invalid_xp_is_a_value_error(self):
        with pytest.raises(ValueError):
            advance(0, -5)

    def test_level_progress(self):
        progress = level_progress(140)
        assert progress.level == 2
        assert progress.xp_into_level == 40
        assert progress.xp_for_next_level == 60
        assert progress.percent == 40.0

    def test_advance_reports_level_up(self):
        assert advance(95, 45) == (140, 2, True)
        assert advance(100, 50) == (150, 2, False)

    def test_awards_are_additive(self):
        exp, level, _ = advance(30, 40)
        exp, level, _ = advance(exp, 55)
        assert (exp, level) == advance(30, 95)[:2]


@pytest.mark.unit
class TestBaseRewards:
    def test_rewards_per_content_type(self):
        assert base_reward(ContentType.LESSON) == 10
        assert base_reward(ContentType.QUIZ) == 25
        assert base_reward(ContentType.ASSIGNMENT) == 50
        assert base_reward(ContentType.MODULE) == 100

    def test_accepts_raw_value(self):
        assert base_reward("QUIZ") == 25


@pytest.mark.unit
class TestStreak:
    def test_no_previous_activity(self):
        assert day_gap(None, datetime(2025, 3, 10, 9)) is None

    def test_gap_uses_calendar_days(self):
        # 23:59 -> 00:01 is a new day even though only two minutes passed.
        assert day_gap(datetime(2025, 3, 9, 23, 59), datetime(2025, 3, 10, 0, 1)) == 1
        assert day_gap(datetime(2025, 3, 10, 0, 1), datetime(2025, 3, 10, 23, 59)) == 0
        assert day_gap(datetime(2025, 3, 7, 12), datetime(2025, 3, 10, 8)) == 3

    def test_clock_skew_counts_as_same_day(self):
        assert day_gap(datetime(2025, 3, 11, 8), datetime(2025, 3, 10, 8)) == 0

    def test_same_day_changes_nothing(self):
        assert evaluate_streak(4, 0) == StreakOutcome(streak=4, streak_bonus=0, daily_bonus=0)

    def test_consecutive_day_extends_streak(self):
        outcome = evaluate_streak(4, 1)
        assert outcome.streak == 5
        assert outcome.streak_bonus == STREAK_BONUS
        assert outcome.daily_bonus == DAILY_LOGIN_BONUS

    def test_missed_day_resets(self):
        outcome = evaluate_streak(12, 2)
        assert outcome == StreakOutcome(streak=1, streak_bonus=0, daily_bonus=DAILY_LOGIN_BONUS)

    def test_first_activity_starts_streak(self):
        outcome = evaluate_streak(0, None)
        assert outcome.streak == 1
        assert outcome.new_day


@pytest.mark.unit
class TestCalculateAward:
    def test_perfect_quiz_on_new_day(self):
        award = calculate_award(
            95,
            ActivityContext(
                content_type=ContentType.QUIZ,
                first_completion=True,
                score=10,
                max_score=10,
                streak=evaluate_streak(0, None),
            ),
        )
        assert award.xp_awarded == 45
        assert award.base_xp == 25
        assert award.perfect_bonus == PERFECT_SCORE_BONUS
        assert award.daily_bonus == DAILY_LOGIN_BONUS
        assert award.streak_bonus == 0
        assert award.new_experience == 140
        assert award.new_level == 2
        assert award.leveled_up is True

    def test_repeat_completion_on_new_day_pays_day_bonuses_only(self):
        award = calculate_award(
            300,
            ActivityContext(content_type=ContentType.MODULE, first_completion=False, streak=evaluate_streak(3, 1)),
        )
        assert award.base_xp == 0
        assert award.perfect_bonus == 0
        assert award.xp_awarded == STREAK_BONUS + DAILY_LOGIN_BONUS
        assert award.new_experience == 325

    def test_repeat_completion_same_day_earns_nothing(self):
        award = calculate_award(
            300,
            ActivityContext(
                content_type=ContentType.QUIZ,
                first_completion=False,
                score=10,
                max_score=10,
                streak=evaluate_streak(3, 0),
            ),
        )
        assert award.xp_awarded == 0
        assert award.new_experience == 300
        assert award.leveled_up is False

    def test_no_streak_context_earns_no_day_bonuses(self):
        award = calculate_award(0, ActivityContext(content_type=ContentType.LESSON, first_completion=True))
        assert award.xp_awarded == 10
        assert (award.streak_bonus, award.daily_bonus) == (0, 0)

    def test_perfect_bonus_only_for_quizzes(self):
        award = calculate_award(
            0,
            ActivityContext(content_type=ContentType.ASSIGNMENT, first_completion=True, score=50, max_score=50),
        )
        assert award.perfect_bonus == 0
        assert award.xp_awarded == 50

    def test_streak_bonus_included(self):
        award = calculate_award(
            0,
            ActivityContext(content_type=ContentType.LESSON, first_completion=True, streak=evaluate_streak(2, 1)),
        )
        assert award.xp_awarded == 10 + STREAK_BONUS + DAILY_LOGIN_BONUS

    def test_zero_max_score_is_never_perfect(self):
        assert not is_perfect_score(0, 0)
        assert not is_perfect_score(None, 10)
        assert is_perfect_score(10, 10)

    def test_negative_score_rejected(self):
        with pytest.raises(InvalidXpInput):
            calculate_award(0, ActivityContext(ContentType.QUIZ, first_completion=True, score=-1, max_score=10))

    def test_negative_experience_is_a_validation_failure(self):
        with pytest.raises(ValidationFailed):
            calculate_award(-10, ActivityContext(ContentType.QUIZ, first_completion=True))
