"""Unit tests for the progress update pipeline (recorder -> XP -> achievements)."""
from datetime import timedelta

import pytest

from learnhub.models.achievement import UserAchievement
from learnhub.models.models import ActivityFeed, ActivityType, User
from learnhub.models.progress import ContentType, ProgressRecord, ProgressStatus
from learnhub.services.errors import UserNotFound, ValidationFailed
from learnhub.services.progress_recorder import ProgressSubmission
from learnhub.services.progress_service import ProgressService


def completed_quiz(content_id="quiz-1", score=10, max_score=10, **extra) -> ProgressSubmission:
    return ProgressSubmission(
        content_type=ContentType.QUIZ,
        content_id=content_id,
        progress_percent=100,
        time_spent=extra.pop("time_spent", 120),
        score=score,
        max_score=max_score,
        completed=True,
        **extra,
    )


def completed_lesson(content_id: str) -> ProgressSubmission:
    return ProgressSubmission(ContentType.LESSON, content_id, 100, 60, completed=True)


def reload_user(db, user_id) -> User:
    db.expire_all()
    return db.query(User).filter(User.id == user_id).one()


@pytest.mark.unit
class TestUpdateProgress:
    def test_perfect_quiz_levels_up(self, db_session, make_user, day_one):
        user = make_user(experience=95)
        result = ProgressService(db_session).update_progress(user.id, completed_quiz(), now=day_one)

        assert result.xp_earned == 45
        assert result.award.perfect_bonus == 15
        assert result.award.daily_bonus == 5
        assert result.level_up is True
        assert result.level == 2
        assert result.experience == 140
        assert result.current_streak == 1
        assert result.new_achievements == []  # catalog not seeded

        stored = reload_user(db_session, user.id)
        assert (stored.experience, stored.level, stored.streak) == (140, 2, 1)
        assert stored.last_active_at == day_one

    def test_achievement_xp_reported_separately(self, catalog, make_user, day_one):
        user = make_user(experience=95)
        result = ProgressService(catalog).update_progress(user.id, completed_quiz(), now=day_one)

        assert [a.title for a in result.new_achievements] == ["First Steps"]
        assert result.xp_earned == 45
        assert result.achievement_xp == 50
        assert result.experience == 190
        assert reload_user(catalog, user.id).achievements_count == 1

    def test_repeat_completion_pays_day_bonuses_only(self, db_session, make_user, day_one):
        user = make_user()
        service = ProgressService(db_session)
        service.update_progress(user.id, completed_quiz(), now=day_one)
        again = service.update_progress(user.id, completed_quiz(), now=day_one + timedelta(days=1))

        # No base or perfect bonus the second time; the consecutive day still counts.
        assert again.award.base_xp == 0
        assert again.award.perfect_bonus == 0
        assert again.streak_bonus == 20
        assert again.xp_earned == 20 + 5
        assert again.current_streak == 2
        assert reload_user(db_session, user.id).experience == 45 + 25
        record = db_session.query(ProgressRecord).one()
        assert record.attempt_count == 2
        assert record.completed_at == day_one

    def test_recompletion_first_on_new_day_does_not_lose_day_bonuses(self, db_session, make_user, day_one):
        user = make_user()
        service = ProgressService(db_session)
        service.update_progress(user.id, completed_lesson("l-1"), now=day_one)

        day_two = day_one + timedelta(days=1)
        repeat = service.update_progress(user.id, completed_lesson("l-1"), now=day_two)
        fresh = service.update_progress(user.id, completed_lesson("l-2"), now=day_two + timedelta(hours=1))

        assert repeat.xp_earned == 20 + 5
        assert fresh.xp_earned == 10
        assert fresh.streak_bonus == 0
        assert repeat.xp_earned + fresh.xp_earned == 10 + 20 + 5
        assert fresh.current_streak == 2
        assert reload_user(db_session, user.id).experience == 15 + 35

    def test_consecutive_day_pays_streak_bonus(self, db_session, make_user, day_one):
        user = make_user(streak=3, last_active_at=day_one - timedelta(days=1))
        lesson = ProgressSubmission(ContentType.LESSON, "l-1", 100, 60, completed=True)
        result = ProgressService(db_session).update_progress(user.id, lesson, now=day_one)
        assert result.streak_bonus == 20
        assert result.xp_earned == 10 + 20 + 5
        assert result.current_streak == 4

    def test_same_day_keeps_streak(self, db_session, make_user, day_one):
        user = make_user(streak=3, last_active_at=day_one - timedelta(hours=2))
        lesson = ProgressSubmission(ContentType.LESSON, "l-1", 100, 60, completed=True)
        result = ProgressService(db_session).update_progress(user.id, lesson, now=day_one)
        assert result.xp_earned == 10
        assert result.current_streak == 3

    def test_in_progress_update_earns_nothing(self, db_session, make_user, day_one):
        user = make_user(streak=3, last_active_at=day_one - timedelta(days=5))
        partial = ProgressSubmission(ContentType.MODULE, "m-1", 40, 300)
        result = ProgressService(db_session).update_progress(user.id, partial, now=day_one)

        assert result.xp_earned == 0
        assert result.streak is None
        assert result.record.status == ProgressStatus.IN_PROGRESS
        stored = reload_user(db_session, user.id)
        assert stored.streak == 3
        assert stored.total_study_seconds == 300
        entry = db_session.query(ActivityFeed).one()
        assert entry.type == ActivityType.PROGRESS_UPDATE

    def test_activity_entries(self, db_session, make_user, day_one):
        user = make_user(experience=95)
        ProgressService(db_session).update_progress(user.id, completed_quiz(), now=day_one)
        types = {e.type for e in db_session.query(ActivityFeed).filter(ActivityFeed.user_id == user.id)}
        assert types == {ActivityType.QUIZ_PASSED, ActivityType.LEVEL_UP}

    def test_study_time_achievement(self, catalog, make_user, day_one):
        user = make_user(total_study_seconds=3500)
        partial = ProgressSubmission(ContentType.LESSON, "l-1", 50, 120)
        result = ProgressService(catalog).update_progress(user.id, partial, now=day_one)
        assert [a.key for a in result.new_achievements] == ["study-session"]

    def test_validation_runs_before_storage(self, db_session, make_user):
        user = make_user()
        with pytest.raises(ValidationFailed):
            ProgressService(db_session).update_progress(user.id, ProgressSubmission(None, None))
        assert db_session.query(ProgressRecord).count() == 0

    def test_unknown_user(self, db_session):
        with pytest.raises(UserNotFound):
            ProgressService(db_session).update_progress(999, completed_quiz())

    def test_failure_in_achievement_stage_rolls_back_everything(self, catalog, make_user, day_one, monkeypatch):
        user = make_user(experience=95)
        service = ProgressService(catalog)

        def boom(*args, **kwargs):
            raise RuntimeError("achievement store unavailable")

        monkeypatch.setattr(service.evaluator, "evaluate", boom)
        with pytest.raises(RuntimeError):
            service.update_progress(user.id, completed_quiz(), now=day_one)

        stored = reload_user(catalog, user.id)
        assert stored.experience == 95
        assert stored.streak == 0
        assert stored.last_active_at is None
        assert catalog.query(ProgressRecord).count() == 0
        assert catalog.query(UserAchievement).count() == 0
        assert catalog.query(ActivityFeed).count() == 0


@pytest.mark.unit
class TestSummary:
    def test_summary_totals(self, db_session, make_user, day_one):
        user = make_user()
        service = ProgressService(db_session)
        service.update_progress(user.id, completed_quiz(score=8, max_score=10, time_spent=600), now=day_one)
        service.update_progress(
            user.id,
            ProgressSubmission(ContentType.LESSON, "l-1", 30, 120),
            now=day_one + timedelta(minutes=5),
        )

        summary = service.summary(user.id)
        assert summary.completed_count == 1
        assert summary.in_progress_count == 1
        assert summary.average_score == 80.0
        assert summary.total_study_minutes == 12
        assert summary.experience == 30  # 25 base + 5 daily
        assert summary.level_progress.xp_for_next_level == 70
        assert [r.content_id for r in summary.recent] == ["l-1", "quiz-1"]

    def test_summary_unknown_user(self, db_session):
        with pytest.raises(UserNotFound):
            ProgressService(db_session).summary(42)
