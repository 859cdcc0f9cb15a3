"""
Races between real sessions on a file-backed SQLite database: each worker
thread owns its own connection and transaction.
"""
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from learnhub.config import Base, enable_sqlite_savepoints
from learnhub.models.achievement import MetricType, UserAchievement
from learnhub.models.models import User
from learnhub.models.progress import ContentType, ProgressRecord
from learnhub.services.achievement_evaluator import AchievementEvaluator, seed_achievements
from learnhub.services.experience_service import award_experience
from learnhub.services.progress_recorder import ProgressSubmission
from learnhub.services.progress_service import ProgressService

WORKERS = 4
NOW = datetime(2025, 3, 10, 9, 0, 0)


@pytest.fixture
def file_sessions(tmp_path):
    import learnhub.models  # noqa: F401
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def racer_id(file_sessions):
    db = file_sessions()
    try:
        seed_achievements(db)
        user = User(email="racer@example.com", hashed_password="x")
        db.add(user)
        db.commit()
        return user.id
    finally:
        db.close()


def race(factory, work, workers=WORKERS):
    """Run work(db) in parallel threads, released together; returns every result."""
    barrier = threading.Barrier(workers)

    def run():
        db = factory()
        try:
            barrier.wait(timeout=10)
            return work(db)
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(run) for _ in range(workers)]
        return [f.result(timeout=60) for f in futures]


def load_user(factory, user_id) -> User:
    db = factory()
    try:
        return db.query(User).filter(User.id == user_id).one()
    finally:
        db.close()


@pytest.mark.integration
class TestConcurrentWrites:
    def test_parallel_awards_are_all_kept(self, file_sessions, racer_id):
        def work(db):
            change = award_experience(db, racer_id, 30)
            db.commit()
            return change

        changes = race(file_sessions, work)

        user = load_user(file_sessions, racer_id)
        assert user.experience == 30 * WORKERS
        assert user.level == 30 * WORKERS // 100 + 1
        assert sorted(c.new_experience for c in changes) == [30, 60, 90, 120]

    def test_parallel_evaluations_unlock_once(self, file_sessions, racer_id):
        def work(db):
            unlocked = AchievementEvaluator(db).evaluate(racer_id, MetricType.FRIENDS_ADDED, 1, now=NOW)
            db.commit()
            return unlocked

        results = race(file_sessions, work)

        assert sum(len(r) for r in results) == 1
        user = load_user(file_sessions, racer_id)
        assert user.achievements_count == 1
        assert user.experience == 50  # Friend Request, paid once
        db = file_sessions()
        try:
            assert db.query(UserAchievement).filter(UserAchievement.user_id == racer_id).count() == 1
        finally:
            db.close()

    def test_parallel_first_completions_pay_once(self, file_sessions, racer_id):
        submission = ProgressSubmission(ContentType.QUIZ, "quiz-1", 100, 60, score=10, max_score=10, completed=True)

        def work(db):
            return ProgressService(db).update_progress(racer_id, submission, now=NOW).xp_earned

        earned = race(file_sessions, work)

        # 25 base + 15 perfect + 5 daily, once; the others land on the same day.
        assert sorted(earned) == [0] * (WORKERS - 1) + [45]
        user = load_user(file_sessions, racer_id)
        assert user.experience == 45 + 50  # plus First Steps
        assert user.achievements_count == 1
        db = file_sessions()
        try:
            record = db.query(ProgressRecord).one()
            assert record.attempt_count == WORKERS
            assert record.time_spent == 60 * WORKERS
        finally:
            db.close()
