"""
Pytest configuration and shared fixtures for the test suite.
Ensures proper Python path and provides common fixtures for unit and integration tests.
"""
import os
import sys
import tempfile
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Keep the app's own engine, log files and startup seeding away from the working tree.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SEED_ACHIEVEMENTS_ON_STARTUP", "false")
os.environ.setdefault("LOG_DIR", str(Path(tempfile.gettempdir()) / "learnhub-test-logs"))

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


def make_engine():
    """In-memory SQLite shared by every session and thread of one test."""
    from learnhub.config import enable_sqlite_savepoints
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return enable_sqlite_savepoints(engine)


# ----- In-memory DB (for tests that need DB without touching real DB) -----
@pytest.fixture
def in_memory_engine():
    engine = make_engine()
    from learnhub.config import Base
    import learnhub.models  # noqa: F401
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(in_memory_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=in_memory_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def catalog(db_session):
    """The default achievement catalog, seeded and committed."""
    from learnhub.services.achievement_evaluator import seed_achievements
    seed_achievements(db_session)
    db_session.commit()
    return db_session


@pytest.fixture
def make_user(db_session):
    """Factory: make_user(experience=95) -> committed User row."""
    from learnhub.models.models import User
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=fields.pop("email", f"learner{n}@example.com"),
            hashed_password=fields.pop("hashed_password", "x"),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def test_user(make_user):
    return make_user(email="learner@example.com", username="learner")
