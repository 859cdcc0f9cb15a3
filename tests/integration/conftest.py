"""
Integration test fixtures. Overrides get_db for API tests with an in-memory DB
shared between the test and the TestClient's worker threads.
"""
import pytest
from sqlalchemy.orm import sessionmaker


@pytest.fixture
def override_get_db(in_memory_engine):
    """Session factory dependency bound to the test's in-memory engine."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=in_memory_engine)

    def _get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    return _get_db


@pytest.fixture
def seeded_catalog(override_get_db):
    from learnhub.services.achievement_evaluator import seed_achievements
    db = next(override_get_db())
    try:
        seed_achievements(db)
        db.commit()
    finally:
        db.close()


@pytest.fixture
def api_client(override_get_db):
    """FastAPI TestClient with in-memory DB override."""
    from fastapi.testclient import TestClient
    from learnhub.api import app
    from learnhub.config import get_db
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def logged_in_client(api_client, seeded_catalog):
    """API client holding the auth cookie of a freshly registered user."""
    response = api_client.post(
        "/auth/register",
        json={
            "email": "player@example.com",
            "password": "testpass123",
            "confirm_password": "testpass123",
            "username": "player1",
        },
    )
    assert response.status_code == 200, response.text
    return api_client


@pytest.fixture
def seeded_paths(override_get_db):
    from learnhub.services.learning_paths import seed_learning_paths
    db = next(override_get_db())
    try:
        seed_learning_paths(db)
        db.commit()
    finally:
        db.close()
