"""Unit tests for the activity feed."""
import pytest

from learnhub.models.models import ActivityType
from learnhub.services.activity_feed import MAX_FEED_PAGE, list_activity, record_activity


@pytest.mark.unit
class TestActivityFeed:
    def test_newest_first(self, db_session, test_user):
        for i in range(3):
            record_activity(db_session, test_user.id, ActivityType.PROGRESS_UPDATE, f"step {i}")
        db_session.commit()
        entries = list_activity(db_session, test_user.id)
        assert [e.description for e in entries] == ["step 2", "step 1", "step 0"]

    def test_filter_by_type(self, db_session, test_user):
        record_activity(db_session, test_user.id, ActivityType.GAME_PLAYED, "played", {"score": 3})
        record_activity(db_session, test_user.id, ActivityType.LEVEL_UP, "level 2")
        entries = list_activity(db_session, test_user.id, activity_type=ActivityType.GAME_PLAYED)
        assert len(entries) == 1
        assert entries[0].event_metadata == {"score": 3}

    def test_limit_is_clamped(self, db_session, test_user):
        for i in range(5):
            record_activity(db_session, test_user.id, ActivityType.PROGRESS_UPDATE, f"step {i}")
        assert len(list_activity(db_session, test_user.id, limit=2)) == 2
        assert len(list_activity(db_session, test_user.id, limit=0)) == 1
        assert MAX_FEED_PAGE == 100

    def test_scoped_to_user(self, db_session, make_user):
        a, b = make_user(), make_user()
        record_activity(db_session, a.id, ActivityType.LEVEL_UP, "a")
        assert list_activity(db_session, b.id) == []

    def test_metadata_defaults_to_empty(self, db_session, test_user):
        entry = record_activity(db_session, test_user.id, ActivityType.LEVEL_UP, "level 3")
        assert entry.event_metadata == {}
