"""Unit tests for the progress recorder against an in-memory DB."""
from datetime import timedelta

import pytest

from learnhub.models.progress import ContentType, ProgressRecord, ProgressStatus
from learnhub.services.errors import ValidationFailed
from learnhub.services.progress_recorder import ProgressRecorder, ProgressSubmission


def lesson(**overrides) -> ProgressSubmission:
    fields = dict(content_type=ContentType.LESSON, content_id="py-101", progress_percent=50.0, time_spent=60)
    fields.update(overrides)
    return ProgressSubmission(**fields)


@pytest.mark.unit
class TestSubmissionValidation:
    def test_missing_content_id(self):
        with pytest.raises(ValidationFailed, match="Content type and ID are required"):
            lesson(content_id=None).validated()

    def test_blank_content_id(self):
        with pytest.raises(ValidationFailed):
            lesson(content_id="   ").validated()

    def test_missing_content_type(self):
        with pytest.raises(ValidationFailed):
            lesson(content_type=None).validated()

    def test_unknown_content_type(self):
        with pytest.raises(ValidationFailed):
            lesson(content_type="VIDEO").validated()

    def test_negative_time_rejected(self):
        with pytest.raises(ValidationFailed):
            lesson(time_spent=-1).validated()

    def test_percent_out_of_range(self):
        with pytest.raises(ValidationFailed):
            lesson(progress_percent=101).validated()

    def test_normalizes(self):
        sub = lesson(content_type="QUIZ", content_id="  q1 ").validated()
        assert sub.content_type == ContentType.QUIZ
        assert sub.content_id == "q1"


@pytest.mark.unit
class TestRecord:
    def test_first_submission_creates_record(self, db_session, test_user, day_one):
        recorded = ProgressRecorder(db_session).record(test_user.id, lesson(), now=day_one)
        record = recorded.record
        assert recorded.created is True
        assert record.status == ProgressStatus.IN_PROGRESS
        assert record.attempt_count == 1
        assert record.time_spent == 60
        assert record.first_attempt_at == day_one
        assert record.completed_at is None
        assert recorded.first_completion is False

    def test_repeat_submission_accumulates(self, db_session, test_user, day_one):
        recorder = ProgressRecorder(db_session)
        recorder.record(test_user.id, lesson(), now=day_one)
        later = day_one + timedelta(hours=1)
        recorded = recorder.record(test_user.id, lesson(time_spent=90, progress_percent=80), now=later)
        record = recorded.record
        assert recorded.created is False
        assert record.attempt_count == 2
        assert record.time_spent == 150
        assert record.completion_percent == 80
        assert record.first_attempt_at == day_one
        assert record.last_attempt_at == later
        assert db_session.query(ProgressRecord).count() == 1

    def test_first_completion_detected_once(self, db_session, test_user, day_one):
        recorder = ProgressRecorder(db_session)
        recorder.record(test_user.id, lesson(), now=day_one)
        first = recorder.record(test_user.id, lesson(completed=True, progress_percent=100), now=day_one)
        assert first.first_completion is True
        assert first.previous_status == ProgressStatus.IN_PROGRESS

        again = recorder.record(test_user.id, lesson(completed=True, progress_percent=100), now=day_one + timedelta(days=1))
        assert again.first_completion is False

    def test_completed_at_written_once(self, db_session, test_user, day_one):
        recorder = ProgressRecorder(db_session)
        recorder.record(test_user.id, lesson(completed=True), now=day_one)
        recorder.record(test_user.id, lesson(completed=False), now=day_one + timedelta(hours=1))
        recorded = recorder.record(test_user.id, lesson(completed=True), now=day_one + timedelta(days=2))
        assert recorded.record.completed_at == day_one
        # Demoted then completed again: not a first completion.
        assert recorded.first_completion is False

    def test_completed_on_first_submission(self, db_session, test_user, day_one):
        recorded = ProgressRecorder(db_session).record(test_user.id, lesson(completed=True), now=day_one)
        assert recorded.created is True
        assert recorded.first_completion is True
        assert recorded.record.completed_at == day_one

    def test_score_is_last_write_wins(self, db_session, test_user, day_one):
        recorder = ProgressRecorder(db_session)
        quiz = dict(content_type=ContentType.QUIZ, content_id="q1")
        recorder.record(test_user.id, lesson(score=9, max_score=10, **quiz), now=day_one)
        recorded = recorder.record(test_user.id, lesson(score=4, max_score=10, **quiz), now=day_one)
        assert recorded.record.score == 4

    def test_keys_are_per_content(self, db_session, test_user, day_one):
        recorder = ProgressRecorder(db_session)
        recorder.record(test_user.id, lesson(), now=day_one)
        recorder.record(test_user.id, lesson(content_type=ContentType.QUIZ), now=day_one)
        recorder.record(test_user.id, lesson(content_id="py-102"), now=day_one)
        assert db_session.query(ProgressRecord).count() == 3

    def test_lost_insert_race_falls_back_to_update(self, db_session, test_user, day_one, monkeypatch):
        recorder = ProgressRecorder(db_session)
        recorder.record(test_user.id, lesson(), now=day_one)

        # Simulate a concurrent writer: the pre-insert lookup misses the row once.
        real_get = recorder.get
        calls = {"n": 0}

        def stale_get(*args):
            calls["n"] += 1
            return None if calls["n"] == 1 else real_get(*args)

        monkeypatch.setattr(recorder, "get", stale_get)
        recorded = recorder.record(test_user.id, lesson(time_spent=30), now=day_one)
        assert recorded.created is False
        assert recorded.record.attempt_count == 2
        assert recorded.record.time_spent == 90
        assert db_session.query(ProgressRecord).count() == 1
