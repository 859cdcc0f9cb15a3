"""
Progress recorder: upserts the ProgressRecord for (user, content_type, content_id).
Awards nothing; ProgressService sequences XP after it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from learnhub.models.models import utcnow
from learnhub.models.progress import ContentType, ProgressRecord, ProgressStatus
from learnhub.services.errors import ValidationFailed
from learnhub.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProgressSubmission:
    content_type: Optional[ContentType]
    content_id: Optional[str]
    progress_percent: float = 0.0
    time_spent: int = 0
    score: Optional[float] = None
    max_score: Optional[float] = None
    completed: bool = False

    def validated(self) -> "ProgressSubmission":
        """Normalized copy; raises ValidationFailed on missing keys or negative amounts."""
        content_id = (self.content_id or "").strip()
        if self.content_type is None or not content_id:
            raise ValidationFailed("Content type and ID are required")
        try:
            content_type = ContentType(self.content_type)
        except ValueError:
            raise ValidationFailed(f"Unknown content type: {self.content_type}")
        if not 0 <= self.progress_percent <= 100:
            raise ValidationFailed("progressPercent must be between 0 and 100")
        for name, value in (("timeSpent", self.time_spent), ("score", self.score), ("maxScore", self.max_score)):
            if value is not None and value < 0:
                raise ValidationFailed(f"{name} must be non-negative")
        return ProgressSubmission(
            content_type=content_type,
            content_id=content_id,
            progress_percent=float(self.progress_percent),
            time_spent=int(self.time_spent or 0),
            score=self.score,
            max_score=self.max_score,
            completed=bool(self.completed),
        )


@dataclass(frozen=True)
class RecordedProgress:
    record: ProgressRecord
    previous_status: Optional[ProgressStatus]
    previously_completed_at: Optional[datetime]
    created: bool

    @property
    def first_completion(self) -> bool:
        """
        The one transition that pays completion XP: not COMPLETED before,
        COMPLETED now, and never completed earlier (a demoted record that is
        completed again does not pay twice).
        """
        return (
            self.previous_status != ProgressStatus.COMPLETED
            and self.record.status == ProgressStatus.COMPLETED
            and self.previously_completed_at is None
        )


class ProgressRecorder:
    """Runs inside the caller's transaction; flushes but never commits."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int, content_type: ContentType, content_id: str) -> Optional[ProgressRecord]:
        return (
            self.db.query(ProgressRecord)
            .filter(
                ProgressRecord.user_id == user_id,
                ProgressRecord.content_type == content_type,
                ProgressRecord.content_id == content_id,
            )
            .first()
        )

    def record(self, user_id: int, submission: ProgressSubmission, *, now: Optional[datetime] = None) -> RecordedProgress:
        sub = submission.validated()
        now = now or utcnow()

        existing = self.get(user_id, sub.content_type, sub.content_id)
        if existing is None:
            created = self._try_create(user_id, sub, now)
            if created is not None:
                return RecordedProgress(record=created, previous_status=None, previously_completed_at=None, created=True)
            # Lost a race with a concurrent first submission; the row exists now.
            existing = self.get(user_id, sub.content_type, sub.content_id)
            if existing is None:
                raise RuntimeError("progress row vanished after unique-key conflict")

        previous_status = existing.status
        previously_completed_at = existing.completed_at
        self._update(existing, sub, now)
        return RecordedProgress(
            record=existing,
            previous_status=previous_status,
            previously_completed_at=previously_completed_at,
            created=False,
        )

    def _try_create(self, user_id: int, sub: ProgressSubmission, now: datetime) -> Optional[ProgressRecord]:
        record = ProgressRecord(
            user_id=user_id,
            content_type=sub.content_type,
            content_id=sub.content_id,
            status=ProgressStatus.COMPLETED if sub.completed else ProgressStatus.IN_PROGRESS,
            completion_percent=sub.progress_percent,
            time_spent=sub.time_spent,
            score=sub.score,
            max_score=sub.max_score,
            attempt_count=1,
            first_attempt_at=now,
            last_attempt_at=now,
            completed_at=now if sub.completed else None,
            updated_at=now,
        )
        try:
            with self.db.begin_nested():
                self.db.add(record)
        except IntegrityError:
            logger.debug(
                "progress insert conflict user_id=%s content=%s:%s",
                user_id, sub.content_type.value, sub.content_id,
            )
            return None
        return record

    def _update(self, record: ProgressRecord, sub: ProgressSubmission, now: datetime) -> None:
        values = {
            "status": ProgressStatus.COMPLETED if sub.completed else ProgressStatus.IN_PROGRESS,
            "completion_percent": sub.progress_percent,
            # Accumulated in SQL so concurrent submissions both count.
            "time_spent": ProgressRecord.time_spent + sub.time_spent,
            "attempt_count": ProgressRecord.attempt_count + 1,
            "score": sub.score,
            "max_score": sub.max_score,
            "last_attempt_at": now,
            "updated_at": now,
        }
        if sub.completed:
            # Written once, never cleared.
            values["completed_at"] = func.coalesce(ProgressRecord.completed_at, now)
        self.db.execute(
            update(ProgressRecord)
            .where(ProgressRecord.id == record.id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        self.db.refresh(record)
