"""
Learning paths: catalog reads with per-user progress, enrollment, and the
rollup that moves an enrollment forward when one of its modules is completed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from learnhub.models.learning_path import LearningPath, LearningPathModule, UserLearningPath
from learnhub.models.models import ActivityType, utcnow
from learnhub.models.progress import ContentType, ProgressRecord, ProgressStatus
from learnhub.services.activity_feed import record_activity
from learnhub.services.errors import AlreadyEnrolled, LearningPathNotFound
from learnhub.services.experience_service import award_experience, lock_user
from learnhub.services.learning_path_catalog import DEFAULT_LEARNING_PATHS
from learnhub.utils.logger import get_logger, log_request

logger = get_logger(__name__)

ENROLLMENT_XP = 25
XP_PER_MINUTE = 5


def path_progress(completed: list[str], module_ids: list[str]) -> float:
    """Percent of the path's modules present in completed."""
    if not module_ids:
        return 0.0
    done = len(set(completed) & set(module_ids))
    return round(done * 100.0 / len(module_ids), 2)


def next_module(completed: list[str], module_ids: list[str]) -> Optional[str]:
    """First module in path order not yet completed."""
    done = set(completed)
    for module_id in module_ids:
        if module_id not in done:
            return module_id
    return None


@dataclass(frozen=True)
class PathModuleView:
    module_id: str
    title: str
    order: int
    is_required: bool
    estimated_time: int
    completed: bool


@dataclass(frozen=True)
class LearningPathView:
    path: LearningPath
    enrollment: Optional[UserLearningPath]
    modules: list[PathModuleView]

    @property
    def enrolled(self) -> bool:
        return self.enrollment is not None

    @property
    def progress(self) -> float:
        return float(self.enrollment.progress) if self.enrollment else 0.0

    @property
    def status(self) -> ProgressStatus:
        return self.enrollment.status if self.enrollment else ProgressStatus.NOT_STARTED

    @property
    def completed_modules(self) -> int:
        return sum(1 for m in self.modules if m.completed)

    @property
    def xp_reward(self) -> int:
        return int(self.path.estimated_time or 0) * XP_PER_MINUTE


@dataclass(frozen=True)
class PathAdvance:
    """One enrollment moved forward by a module completion."""
    learning_path_id: int
    title: str
    progress: float
    status: ProgressStatus
    path_completed: bool


@dataclass(frozen=True)
class EnrollmentResult:
    enrollment: UserLearningPath
    xp_earned: int
    level_up: bool


def roll_up_module(db: Session, user_id: int, module_id: str, now: datetime) -> list[PathAdvance]:
    """
    Add module_id to every enrollment of the user whose path contains it.
    A module already listed is left alone, so repeats change nothing. Runs
    inside the caller's transaction with the user row locked.
    """
    enrollments = (
        db.query(UserLearningPath)
        .join(LearningPathModule, LearningPathModule.learning_path_id == UserLearningPath.learning_path_id)
        .filter(UserLearningPath.user_id == user_id, LearningPathModule.module_id == module_id)
        .order_by(UserLearningPath.id.asc())
        .all()
    )
    advanced: list[PathAdvance] = []
    for enrollment in enrollments:
        completed = list(enrollment.completed_modules or [])
        if module_id in completed:
            continue
        completed.append(module_id)
        path = enrollment.learning_path
        module_ids = [m.module_id for m in path.modules]

        # Reassigned, not appended in place, so the JSON column is flagged dirty.
        enrollment.completed_modules = completed
        enrollment.progress = path_progress(completed, module_ids)
        enrollment.current_module = next_module(completed, module_ids)
        finished = enrollment.current_module is None and enrollment.status != ProgressStatus.COMPLETED
        if finished:
            enrollment.status = ProgressStatus.COMPLETED
            enrollment.completed_at = now
            record_activity(
                db,
                user_id,
                ActivityType.LEARNING_PATH_COMPLETED,
                f"Completed learning path: {path.title}",
                {"learningPathId": path.id, "learningPathTitle": path.title},
            )
        elif enrollment.status != ProgressStatus.COMPLETED:
            enrollment.status = ProgressStatus.IN_PROGRESS
        logger.info(
            "learning path advanced user_id=%s path=%s module=%s progress=%s",
            user_id, path.key, module_id, enrollment.progress,
        )
        advanced.append(
            PathAdvance(
                learning_path_id=path.id,
                title=path.title,
                progress=float(enrollment.progress),
                status=enrollment.status,
                path_completed=finished,
            )
        )
    if advanced:
        db.flush()
    return advanced


class LearningPathService:
    def __init__(self, db: Session):
        self.db = db

    def list_paths(self, user_id: Optional[int] = None) -> list[LearningPathView]:
        """Recommended paths first, then by title. Per-user state only when user_id is given."""
        paths = (
            self.db.query(LearningPath)
            .order_by(LearningPath.is_recommended.desc(), LearningPath.title.asc())
            .all()
        )
        enrollments: dict[int, UserLearningPath] = {}
        if user_id is not None:
            enrollments = {
                e.learning_path_id: e
                for e in self.db.query(UserLearningPath).filter(UserLearningPath.user_id == user_id)
            }

        views: list[LearningPathView] = []
        for path in paths:
            enrollment = enrollments.get(path.id)
            done = set(enrollment.completed_modules or []) if enrollment else set()
            views.append(
                LearningPathView(
                    path=path,
                    enrollment=enrollment,
                    modules=[
                        PathModuleView(
                            module_id=m.module_id,
                            title=m.title,
                            order=m.order,
                            is_required=bool(m.is_required),
                            estimated_time=int(m.estimated_time or 0),
                            completed=m.module_id in done,
                        )
                        for m in path.modules
                    ],
                )
            )
        return views

    def enroll(self, user_id: int, learning_path_id: int, *, now: Optional[datetime] = None) -> EnrollmentResult:
        """
        Start a path. Modules the user already completed count immediately.
        Pays the enrollment XP once; a second enrollment raises AlreadyEnrolled.
        """
        now = now or utcnow()
        with log_request(logger, "learning_paths.enroll", user_id=user_id, learning_path_id=learning_path_id):
            try:
                result = self._enroll(user_id, learning_path_id, now)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        self.db.refresh(result.enrollment)
        return result

    def _enroll(self, user_id: int, learning_path_id: int, now: datetime) -> EnrollmentResult:
        lock_user(self.db, user_id)
        path = self.db.query(LearningPath).filter(LearningPath.id == learning_path_id).first()
        if path is None:
            raise LearningPathNotFound(learning_path_id)

        module_ids = [m.module_id for m in path.modules]
        finished_modules = {
            content_id
            for (content_id,) in self.db.query(ProgressRecord.content_id).filter(
                ProgressRecord.user_id == user_id,
                ProgressRecord.content_type == ContentType.MODULE,
                ProgressRecord.status == ProgressStatus.COMPLETED,
                ProgressRecord.content_id.in_(module_ids),
            )
        }
        completed = [m for m in module_ids if m in finished_modules]
        done = bool(module_ids) and len(completed) == len(module_ids)

        enrollment = UserLearningPath(
            user_id=user_id,
            learning_path_id=path.id,
            status=ProgressStatus.COMPLETED if done else ProgressStatus.IN_PROGRESS,
            progress=path_progress(completed, module_ids),
            completed_modules=completed,
            current_module=next_module(completed, module_ids),
            started_at=now,
            completed_at=now if done else None,
        )
        try:
            with self.db.begin_nested():
                self.db.add(enrollment)
        except IntegrityError:
            raise AlreadyEnrolled(f"Already enrolled in learning path {path.id}")

        change = award_experience(self.db, user_id, ENROLLMENT_XP)
        record_activity(
            self.db,
            user_id,
            ActivityType.LEARNING_PATH_STARTED,
            f"Started learning path: {path.title}",
            {"learningPathId": path.id, "learningPathTitle": path.title, "xpEarned": ENROLLMENT_XP},
        )
        if change.leveled_up:
            record_activity(
                self.db,
                user_id,
                ActivityType.LEVEL_UP,
                f"Reached level {change.new_level}",
                {"previousLevel": change.previous_level, "level": change.new_level, "experience": change.new_experience},
            )
        logger.info("learning path enrolled user_id=%s path=%s completed=%s", user_id, path.key, len(completed))
        return EnrollmentResult(enrollment=enrollment, xp_earned=ENROLLMENT_XP, level_up=change.leveled_up)


def seed_learning_paths(db: Session) -> int:
    """Insert default paths missing from the table (matched by key). Returns how many were added."""
    present = {key for (key,) in db.query(LearningPath.key).all()}
    created = 0
    for rule in DEFAULT_LEARNING_PATHS:
        if rule.key in present:
            continue
        db.add(
            LearningPath(
                key=rule.key,
                title=rule.title,
                description=rule.description,
                category=rule.category,
                difficulty=rule.difficulty,
                estimated_time=rule.estimated_time,
                is_public=True,
                is_recommended=rule.is_recommended,
                modules=[
                    LearningPathModule(
                        module_id=m.module_id,
                        title=m.title,
                        order=position,
                        is_required=m.is_required,
                        estimated_time=m.estimated_time,
                    )
                    for position, m in enumerate(rule.modules, start=1)
                ],
            )
        )
        created += 1
    if created:
        db.flush()
        logger.info("learning paths seeded created=%s", created)
    return created
