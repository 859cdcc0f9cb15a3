"""
Activity feed: append-only log of gamification events shown on the dashboard.
"""

from typing import Any, Optional

from sqlalchemy.orm import Session

from learnhub.models.models import ActivityFeed, ActivityType, utcnow

MAX_FEED_PAGE = 100


def record_activity(
    db: Session,
    user_id: int,
    activity_type: ActivityType,
    description: str,
    metadata: Optional[dict[str, Any]] = None,
) -> ActivityFeed:
    """Append an entry. Flushed but not committed; the caller owns the transaction."""
    entry = ActivityFeed(
        user_id=user_id,
        type=activity_type,
        description=description,
        event_metadata=metadata or {},
        created_at=utcnow(),
    )
    db.add(entry)
    db.flush()
    return entry


def list_activity(
    db: Session,
    user_id: int,
    *,
    limit: int = 20,
    activity_type: Optional[ActivityType] = None,
) -> list[ActivityFeed]:
    """Newest first."""
    q = db.query(ActivityFeed).filter(ActivityFeed.user_id == user_id)
    if activity_type is not None:
        q = q.filter(ActivityFeed.type == activity_type)
    limit = max(1, min(limit, MAX_FEED_PAGE))
    return q.order_by(ActivityFeed.created_at.desc(), ActivityFeed.id.desc()).limit(limit).all()
