"""Activity feed: what the automation did, for the dashboard's recent-activity widget."""

from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from pipeline_dashboard.db.models import ActivityLogModel
from pipeline_dashboard.domain.enums import ActivityStatus, ActivityType


def record_activity(
    session: Session,
    activity_type: ActivityType,
    title: str,
    status: ActivityStatus,
    description: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> ActivityLogModel:
    """Add an activity entry to the session (flushed, not committed)."""
    entry = ActivityLogModel(
        type=activity_type.value,
        title=title,
        description=description,
        status=status.value,
        metadata_=metadata or {},
    )
    session.add(entry)
    session.flush()
    return entry


def recent_activity(session: Session, limit: int = 20) -> list[ActivityLogModel]:
    """Most recent activity entries, newest first."""
    return list(
        session.execute(
            select(ActivityLogModel).order_by(desc(ActivityLogModel.created_at)).limit(limit)
        )
        .scalars()
        .all()
    )
