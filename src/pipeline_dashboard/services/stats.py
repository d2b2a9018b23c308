"""Today's production numbers for the dashboard stats cards."""

from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from pipeline_dashboard.config import settings
from pipeline_dashboard.db.models import ContentJobModel, TrendingTopicModel
from pipeline_dashboard.domain.enums import Stage, VideoType
from pipeline_dashboard.domain.models import ensure_utc
from pipeline_dashboard.domain.timeline import local_day_start, local_run_date
from pipeline_dashboard.services.automation_settings import get_system_status
from pipeline_dashboard.services.jobs import list_active_jobs


@dataclass
class DailyStats:
    date: str
    videos_created: int
    shorts_created: int
    videos_published: int
    failed: int
    success_rate: int
    queue_count: int
    trending_topics_found: int
    system_status: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def daily_stats(session: Session, now: datetime | None = None) -> DailyStats:
    """Counts for the current local day in the schedule timezone.

    The success rate is completed / (completed + failed) for jobs touched
    today, as a whole percentage; it is 100 when nothing finished yet.
    """
    now = ensure_utc(now) or datetime.now(UTC)
    day_start = local_day_start(now, settings.schedule_timezone)

    finished_today = (
        session.execute(
            select(ContentJobModel).where(
                ContentJobModel.stage.in_([Stage.COMPLETED.value, Stage.FAILED.value]),
                or_(
                    ContentJobModel.updated_at >= day_start,
                    ContentJobModel.published_at >= day_start,
                ),
            )
        )
        .scalars()
        .all()
    )
    completed = [job for job in finished_today if job.stage == Stage.COMPLETED.value]
    failed = [job for job in finished_today if job.stage == Stage.FAILED.value]

    attempts = len(completed) + len(failed)
    success_rate = round(len(completed) / attempts * 100) if attempts else 100

    topics_found = session.execute(
        select(func.count())
        .select_from(TrendingTopicModel)
        .where(TrendingTopicModel.created_at >= day_start)
    ).scalar_one()

    return DailyStats(
        date=local_run_date(now, settings.schedule_timezone),
        videos_created=sum(1 for job in completed if job.video_type == VideoType.LONG_FORM.value),
        shorts_created=sum(1 for job in completed if job.video_type == VideoType.SHORT.value),
        videos_published=sum(1 for job in completed if job.published_at is not None),
        failed=len(failed),
        success_rate=success_rate,
        queue_count=len(list_active_jobs(session)),
        trending_topics_found=topics_found,
        system_status=get_system_status(session).value,
    )
