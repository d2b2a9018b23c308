"""Automation trigger dispatcher.

Starts the daily content run, hands due videos to the publisher, and sweeps
jobs that stopped reporting progress. Every operation commits its own work so
that the production backend only ever sees committed jobs.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import case, desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pipeline_dashboard.adapters.publisher import PublisherAdapter, get_publisher
from pipeline_dashboard.adapters.publisher.base import PublishRequest, PublishResponse
from pipeline_dashboard.config import settings
from pipeline_dashboard.db.models import ChannelModel, ContentJobModel, TrendingTopicModel
from pipeline_dashboard.domain.enums import (
    ActivityStatus,
    ActivityType,
    Stage,
    SystemStatus,
    TopicPriority,
    VideoType,
)
from pipeline_dashboard.domain.models import DailyTriggerResult, UploadCheckResult, ensure_utc
from pipeline_dashboard.domain.stages import TERMINAL_STAGES, InvalidStage, InvalidTransition
from pipeline_dashboard.domain.timeline import local_run_date
from pipeline_dashboard.logging import get_logger
from pipeline_dashboard.services import jobs as job_store
from pipeline_dashboard.services.activity import record_activity
from pipeline_dashboard.services.automation_settings import (
    LAST_DAILY_TRIGGER_KEY,
    get_json_setting,
    get_system_status,
    set_json_setting,
    set_system_status,
)
from pipeline_dashboard.services.channels import list_channels
from pipeline_dashboard.utils.async_utils import run_async

logger = get_logger(__name__)

DAILY_KEY_PREFIX = "daily:"
DEFAULT_CHANNEL_KEY = "default"
DAILY_VIDEO_TYPES = (VideoType.LONG_FORM, VideoType.SHORT)

_TERMINAL_VALUES = [s.value for s in TERMINAL_STAGES]


class AlreadyRunning(Exception):
    """Raised when a daily run is requested while an earlier one is still in flight."""

    def __init__(self, job_ids: list[UUID], message: str | None = None) -> None:
        self.job_ids = job_ids
        super().__init__(
            message or f"Daily automation already running ({len(job_ids)} jobs in progress)"
        )


@dataclass
class DispatcherStatus:
    """What the automation is doing right now."""

    system_status: SystemStatus
    last_daily_trigger: dict[str, Any] | None = None
    running_daily_jobs: list[UUID] = field(default_factory=list)

    @property
    def is_running(self) -> bool:
        return bool(self.running_daily_jobs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "system_status": self.system_status.value,
            "last_daily_trigger": self.last_daily_trigger,
            "running_daily_jobs": [str(job_id) for job_id in self.running_daily_jobs],
            "running_count": len(self.running_daily_jobs),
            "is_running": self.is_running,
        }


def daily_key(run_date: str, channel_id: UUID | None, video_type: VideoType) -> str:
    """Natural key of a daily job: one per channel, video type and local day."""
    channel_part = str(channel_id) if channel_id else DEFAULT_CHANNEL_KEY
    return f"{DAILY_KEY_PREFIX}{run_date}:{channel_part}:{video_type.value}"


def send_to_production(job_id: UUID) -> None:
    """Hand a created job to the production backend's Celery worker."""
    from pipeline_dashboard.worker import celery_app

    celery_app.send_task(settings.production_task_name, args=[str(job_id)])
    logger.info("production_handoff_sent", job_id=str(job_id), task=settings.production_task_name)


class AutomationDispatcher:
    """Runs the automation operations against one database session."""

    def __init__(
        self,
        session: Session,
        publisher: PublisherAdapter | None = None,
        handoff: Callable[[UUID], None] | None = None,
        allow_overlap: bool | None = None,
    ) -> None:
        self.session = session
        self.publisher = publisher or get_publisher()
        self.handoff = handoff or send_to_production
        self.allow_overlap = (
            settings.daily_allow_overlap if allow_overlap is None else allow_overlap
        )

    # Daily trigger

    def running_daily_jobs(self) -> list[ContentJobModel]:
        """Daily jobs that have not reached a terminal stage."""
        return list(
            self.session.execute(
                select(ContentJobModel)
                .where(
                    ContentJobModel.idempotency_key.like(f"{DAILY_KEY_PREFIX}%"),
                    ContentJobModel.stage.notin_(_TERMINAL_VALUES),
                )
                .order_by(ContentJobModel.created_at)
            )
            .scalars()
            .all()
        )

    def _pick_topics(self) -> list[TrendingTopicModel]:
        priority_rank = case(
            (TrendingTopicModel.priority == TopicPriority.HIGH.value, 0),
            else_=1,
        )
        return list(
            self.session.execute(
                select(TrendingTopicModel)
                .where(
                    TrendingTopicModel.priority.in_(
                        [TopicPriority.HIGH.value, TopicPriority.MEDIUM.value]
                    ),
                    TrendingTopicModel.status == "pending",
                )
                .order_by(priority_rank, desc(TrendingTopicModel.search_volume))
                .limit(2)
            )
            .scalars()
            .all()
        )

    def trigger_daily(self, now: datetime | None = None, source: str = "manual") -> DailyTriggerResult:
        """Create the day's long-form and short jobs for every active channel.

        Raises:
            AlreadyRunning: If an earlier daily run is still in flight and overlap
                is not allowed. Nothing is created in that case.
        """
        now = ensure_utc(now) or datetime.now(UTC)
        run_date = local_run_date(now, settings.schedule_timezone)

        running = self.running_daily_jobs()
        if running and not self.allow_overlap:
            job_ids = [job.id for job in running]
            logger.warning(
                "daily_trigger_rejected",
                run_date=run_date,
                running_jobs=len(job_ids),
                source=source,
            )
            raise AlreadyRunning(job_ids)

        channels: list[ChannelModel | None] = list(list_channels(self.session, active_only=True))
        if not channels:
            channels = [None]

        topics = self._pick_topics()
        assigned: dict[UUID, TrendingTopicModel] = {}
        result = DailyTriggerResult(accepted=True, run_date=run_date)

        try:
            for channel in channels:
                for video_type in DAILY_VIDEO_TYPES:
                    key = daily_key(run_date, channel.id if channel else None, video_type)
                    if job_store.get_job_by_key(self.session, key) is not None:
                        result.skipped.append(key)
                        continue

                    topic = self._topic_for(topics, video_type)
                    job = job_store.create_job(
                        self.session,
                        video_type=video_type,
                        title=topic.title if topic else _fallback_title(video_type, run_date),
                        topic_id=topic.id if topic else None,
                        channel_id=channel.id if channel else None,
                        idempotency_key=key,
                        metadata={
                            "run_date": run_date,
                            "channel": channel.name if channel else DEFAULT_CHANNEL_KEY,
                            "trigger": source,
                        },
                    )
                    result.created.append(job.id)
                    if topic is not None:
                        assigned[topic.id] = topic
        except IntegrityError as e:
            # Another trigger inserted the same natural key between our check and insert.
            self.session.rollback()
            logger.warning("daily_trigger_race_lost", run_date=run_date, error=str(e.orig))
            raise AlreadyRunning([], "Daily automation was started concurrently") from e

        for topic in assigned.values():
            topic.status = "processing"

        set_json_setting(
            self.session,
            LAST_DAILY_TRIGGER_KEY,
            {
                "triggered_at": now.isoformat(),
                "run_date": run_date,
                "source": source,
                "created": [str(job_id) for job_id in result.created],
                "skipped": result.skipped,
            },
            description="Last daily automation trigger",
        )
        record_activity(
            self.session,
            ActivityType.SYSTEM,
            "Daily Automation Started",
            ActivityStatus.INFO,
            description=f"Created {len(result.created)} jobs for {run_date}",
            metadata={"run_date": run_date, "created": len(result.created), "source": source},
        )
        self.session.commit()

        logger.info(
            "daily_trigger_created",
            run_date=run_date,
            created=len(result.created),
            skipped=len(result.skipped),
            source=source,
        )

        if settings.production_handoff_enabled:
            for job_id in result.created:
                self._hand_off(job_id)

        return result

    @staticmethod
    def _topic_for(
        topics: list[TrendingTopicModel], video_type: VideoType
    ) -> TrendingTopicModel | None:
        if not topics:
            return None
        if video_type is VideoType.SHORT and len(topics) > 1:
            return topics[1]
        return topics[0]

    def _hand_off(self, job_id: UUID) -> None:
        try:
            self.handoff(job_id)
        except Exception as e:
            # The job stays pending; the stuck-job sweep fails it if nobody picks it up.
            logger.error("production_handoff_failed", job_id=str(job_id), error=str(e))
            record_activity(
                self.session,
                ActivityType.WARNING,
                "Production Handoff Failed",
                ActivityStatus.WARNING,
                description=str(e),
                metadata={"job_id": str(job_id)},
            )
            self.session.commit()

    # Scheduled uploads

    def check_scheduled_uploads(self, now: datetime | None = None) -> UploadCheckResult:
        """Publish every due job that is ready for upload."""
        now = ensure_utc(now) or datetime.now(UTC)
        result = UploadCheckResult()

        for job in job_store.list_scheduled_jobs(self.session):
            scheduled_time = ensure_utc(job.scheduled_time)
            if scheduled_time > now or job.stage != Stage.READY_FOR_UPLOAD.value:
                if scheduled_time <= now:
                    logger.info("upload_not_ready", job_id=str(job.id), stage=job.stage)
                result.still_pending.append(job.id)
                continue

            job_id = job.id
            try:
                published = self._upload(job_id, now)
            except (job_store.JobNotFoundError, InvalidStage, InvalidTransition) as e:
                self.session.rollback()
                logger.warning("upload_skipped", job_id=str(job_id), error=str(e))
                result.still_pending.append(job_id)
                continue

            if published is None:
                result.still_pending.append(job_id)
            elif published:
                result.published.append(job_id)
            else:
                result.failed.append(job_id)

        logger.info(
            "upload_check_completed",
            published=len(result.published),
            still_pending=len(result.still_pending),
            failed=len(result.failed),
        )
        return result

    def _upload(self, job_id: UUID, now: datetime) -> bool | None:
        """Publish one job. Returns None if another check already claimed it."""
        job = job_store.get_job(self.session, job_id, for_update=True)
        if job.stage != Stage.READY_FOR_UPLOAD.value:
            logger.info("upload_already_claimed", job_id=str(job_id), stage=job.stage)
            self.session.commit()
            return None

        job = job_store.apply_progress(self.session, job_id, Stage.UPLOADING, now=now)
        request = PublishRequest(
            job_id=job.id,
            title=job.title,
            video_type=VideoType(job.video_type),
            scheduled_time=ensure_utc(job.scheduled_time),
            drive_url=(job.metadata_ or {}).get("drive_url"),
            metadata=dict(job.metadata_ or {}),
        )
        self.session.commit()

        try:
            response = run_async(self.publisher.publish(request))
        except Exception as e:
            logger.error("publish_raised", job_id=str(job_id), error=str(e))
            response = PublishResponse(success=False, error_message=str(e))

        if response.success:
            job_store.mark_published(
                self.session, job_id, response.platform_video_id, response.url, now=now
            )
            record_activity(
                self.session,
                ActivityType.UPLOAD,
                "Video Uploaded",
                ActivityStatus.SUCCESS,
                description=request.title,
                metadata={"job_id": str(job_id), "platform_video_id": response.platform_video_id},
            )
            logger.info(
                "upload_published",
                job_id=str(job_id),
                platform_video_id=response.platform_video_id,
            )
        else:
            error = response.error_message or "Upload failed"
            job_store.mark_failed(self.session, job_id, error, now=now)
            record_activity(
                self.session,
                ActivityType.ERROR,
                "Upload Failed",
                ActivityStatus.ERROR,
                description=error,
                metadata={"job_id": str(job_id)},
            )
            logger.warning("upload_failed", job_id=str(job_id), error=error)

        self.session.commit()
        return response.success

    # Control

    def status(self) -> DispatcherStatus:
        return DispatcherStatus(
            system_status=get_system_status(self.session),
            last_daily_trigger=get_json_setting(self.session, LAST_DAILY_TRIGGER_KEY),
            running_daily_jobs=[job.id for job in self.running_daily_jobs()],
        )

    def pause(self) -> DispatcherStatus:
        self._set_status(SystemStatus.PAUSED, "Automation Paused")
        return self.status()

    def resume(self) -> DispatcherStatus:
        self._set_status(SystemStatus.ACTIVE, "Automation Resumed")
        return self.status()

    def _set_status(self, status: SystemStatus, title: str) -> None:
        set_system_status(self.session, status, "Scheduled automation state")
        record_activity(self.session, ActivityType.SYSTEM, title, ActivityStatus.INFO)
        self.session.commit()
        logger.info("system_status_changed", system_status=status.value)

    def is_paused(self) -> bool:
        return get_system_status(self.session) is SystemStatus.PAUSED

    def clear_stuck_jobs(
        self, now: datetime | None = None, timeout_minutes: int | None = None
    ) -> list[UUID]:
        """Fail jobs that have not reported progress within the timeout."""
        now = ensure_utc(now) or datetime.now(UTC)
        timeout = timeout_minutes or settings.stuck_job_timeout_minutes
        error = f"Job stalled: no progress for {timeout} minutes"

        cleared = []
        for job in job_store.find_stuck_jobs(self.session, now, timeout):
            previous_stage = job.stage
            job_store.mark_failed(self.session, job.id, error, now=now)
            record_activity(
                self.session,
                ActivityType.ERROR,
                "Stuck Job Cleared",
                ActivityStatus.ERROR,
                description=f"{job.title}: {error}",
                metadata={"job_id": str(job.id), "stage": previous_stage},
            )
            cleared.append(job.id)

        self.session.commit()
        if cleared:
            logger.warning("stuck_jobs_cleared", count=len(cleared), timeout_minutes=timeout)
        return cleared


def _fallback_title(video_type: VideoType, run_date: str) -> str:
    label = "Long-form video" if video_type is VideoType.LONG_FORM else "Short"
    return f"{label} for {run_date}"
