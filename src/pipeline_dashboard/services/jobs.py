"""Content job store.

All writes to a job's stage/progress go through ``apply_progress``, which locks
the row and does a single read-modify-write so a late, lower progress value can
never overwrite a later stage.
"""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import desc, or_, select
from sqlalchemy.orm import Session

from pipeline_dashboard.db.models import ContentJobModel
from pipeline_dashboard.domain.enums import Stage, VideoType
from pipeline_dashboard.domain.models import JobRecord, PipelineSnapshot, ensure_utc
from pipeline_dashboard.domain.snapshot import build_snapshot
from pipeline_dashboard.domain.stages import (
    TERMINAL_STAGES,
    is_known_stage,
    parse_stage,
    validate_transition,
)
from pipeline_dashboard.domain.timeline import next_slot
from pipeline_dashboard.logging import get_logger
from pipeline_dashboard.services.channels import channel_for_job

logger = get_logger(__name__)

_TERMINAL_VALUES = [s.value for s in TERMINAL_STAGES]


class JobNotFoundError(Exception):
    """Raised when a content job is not found."""

    pass


class JobUpdateError(ValueError):
    """Raised when an update carries field values the job cannot accept."""

    pass


def to_record(model: ContentJobModel) -> JobRecord:
    """Convert a job row into a domain record."""
    return JobRecord(
        id=model.id,
        topic_id=model.topic_id,
        video_type=VideoType(model.video_type),
        title=model.title,
        stage=model.stage,
        progress=model.progress,
        scheduled_time=ensure_utc(model.scheduled_time),
        published_at=ensure_utc(model.published_at),
        error_message=model.error_message,
        metadata=dict(model.metadata_ or {}),
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
    )


def create_job(
    session: Session,
    video_type: VideoType,
    title: str,
    topic_id: UUID | None = None,
    channel_id: UUID | None = None,
    idempotency_key: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> ContentJobModel:
    """Create a job at stage ``pending`` with progress 0."""
    record = JobRecord.create(video_type=video_type, title=title, topic_id=topic_id, metadata=metadata)
    job = ContentJobModel(
        id=record.id,
        topic_id=topic_id,
        channel_id=channel_id,
        idempotency_key=idempotency_key,
        video_type=video_type.value,
        title=title,
        stage=Stage.PENDING.value,
        progress=0,
        metadata_=record.metadata,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )
    session.add(job)
    session.flush()

    logger.info(
        "content_job_created",
        job_id=str(job.id),
        video_type=video_type.value,
        idempotency_key=idempotency_key,
    )
    return job


def get_job(session: Session, job_id: UUID, for_update: bool = False) -> ContentJobModel:
    """Get a job by id, optionally locking the row for a read-modify-write.

    Raises:
        JobNotFoundError: If the job does not exist.
    """
    query = select(ContentJobModel).where(ContentJobModel.id == job_id)
    if for_update:
        # Reload attributes under the lock; the identity map may hold an older read.
        query = query.with_for_update().execution_options(populate_existing=True)
    job = session.execute(query).scalar_one_or_none()
    if job is None:
        raise JobNotFoundError(f"Content job not found: {job_id}")
    return job


def get_job_by_key(session: Session, idempotency_key: str) -> ContentJobModel | None:
    return session.execute(
        select(ContentJobModel).where(ContentJobModel.idempotency_key == idempotency_key)
    ).scalar_one_or_none()


def list_jobs(session: Session, limit: int = 50) -> list[ContentJobModel]:
    """Most recently created jobs first."""
    return list(
        session.execute(
            select(ContentJobModel).order_by(desc(ContentJobModel.created_at)).limit(limit)
        )
        .scalars()
        .all()
    )


def list_active_jobs(session: Session) -> list[ContentJobModel]:
    """Jobs whose stage is not terminal (including stages unknown to this build)."""
    return list(
        session.execute(
            select(ContentJobModel)
            .where(ContentJobModel.stage.notin_(_TERMINAL_VALUES))
            .order_by(desc(ContentJobModel.created_at))
        )
        .scalars()
        .all()
    )


def list_scheduled_jobs(session: Session) -> list[ContentJobModel]:
    """Jobs with a scheduled time that are not yet published and have not failed."""
    return list(
        session.execute(
            select(ContentJobModel)
            .where(
                ContentJobModel.scheduled_time.isnot(None),
                ContentJobModel.published_at.is_(None),
                ContentJobModel.stage != Stage.FAILED.value,
            )
            .order_by(ContentJobModel.scheduled_time)
        )
        .scalars()
        .all()
    )


def load_snapshot(session: Session) -> PipelineSnapshot:
    """Read the jobs the snapshot can contain and project them."""
    rows = (
        session.execute(
            select(ContentJobModel).where(
                or_(
                    ContentJobModel.stage.notin_(_TERMINAL_VALUES),
                    ContentJobModel.scheduled_time.isnot(None),
                )
            )
        )
        .scalars()
        .all()
    )
    return build_snapshot(to_record(row) for row in rows)


def apply_progress(
    session: Session,
    job_id: UUID,
    stage: Stage | str,
    progress: int | None = None,
    error_message: str | None = None,
    metadata: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> ContentJobModel:
    """Apply a worker's stage/progress update to a job.

    Rules:
    - same stage: progress only moves forward; a lower value is ignored
    - next stage: progress resets to 0 unless a value is given
    - completed: progress is pinned to 100
    - failed: requires an error message; progress is left as is
    - entering scheduling_upload fills scheduled_time from the channel's slot

    Raises:
        InvalidStage: If ``stage`` (or the stored stage) is outside the catalog.
        InvalidTransition: If the move skips or rewinds stages or leaves a terminal stage.
        JobUpdateError: For an out-of-range progress or a misplaced error message.
        JobNotFoundError: If the job does not exist.
    """
    new_stage = parse_stage(stage)
    now = ensure_utc(now) or datetime.now(timezone.utc)

    if progress is not None and not 0 <= progress <= 100:
        raise JobUpdateError(f"progress must be between 0 and 100, got {progress}")
    if new_stage is Stage.FAILED and not (error_message and error_message.strip()):
        raise JobUpdateError("error_message is required when failing a job")
    if new_stage is not Stage.FAILED and error_message is not None:
        raise JobUpdateError("error_message is only allowed when stage is 'failed'")

    job = get_job(session, job_id, for_update=True)
    current = parse_stage(job.stage)
    validate_transition(current, new_stage)

    if new_stage is Stage.FAILED:
        job.stage = new_stage.value
        job.error_message = error_message
    elif new_stage is current:
        if progress is not None:
            if progress < job.progress:
                logger.warning(
                    "stale_progress_ignored",
                    job_id=str(job.id),
                    stage=current.value,
                    current_progress=job.progress,
                    received_progress=progress,
                )
            else:
                job.progress = progress
    else:
        job.stage = new_stage.value
        job.progress = progress if progress is not None else 0

    if new_stage is Stage.COMPLETED:
        job.progress = 100

    if new_stage is Stage.SCHEDULING_UPLOAD and job.scheduled_time is None:
        channel = channel_for_job(session, job)
        job.scheduled_time = next_slot(channel, job.video_type, now)
        logger.info(
            "upload_slot_assigned",
            job_id=str(job.id),
            channel=channel.name,
            scheduled_time=job.scheduled_time.isoformat(),
        )

    if metadata:
        job.metadata_ = {**(job.metadata_ or {}), **metadata}

    job.updated_at = now
    session.flush()

    logger.info(
        "content_job_progress",
        job_id=str(job.id),
        previous_stage=current.value,
        stage=job.stage,
        progress=job.progress,
    )
    return job


def mark_failed(
    session: Session, job_id: UUID, error_message: str, now: datetime | None = None
) -> ContentJobModel:
    """Move a job to ``failed`` with the given reason."""
    return apply_progress(session, job_id, Stage.FAILED, error_message=error_message, now=now)


def mark_published(
    session: Session,
    job_id: UUID,
    platform_video_id: str | None,
    url: str | None = None,
    now: datetime | None = None,
) -> ContentJobModel:
    """Move an uploading job to ``completed`` and stamp ``published_at``."""
    now = ensure_utc(now) or datetime.now(timezone.utc)
    job = apply_progress(
        session,
        job_id,
        Stage.COMPLETED,
        metadata={"platform_video_id": platform_video_id, "platform_url": url},
        now=now,
    )
    job.published_at = now
    session.flush()
    return job


def find_stuck_jobs(
    session: Session, now: datetime, timeout_minutes: int
) -> list[ContentJobModel]:
    """Non-terminal jobs that have not been updated within the timeout."""
    cutoff = ensure_utc(now) - timedelta(minutes=timeout_minutes)
    return [
        job
        for job in list_active_jobs(session)
        if is_known_stage(job.stage)
        and (ensure_utc(job.updated_at) or ensure_utc(job.created_at)) < cutoff
    ]
