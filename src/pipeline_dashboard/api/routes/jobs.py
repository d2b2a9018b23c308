"""Content job endpoints, including the worker progress write path."""

from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from pipeline_dashboard.api.deps import SessionDep
from pipeline_dashboard.db.models import ContentJobModel
from pipeline_dashboard.domain.stages import InvalidStage, InvalidTransition
from pipeline_dashboard.domain.status import present
from pipeline_dashboard.logging import bind_job_context, clear_job_context, get_logger
from pipeline_dashboard.services.jobs import (
    JobNotFoundError,
    JobUpdateError,
    apply_progress,
    get_job,
    list_jobs,
    to_record,
)

router = APIRouter(prefix="/jobs", tags=["Jobs"])
logger = get_logger(__name__)


class JobResponse(BaseModel):
    """A content job as stored, with its display status."""

    id: str
    video_type: str
    title: str
    stage: str
    progress: int
    topic_id: str | None = None
    channel_id: str | None = None
    scheduled_time: datetime | None = None
    published_at: datetime | None = None
    error_message: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    status: str
    badge_label: str


class JobListResponse(BaseModel):
    jobs: list[JobResponse]
    count: int


class ProgressUpdateRequest(BaseModel):
    """Stage/progress report sent by a production worker."""

    stage: str = Field(..., min_length=1, description="Stage the job is now in")
    progress: int | None = Field(None, ge=0, le=100, description="Percent within the stage")
    error_message: str | None = Field(None, max_length=5000, description="Required for 'failed'")
    metadata: dict[str, Any] | None = Field(None, description="Merged into the job's metadata")


def _job_response(job: ContentJobModel) -> JobResponse:
    record = to_record(job)
    presentation = present(record.stage, record.progress)
    return JobResponse(
        id=str(record.id),
        video_type=str(record.video_type),
        title=record.title,
        stage=record.stage,
        progress=record.progress,
        topic_id=str(record.topic_id) if record.topic_id else None,
        channel_id=str(job.channel_id) if job.channel_id else None,
        scheduled_time=record.scheduled_time,
        published_at=record.published_at,
        error_message=record.error_message,
        metadata=record.metadata,
        created_at=record.created_at,
        updated_at=record.updated_at,
        status=presentation.status.value,
        badge_label=presentation.badge_label,
    )


@router.get(
    "",
    response_model=JobListResponse,
    summary="List jobs",
    description="Most recently created content jobs first.",
)
async def list_content_jobs(
    session: SessionDep,
    limit: int = Query(default=50, ge=1, le=500),
) -> JobListResponse:
    jobs = [_job_response(job) for job in list_jobs(session, limit=limit)]
    return JobListResponse(jobs=jobs, count=len(jobs))


@router.get(
    "/{job_id}",
    response_model=JobResponse,
    summary="Get job",
)
async def get_content_job(job_id: UUID, session: SessionDep) -> JobResponse:
    try:
        job = get_job(session, job_id)
    except JobNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found",
        )
    return _job_response(job)


@router.post(
    "/{job_id}/progress",
    response_model=JobResponse,
    summary="Report progress",
    description="Advance a job's stage or progress. Used by the production workers.",
)
async def report_progress(
    job_id: UUID, request: ProgressUpdateRequest, session: SessionDep
) -> JobResponse:
    """Apply a worker's progress report."""
    bind_job_context(str(job_id), reported_stage=request.stage)
    try:
        job = apply_progress(
            session,
            job_id,
            request.stage,
            progress=request.progress,
            error_message=request.error_message,
            metadata=request.metadata,
        )
        session.commit()
    except JobNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found",
        )
    except InvalidTransition as e:
        logger.warning("progress_rejected", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except (InvalidStage, JobUpdateError) as e:
        logger.warning("progress_rejected", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    finally:
        clear_job_context()

    return _job_response(job)
