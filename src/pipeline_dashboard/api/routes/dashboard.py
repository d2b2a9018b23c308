"""Dashboard endpoints: live pipeline view, upload schedule, stats and activity.

Snapshot routes are served with ``Cache-Control: no-store``; the dashboard
polls them on a fixed interval and must never see a cached copy.
"""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Query, Response
from pydantic import BaseModel

from pipeline_dashboard.api.deps import SessionDep
from pipeline_dashboard.domain.enums import CachePolicy
from pipeline_dashboard.domain.models import JobRecord
from pipeline_dashboard.domain.snapshot import stage_overview
from pipeline_dashboard.domain.status import present, visual_state
from pipeline_dashboard.logging import get_logger
from pipeline_dashboard.services.activity import recent_activity
from pipeline_dashboard.services.jobs import load_snapshot
from pipeline_dashboard.services.polling import PollingConfig
from pipeline_dashboard.services.stats import daily_stats

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])
logger = get_logger(__name__)


# =============================================================================
# Response Models
# =============================================================================


class StatusPresentationView(BaseModel):
    """How a job's stage is drawn."""

    status: str
    icon: str
    badge_label: str
    visual_state: str


class JobView(BaseModel):
    """A content job with its display status."""

    id: str
    video_type: str
    title: str
    stage: str
    progress: int
    scheduled_time: datetime | None = None
    published_at: datetime | None = None
    error_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    presentation: StatusPresentationView


class PipelineSnapshotResponse(BaseModel):
    """Active and scheduled jobs at the time of the request."""

    active: list[JobView]
    scheduled: list[JobView]
    is_running: bool


class StageOverviewItem(BaseModel):
    stage: str
    label: str
    status: str
    visual_state: str


class StageOverviewResponse(BaseModel):
    """Stage-by-stage row for the most recently created active job."""

    job_id: str | None
    stages: list[StageOverviewItem]


class ScheduleItem(BaseModel):
    id: str
    title: str
    video_type: str
    stage: str
    progress: int
    scheduled_time: datetime | None = None
    presentation: StatusPresentationView


class ScheduledVideosResponse(BaseModel):
    """Upload schedule: queued uploads and jobs still in production."""

    scheduled: list[ScheduleItem]
    processing: list[ScheduleItem]


class StatsResponse(BaseModel):
    date: str
    videos_created: int
    shorts_created: int
    videos_published: int
    failed: int
    success_rate: int
    queue_count: int
    trending_topics_found: int
    system_status: str


class ActivityItem(BaseModel):
    id: str
    type: str
    title: str
    description: str | None
    status: str
    metadata: dict[str, Any] | None = None
    created_at: datetime | None


class PollingResponse(BaseModel):
    """Polling parameters clients should use per view."""

    summary: dict[str, Any]
    detail: dict[str, Any]


# =============================================================================
# Helpers
# =============================================================================


def _no_store(response: Response) -> None:
    response.headers["Cache-Control"] = CachePolicy.NO_STORE.value


def _presentation(record: JobRecord) -> StatusPresentationView:
    return StatusPresentationView(**present(record.stage, record.progress).to_dict())


def _job_view(record: JobRecord) -> JobView:
    return JobView(
        id=str(record.id),
        video_type=str(record.video_type),
        title=record.title,
        stage=record.stage,
        progress=record.progress,
        scheduled_time=record.scheduled_time,
        published_at=record.published_at,
        error_message=record.error_message,
        created_at=record.created_at,
        updated_at=record.updated_at,
        presentation=_presentation(record),
    )


def _schedule_item(record: JobRecord) -> ScheduleItem:
    return ScheduleItem(
        id=str(record.id),
        title=record.title,
        video_type=str(record.video_type),
        stage=record.stage,
        progress=record.progress,
        scheduled_time=record.scheduled_time,
        presentation=_presentation(record),
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.get(
    "/active-pipeline",
    response_model=PipelineSnapshotResponse,
    summary="Active pipeline",
    description="Jobs in flight and jobs waiting for their upload slot.",
)
async def get_active_pipeline(session: SessionDep, response: Response) -> PipelineSnapshotResponse:
    """Fresh pipeline snapshot."""
    _no_store(response)
    snapshot = load_snapshot(session)
    return PipelineSnapshotResponse(
        active=[_job_view(job) for job in snapshot.active],
        scheduled=[_job_view(job) for job in snapshot.scheduled],
        is_running=snapshot.is_running,
    )


@router.get(
    "/stage-overview",
    response_model=StageOverviewResponse,
    summary="Stage overview",
    description="Completed / active / pending status of every pipeline stage.",
)
async def get_stage_overview(session: SessionDep, response: Response) -> StageOverviewResponse:
    _no_store(response)
    snapshot = load_snapshot(session)
    entries = stage_overview(snapshot)
    return StageOverviewResponse(
        job_id=str(snapshot.active[0].id) if snapshot.active else None,
        stages=[
            StageOverviewItem(
                stage=entry.stage.value,
                label=entry.label,
                status=entry.status.value,
                visual_state=visual_state(entry.status),
            )
            for entry in entries
        ],
    )


@router.get(
    "/scheduled-videos",
    response_model=ScheduledVideosResponse,
    summary="Upload schedule",
)
async def get_scheduled_videos(session: SessionDep, response: Response) -> ScheduledVideosResponse:
    """Queued uploads in slot order, plus the jobs still being produced."""
    _no_store(response)
    snapshot = load_snapshot(session)
    return ScheduledVideosResponse(
        scheduled=[_schedule_item(job) for job in snapshot.scheduled],
        processing=[_schedule_item(job) for job in snapshot.active],
    )


@router.get(
    "/stats",
    response_model=StatsResponse,
    summary="Today's stats",
)
async def get_stats(session: SessionDep, response: Response) -> StatsResponse:
    _no_store(response)
    return StatsResponse(**daily_stats(session).to_dict())


@router.get(
    "/recent-activity",
    response_model=list[ActivityItem],
    summary="Recent activity",
)
async def get_recent_activity(
    session: SessionDep,
    response: Response,
    limit: int = Query(default=20, ge=1, le=100),
) -> list[ActivityItem]:
    """What the automation did recently, newest first."""
    _no_store(response)
    return [
        ActivityItem(
            id=str(entry.id),
            type=entry.type,
            title=entry.title,
            description=entry.description,
            status=entry.status,
            metadata=entry.metadata_,
            created_at=entry.created_at,
        )
        for entry in recent_activity(session, limit=limit)
    ]


@router.get(
    "/polling",
    response_model=PollingResponse,
    summary="Polling configuration",
)
async def get_polling_config() -> PollingResponse:
    return PollingResponse(
        summary=PollingConfig.summary().to_dict(),
        detail=PollingConfig.detail().to_dict(),
    )
