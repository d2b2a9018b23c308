"""Automation control endpoints.

These run the dispatcher in FastAPI's threadpool (plain ``def`` handlers)
because an upload check drives the async publisher on its own event loop.
"""

from typing import Any

from fastapi import APIRouter, status
from pydantic import BaseModel

from pipeline_dashboard.api.deps import DispatcherDep
from pipeline_dashboard.logging import get_logger

router = APIRouter(prefix="/automation", tags=["Automation"])
logger = get_logger(__name__)


class AutomationStatusResponse(BaseModel):
    system_status: str
    last_daily_trigger: dict[str, Any] | None = None
    running_daily_jobs: list[str]
    running_count: int
    is_running: bool


class DailyTriggerResponse(BaseModel):
    accepted: bool
    run_date: str
    created: list[str]
    skipped: list[str]


class UploadCheckResponse(BaseModel):
    published: list[str]
    still_pending: list[str]
    failed: list[str]


class ClearStuckJobsResponse(BaseModel):
    cleared: list[str]
    count: int


@router.get(
    "/status",
    response_model=AutomationStatusResponse,
    summary="Automation status",
)
def get_automation_status(dispatcher: DispatcherDep) -> AutomationStatusResponse:
    return AutomationStatusResponse(**dispatcher.status().to_dict())


@router.post(
    "/trigger-daily",
    response_model=DailyTriggerResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Trigger daily automation",
    description="Create today's long-form and short jobs for every active channel.",
)
def trigger_daily(dispatcher: DispatcherDep) -> DailyTriggerResponse:
    """Run the daily trigger now (ignores the paused state).

    An overlapping run raises ``AlreadyRunning``, answered with 409 by the
    application's exception handler.
    """
    logger.info("daily_trigger_requested")
    result = dispatcher.trigger_daily(source="manual")

    return DailyTriggerResponse(
        accepted=result.accepted,
        run_date=result.run_date,
        created=[str(job_id) for job_id in result.created],
        skipped=result.skipped,
    )


@router.post(
    "/check-uploads",
    response_model=UploadCheckResponse,
    summary="Check scheduled uploads",
    description="Publish every job whose upload slot has arrived.",
)
def check_uploads(dispatcher: DispatcherDep) -> UploadCheckResponse:
    result = dispatcher.check_scheduled_uploads()
    return UploadCheckResponse(
        published=[str(job_id) for job_id in result.published],
        still_pending=[str(job_id) for job_id in result.still_pending],
        failed=[str(job_id) for job_id in result.failed],
    )


@router.post(
    "/pause",
    response_model=AutomationStatusResponse,
    summary="Pause scheduled automation",
)
def pause_automation(dispatcher: DispatcherDep) -> AutomationStatusResponse:
    return AutomationStatusResponse(**dispatcher.pause().to_dict())


@router.post(
    "/resume",
    response_model=AutomationStatusResponse,
    summary="Resume scheduled automation",
)
def resume_automation(dispatcher: DispatcherDep) -> AutomationStatusResponse:
    return AutomationStatusResponse(**dispatcher.resume().to_dict())


@router.post(
    "/clear-stuck-jobs",
    response_model=ClearStuckJobsResponse,
    summary="Clear stuck jobs",
    description="Fail jobs that have not reported progress within the timeout.",
)
def clear_stuck_jobs(dispatcher: DispatcherDep) -> ClearStuckJobsResponse:
    cleared = dispatcher.clear_stuck_jobs()
    return ClearStuckJobsResponse(cleared=[str(job_id) for job_id in cleared], count=len(cleared))
