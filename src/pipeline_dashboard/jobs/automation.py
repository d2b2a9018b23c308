"""Celery tasks driving the scheduled automation."""

from typing import Any

from pipeline_dashboard.db.session import get_session_context
from pipeline_dashboard.logging import get_logger
from pipeline_dashboard.services.dispatcher import AlreadyRunning, AutomationDispatcher
from pipeline_dashboard.worker import celery_app

logger = get_logger(__name__)


@celery_app.task(bind=True, name="automation.trigger_daily")
def trigger_daily_task(self: Any, source: str = "beat") -> dict[str, Any]:
    """Start the daily content run unless automation is paused or still busy."""
    task_id = self.request.id

    with get_session_context() as session:
        dispatcher = AutomationDispatcher(session)
        if source == "beat" and dispatcher.is_paused():
            logger.info("daily_trigger_skipped_paused", task_id=task_id)
            return {"success": True, "skipped": True, "reason": "paused"}

        try:
            result = dispatcher.trigger_daily(source=source)
        except AlreadyRunning as e:
            logger.warning("daily_trigger_already_running", task_id=task_id, error=str(e))
            return {
                "success": False,
                "error": str(e),
                "running_jobs": [str(job_id) for job_id in e.job_ids],
            }

    return {
        "success": True,
        "run_date": result.run_date,
        "created": [str(job_id) for job_id in result.created],
        "skipped": result.skipped,
    }


@celery_app.task(bind=True, name="automation.check_scheduled_uploads")
def check_scheduled_uploads_task(self: Any, source: str = "beat") -> dict[str, Any]:
    """Publish videos whose upload slot has arrived."""
    with get_session_context() as session:
        dispatcher = AutomationDispatcher(session)
        if source == "beat" and dispatcher.is_paused():
            logger.info("upload_check_skipped_paused", task_id=self.request.id)
            return {"success": True, "skipped": True, "reason": "paused"}

        result = dispatcher.check_scheduled_uploads()

    return {
        "success": True,
        "published": [str(job_id) for job_id in result.published],
        "still_pending": [str(job_id) for job_id in result.still_pending],
        "failed": [str(job_id) for job_id in result.failed],
    }


@celery_app.task(bind=True, name="automation.clear_stuck_jobs")
def clear_stuck_jobs_task(self: Any) -> dict[str, Any]:
    """Fail jobs that stopped reporting progress."""
    with get_session_context() as session:
        cleared = AutomationDispatcher(session).clear_stuck_jobs()

    logger.info("stuck_job_sweep_completed", task_id=self.request.id, cleared=len(cleared))
    return {"success": True, "cleared": [str(job_id) for job_id in cleared]}
