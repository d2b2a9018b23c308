"""Celery job definitions."""

from pipeline_dashboard.jobs.automation import (
    check_scheduled_uploads_task,
    clear_stuck_jobs_task,
    trigger_daily_task,
)

__all__ = [
    "check_scheduled_uploads_task",
    "clear_stuck_jobs_task",
    "trigger_daily_task",
]
