"""Celery worker configuration."""

from celery import Celery
from celery.schedules import crontab

from pipeline_dashboard.config import settings
from pipeline_dashboard.logging import setup_logging

# Setup logging before anything else
setup_logging()

# Create Celery app
celery_app = Celery(
    "pipeline_dashboard",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.schedule_timezone,
    enable_utc=True,
    # Task execution
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=600,  # 10 minutes max
    task_soft_time_limit=540,  # 9 minutes soft limit
    # Worker settings
    worker_prefetch_multiplier=1,
    # Result backend
    result_expires=86400,  # 24 hours
    # Task routing
    task_routes={
        "automation.trigger_daily": {"queue": "default"},
        "automation.check_scheduled_uploads": {"queue": "high"},
        "automation.clear_stuck_jobs": {"queue": "low"},
    },
    # Beat scheduler
    beat_schedule={
        # Daily content run, local time of the schedule timezone
        "trigger-daily-automation": {
            "task": "automation.trigger_daily",
            "schedule": crontab(hour=settings.daily_run_hour, minute=0),
            "kwargs": {"source": "beat"},
            "options": {"queue": "default"},
        },
        # Publish due videos - every 30 minutes by default
        "check-scheduled-uploads": {
            "task": "automation.check_scheduled_uploads",
            "schedule": float(settings.upload_check_interval_seconds),
            "kwargs": {"source": "beat"},
            "options": {"queue": "high"},
        },
        # Fail jobs with no progress - hourly by default
        "clear-stuck-jobs": {
            "task": "automation.clear_stuck_jobs",
            "schedule": float(settings.stuck_job_sweep_interval_seconds),
            "options": {"queue": "low"},
        },
    },
)

# Auto-discover tasks
celery_app.autodiscover_tasks(["pipeline_dashboard.jobs"], related_name="automation")
