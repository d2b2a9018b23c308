"""Tests for the Celery automation tasks."""

from contextlib import contextmanager
from unittest.mock import patch

import pytest

from pipeline_dashboard.config import settings
from pipeline_dashboard.domain.enums import SystemStatus
from pipeline_dashboard.services.automation_settings import set_system_status


@pytest.fixture
def task_session(session, monkeypatch: pytest.MonkeyPatch):
    """Point the tasks at the test database and disable the production handoff."""

    @contextmanager
    def session_context():
        yield session
        session.commit()

    monkeypatch.setattr(settings, "production_handoff_enabled", False)
    with patch("pipeline_dashboard.jobs.automation.get_session_context", session_context):
        yield session


def test_trigger_daily_task_creates_jobs(task_session) -> None:
    from pipeline_dashboard.jobs.automation import trigger_daily_task

    result = trigger_daily_task(source="beat")

    assert result["success"] is True
    assert len(result["created"]) == 2


def test_trigger_daily_task_skips_while_paused(task_session) -> None:
    from pipeline_dashboard.jobs.automation import trigger_daily_task

    set_system_status(task_session, SystemStatus.PAUSED, "paused for test")
    task_session.commit()

    assert trigger_daily_task(source="beat") == {"success": True, "skipped": True, "reason": "paused"}
    # Manual runs ignore the pause
    assert trigger_daily_task(source="manual")["success"] is True


def test_trigger_daily_task_reports_already_running(task_session) -> None:
    from pipeline_dashboard.jobs.automation import trigger_daily_task

    first = trigger_daily_task(source="beat")
    second = trigger_daily_task(source="beat")

    assert second["success"] is False
    assert sorted(second["running_jobs"]) == sorted(first["created"])


def test_check_scheduled_uploads_task(task_session) -> None:
    from pipeline_dashboard.jobs.automation import check_scheduled_uploads_task

    result = check_scheduled_uploads_task()

    assert result == {"success": True, "published": [], "still_pending": [], "failed": []}


def test_clear_stuck_jobs_task(task_session) -> None:
    from pipeline_dashboard.jobs.automation import clear_stuck_jobs_task

    assert clear_stuck_jobs_task() == {"success": True, "cleared": []}


def test_beat_schedule_registers_automation_tasks() -> None:
    from pipeline_dashboard.worker import celery_app

    tasks = {entry["task"] for entry in celery_app.conf.beat_schedule.values()}

    assert tasks == {
        "automation.trigger_daily",
        "automation.check_scheduled_uploads",
        "automation.clear_stuck_jobs",
    }
