"""Application services."""

from pipeline_dashboard.services.jobs import (
    JobNotFoundError,
    JobUpdateError,
    apply_progress,
    load_snapshot,
)
from pipeline_dashboard.services.dispatcher import (
    AlreadyRunning,
    AutomationDispatcher,
    DispatcherStatus,
)
from pipeline_dashboard.services.polling import PollingConfig, PollState, SnapshotPoller, StaleRead
from pipeline_dashboard.services.stats import DailyStats, daily_stats

__all__ = [
    "AlreadyRunning",
    "AutomationDispatcher",
    "DailyStats",
    "DispatcherStatus",
    "JobNotFoundError",
    "JobUpdateError",
    "PollState",
    "PollingConfig",
    "SnapshotPoller",
    "StaleRead",
    "apply_progress",
    "daily_stats",
    "load_snapshot",
]
