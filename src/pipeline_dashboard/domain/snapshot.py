"""Pipeline snapshot aggregation.

Pure read-side projection from job records to the dashboard's
"what is happening right now" view. No stage mutation happens here.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from pipeline_dashboard.domain.enums import DisplayStatus, Stage
from pipeline_dashboard.domain.models import (
    JobRecord,
    PipelineSnapshot,
    StageOverviewEntry,
    ensure_utc,
)
from pipeline_dashboard.domain.stages import (
    PIPELINE_STAGES,
    TERMINAL_STAGES,
    is_known_stage,
    order,
)
from pipeline_dashboard.domain.status import badge_label

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)
_TERMINAL_VALUES = frozenset(s.value for s in TERMINAL_STAGES)


def _is_terminal_for_display(job: JobRecord) -> bool:
    # Unknown stages are treated as still in flight
    return job.stage in _TERMINAL_VALUES


def build_snapshot(jobs: Iterable[JobRecord]) -> PipelineSnapshot:
    """Build the active/scheduled/is_running view from a set of jobs.

    ``active`` holds non-terminal jobs, newest first. ``scheduled`` holds
    jobs with a scheduled time that are neither published nor failed, soonest
    first. Ties are broken by job id so the output is deterministic.
    """
    job_list = list(jobs)

    active = sorted(
        (job for job in job_list if not _is_terminal_for_display(job)),
        key=lambda job: (ensure_utc(job.created_at) or _EPOCH, str(job.id)),
        reverse=True,
    )

    scheduled = sorted(
        (
            job
            for job in job_list
            if job.scheduled_time is not None
            and job.published_at is None
            and job.stage != Stage.FAILED.value
        ),
        key=lambda job: (ensure_utc(job.scheduled_time), str(job.id)),
    )

    return PipelineSnapshot(
        active=tuple(active),
        scheduled=tuple(scheduled),
        is_running=len(active) > 0,
    )


def stage_overview(snapshot: PipelineSnapshot) -> list[StageOverviewEntry]:
    """Stage-by-stage completion row for the dashboard.

    Only the most recently created active job drives the row. With several
    jobs in flight the others are not reflected here.
    """
    representative = snapshot.active[0] if snapshot.active else None
    current: int | None = None
    if representative is not None and is_known_stage(representative.stage):
        current = order(representative.stage)

    entries: list[StageOverviewEntry] = []
    for stage in PIPELINE_STAGES:
        if current is None:
            status = DisplayStatus.PENDING
        elif order(stage) < current:
            status = DisplayStatus.COMPLETED
        elif order(stage) == current:
            status = DisplayStatus.ACTIVE
        else:
            status = DisplayStatus.PENDING
        entries.append(StageOverviewEntry(stage=stage, label=badge_label(stage), status=status))
    return entries
