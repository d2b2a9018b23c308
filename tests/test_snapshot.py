"""Tests for snapshot aggregation and the stage overview row."""

import random
from datetime import UTC, datetime, timedelta
from uuid import UUID

from pipeline_dashboard.domain.enums import DisplayStatus, Stage, VideoType
from pipeline_dashboard.domain.models import JobRecord, PipelineSnapshot
from pipeline_dashboard.domain.snapshot import build_snapshot, stage_overview

BASE = datetime(2024, 6, 1, 8, 0, tzinfo=UTC)


def _job(
    n: int,
    stage: str = Stage.PENDING.value,
    progress: int = 0,
    scheduled_in: int | None = None,
    published: bool = False,
) -> JobRecord:
    return JobRecord(
        id=UUID(int=n),
        video_type=VideoType.SHORT if n % 2 else VideoType.LONG_FORM,
        title=f"Job {n}",
        stage=stage,
        progress=progress,
        scheduled_time=BASE + timedelta(hours=scheduled_in) if scheduled_in is not None else None,
        published_at=BASE if published else None,
        created_at=BASE + timedelta(minutes=n),
        updated_at=BASE + timedelta(minutes=n),
    )


def _random_jobs(rng: random.Random) -> list[JobRecord]:
    stages = [s.value for s in Stage] + ["color_grading"]
    jobs = []
    for n in range(rng.randint(0, 12)):
        stage = rng.choice(stages)
        jobs.append(
            _job(
                n,
                stage=stage,
                progress=rng.randint(0, 100),
                scheduled_in=rng.choice([None, rng.randint(-5, 48)]),
                published=stage == Stage.COMPLETED.value and rng.random() < 0.5,
            )
        )
    return jobs


def test_empty_snapshot_is_not_running() -> None:
    snapshot = build_snapshot([])

    assert snapshot == PipelineSnapshot(active=(), scheduled=(), is_running=False)


def test_active_excludes_terminal_and_sorts_newest_first() -> None:
    jobs = [
        _job(1, Stage.SCRIPT_GENERATION.value),
        _job(2, Stage.COMPLETED.value, 100),
        _job(3, Stage.FAILED.value),
        _job(4, Stage.PENDING.value),
        _job(5, "color_grading"),
    ]

    snapshot = build_snapshot(jobs)

    assert [job.id.int for job in snapshot.active] == [5, 4, 1]
    assert snapshot.is_running


def test_scheduled_excludes_published_and_failed() -> None:
    jobs = [
        _job(1, Stage.READY_FOR_UPLOAD.value, scheduled_in=10),
        _job(2, Stage.COMPLETED.value, 100, scheduled_in=2, published=True),
        _job(3, Stage.FAILED.value, scheduled_in=3),
        _job(4, Stage.SCHEDULING_UPLOAD.value, scheduled_in=5),
        _job(5, Stage.VIDEO_CREATION.value),
    ]

    snapshot = build_snapshot(jobs)

    assert [job.id.int for job in snapshot.scheduled] == [4, 1]


def test_build_snapshot_is_idempotent_and_order_independent() -> None:
    rng = random.Random(1234)
    for _ in range(50):
        jobs = _random_jobs(rng)
        first = build_snapshot(jobs)
        second = build_snapshot(jobs)
        shuffled = list(jobs)
        rng.shuffle(shuffled)

        assert first == second
        assert build_snapshot(shuffled) == first


def test_is_running_iff_active_non_empty() -> None:
    rng = random.Random(99)
    for _ in range(100):
        snapshot = build_snapshot(_random_jobs(rng))
        assert snapshot.is_running == (len(snapshot.active) > 0)


def test_stage_overview_for_video_creation() -> None:
    snapshot = build_snapshot([_job(1, Stage.VIDEO_CREATION.value, 30)])

    overview = {entry.stage: entry.status for entry in stage_overview(snapshot)}

    assert overview[Stage.SCRIPT_GENERATION] is DisplayStatus.COMPLETED
    assert overview[Stage.AUDIO_GENERATION] is DisplayStatus.COMPLETED
    assert overview[Stage.VIDEO_CREATION] is DisplayStatus.ACTIVE
    for stage in (
        Stage.VIDEO_PROCESSING,
        Stage.THUMBNAIL_GENERATION,
        Stage.FILE_ORGANIZATION,
        Stage.SCHEDULING_UPLOAD,
        Stage.READY_FOR_UPLOAD,
        Stage.UPLOADING,
    ):
        assert overview[stage] is DisplayStatus.PENDING


def test_stage_overview_uses_most_recent_active_job() -> None:
    snapshot = build_snapshot(
        [_job(1, Stage.UPLOADING.value), _job(2, Stage.SCRIPT_GENERATION.value)]
    )

    overview = stage_overview(snapshot)

    assert overview[0].status is DisplayStatus.ACTIVE
    assert all(entry.status is DisplayStatus.PENDING for entry in overview[1:])


def test_stage_overview_all_pending_when_idle_or_unknown() -> None:
    for jobs in ([], [_job(1, "color_grading")], [_job(2, Stage.PENDING.value)]):
        overview = stage_overview(build_snapshot(jobs))
        assert all(entry.status is DisplayStatus.PENDING for entry in overview)


def test_stage_overview_labels() -> None:
    labels = [entry.label for entry in stage_overview(build_snapshot([]))]
    assert labels[0] == "Generating Script"
    assert labels[-1] == "Uploading"
