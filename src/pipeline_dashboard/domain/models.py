"""Domain models - pure Python classes independent of database."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from pipeline_dashboard.domain.enums import DisplayStatus, Stage, VideoType


def ensure_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _isoformat(value: datetime | None) -> str | None:
    value = ensure_utc(value)
    return value.isoformat() if value else None


@dataclass
class JobRecord:
    """One piece of content moving through the pipeline.

    ``stage`` is kept as a plain string on the read side so that records
    written by a newer worker (with a stage this dashboard does not know yet)
    still load and render.
    """

    id: UUID
    video_type: VideoType
    title: str
    stage: str = Stage.PENDING.value
    progress: int = 0
    topic_id: UUID | None = None
    scheduled_time: datetime | None = None
    published_at: datetime | None = None
    error_message: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def create(
        cls,
        video_type: VideoType,
        title: str,
        topic_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> "JobRecord":
        """Create a new job at the start of the pipeline."""
        now = datetime.now(timezone.utc)
        return cls(
            id=uuid4(),
            video_type=video_type,
            title=title,
            topic_id=topic_id,
            metadata=metadata or {},
            created_at=now,
            updated_at=now,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "topic_id": str(self.topic_id) if self.topic_id else None,
            "video_type": str(self.video_type),
            "title": self.title,
            "stage": self.stage,
            "progress": self.progress,
            "scheduled_time": _isoformat(self.scheduled_time),
            "published_at": _isoformat(self.published_at),
            "error_message": self.error_message,
            "metadata": dict(self.metadata),
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }


@dataclass(frozen=True)
class Channel:
    """Upload-time policy owned by a publishing channel."""

    id: UUID | None
    name: str
    long_form_upload_time: str = "18:30"
    short_upload_time: str = "20:30"
    timezone: str = "Asia/Kolkata"
    is_active: bool = True

    def upload_time_for(self, video_type: VideoType | str) -> str:
        if VideoType(video_type) is VideoType.SHORT:
            return self.short_upload_time
        return self.long_form_upload_time


@dataclass(frozen=True)
class PipelineSnapshot:
    """Derived read view of the pipeline; never persisted."""

    active: tuple[JobRecord, ...]
    scheduled: tuple[JobRecord, ...]
    is_running: bool


@dataclass(frozen=True)
class StageOverviewEntry:
    """One cell of the stage-by-stage overview row."""

    stage: Stage
    label: str
    status: DisplayStatus


@dataclass
class DailyTriggerResult:
    """Outcome of a daily automation trigger."""

    accepted: bool
    run_date: str
    created: list[UUID] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


@dataclass
class UploadCheckResult:
    """Outcome of a scheduled-upload check."""

    published: list[UUID] = field(default_factory=list)
    still_pending: list[UUID] = field(default_factory=list)
    failed: list[UUID] = field(default_factory=list)
