"""Domain enumerations."""

from enum import StrEnum


class Stage(StrEnum):
    """Stage of a content job in the production pipeline.

    Declaration order is the lifecycle order. FAILED is out-of-band: it can be
    entered from any non-terminal stage and has no position in the sequence.
    """

    PENDING = "pending"
    SCRIPT_GENERATION = "script_generation"
    AUDIO_GENERATION = "audio_generation"
    VIDEO_CREATION = "video_creation"
    VIDEO_PROCESSING = "video_processing"
    THUMBNAIL_GENERATION = "thumbnail_generation"
    FILE_ORGANIZATION = "file_organization"
    SCHEDULING_UPLOAD = "scheduling_upload"
    READY_FOR_UPLOAD = "ready_for_upload"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"


class DisplayStatus(StrEnum):
    """How a job or a stage is shown on the dashboard."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class IconKind(StrEnum):
    """Icon rendered next to a job or stage."""

    CHECK = "check"
    SPINNER = "spinner"
    ALERT = "alert"
    CLOCK = "clock"


class StageComparison(StrEnum):
    """Result of comparing two stages by pipeline order."""

    BEFORE = "before"
    SAME = "same"
    AFTER = "after"


class VideoType(StrEnum):
    """Kind of video a job produces."""

    LONG_FORM = "long_form"
    SHORT = "short"


class TopicPriority(StrEnum):
    """Priority of a trending topic."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SystemStatus(StrEnum):
    """Whether beat-driven automation runs."""

    ACTIVE = "active"
    PAUSED = "paused"


class ActivityType(StrEnum):
    """Category of an activity log entry."""

    GENERATION = "generation"
    UPLOAD = "upload"
    ERROR = "error"
    SYSTEM = "system"
    WARNING = "warning"


class ActivityStatus(StrEnum):
    """Outcome recorded on an activity log entry."""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class CachePolicy(StrEnum):
    """Client cache policy for snapshot reads."""

    NO_STORE = "no-store"
