"""Domain models and pipeline rules."""

from pipeline_dashboard.domain.enums import (
    DisplayStatus,
    IconKind,
    Stage,
    StageComparison,
    VideoType,
)
from pipeline_dashboard.domain.models import (
    Channel,
    DailyTriggerResult,
    JobRecord,
    PipelineSnapshot,
    StageOverviewEntry,
    UploadCheckResult,
)
from pipeline_dashboard.domain.snapshot import build_snapshot, stage_overview
from pipeline_dashboard.domain.stages import (
    PIPELINE_STAGES,
    InvalidStage,
    InvalidTransition,
    compare,
    is_terminal,
    order,
)
from pipeline_dashboard.domain.status import badge_label, classify, present
from pipeline_dashboard.domain.timeline import next_slot

__all__ = [
    "Channel",
    "DailyTriggerResult",
    "DisplayStatus",
    "IconKind",
    "InvalidStage",
    "InvalidTransition",
    "JobRecord",
    "PIPELINE_STAGES",
    "PipelineSnapshot",
    "Stage",
    "StageComparison",
    "StageOverviewEntry",
    "UploadCheckResult",
    "VideoType",
    "badge_label",
    "build_snapshot",
    "classify",
    "compare",
    "is_terminal",
    "next_slot",
    "order",
    "present",
    "stage_overview",
]
