"""Status classification for jobs and stages.

``classify`` is the only place that decides whether something is pending,
active, completed or failed. Icons, badge labels and CSS states are all derived
from its result.
"""

from dataclasses import dataclass
from typing import Any

from pipeline_dashboard.domain.enums import DisplayStatus, IconKind, Stage
from pipeline_dashboard.domain.stages import PIPELINE_STAGES, is_known_stage

BADGE_LABELS: dict[Stage, str] = {
    Stage.PENDING: "Pending",
    Stage.SCRIPT_GENERATION: "Generating Script",
    Stage.AUDIO_GENERATION: "Generating Audio",
    Stage.VIDEO_CREATION: "Creating Video",
    Stage.VIDEO_PROCESSING: "Processing Video",
    Stage.THUMBNAIL_GENERATION: "Generating Thumbnail",
    Stage.FILE_ORGANIZATION: "Organizing Files",
    Stage.SCHEDULING_UPLOAD: "Scheduling Upload",
    Stage.READY_FOR_UPLOAD: "Ready for Upload",
    Stage.UPLOADING: "Uploading",
    Stage.COMPLETED: "Completed",
    Stage.FAILED: "Failed",
}

_ICONS: dict[DisplayStatus, IconKind] = {
    DisplayStatus.COMPLETED: IconKind.CHECK,
    DisplayStatus.ACTIVE: IconKind.SPINNER,
    DisplayStatus.FAILED: IconKind.ALERT,
    DisplayStatus.PENDING: IconKind.CLOCK,
}

_VISUAL_STATES: dict[DisplayStatus, str] = {
    DisplayStatus.COMPLETED: "pipeline-step completed",
    DisplayStatus.ACTIVE: "pipeline-step active",
    DisplayStatus.FAILED: "pipeline-step failed",
    DisplayStatus.PENDING: "pipeline-step pending",
}

_ACTIVE_STAGES = frozenset(s.value for s in PIPELINE_STAGES)


@dataclass(frozen=True)
class StatusPresentation:
    """Everything a view needs to render one job's state."""

    status: DisplayStatus
    icon: IconKind
    badge_label: str
    visual_state: str

    def to_dict(self) -> dict[str, str]:
        return {
            "status": self.status.value,
            "icon": self.icon.value,
            "badge_label": self.badge_label,
            "visual_state": self.visual_state,
        }


def classify(stage: Stage | str, progress: int | None = 0) -> DisplayStatus:
    """Classify a (stage, progress) pair.

    Never raises: stages the dashboard does not know yet can only come out as
    completed (progress 100) or pending.
    """
    value = stage.value if isinstance(stage, Stage) else stage

    if value == Stage.FAILED.value:
        return DisplayStatus.FAILED
    if value == Stage.COMPLETED.value or progress == 100:
        return DisplayStatus.COMPLETED
    if value in _ACTIVE_STAGES:
        return DisplayStatus.ACTIVE
    return DisplayStatus.PENDING


def icon_for(status: DisplayStatus) -> IconKind:
    return _ICONS[status]


def visual_state(status: DisplayStatus) -> str:
    return _VISUAL_STATES[status]


def humanize_stage(value: Any) -> str:
    """Render an unrecognised stage value: ``color_grading`` -> ``COLOR GRADING``."""
    text = str(value).strip()
    if not text:
        return "UNKNOWN"
    return " ".join(part for part in text.replace("-", "_").split("_") if part).upper()


def badge_label(stage: Stage | str) -> str:
    """Human label for a stage, with a readable fallback for unknown values."""
    if is_known_stage(stage):
        return BADGE_LABELS[Stage(stage)]
    return humanize_stage(stage)


def present(stage: Stage | str, progress: int | None = 0) -> StatusPresentation:
    """Classify and derive all presentation hints in one call."""
    status = classify(stage, progress)
    return StatusPresentation(
        status=status,
        icon=icon_for(status),
        badge_label=badge_label(stage),
        visual_state=visual_state(status),
    )
