"""Stage catalog: the ordered, closed set of pipeline stages.

Everything here is pure. Callers on the write path use ``parse_stage`` and
``validate_transition``; read paths that must not fail on unknown input use
``is_known_stage`` first.
"""

from typing import Any

from pipeline_dashboard.domain.enums import Stage, StageComparison

# Lifecycle sequence: PENDING, the pipeline stages, then COMPLETED.
LIFECYCLE: tuple[Stage, ...] = tuple(s for s in Stage if s is not Stage.FAILED)

# Stages that represent ongoing production work, in pipeline order.
PIPELINE_STAGES: tuple[Stage, ...] = tuple(
    s for s in LIFECYCLE if s not in (Stage.PENDING, Stage.COMPLETED)
)

TERMINAL_STAGES: frozenset[Stage] = frozenset({Stage.COMPLETED, Stage.FAILED})

_ORDER: dict[Stage, int] = {stage: index for index, stage in enumerate(LIFECYCLE)}
_VALUES: frozenset[str] = frozenset(s.value for s in Stage)


class InvalidStage(ValueError):
    """Raised when a value is not a member of the stage catalog."""

    def __init__(self, value: Any, reason: str | None = None) -> None:
        self.value = value
        message = reason or f"Unknown pipeline stage: {value!r}"
        super().__init__(message)


class InvalidTransition(ValueError):
    """Raised when a stage change would skip, rewind, or leave a terminal stage."""

    def __init__(self, current: Stage, new: Stage) -> None:
        self.current = current
        self.new = new
        super().__init__(f"Cannot move job from '{current}' to '{new}'")


def is_known_stage(value: Any) -> bool:
    """Return True if value names a catalog stage."""
    return isinstance(value, str) and value in _VALUES


def parse_stage(value: Any) -> Stage:
    """Convert a raw value into a Stage, rejecting anything outside the catalog."""
    if isinstance(value, Stage):
        return value
    if not is_known_stage(value):
        raise InvalidStage(value)
    return Stage(value)


def order(stage: Stage | str) -> int:
    """Position of a stage in the lifecycle (PENDING=0 ... COMPLETED=10).

    Raises:
        InvalidStage: For FAILED (out-of-band) or any value outside the catalog.
    """
    parsed = parse_stage(stage)
    if parsed is Stage.FAILED:
        raise InvalidStage(parsed, "'failed' has no position in the stage order")
    return _ORDER[parsed]


def is_terminal(stage: Stage | str) -> bool:
    """True for COMPLETED and FAILED."""
    return parse_stage(stage) in TERMINAL_STAGES


def compare(a: Stage | str, b: Stage | str) -> StageComparison:
    """Compare two stages by lifecycle order."""
    left, right = order(a), order(b)
    if left < right:
        return StageComparison.BEFORE
    if left > right:
        return StageComparison.AFTER
    return StageComparison.SAME


def next_stage(stage: Stage | str) -> Stage | None:
    """The stage that follows ``stage``, or None for terminal stages."""
    parsed = parse_stage(stage)
    if parsed in TERMINAL_STAGES:
        return None
    return LIFECYCLE[_ORDER[parsed] + 1]


def validate_transition(current: Stage | str, new: Stage | str) -> None:
    """Check that a job may move from ``current`` to ``new``.

    Allowed: staying on the same non-terminal stage, advancing exactly one
    step, or failing from any non-terminal stage.

    Raises:
        InvalidStage: If either value is outside the catalog.
        InvalidTransition: For any other move.
    """
    cur = parse_stage(current)
    nxt = parse_stage(new)

    if cur in TERMINAL_STAGES:
        raise InvalidTransition(cur, nxt)
    if nxt is Stage.FAILED or nxt is cur:
        return
    if next_stage(cur) is not nxt:
        raise InvalidTransition(cur, nxt)
