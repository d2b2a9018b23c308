"""Tests for the stage catalog."""

import itertools

import pytest

from pipeline_dashboard.domain.enums import Stage, StageComparison
from pipeline_dashboard.domain.stages import (
    LIFECYCLE,
    PIPELINE_STAGES,
    InvalidStage,
    InvalidTransition,
    compare,
    is_terminal,
    next_stage,
    order,
    parse_stage,
    validate_transition,
)


def test_lifecycle_follows_declaration_order() -> None:
    """Test that the lifecycle is the declared order without FAILED."""
    assert LIFECYCLE[0] is Stage.PENDING
    assert LIFECYCLE[-1] is Stage.COMPLETED
    assert Stage.FAILED not in LIFECYCLE
    assert [order(stage) for stage in LIFECYCLE] == list(range(len(LIFECYCLE)))


def test_pipeline_stages_exclude_pending_and_completed() -> None:
    assert PIPELINE_STAGES[0] is Stage.SCRIPT_GENERATION
    assert PIPELINE_STAGES[-1] is Stage.UPLOADING
    assert len(PIPELINE_STAGES) == 9


def test_order_is_injective() -> None:
    positions = [order(stage) for stage in LIFECYCLE]
    assert len(set(positions)) == len(positions)


def test_compare_is_strict_total_order() -> None:
    """Test compare() agrees with declaration sequence for every pair."""
    for a, b in itertools.product(LIFECYCLE, repeat=2):
        expected = (
            StageComparison.BEFORE
            if LIFECYCLE.index(a) < LIFECYCLE.index(b)
            else StageComparison.AFTER
            if LIFECYCLE.index(a) > LIFECYCLE.index(b)
            else StageComparison.SAME
        )
        assert compare(a, b) is expected
        assert compare(a.value, b.value) is expected


def test_order_rejects_failed_and_unknown() -> None:
    with pytest.raises(InvalidStage):
        order(Stage.FAILED)
    with pytest.raises(InvalidStage) as exc_info:
        order("color_grading")
    assert exc_info.value.value == "color_grading"


def test_parse_stage() -> None:
    assert parse_stage("video_creation") is Stage.VIDEO_CREATION
    assert parse_stage(Stage.UPLOADING) is Stage.UPLOADING
    for bad in ("", "VIDEO_CREATION", None, 3):
        with pytest.raises(InvalidStage):
            parse_stage(bad)


def test_is_terminal() -> None:
    assert is_terminal(Stage.COMPLETED)
    assert is_terminal("failed")
    assert not any(is_terminal(stage) for stage in PIPELINE_STAGES)
    assert not is_terminal(Stage.PENDING)


def test_next_stage() -> None:
    assert next_stage(Stage.PENDING) is Stage.SCRIPT_GENERATION
    assert next_stage(Stage.UPLOADING) is Stage.COMPLETED
    assert next_stage(Stage.COMPLETED) is None
    assert next_stage(Stage.FAILED) is None


def test_validate_transition_allows_single_step_and_same_stage() -> None:
    for current, new in zip(LIFECYCLE, LIFECYCLE[1:]):
        validate_transition(current, new)
    validate_transition(Stage.VIDEO_CREATION, Stage.VIDEO_CREATION)


def test_failed_is_reachable_from_any_non_terminal_stage() -> None:
    for stage in LIFECYCLE[:-1]:
        validate_transition(stage, Stage.FAILED)


@pytest.mark.parametrize(
    "current,new",
    [
        (Stage.PENDING, Stage.VIDEO_CREATION),  # skip
        (Stage.VIDEO_PROCESSING, Stage.AUDIO_GENERATION),  # rewind
        (Stage.COMPLETED, Stage.FAILED),  # leave terminal
        (Stage.FAILED, Stage.PENDING),
        (Stage.COMPLETED, Stage.COMPLETED),
    ],
)
def test_validate_transition_rejects(current: Stage, new: Stage) -> None:
    with pytest.raises(InvalidTransition):
        validate_transition(current, new)


def test_validate_transition_rejects_unknown_stage() -> None:
    with pytest.raises(InvalidStage):
        validate_transition(Stage.PENDING, "color_grading")
