"""Tests for the trace recorder."""

import pytest

from nutrifacts.core.trace import TraceRecorder


def test_first_entered_label_is_method_used() -> None:
    recorder = TraceRecorder()
    recorder.note("No nutrient_levels field in product")
    recorder.enter("Trying knowledge panels")
    recorder.enter("Falling back to nutriments data")

    trace = recorder.build(result_count=2)

    assert trace.method_used == "Trying knowledge panels"
    assert trace.steps == (
        "No nutrient_levels field in product",
        "Trying knowledge panels",
        "Falling back to nutriments data",
    )
    assert trace.result_count == 2


def test_trace_without_entered_branch() -> None:
    trace = TraceRecorder().build(result_count=0)
    assert trace.method_used == "No method used"
    assert trace.steps == ()


def test_built_trace_is_frozen_and_detached() -> None:
    recorder = TraceRecorder()
    recorder.note("first")
    trace = recorder.build(result_count=0)

    recorder.note("second")

    assert trace.steps == ("first",)
    with pytest.raises(Exception):  # FrozenInstanceError
        trace.result_count = 5
