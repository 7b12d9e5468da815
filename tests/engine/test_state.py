# tests/engine/test_state.py
"""Tests for the pipeline run state machine."""

import pytest

from textchain.contracts import OrchestrationInvariantError, StepError, StepErrorCode, StepResult
from textchain.engine.state import (
    PipelineState,
    RunState,
    apply_step_result,
    begin_step,
    initial_state,
    settle,
)

_ERROR = StepError(code=StepErrorCode.INVALID_PATTERN, message="Invalid regex pattern: x")


def _run_steps(state: RunState, outputs: list[str]) -> RunState:
    for output in outputs:
        state = apply_step_result(begin_step(state), StepResult.success(output))
    return state


class TestHappyPath:
    def test_initial_state(self) -> None:
        state = initial_state("hello", 2)

        assert state.state == PipelineState.CREATED
        assert state.current_text == "hello"
        assert state.step_index == 0
        assert not state.is_terminal

    def test_text_threads_through_steps(self) -> None:
        state = _run_steps(initial_state("a", 3), ["b", "c", "d"])

        assert state.state == PipelineState.STEP_COMPLETED
        assert state.completed_steps == 3
        assert state.current_text == "d"

    def test_settle_after_last_step(self) -> None:
        state = settle(_run_steps(initial_state("a", 2), ["b", "c"]))

        assert state.state == PipelineState.ALL_COMPLETED
        assert state.is_terminal
        assert state.current_text == "c"

    def test_empty_output_is_still_success(self) -> None:
        state = _run_steps(initial_state("a", 1), [""])

        assert state.state == PipelineState.STEP_COMPLETED
        assert state.current_text == ""


class TestFailure:
    def test_failure_keeps_previous_text(self) -> None:
        state = _run_steps(initial_state("a", 3), ["b"])
        state = apply_step_result(begin_step(state), StepResult.failure(_ERROR))

        assert state.state == PipelineState.STEP_FAILED
        assert state.error == _ERROR
        assert state.current_text == "b"
        assert state.completed_steps == 1

    def test_settle_failure(self) -> None:
        state = apply_step_result(begin_step(initial_state("a", 2)), StepResult.failure(_ERROR))

        settled = settle(state)

        assert settled.state == PipelineState.RUN_FAILED
        assert settled.is_terminal


class TestIllegalTransitions:
    def test_zero_steps_rejected(self) -> None:
        with pytest.raises(OrchestrationInvariantError):
            initial_state("a", 0)

    def test_cannot_begin_while_running(self) -> None:
        with pytest.raises(OrchestrationInvariantError):
            begin_step(begin_step(initial_state("a", 2)))

    def test_cannot_begin_after_failure(self) -> None:
        state = apply_step_result(begin_step(initial_state("a", 2)), StepResult.failure(_ERROR))

        with pytest.raises(OrchestrationInvariantError):
            begin_step(state)

    def test_cannot_begin_past_last_step(self) -> None:
        state = _run_steps(initial_state("a", 1), ["b"])

        with pytest.raises(OrchestrationInvariantError, match="already completed"):
            begin_step(state)

    def test_cannot_apply_without_running_step(self) -> None:
        with pytest.raises(OrchestrationInvariantError):
            apply_step_result(initial_state("a", 1), StepResult.success("b"))

    def test_cannot_settle_with_steps_remaining(self) -> None:
        state = _run_steps(initial_state("a", 2), ["b"])

        with pytest.raises(OrchestrationInvariantError):
            settle(state)

    def test_cannot_settle_before_start(self) -> None:
        with pytest.raises(OrchestrationInvariantError):
            settle(initial_state("a", 1))
