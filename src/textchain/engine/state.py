# src/textchain/engine/state.py
"""Pipeline run state machine.

    CREATED ──begin_step──▶ STEP_RUNNING ──apply_step_result──▶ STEP_COMPLETED ──begin_step──▶ STEP_RUNNING ...
                                      └──────────────────────▶ STEP_FAILED
    STEP_COMPLETED (last step) ──settle──▶ ALL_COMPLETED
    STEP_FAILED ──settle──▶ RUN_FAILED

Transitions are pure functions over an immutable RunState. Any other
transition raises OrchestrationInvariantError: the orchestrator drove the
machine wrongly, which is a bug, never a data condition.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum

from textchain.contracts.errors import OrchestrationInvariantError, StepError
from textchain.contracts.results import StepResult


class PipelineState(StrEnum):
    CREATED = "created"
    STEP_RUNNING = "step_running"
    STEP_COMPLETED = "step_completed"
    STEP_FAILED = "step_failed"
    ALL_COMPLETED = "all_completed"
    RUN_FAILED = "run_failed"


TERMINAL_STATES = frozenset({PipelineState.ALL_COMPLETED, PipelineState.RUN_FAILED})


@dataclass(frozen=True)
class RunState:
    """Where a pipeline invocation is.

    Attributes:
        state: Current machine state
        step_count: Number of steps in the transformation (at least one)
        completed_steps: Steps that finished successfully so far
        current_text: Output of the last completed step (the run input before any)
        error: The step failure, once in STEP_FAILED or RUN_FAILED
    """

    state: PipelineState
    step_count: int
    completed_steps: int
    current_text: str
    error: StepError | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def step_index(self) -> int:
        """Index of the step that is running or will run next."""
        return self.completed_steps


def initial_state(input_text: str, step_count: int) -> RunState:
    if step_count < 1:
        raise OrchestrationInvariantError(f"A run needs at least one step, got {step_count}")
    return RunState(
        state=PipelineState.CREATED,
        step_count=step_count,
        completed_steps=0,
        current_text=input_text,
    )


def begin_step(run_state: RunState) -> RunState:
    if run_state.state not in (PipelineState.CREATED, PipelineState.STEP_COMPLETED):
        raise OrchestrationInvariantError(f"Cannot begin a step from {run_state.state}")
    if run_state.completed_steps >= run_state.step_count:
        raise OrchestrationInvariantError(f"All {run_state.step_count} steps already completed; cannot begin another")
    return replace(run_state, state=PipelineState.STEP_RUNNING)


def apply_step_result(run_state: RunState, result: StepResult) -> RunState:
    if run_state.state != PipelineState.STEP_RUNNING:
        raise OrchestrationInvariantError(f"Cannot apply a step result in {run_state.state}")

    if result.ok and result.output is not None:
        return replace(
            run_state,
            state=PipelineState.STEP_COMPLETED,
            completed_steps=run_state.completed_steps + 1,
            current_text=result.output,
        )
    return replace(run_state, state=PipelineState.STEP_FAILED, error=result.error)


def settle(run_state: RunState) -> RunState:
    """Move a finished machine to its terminal state."""
    if run_state.state == PipelineState.STEP_FAILED:
        return replace(run_state, state=PipelineState.RUN_FAILED)
    if run_state.state == PipelineState.STEP_COMPLETED and run_state.completed_steps == run_state.step_count:
        return replace(run_state, state=PipelineState.ALL_COMPLETED)
    raise OrchestrationInvariantError(
        f"Cannot settle from {run_state.state} with {run_state.completed_steps}/{run_state.step_count} steps completed"
    )
