# src/textchain/engine/orchestrator.py
"""PipelineOrchestrator - runs a transformation's steps in order.

Coordinates:
- Definition lookup and validation
- Run creation
- Per step: step run creation, execution, completion or failure recording
- Run completion

Strictly sequential and fail-fast. A step failure ends the run as FAILED
and is a *successful* invocation (the failed run is the answer). A ledger
failure aborts immediately with its own TransformErrorCode, because the
recorded state can no longer be trusted.
"""

from __future__ import annotations

from typing import assert_never

import structlog
from sqlalchemy.exc import SQLAlchemyError

from textchain.contracts.collaborators import TransformationSource
from textchain.contracts.definitions import RewriteStep, Step, SubstitutionStep, UnsupportedStep
from textchain.contracts.enums import StepType
from textchain.contracts.errors import (
    CollaboratorError,
    OrchestrationInvariantError,
    PersistenceFailure,
    StepError,
    StepErrorCode,
    TransformError,
    TransformErrorCode,
)
from textchain.contracts.results import PipelineResult
from textchain.core.config import ProviderCredentials
from textchain.engine.executor import StepExecutor
from textchain.engine.spans import SpanFactory
from textchain.engine.state import PipelineState, apply_step_result, begin_step, initial_state, settle
from textchain.engine.tracker import RunTracker

slog = structlog.get_logger(__name__)


def step_type_of(step: Step) -> str:
    """Stored type tag of a step."""
    match step:
        case SubstitutionStep():
            return StepType.FIND_REPLACE.value
        case RewriteStep():
            return StepType.PROMPT_TRANSFORM.value
        case UnsupportedStep():
            return step.step_type
        case _:
            assert_never(step)


def _persistence_error(
    code: TransformErrorCode,
    failure: PersistenceFailure | None,
    step_error: StepError | None = None,
) -> PipelineResult:
    return PipelineResult.failure(
        TransformError(
            code=code,
            detail=failure.message if failure is not None else None,
            persistence=failure,
            step_error=step_error,
        )
    )


class PipelineOrchestrator:
    """Runs one transformation against one input.

    Example:
        orchestrator = PipelineOrchestrator(
            definitions=TransformationStore(db),
            executor=StepExecutor(backends),
            tracker=RunTracker(RunRecorder(db)),
        )
        result = orchestrator.run("tr-1", "some text", recording_id=None, credentials=credentials)
    """

    def __init__(
        self,
        *,
        definitions: TransformationSource,
        executor: StepExecutor,
        tracker: RunTracker,
        span_factory: SpanFactory | None = None,
    ) -> None:
        self._definitions = definitions
        self._executor = executor
        self._tracker = tracker
        self._spans = span_factory or SpanFactory()

    def run(
        self,
        transformation_id: str,
        input_text: str,
        recording_id: str | None,
        credentials: ProviderCredentials,
    ) -> PipelineResult:
        """Execute every step of a transformation, recording each one.

        Returns:
            PipelineResult.success(run) with a COMPLETED or FAILED run, or
            PipelineResult.failure(TransformError) when there is no run to
            show or the ledger could not record it
        """
        log = slog.bind(transformation_id=transformation_id)

        try:
            transformation = self._definitions.get_transformation(transformation_id)
        except (CollaboratorError, SQLAlchemyError) as e:
            log.warning("transformation_lookup_failed", error_type=type(e).__name__)
            return PipelineResult.failure(TransformError(code=TransformErrorCode.TRANSFORMATION_NOT_FOUND, detail=str(e)))

        if transformation is None:
            return PipelineResult.failure(TransformError(code=TransformErrorCode.TRANSFORMATION_NOT_FOUND))

        if not transformation.steps:
            return PipelineResult.failure(TransformError(code=TransformErrorCode.NO_STEPS_CONFIGURED))

        with self._spans.run_span(transformation_id) as run_span:
            created = self._tracker.create_run(transformation_id, recording_id, input_text)
            if not created.ok:
                return _persistence_error(TransformErrorCode.FAILED_TO_CREATE_RUN, created.failure)
            run = created.unwrap()

            log = log.bind(run_id=run.run_id)
            run_span.set_attribute("run.id", run.run_id)
            log.info("run_started", step_count=len(transformation.steps), input_chars=len(input_text))

            state = initial_state(input_text, len(transformation.steps))

            for index, step in enumerate(transformation.steps):
                state = begin_step(state)
                step_input = state.current_text

                added = self._tracker.add_step_run(run, step.step_id, step_input)
                if not added.ok:
                    return _persistence_error(TransformErrorCode.FAILED_TO_ADD_STEP_RUN, added.failure)
                step_run = added.unwrap()

                with self._spans.step_span(step.step_id, step_type_of(step), index):
                    try:
                        result = self._executor.execute(step_input, step, credentials)
                    except Exception as e:
                        # Record the crash so neither row stays RUNNING, then propagate
                        crash = StepError(code=StepErrorCode.INTERNAL_ERROR, message=f"{type(e).__name__}: {e}")
                        log.error("step_crashed", step_id=step.step_id, step_index=index, error_type=type(e).__name__)
                        self._tracker.mark_run_and_step_failed(run, step_run.step_run_id, crash)
                        raise

                state = apply_step_result(state, result)

                if state.state == PipelineState.STEP_FAILED:
                    step_error = state.error
                    if step_error is None:
                        raise OrchestrationInvariantError("STEP_FAILED without a StepError")
                    log.info(
                        "step_failed",
                        step_id=step.step_id,
                        step_index=index,
                        error_code=step_error.code.value,
                    )

                    failed = self._tracker.mark_run_and_step_failed(run, step_run.step_run_id, step_error)
                    if not failed.ok:
                        return _persistence_error(TransformErrorCode.FAILED_TO_MARK_FAILED, failed.failure, step_error)

                    state = settle(state)
                    log.info("run_failed", failed_step_index=index)
                    return PipelineResult.success(failed.unwrap())

                completed_step = self._tracker.mark_step_completed(run, step_run.step_run_id, state.current_text)
                if not completed_step.ok:
                    return _persistence_error(TransformErrorCode.FAILED_TO_MARK_STEP_COMPLETED, completed_step.failure)

                log.debug("step_completed", step_id=step.step_id, step_index=index, output_chars=len(state.current_text))

            state = settle(state)
            completed = self._tracker.mark_run_completed(run, state.current_text)
            if not completed.ok:
                return _persistence_error(TransformErrorCode.FAILED_TO_MARK_RUN_COMPLETED, completed.failure)

            log.info("run_completed", output_chars=len(state.current_text))
            return PipelineResult.success(completed.unwrap())
