# src/textchain/engine/tracker.py
"""RunTracker - the orchestrator's view of the run ledger.

Every operation returns a TrackerResult. Storage exceptions
(SQLAlchemyError, AuditIntegrityError) become a PersistenceFailure; any
other exception is a bug and propagates.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

import structlog
from sqlalchemy.exc import SQLAlchemyError

from textchain.contracts.audit import TransformationRun, TransformationStepRun
from textchain.contracts.errors import AuditIntegrityError, PersistenceFailure, StepError
from textchain.contracts.results import TrackerResult
from textchain.core.ledger.recorder import RunRecorder

slog = structlog.get_logger(__name__)

T = TypeVar("T")


class RunTracker:
    """Records run and step run lifecycle through a RunRecorder."""

    def __init__(self, recorder: RunRecorder) -> None:
        self._recorder = recorder

    def create_run(
        self,
        transformation_id: str,
        recording_id: str | None,
        input_text: str,
    ) -> TrackerResult[TransformationRun]:
        return self._guard(
            "create_run",
            lambda: self._recorder.begin_run(transformation_id, input_text, recording_id=recording_id),
            transformation_id=transformation_id,
        )

    def add_step_run(
        self,
        run: TransformationRun,
        step_id: str,
        input_text: str,
    ) -> TrackerResult[TransformationStepRun]:
        return self._guard(
            "add_step_run",
            lambda: self._recorder.begin_step_run(run.run_id, step_id, input_text),
            run_id=run.run_id,
            step_id=step_id,
        )

    def mark_step_completed(
        self,
        run: TransformationRun,
        step_run_id: str,
        output: str,
    ) -> TrackerResult[TransformationStepRun]:
        return self._guard(
            "mark_step_completed",
            lambda: self._recorder.complete_step_run(step_run_id, output),
            run_id=run.run_id,
            step_run_id=step_run_id,
        )

    def mark_run_and_step_failed(
        self,
        run: TransformationRun,
        step_run_id: str,
        error: StepError,
    ) -> TrackerResult[TransformationRun]:
        """Mark the step run and the run FAILED together (one transaction)."""
        return self._guard(
            "mark_run_and_step_failed",
            lambda: self._recorder.fail_run_and_step(
                run.run_id,
                step_run_id,
                error=error.message,
                error_code=error.code.value,
            ),
            run_id=run.run_id,
            step_run_id=step_run_id,
        )

    def mark_run_completed(self, run: TransformationRun, output: str) -> TrackerResult[TransformationRun]:
        """Mark the run COMPLETED. Refused unless every step run completed."""
        return self._guard(
            "mark_run_completed",
            lambda: self._recorder.complete_run(run.run_id, output),
            run_id=run.run_id,
        )

    def _guard(self, operation: str, work: Callable[[], T], **context: str) -> TrackerResult[T]:
        try:
            return TrackerResult.success(work())
        except (SQLAlchemyError, AuditIntegrityError) as e:
            slog.error(
                "ledger_write_failed",
                operation=operation,
                exception_type=type(e).__name__,
                error=str(e),
                **context,
            )
            return TrackerResult.error(
                PersistenceFailure(
                    operation=operation,
                    message=str(e),
                    exception_type=type(e).__name__,
                )
            )
