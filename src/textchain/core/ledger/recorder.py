"""RunRecorder: SQL storage for transformation runs and step runs.

Every state change is a guarded UPDATE (``WHERE status = 'running'``).
A guarded write that matches zero rows means the record is missing or
already terminal, and raises AuditIntegrityError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import Connection, func, select

from textchain.contracts.audit import TransformationRun, TransformationStepRun
from textchain.contracts.enums import RunStatus, StepRunStatus
from textchain.contracts.errors import AuditIntegrityError
from textchain.core.canonical import stable_hash
from textchain.core.ledger._database_ops import DatabaseOps, require_rows
from textchain.core.ledger._helpers import generate_id, now
from textchain.core.ledger.repositories import RunRepository, StepRunRepository
from textchain.core.ledger.schema import transformation_runs_table, transformation_step_runs_table

if TYPE_CHECKING:
    from textchain.core.ledger.database import LedgerDB


class RunRecorder:
    """High-level API for recording transformation runs.

    Example:
        db = LedgerDB.in_memory()
        recorder = RunRecorder(db)

        run = recorder.begin_run("tr-1", "hello", recording_id=None)
        step_run = recorder.begin_step_run(run.run_id, "step-1", "hello")
        recorder.complete_step_run(step_run.step_run_id, "HELLO")
        recorder.complete_run(run.run_id, "HELLO")
    """

    def __init__(self, db: LedgerDB) -> None:
        self._db = db
        self._ops = DatabaseOps(db)
        self._run_repo = RunRepository()
        self._step_run_repo = StepRunRepository()

    # === Run Management ===

    def begin_run(
        self,
        transformation_id: str,
        input_text: str,
        *,
        recording_id: str | None = None,
        run_id: str | None = None,
    ) -> TransformationRun:
        """Insert a new run with status RUNNING.

        Args:
            transformation_id: Transformation being executed
            input_text: Text the pipeline starts from
            recording_id: Source recording, when the input is a transcript
            run_id: Optional run ID (generated if not provided)

        Returns:
            TransformationRun as written
        """
        run = TransformationRun(
            run_id=run_id or generate_id(),
            transformation_id=transformation_id,
            recording_id=recording_id,
            input=input_text,
            status=RunStatus.RUNNING,
            started_at=now(),
        )

        self._ops.execute_insert(
            transformation_runs_table.insert().values(
                run_id=run.run_id,
                transformation_id=run.transformation_id,
                recording_id=run.recording_id,
                input=run.input,
                status=run.status.value,
                started_at=run.started_at,
            )
        )

        return run

    def complete_run(self, run_id: str, output: str) -> TransformationRun:
        """Mark a run COMPLETED with its final output.

        Refuses unless the run has at least one step run, every step run is
        COMPLETED, and ``output`` is the last step run's output.

        Raises:
            AuditIntegrityError: If the run's step runs do not support completion,
                or the run is missing or already terminal
        """

        def work(conn: Connection) -> None:
            step_rows = conn.execute(
                select(
                    transformation_step_runs_table.c.status,
                    transformation_step_runs_table.c.output,
                )
                .where(transformation_step_runs_table.c.run_id == run_id)
                .order_by(transformation_step_runs_table.c.step_index)
            ).fetchall()

            if not step_rows:
                raise AuditIntegrityError(f"complete_run: run {run_id} has no step runs")
            unfinished = [row for row in step_rows if row.status != StepRunStatus.COMPLETED.value]
            if unfinished:
                raise AuditIntegrityError(
                    f"complete_run: run {run_id} has {len(unfinished)} step run(s) not completed "
                    f"(statuses: {sorted({row.status for row in unfinished})})"
                )
            if step_rows[-1].output != output:
                raise AuditIntegrityError(f"complete_run: output for run {run_id} does not match the last step run's output")

            result = conn.execute(
                transformation_runs_table.update()
                .where(transformation_runs_table.c.run_id == run_id)
                .where(transformation_runs_table.c.status == RunStatus.RUNNING.value)
                .values(
                    status=RunStatus.COMPLETED.value,
                    output=output,
                    completed_at=now(),
                )
            )
            require_rows(result.rowcount, f"complete_run({run_id})")

        self._ops.execute_in_transaction(work)
        return self._require_run(run_id)

    def fail_run_and_step(
        self,
        run_id: str,
        step_run_id: str,
        *,
        error: str,
        error_code: str,
    ) -> TransformationRun:
        """Mark a step run and its run FAILED in one transaction.

        The run's ``error`` mirrors the step run's message. Either both rows
        change or neither does.

        Raises:
            AuditIntegrityError: If either row is missing or already terminal,
                or the step run belongs to another run
        """
        timestamp = now()

        def work(conn: Connection) -> None:
            step_result = conn.execute(
                transformation_step_runs_table.update()
                .where(transformation_step_runs_table.c.step_run_id == step_run_id)
                .where(transformation_step_runs_table.c.run_id == run_id)
                .where(transformation_step_runs_table.c.status == StepRunStatus.RUNNING.value)
                .values(
                    status=StepRunStatus.FAILED.value,
                    error=error,
                    error_code=error_code,
                    completed_at=timestamp,
                )
            )
            require_rows(step_result.rowcount, f"fail_run_and_step: step run {step_run_id}")

            run_result = conn.execute(
                transformation_runs_table.update()
                .where(transformation_runs_table.c.run_id == run_id)
                .where(transformation_runs_table.c.status == RunStatus.RUNNING.value)
                .values(
                    status=RunStatus.FAILED.value,
                    error=error,
                    completed_at=timestamp,
                )
            )
            require_rows(run_result.rowcount, f"fail_run_and_step: run {run_id}")

        self._ops.execute_in_transaction(work)
        return self._require_run(run_id)

    def get_run(self, run_id: str) -> TransformationRun | None:
        """Get a run by ID.

        Returns:
            TransformationRun or None if not found
        """
        query = select(transformation_runs_table).where(transformation_runs_table.c.run_id == run_id)
        row = self._ops.execute_fetchone(query)
        if row is None:
            return None
        return self._run_repo.load(row)

    def get_runs_by_transformation_id(self, transformation_id: str) -> list[TransformationRun]:
        """All runs of a transformation, newest first."""
        query = (
            select(transformation_runs_table)
            .where(transformation_runs_table.c.transformation_id == transformation_id)
            .order_by(transformation_runs_table.c.started_at.desc())
        )
        return [self._run_repo.load(row) for row in self._ops.execute_fetchall(query)]

    def get_runs_by_recording_id(self, recording_id: str) -> list[TransformationRun]:
        """All runs started from a recording's transcript, newest first."""
        query = (
            select(transformation_runs_table)
            .where(transformation_runs_table.c.recording_id == recording_id)
            .order_by(transformation_runs_table.c.started_at.desc())
        )
        return [self._run_repo.load(row) for row in self._ops.execute_fetchall(query)]

    # === Step Run Recording ===

    def begin_step_run(
        self,
        run_id: str,
        step_id: str,
        input_text: str,
        *,
        step_run_id: str | None = None,
    ) -> TransformationStepRun:
        """Insert the next step run of a run with status RUNNING.

        ``step_index`` is the number of step runs already recorded for the
        run, so indexes are dense and follow insertion order.

        Raises:
            AuditIntegrityError: If the run is missing or terminal, or another
                step run of the run is still RUNNING
        """
        step_run_id = step_run_id or generate_id()
        input_hash = stable_hash(input_text)
        timestamp = now()

        def work(conn: Connection) -> TransformationStepRun:
            run_status = conn.execute(
                select(transformation_runs_table.c.status).where(transformation_runs_table.c.run_id == run_id)
            ).scalar_one_or_none()
            if run_status is None:
                raise AuditIntegrityError(f"begin_step_run: run {run_id} not found")
            if run_status != RunStatus.RUNNING.value:
                raise AuditIntegrityError(f"begin_step_run: run {run_id} is already {run_status}")

            counts: dict[str, Any] = dict(
                conn.execute(
                    select(transformation_step_runs_table.c.status, func.count())
                    .where(transformation_step_runs_table.c.run_id == run_id)
                    .group_by(transformation_step_runs_table.c.status)
                ).all()
            )
            if counts.get(StepRunStatus.RUNNING.value, 0) > 0:
                raise AuditIntegrityError(f"begin_step_run: run {run_id} already has a running step run")

            step_run = TransformationStepRun(
                step_run_id=step_run_id,
                run_id=run_id,
                step_id=step_id,
                step_index=sum(counts.values()),
                input=input_text,
                input_hash=input_hash,
                status=StepRunStatus.RUNNING,
                started_at=timestamp,
            )
            conn.execute(
                transformation_step_runs_table.insert().values(
                    step_run_id=step_run.step_run_id,
                    run_id=step_run.run_id,
                    step_id=step_run.step_id,
                    step_index=step_run.step_index,
                    input=step_run.input,
                    input_hash=step_run.input_hash,
                    status=step_run.status.value,
                    started_at=step_run.started_at,
                )
            )
            return step_run

        return self._ops.execute_in_transaction(work)

    def complete_step_run(self, step_run_id: str, output: str) -> TransformationStepRun:
        """Mark a step run COMPLETED with its output.

        Raises:
            AuditIntegrityError: If the step run is missing or already terminal
        """
        self._ops.execute_update(
            transformation_step_runs_table.update()
            .where(transformation_step_runs_table.c.step_run_id == step_run_id)
            .where(transformation_step_runs_table.c.status == StepRunStatus.RUNNING.value)
            .values(
                status=StepRunStatus.COMPLETED.value,
                output=output,
                output_hash=stable_hash(output),
                completed_at=now(),
            )
        )

        result = self.get_step_run(step_run_id)
        if result is None:
            raise AuditIntegrityError(f"Step run {step_run_id} not found after update - database corruption or transaction failure")
        return result

    def get_step_run(self, step_run_id: str) -> TransformationStepRun | None:
        query = select(transformation_step_runs_table).where(transformation_step_runs_table.c.step_run_id == step_run_id)
        row = self._ops.execute_fetchone(query)
        if row is None:
            return None
        return self._step_run_repo.load(row)

    def get_step_runs(self, run_id: str) -> list[TransformationStepRun]:
        """All step runs of a run, in step order."""
        query = (
            select(transformation_step_runs_table)
            .where(transformation_step_runs_table.c.run_id == run_id)
            .order_by(transformation_step_runs_table.c.step_index)
        )
        return [self._step_run_repo.load(row) for row in self._ops.execute_fetchall(query)]

    def _require_run(self, run_id: str) -> TransformationRun:
        result = self.get_run(run_id)
        if result is None:
            raise AuditIntegrityError(f"Run {run_id} not found after update - database corruption or transaction failure")
        return result
