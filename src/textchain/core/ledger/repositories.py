"""Repository layer for ledger records.

Handles the seam between SQLAlchemy rows (strings) and domain objects
(strict enum types). This is NOT a trust boundary - if the database
has bad data, we crash.

Transformation steps are the one exception: an unknown step_type is a
legitimate stored value (written by a newer editor) and loads as
UnsupportedStep so the run can fail that step instead of the whole load.
"""

from typing import Any

from sqlalchemy.engine import Row as SARow

from textchain.contracts.audit import TransformationRun, TransformationStepRun
from textchain.contracts.definitions import RewriteStep, Step, SubstitutionStep, UnsupportedStep
from textchain.contracts.enums import RunStatus, StepRunStatus, StepType


class RunRepository:
    """Repository for TransformationRun records."""

    def load(self, row: SARow[Any]) -> TransformationRun:
        """Load TransformationRun from database row.

        Converts string fields to enums. Crashes on invalid data.
        """
        return TransformationRun(
            run_id=row.run_id,
            transformation_id=row.transformation_id,
            recording_id=row.recording_id,
            input=row.input,
            output=row.output,
            error=row.error,
            status=RunStatus(row.status),  # Convert HERE
            started_at=row.started_at,
            completed_at=row.completed_at,
        )


class StepRunRepository:
    """Repository for TransformationStepRun records."""

    def load(self, row: SARow[Any]) -> TransformationStepRun:
        """Load TransformationStepRun from database row.

        Converts string fields to enums. Crashes on invalid data.
        """
        return TransformationStepRun(
            step_run_id=row.step_run_id,
            run_id=row.run_id,
            step_id=row.step_id,
            step_index=row.step_index,
            input=row.input,
            input_hash=row.input_hash,
            output=row.output,
            output_hash=row.output_hash,
            status=StepRunStatus(row.status),
            error=row.error,
            error_code=row.error_code,
            started_at=row.started_at,
            completed_at=row.completed_at,
        )


class StepRepository:
    """Repository for transformation step definitions."""

    def load(self, row: SARow[Any]) -> Step:
        """Load a Step variant from database row.

        Required fields for a known step type must be present; a NULL there
        is corruption and raises.
        """
        if row.step_type == StepType.FIND_REPLACE:
            return SubstitutionStep(
                step_id=row.step_id,
                find_text=_required(row, "find_text"),
                replace_text=_required(row, "replace_text"),
                use_regex=bool(row.use_regex),
            )
        if row.step_type == StepType.PROMPT_TRANSFORM:
            return RewriteStep(
                step_id=row.step_id,
                provider=_required(row, "provider"),
                model_id=_required(row, "model_id"),
                system_prompt_template=_required(row, "system_prompt_template"),
                user_prompt_template=_required(row, "user_prompt_template"),
            )
        return UnsupportedStep(step_id=row.step_id, step_type=row.step_type)


def _required(row: SARow[Any], column: str) -> Any:
    value = getattr(row, column)
    if value is None:
        raise ValueError(f"transformation_steps.{column} is NULL for step {row.step_id} ({row.step_type})")
    return value
