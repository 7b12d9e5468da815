"""Audit trail contracts for the run ledger.

These are strict contracts - status fields use proper enum types.
The repository layer handles string→enum conversion for DB reads.

The ledger is OUR data. If we read garbage from it, something
catastrophic happened - crash immediately.
"""

from dataclasses import dataclass
from datetime import datetime

from textchain.contracts.enums import RunStatus, StepRunStatus


def _validate_enum(value: object, enum_type: type, field_name: str) -> None:
    """Validate that value is an instance of the expected enum type."""
    if value is not None and not isinstance(value, enum_type):
        raise TypeError(f"{field_name} must be {enum_type.__name__}, got {type(value).__name__}: {value!r}")


@dataclass
class TransformationRun:
    """One execution of a Transformation against a specific input.

    ``error`` mirrors the failing step run's message so that a failed run
    can be shown without loading its steps.
    """

    run_id: str
    transformation_id: str
    input: str
    status: RunStatus  # Strict: enum only
    started_at: datetime
    recording_id: str | None = None
    output: str | None = None
    error: str | None = None
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        _validate_enum(self.status, RunStatus, "status")

    @property
    def is_terminal(self) -> bool:
        return self.status != RunStatus.RUNNING


@dataclass
class TransformationStepRun:
    """The record of one step's execution within a run."""

    step_run_id: str
    run_id: str
    step_id: str
    step_index: int
    input: str
    input_hash: str
    status: StepRunStatus  # Strict: enum only
    started_at: datetime
    output: str | None = None
    output_hash: str | None = None
    error: str | None = None
    error_code: str | None = None
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        _validate_enum(self.status, StepRunStatus, "status")
