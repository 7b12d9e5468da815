# src/textchain/core/ledger/__init__.py
"""Ledger: durable record of transformation definitions and runs.

Primary API:
    RunRecorder - Runs and step runs (guarded, monotonic status updates)
    TransformationStore - Transformation definitions
    LedgerDB - Database connection management
"""

from textchain.contracts import (
    RunStatus,
    StepRunStatus,
    TransformationRun,
    TransformationStepRun,
)
from textchain.core.ledger.database import LedgerDB, SchemaCompatibilityError
from textchain.core.ledger.definitions import TransformationStore
from textchain.core.ledger.recorder import RunRecorder
from textchain.core.ledger.schema import (
    metadata,
    transformation_runs_table,
    transformation_step_runs_table,
    transformation_steps_table,
    transformations_table,
)

__all__ = [
    "LedgerDB",
    "RunRecorder",
    "RunStatus",
    "SchemaCompatibilityError",
    "StepRunStatus",
    "TransformationRun",
    "TransformationStepRun",
    "TransformationStore",
    "metadata",
    "transformation_runs_table",
    "transformation_step_runs_table",
    "transformation_steps_table",
    "transformations_table",
]
