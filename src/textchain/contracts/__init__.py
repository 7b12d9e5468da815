"""Shared contracts for cross-boundary data types.

All dataclasses and enums that cross subsystem boundaries are defined here.
This package is a LEAF MODULE with no outbound dependencies to core/engine.
Settings classes are NOT re-exported here - import them from
textchain.core.config.

Import patterns:
    from textchain.contracts import RunStatus, TransformationRun, StepResult
    from textchain.core.config import TextchainSettings
"""

from textchain.contracts.audit import TransformationRun, TransformationStepRun
from textchain.contracts.collaborators import ClipboardReader, RecordingLookup, TransformationSource
from textchain.contracts.definitions import (
    INPUT_PLACEHOLDER,
    Recording,
    RewriteStep,
    Step,
    SubstitutionStep,
    Transformation,
    UnsupportedStep,
)
from textchain.contracts.enums import Provider, RunStatus, StepRunStatus, StepType
from textchain.contracts.errors import (
    PERSISTENCE_ERROR_CODES,
    AuditIntegrityError,
    CollaboratorError,
    OrchestrationInvariantError,
    PersistenceFailure,
    StepError,
    StepErrorCode,
    TransformError,
    TransformErrorCode,
)
from textchain.contracts.results import PipelineResult, StepResult, TrackerResult

__all__ = [
    "INPUT_PLACEHOLDER",
    "PERSISTENCE_ERROR_CODES",
    "AuditIntegrityError",
    "ClipboardReader",
    "CollaboratorError",
    "OrchestrationInvariantError",
    "PersistenceFailure",
    "PipelineResult",
    "Provider",
    "Recording",
    "RecordingLookup",
    "RewriteStep",
    "RunStatus",
    "Step",
    "StepError",
    "StepErrorCode",
    "StepResult",
    "StepRunStatus",
    "StepType",
    "SubstitutionStep",
    "TrackerResult",
    "Transformation",
    "TransformationRun",
    "TransformationSource",
    "TransformationStepRun",
    "TransformError",
    "TransformErrorCode",
    "UnsupportedStep",
]
