"""Error taxonomy for the transformation pipeline.

Two families of failure values, plus the exceptions reserved for bugs and
collaborator boundaries:

- StepError: the content of a step failed (bad pattern, provider refused,
  empty response, ...). Recorded against the step run; the run ends FAILED.
- TransformError: the pipeline could not run or could not record what
  happened. Returned to the caller instead of a run.

Neither family is raised. Exceptions here are for programming errors
(OrchestrationInvariantError, AuditIntegrityError) and for collaborators
that report failure by raising (CollaboratorError).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class StepErrorCode(StrEnum):
    """Why a single step failed."""

    INVALID_PATTERN = "invalid_pattern"
    PROVIDER_CONNECTION_ERROR = "provider_connection_error"
    PROVIDER_RESPONSE_ERROR = "provider_response_error"
    PROVIDER_EMPTY_RESPONSE = "provider_empty_response"
    UNSUPPORTED_PROVIDER = "unsupported_provider"
    UNSUPPORTED_STEP_TYPE = "unsupported_step_type"
    # A step raised instead of returning a result; the exception propagates
    INTERNAL_ERROR = "internal_error"


class TransformErrorCode(StrEnum):
    """Why a pipeline invocation produced no run (or an untrustworthy one)."""

    NO_INPUT = "no_input"
    FAILED_TO_GET_CLIPBOARD_TEXT = "failed_to_get_clipboard_text"
    RECORDING_NOT_FOUND = "recording_not_found"
    TRANSFORMATION_NOT_FOUND = "transformation_not_found"
    NO_STEPS_CONFIGURED = "no_steps_configured"
    # Persistence failures
    FAILED_TO_CREATE_RUN = "failed_to_create_run"
    FAILED_TO_ADD_STEP_RUN = "failed_to_add_step_run"
    FAILED_TO_MARK_FAILED = "failed_to_mark_failed"
    FAILED_TO_MARK_STEP_COMPLETED = "failed_to_mark_step_completed"
    FAILED_TO_MARK_RUN_COMPLETED = "failed_to_mark_run_completed"


PERSISTENCE_ERROR_CODES = frozenset(
    {
        TransformErrorCode.FAILED_TO_CREATE_RUN,
        TransformErrorCode.FAILED_TO_ADD_STEP_RUN,
        TransformErrorCode.FAILED_TO_MARK_FAILED,
        TransformErrorCode.FAILED_TO_MARK_STEP_COMPLETED,
        TransformErrorCode.FAILED_TO_MARK_RUN_COMPLETED,
    }
)


@dataclass(frozen=True)
class StepError:
    """Failure of a single step.

    Attributes:
        code: Failure category
        message: Human-readable message, stored on the step run
        status_code: HTTP status for provider response errors
    """

    code: StepErrorCode
    message: str
    status_code: int | None = None


@dataclass(frozen=True)
class PersistenceFailure:
    """A ledger write or read that did not happen.

    Attributes:
        operation: Tracker operation that failed (e.g. "create_run")
        message: Underlying error text
        exception_type: Class name of the storage exception
    """

    operation: str
    message: str
    exception_type: str


@dataclass(frozen=True)
class TransformError:
    """Pipeline-level failure returned in place of a run.

    ``step_error`` is set when a persistence failure happened while
    recording a step failure; the step failure is kept as context.
    """

    code: TransformErrorCode
    detail: str | None = None
    persistence: PersistenceFailure | None = None
    step_error: StepError | None = None

    @property
    def is_persistence_failure(self) -> bool:
        return self.code in PERSISTENCE_ERROR_CODES


# =============================================================================
# Exceptions
# =============================================================================


class AuditIntegrityError(Exception):
    """A ledger write would violate (or revealed a violation of) a run invariant.

    Raised by the ledger recorder for zero-row updates, writes against
    terminal records and out-of-order step runs.
    """


class OrchestrationInvariantError(Exception):
    """The orchestrator attempted an illegal state transition. Always a bug."""


class CollaboratorError(Exception):
    """An external collaborator (clipboard, recordings, definitions) failed."""
