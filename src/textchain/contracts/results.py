"""Operation outcomes.

These types answer: "What did an operation produce?"

Every core operation returns one of these instead of raising. Status is a
Literal["success", "error"], not an enum. Use the factory methods.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, Literal, TypeVar

if TYPE_CHECKING:
    from textchain.contracts.audit import TransformationRun
    from textchain.contracts.errors import PersistenceFailure, StepError, TransformError

T = TypeVar("T")


@dataclass(frozen=True)
class StepResult:
    """Result of executing one step: the full replacement text or one error."""

    status: Literal["success", "error"]
    output: str | None
    error: StepError | None

    def __post_init__(self) -> None:
        if self.status == "success" and self.output is None:
            raise ValueError("StepResult with status='success' MUST carry output text")
        if self.status == "error" and self.error is None:
            raise ValueError("StepResult with status='error' MUST carry a StepError")

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @classmethod
    def success(cls, output: str) -> StepResult:
        return cls(status="success", output=output, error=None)

    @classmethod
    def failure(cls, error: StepError) -> StepResult:
        return cls(status="error", output=None, error=error)


@dataclass(frozen=True)
class TrackerResult(Generic[T]):
    """Result of a run tracker operation."""

    status: Literal["success", "error"]
    value: T | None
    failure: PersistenceFailure | None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def unwrap(self) -> T:
        """Return the value of a successful result.

        Raises:
            ValueError: If called on a failed result (caller bug)
        """
        if self.status != "success" or self.value is None:
            raise ValueError(f"unwrap() called on failed TrackerResult: {self.failure}")
        return self.value

    @classmethod
    def success(cls, value: T) -> TrackerResult[T]:
        return cls(status="success", value=value, failure=None)

    @classmethod
    def error(cls, failure: PersistenceFailure) -> TrackerResult[T]:
        return cls(status="error", value=None, failure=failure)


@dataclass(frozen=True)
class PipelineResult:
    """Result of a pipeline invocation.

    A step failure is still a *successful* invocation: the run exists, it
    is FAILED and it says why. ``status == "error"`` means there is no run
    to show, or the ledger could not record the run's state.
    """

    status: Literal["success", "error"]
    run: TransformationRun | None
    error: TransformError | None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @classmethod
    def success(cls, run: TransformationRun) -> PipelineResult:
        return cls(status="success", run=run, error=None)

    @classmethod
    def failure(cls, error: TransformError) -> PipelineResult:
        return cls(status="error", run=None, error=error)
