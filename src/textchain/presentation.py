# src/textchain/presentation.py
"""User-facing wording for pipeline outcomes.

Maps error values and finished runs to a short title and description for
whatever surface shows them (toast, tray, log line). Presentation only:
nothing here decides control flow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import assert_never

from textchain.contracts.audit import TransformationRun
from textchain.contracts.enums import RunStatus
from textchain.contracts.errors import StepError, StepErrorCode, TransformError, TransformErrorCode


@dataclass(frozen=True)
class Notice:
    title: str
    description: str


def describe_error(error: TransformError) -> Notice:
    """Title and description for a pipeline-level failure."""
    match error.code:
        case TransformErrorCode.NO_INPUT:
            return Notice("Empty input", "Please enter some text to transform.")
        case TransformErrorCode.FAILED_TO_GET_CLIPBOARD_TEXT:
            return Notice("Failed to get clipboard text", "Could not get the text from the clipboard.")
        case TransformErrorCode.RECORDING_NOT_FOUND:
            return Notice("Recording not found", "Could not find the selected recording.")
        case TransformErrorCode.TRANSFORMATION_NOT_FOUND:
            return Notice("Transformation not found", "Could not find the selected transformation.")
        case TransformErrorCode.NO_STEPS_CONFIGURED:
            return Notice("No steps configured", "Please add at least one transformation step.")
        case TransformErrorCode.FAILED_TO_CREATE_RUN:
            return Notice("Failed to create transformation run", "Could not create the transformation run.")
        case TransformErrorCode.FAILED_TO_ADD_STEP_RUN:
            return Notice("Failed to add transformation step run", "Could not add the transformation step run.")
        case TransformErrorCode.FAILED_TO_MARK_FAILED:
            description = "Could not mark the transformation run and step as failed."
            if error.step_error is not None:
                description = f"{description} The step failed with: {error.step_error.message}"
            return Notice("Failed to mark transformation run and step as failed", description)
        case TransformErrorCode.FAILED_TO_MARK_STEP_COMPLETED:
            return Notice(
                "Failed to mark transformation run step as completed",
                "Could not mark the transformation run step as completed.",
            )
        case TransformErrorCode.FAILED_TO_MARK_RUN_COMPLETED:
            return Notice(
                "Failed to mark transformation run as completed",
                "Could not mark the transformation run as completed.",
            )
        case _:
            assert_never(error.code)


_STEP_ERROR_TITLES: dict[StepErrorCode, str] = {
    StepErrorCode.INVALID_PATTERN: "Invalid find pattern",
    StepErrorCode.PROVIDER_CONNECTION_ERROR: "Could not reach the provider",
    StepErrorCode.PROVIDER_RESPONSE_ERROR: "Provider returned an error",
    StepErrorCode.PROVIDER_EMPTY_RESPONSE: "Provider returned no text",
    StepErrorCode.UNSUPPORTED_PROVIDER: "Unsupported provider",
    StepErrorCode.UNSUPPORTED_STEP_TYPE: "Unsupported step type",
    StepErrorCode.INTERNAL_ERROR: "Internal error",
}


def describe_step_error(error: StepError) -> Notice:
    return Notice(_STEP_ERROR_TITLES[error.code], error.message)


def describe_run(run: TransformationRun) -> Notice | None:
    """Notice for a finished run, or None when there is nothing to warn about.

    A FAILED run shows its recorded error. A COMPLETED run with empty output
    gets a warning; a COMPLETED run with output and a RUNNING run get none.
    """
    if run.status == RunStatus.FAILED:
        return Notice("Transformation failed", run.error or "The transformation failed.")
    if run.status == RunStatus.COMPLETED and not run.output:
        return Notice("Transformation produced no output", "The transformation completed but produced no output.")
    return None
