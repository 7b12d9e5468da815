# src/textchain/plugins/backends/base.py
"""Shared pieces of the rewrite backends.

- render_prompt: literal {{input}} substitution for prompt templates
- RewriteBackend: the protocol every provider adapter implements
- from_http_result: maps an HttpResult onto a StepResult with the
  provider's label in every message
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, TypeVar

from pydantic import BaseModel

from textchain.contracts.definitions import INPUT_PLACEHOLDER
from textchain.contracts.errors import StepError, StepErrorCode
from textchain.contracts.results import StepResult
from textchain.plugins.clients.http import (
    HttpConnectionFailure,
    HttpParseFailure,
    HttpResponseFailure,
    HttpResult,
    HttpSuccess,
)

M = TypeVar("M", bound=BaseModel)


def render_prompt(template: str, text: str) -> str:
    """Replace every ``{{input}}`` in ``template`` with ``text``.

    All occurrences are replaced, not just the first, so a template that
    repeats the token receives the text each time. Literal replacement:
    ``text`` is inserted verbatim, so braces or placeholder-looking content in
    the pipeline text is never re-expanded.
    """
    return template.replace(INPUT_PLACEHOLDER, text)


class RewriteBackend(Protocol):
    """A remote language-model rewrite provider."""

    label: str

    def rewrite(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        model_id: str,
        api_key: str,
    ) -> StepResult:
        """Send already-rendered prompts and return the rewritten text or one StepError."""
        ...


def api_error(label: str, message: str, status_code: int | None = None) -> str:
    if status_code is None:
        return f"{label} API Error: {message}"
    return f"{label} API Error: {message} ({status_code})"


def empty_response(label: str) -> StepResult:
    return StepResult.failure(
        StepError(
            code=StepErrorCode.PROVIDER_EMPTY_RESPONSE,
            message=f"{label} API returned an empty response",
        )
    )


def from_http_result(
    label: str,
    result: HttpResult[M],
    extract_text: Callable[[M], str | None],
) -> StepResult:
    """Convert an HTTP outcome into a step outcome.

    Args:
        label: Provider name used in messages ("OpenAI", "Groq", ...)
        result: Outcome of JsonHttpClient.post
        extract_text: Pulls the rewritten text out of a validated body;
            returns None (or "") when the body carries no text

    Returns:
        StepResult with the text, or the matching StepError
    """
    match result:
        case HttpSuccess(body=body):
            text = extract_text(body)
            if not text:
                return empty_response(label)
            return StepResult.success(text)
        case HttpResponseFailure(status_code=status_code, message=message):
            return StepResult.failure(
                StepError(
                    code=StepErrorCode.PROVIDER_RESPONSE_ERROR,
                    message=api_error(label, message, status_code),
                    status_code=status_code,
                )
            )
        case HttpParseFailure(status_code=status_code):
            return StepResult.failure(
                StepError(
                    code=StepErrorCode.PROVIDER_RESPONSE_ERROR,
                    message=api_error(label, "Failed to parse response", status_code),
                    status_code=status_code,
                )
            )
        case HttpConnectionFailure(message=message):
            return StepResult.failure(
                StepError(
                    code=StepErrorCode.PROVIDER_CONNECTION_ERROR,
                    message=api_error(label, message),
                )
            )
        case _:
            raise TypeError(f"Unknown HTTP result type: {type(result).__name__}")
