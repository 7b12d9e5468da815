# src/textchain/plugins/backends/google.py
"""Google Generative AI rewrite backend (google-genai SDK).

The SDK owns the wire protocol. System and user prompts are sent as one
combined prompt, ``f"{system}\\n{user}"``, with temperature 0.

A client is built per call because the API key is per invocation.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from textchain.contracts.errors import StepError, StepErrorCode
from textchain.contracts.results import StepResult
from textchain.plugins.backends.base import api_error, empty_response

logger = structlog.get_logger(__name__)

LABEL = "Google"

ClientFactory = Callable[[str], Any]


def _default_client_factory(api_key: str) -> genai.Client:
    return genai.Client(api_key=api_key)


class GoogleBackend:
    """Rewrite backend for Google Generative AI models."""

    label = LABEL

    def __init__(
        self,
        *,
        temperature: float = 0.0,
        client_factory: ClientFactory | None = None,
    ) -> None:
        """Initialize backend.

        Args:
            temperature: Sampling temperature sent with every request
            client_factory: Builds an SDK client from an API key. Tests inject a mock.
        """
        self._temperature = temperature
        self._client_factory = client_factory or _default_client_factory

    def rewrite(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        model_id: str,
        api_key: str,
    ) -> StepResult:
        # The SDK falls back to GOOGLE_API_KEY when given an empty key;
        # credentials come only from the invocation.
        if not api_key:
            return StepResult.failure(
                StepError(
                    code=StepErrorCode.PROVIDER_CONNECTION_ERROR,
                    message=api_error(self.label, "API key is not configured"),
                )
            )

        combined_prompt = f"{system_prompt}\n{user_prompt}"

        try:
            client = self._client_factory(api_key)
            response = client.models.generate_content(
                model=model_id,
                contents=combined_prompt,
                config=genai_types.GenerateContentConfig(temperature=self._temperature),
            )
            text = response.text
        except genai_errors.APIError as e:
            logger.info("google_api_error", model=model_id, status_code=e.code)
            return StepResult.failure(
                StepError(
                    code=StepErrorCode.PROVIDER_RESPONSE_ERROR,
                    message=api_error(self.label, e.message or str(e), e.code),
                    status_code=e.code,
                )
            )
        except Exception as e:
            # SDK boundary: transport, auth and construction errors surface as
            # assorted exception types.
            logger.warning("google_call_failed", model=model_id, error_type=type(e).__name__)
            return StepResult.failure(
                StepError(
                    code=StepErrorCode.PROVIDER_CONNECTION_ERROR,
                    message=api_error(self.label, str(e) or type(e).__name__),
                )
            )

        if not text:
            return empty_response(self.label)
        return StepResult.success(text)
