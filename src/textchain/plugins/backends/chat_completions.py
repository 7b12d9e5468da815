# src/textchain/plugins/backends/chat_completions.py
"""Chat-completions rewrite backend (OpenAI and OpenAI-compatible APIs).

One class serves both OpenAI and Groq; they share the wire protocol and
differ only in endpoint and label.

Request:  {"model": ..., "messages": [{"role": "system", ...}, {"role": "user", ...}]}
Response: choices[0].message.content
"""

from __future__ import annotations

import structlog
from pydantic import BaseModel, Field

from textchain.contracts.results import StepResult
from textchain.plugins.backends.base import from_http_result
from textchain.plugins.clients.http import JsonHttpClient

logger = structlog.get_logger(__name__)


class _ChatMessage(BaseModel):
    content: str | None = None


class _ChatChoice(BaseModel):
    message: _ChatMessage | None = None


class ChatCompletionResponse(BaseModel):
    """The subset of a chat-completions response we read.

    Fields are optional so that a well-formed but textless answer is an
    empty response, not a parse failure.
    """

    choices: list[_ChatChoice] = Field(default_factory=list)


def _first_choice_content(response: ChatCompletionResponse) -> str | None:
    if not response.choices:
        return None
    message = response.choices[0].message
    if message is None:
        return None
    return message.content


class ChatCompletionsBackend:
    """Rewrite backend speaking the chat-completions protocol with a bearer token."""

    def __init__(self, *, label: str, url: str, http: JsonHttpClient) -> None:
        """Initialize backend.

        Args:
            label: Provider name used in error messages ("OpenAI", "Groq")
            url: Full chat-completions endpoint URL
            http: Shared JSON HTTP client
        """
        self.label = label
        self._url = url
        self._http = http

    def rewrite(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        model_id: str,
        api_key: str,
    ) -> StepResult:
        body = {
            "model": model_id,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        logger.debug("chat_completion_request", provider=self.label, model=model_id, prompt_chars=len(system_prompt) + len(user_prompt))
        result = self._http.post(
            self._url,
            headers={"Authorization": f"Bearer {api_key}"},
            body=body,
            schema=ChatCompletionResponse,
        )
        return from_http_result(self.label, result, _first_choice_content)
