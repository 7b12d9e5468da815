# src/textchain/plugins/backends/anthropic.py
"""Anthropic messages API rewrite backend.

Request:  {"model": ..., "system": ..., "messages": [{"role": "user", ...}], "max_tokens": 1024}
Response: content[0].text, only when content[0].type == "text"
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from textchain.contracts.results import StepResult
from textchain.plugins.backends.base import from_http_result
from textchain.plugins.clients.http import JsonHttpClient

LABEL = "Anthropic"


class _ContentBlock(BaseModel):
    type: str
    text: str | None = None


class MessagesResponse(BaseModel):
    """The subset of a messages API response we read."""

    content: list[_ContentBlock] = Field(default_factory=list)


def _first_text_block(response: MessagesResponse) -> str | None:
    if not response.content:
        return None
    first = response.content[0]
    if first.type != "text":
        return None
    return first.text


class AnthropicBackend:
    """Rewrite backend for the Anthropic messages API."""

    label = LABEL

    def __init__(
        self,
        *,
        url: str,
        http: JsonHttpClient,
        api_version: str = "2023-06-01",
        max_tokens: int = 1024,
    ) -> None:
        self._url = url
        self._http = http
        self._api_version = api_version
        self._max_tokens = max_tokens

    def rewrite(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        model_id: str,
        api_key: str,
    ) -> StepResult:
        result = self._http.post(
            self._url,
            headers={
                "x-api-key": api_key,
                "anthropic-version": self._api_version,
            },
            body={
                "model": model_id,
                "system": system_prompt,
                "messages": [{"role": "user", "content": user_prompt}],
                "max_tokens": self._max_tokens,
            },
            schema=MessagesResponse,
        )
        return from_http_result(self.label, result, _first_text_block)
