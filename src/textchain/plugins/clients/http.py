# src/textchain/plugins/clients/http.py
"""JSON-over-HTTP client for provider calls.

Provider responses are external data: zero trust. The client validates the
body against a Pydantic schema at the boundary and reports every outcome as
a value. Nothing here raises for a bad response, and nothing is retried.

Outcomes:
    HttpSuccess - 2xx with a body matching the schema
    HttpConnectionFailure - request could not be built or got no response (bad URL, DNS, timeout)
    HttpResponseFailure - non-2xx status, with a best-effort error message
    HttpParseFailure - 2xx whose body does not match the schema
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

# Cap on raw body text used as an error message when no structured message exists
_MAX_ERROR_TEXT = 500


@dataclass(frozen=True)
class HttpSuccess(Generic[M]):
    """2xx response with a validated body."""

    status_code: int
    body: M


@dataclass(frozen=True)
class HttpConnectionFailure:
    """The request did not produce a response."""

    message: str
    exception_type: str


@dataclass(frozen=True)
class HttpResponseFailure:
    """The server answered with a non-2xx status."""

    status_code: int
    message: str


@dataclass(frozen=True)
class HttpParseFailure:
    """2xx response whose body failed schema validation."""

    status_code: int
    message: str


HttpResult = HttpSuccess[M] | HttpConnectionFailure | HttpResponseFailure | HttpParseFailure


def extract_error_message(response: httpx.Response) -> str:
    """Best-effort human-readable message from an error response.

    Understands the common provider envelopes:
    ``{"error": {"message": ...}}``, ``{"error": "..."}`` and ``{"message": ...}``.
    Falls back to the raw body text, then to the reason phrase.
    """
    body: Any
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if isinstance(body.get("message"), str):
            return str(body["message"])

    text = response.text.strip()
    if text:
        return text[:_MAX_ERROR_TEXT]
    return response.reason_phrase or f"HTTP {response.status_code}"


class JsonHttpClient:
    """POSTs JSON bodies and validates JSON responses.

    Wraps one shared httpx.Client for connection pooling. httpx.Client is
    thread-safe, so a single instance serves concurrent pipeline runs.

    Example:
        client = JsonHttpClient(timeout=60.0)
        result = client.post(url, headers={"Authorization": "Bearer ..."}, body={...}, schema=ChatCompletion)
        match result:
            case HttpSuccess(body=completion):
                ...
    """

    def __init__(
        self,
        *,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self._timeout = timeout
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def post(
        self,
        url: str,
        *,
        headers: dict[str, str],
        body: dict[str, Any],
        schema: type[M],
    ) -> HttpResult[M]:
        """POST ``body`` as JSON and validate the response against ``schema``.

        Returns:
            One of the four outcomes; never raises for network or response problems
        """
        merged_headers = {"Content-Type": "application/json", **headers}
        start = time.perf_counter()

        # Request construction is inside the try: a malformed endpoint raises
        # InvalidURL and a non-ASCII credential raises UnicodeEncodeError there.
        try:
            request = self._client.build_request("POST", url, json=body, headers=merged_headers)
            response = self._client.send(request)
        except (httpx.RequestError, httpx.InvalidURL, UnicodeEncodeError) as e:
            logger.warning(
                "http_request_failed",
                url=url,
                error_type=type(e).__name__,
                latency_ms=(time.perf_counter() - start) * 1000,
            )
            return HttpConnectionFailure(message=str(e) or type(e).__name__, exception_type=type(e).__name__)

        latency_ms = (time.perf_counter() - start) * 1000

        if not response.is_success:
            logger.info(
                "http_error_status",
                url=url,
                status_code=response.status_code,
                latency_ms=latency_ms,
            )
            return HttpResponseFailure(status_code=response.status_code, message=extract_error_message(response))

        try:
            parsed = schema.model_validate_json(response.content)
        except ValidationError as e:
            logger.warning(
                "http_response_schema_mismatch",
                url=url,
                status_code=response.status_code,
                schema=schema.__name__,
                error_count=e.error_count(),
            )
            return HttpParseFailure(status_code=response.status_code, message=str(e))

        logger.debug("http_request_completed", url=url, status_code=response.status_code, latency_ms=latency_ms)
        return HttpSuccess(status_code=response.status_code, body=parsed)

    def close(self) -> None:
        """Close the underlying httpx client and release connections."""
        self._client.close()

    def __enter__(self) -> JsonHttpClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
