# tests/plugins/clients/test_http.py
"""Tests for JsonHttpClient outcomes and error message extraction."""

import json

import httpx
import pytest
import respx
from pydantic import BaseModel

from textchain.plugins.clients.http import (
    HttpConnectionFailure,
    HttpParseFailure,
    HttpResponseFailure,
    HttpSuccess,
    JsonHttpClient,
    extract_error_message,
)

URL = "https://api.example.test/v1/echo"


class EchoResponse(BaseModel):
    text: str


@pytest.fixture
def client():
    with JsonHttpClient(timeout=5.0) as http:
        yield http


class TestPost:
    @respx.mock
    def test_success_validates_body(self, client: JsonHttpClient) -> None:
        respx.post(URL).mock(return_value=httpx.Response(200, json={"text": "hi", "extra": 1}))

        result = client.post(URL, headers={}, body={"q": 1}, schema=EchoResponse)

        assert isinstance(result, HttpSuccess)
        assert result.status_code == 200
        assert result.body.text == "hi"

    @respx.mock
    def test_sends_json_body_and_merged_headers(self, client: JsonHttpClient) -> None:
        route = respx.post(URL).mock(return_value=httpx.Response(200, json={"text": "ok"}))

        client.post(URL, headers={"Authorization": "Bearer k"}, body={"model": "m"}, schema=EchoResponse)

        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer k"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"model": "m"}

    @respx.mock
    def test_non_2xx_is_response_failure(self, client: JsonHttpClient) -> None:
        respx.post(URL).mock(return_value=httpx.Response(401, json={"error": {"message": "Invalid API key"}}))

        result = client.post(URL, headers={}, body={}, schema=EchoResponse)

        assert result == HttpResponseFailure(status_code=401, message="Invalid API key")

    @respx.mock
    def test_schema_mismatch_is_parse_failure(self, client: JsonHttpClient) -> None:
        respx.post(URL).mock(return_value=httpx.Response(200, json={"unexpected": True}))

        result = client.post(URL, headers={}, body={}, schema=EchoResponse)

        assert isinstance(result, HttpParseFailure)
        assert result.status_code == 200

    @respx.mock
    def test_non_json_2xx_is_parse_failure(self, client: JsonHttpClient) -> None:
        respx.post(URL).mock(return_value=httpx.Response(200, text="<html>gateway</html>"))

        result = client.post(URL, headers={}, body={}, schema=EchoResponse)

        assert isinstance(result, HttpParseFailure)

    @respx.mock
    def test_connect_error_is_connection_failure(self, client: JsonHttpClient) -> None:
        respx.post(URL).mock(side_effect=httpx.ConnectError("Connection refused"))

        result = client.post(URL, headers={}, body={}, schema=EchoResponse)

        assert result == HttpConnectionFailure(message="Connection refused", exception_type="ConnectError")

    @respx.mock
    def test_timeout_is_connection_failure(self, client: JsonHttpClient) -> None:
        respx.post(URL).mock(side_effect=httpx.ReadTimeout("timed out"))

        result = client.post(URL, headers={}, body={}, schema=EchoResponse)

        assert isinstance(result, HttpConnectionFailure)
        assert result.exception_type == "ReadTimeout"

    def test_non_ascii_header_is_connection_failure(self, client: JsonHttpClient) -> None:
        result = client.post(URL, headers={"x-api-key": "clé-ü"}, body={}, schema=EchoResponse)

        assert isinstance(result, HttpConnectionFailure)
        assert result.exception_type == "UnicodeEncodeError"

    def test_malformed_url_is_connection_failure(self, client: JsonHttpClient) -> None:
        result = client.post("https://api.example.test:notaport/v1", headers={}, body={}, schema=EchoResponse)

        assert isinstance(result, HttpConnectionFailure)
        assert result.exception_type == "InvalidURL"

    def test_injected_transport(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"text": request.headers["x-echo"]})

        with JsonHttpClient(transport=httpx.MockTransport(handler)) as http:
            result = http.post(URL, headers={"x-echo": "seen"}, body={}, schema=EchoResponse)

        assert isinstance(result, HttpSuccess)
        assert result.body.text == "seen"


class TestExtractErrorMessage:
    def _response(self, status: int, **kwargs: object) -> httpx.Response:
        return httpx.Response(status, request=httpx.Request("POST", URL), **kwargs)  # type: ignore[arg-type]

    def test_nested_error_message(self) -> None:
        response = self._response(400, json={"error": {"message": "bad model", "type": "invalid_request_error"}})
        assert extract_error_message(response) == "bad model"

    def test_error_string(self) -> None:
        assert extract_error_message(self._response(400, json={"error": "quota exceeded"})) == "quota exceeded"

    def test_top_level_message(self) -> None:
        assert extract_error_message(self._response(503, json={"message": "overloaded"})) == "overloaded"

    def test_plain_text_body_truncated(self) -> None:
        response = self._response(502, text="x" * 800)
        assert extract_error_message(response) == "x" * 500

    def test_empty_body_uses_reason_phrase(self) -> None:
        assert extract_error_message(self._response(429)) == "Too Many Requests"
