# src/textchain/plugins/clients/__init__.py
"""Clients for external services.

Example:
    from textchain.plugins.clients import JsonHttpClient, HttpSuccess

    client = JsonHttpClient(timeout=30.0)
    result = client.post(url, headers={...}, body={...}, schema=MyResponse)
    if isinstance(result, HttpSuccess):
        print(result.body)
"""

from textchain.plugins.clients.http import (
    HttpConnectionFailure,
    HttpParseFailure,
    HttpResponseFailure,
    HttpResult,
    HttpSuccess,
    JsonHttpClient,
    extract_error_message,
)

__all__ = [
    "HttpConnectionFailure",
    "HttpParseFailure",
    "HttpResponseFailure",
    "HttpResult",
    "HttpSuccess",
    "JsonHttpClient",
    "extract_error_message",
]
