from __future__ import annotations

import types

import httpx

from chatstream.base.errors import (
    ConnectionClosedError,
    ErrorCode,
    HTTPStatusError,
    MalformedFrameError,
    ProviderError,
    classify_exception,
    code_for_status,
)


def test_classify_provider_error_passthrough():
    e = ProviderError(code=ErrorCode.AUTH, message="nope", provider="x")
    assert classify_exception(e) is ErrorCode.AUTH  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(MalformedFrameError()) is ErrorCode.VALIDATION  # nosec B101


def test_classify_http_status_mapping():
    # Direct attr
    e1 = types.SimpleNamespace(status_code=404)
    assert classify_exception(e1) is ErrorCode.NOT_FOUND  # nosec B101 - assert is appropriate in unit tests
    # response.status_code
    e2 = types.SimpleNamespace(response=types.SimpleNamespace(status_code=503))
    assert classify_exception(e2) is ErrorCode.UNAVAILABLE  # nosec B101 - assert is appropriate in unit tests


def test_classify_httpx_transport_errors():
    assert classify_exception(httpx.ReadTimeout("slow")) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(httpx.ConnectError("refused")) is ErrorCode.TRANSIENT  # nosec B101
    assert classify_exception(httpx.RemoteProtocolError("peer closed")) is ErrorCode.TRANSIENT  # nosec B101
    assert classify_exception(TimeoutError()) is ErrorCode.TIMEOUT  # nosec B101


def test_classify_heuristics():
    assert classify_exception(Exception("rate limit exceeded")) is ErrorCode.RATE_LIMIT  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(Exception("timed out waiting")) is ErrorCode.TIMEOUT  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(Exception("invalid api key")) is ErrorCode.AUTH  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(Exception("random")) is ErrorCode.UNKNOWN  # nosec B101 - assert is appropriate in unit tests


def test_code_for_status():
    assert code_for_status(429) is ErrorCode.RATE_LIMIT  # nosec B101
    assert code_for_status(401) is ErrorCode.AUTH  # nosec B101
    assert code_for_status(418) is ErrorCode.VALIDATION  # nosec B101
    assert code_for_status(599) is ErrorCode.SERVER_ERROR  # nosec B101
    assert code_for_status(302) is ErrorCode.UNKNOWN  # nosec B101


def test_stream_error_shapes():
    err = HTTPStatusError(503, "x" * 1000, model="m")
    assert err.status == 503 and err.code is ErrorCode.UNAVAILABLE  # nosec B101
    assert err.retryable  # nosec B101
    assert len(err.body) == 1000  # nosec B101
    assert len(err.message) < 300  # nosec B101
    assert "503" in str(err)  # nosec B101

    closed = ConnectionClosedError(chunks=[{"a": 1}], frames_emitted=1)
    assert closed.chunk_count == 1 and closed.chunks == ({"a": 1},)  # nosec B101
    assert isinstance(closed, ProviderError)  # nosec B101
