"""StreamPipeline lifecycle tests.

Each test hands the pipeline an unread ``httpx.Response`` and checks the
phase it ends in, what the sink saw, what the error carries and that the
response was closed.
"""
from __future__ import annotations

import logging

import httpx
import pytest

from chatstream.base.errors import (
    ConnectionClosedError,
    ErrorCode,
    HTTPStatusError,
    MalformedFrameError,
    ProviderError,
)
from chatstream.base.streaming import StreamPhase, StreamPipeline, StructuredCallback

from .helpers import DONE_FRAME, dropped_stream, make_response, sse_body, sse_frame

DELTAS = [{"role": "assistant"}, {"content": "Hello"}, {"content": " world"}]


def _pipeline(response, consumer=None, **kwargs) -> StreamPipeline:
    return StreamPipeline(lambda: response, consumer=consumer, model="gpt-test", **kwargs)


def test_successful_stream_reaches_done():
    resp = make_response([sse_body(DELTAS)], headers={"Content-Type": "text/event-stream", "x-request-id": "req_9"})
    seen = []
    pipe = _pipeline(resp, seen.append)
    assert pipe.phase is StreamPhase.IDLE  # nosec B101

    result = pipe.run()

    assert pipe.phase is StreamPhase.DONE  # nosec B101
    assert resp.is_closed  # nosec B101
    assert seen == ["", "Hello", " world"]  # nosec B101
    assert result.status == 200  # nosec B101
    assert [c["choices"][0]["delta"] for c in result.responses] == DELTAS  # nosec B101
    assert result.meta is not None  # nosec B101
    assert result.meta.request_id == "req_9"  # nosec B101
    assert result.meta.to_dict()["http_status"] == 200  # nosec B101
    assert result.meta.extra["stream_chunks"] == 3  # nosec B101
    assert pipe.metrics.emitted == 3  # nosec B101


def test_sink_runs_before_the_next_read():
    order = []

    def source():
        for delta in DELTAS:
            order.append("read")
            yield sse_frame(delta)
        order.append("read")
        yield DONE_FRAME

    _pipeline(make_response(source()), lambda text: order.append("sink")).run()
    assert order == ["read", "sink", "read", "sink", "read", "sink", "read"]  # nosec B101


def test_error_status_fails_before_any_chunk():
    resp = httpx.Response(429, text="Too Many Requests")
    seen = []
    pipe = _pipeline(resp, seen.append)
    with pytest.raises(HTTPStatusError) as info:
        pipe.run()
    err = info.value
    assert err.status == 429  # nosec B101
    assert err.body == "Too Many Requests"  # nosec B101
    assert err.code is ErrorCode.RATE_LIMIT  # nosec B101
    assert err.retryable  # nosec B101
    assert err.chunks == ()  # nosec B101
    assert seen == []  # nosec B101
    assert pipe.phase is StreamPhase.FAILED  # nosec B101
    assert resp.is_closed  # nosec B101


def test_error_status_ignores_event_stream_body():
    resp = make_response([sse_body(DELTAS)], status=500)
    seen = []
    with pytest.raises(HTTPStatusError) as info:
        _pipeline(resp, seen.append).run()
    assert info.value.code is ErrorCode.SERVER_ERROR  # nosec B101
    assert seen == []  # nosec B101


def test_drop_mid_stream_keeps_delivered_chunks():
    source = dropped_stream([sse_body(DELTAS[:2], done=False)], httpx.RemoteProtocolError("peer closed"))
    resp = make_response(source)
    seen = []
    pipe = _pipeline(resp, seen.append)
    with pytest.raises(ConnectionClosedError) as info:
        pipe.run()
    err = info.value
    assert seen == ["", "Hello"]  # nosec B101
    assert err.chunk_count == 2  # nosec B101
    assert err.frames_emitted == 2  # nosec B101
    assert err.model == "gpt-test"  # nosec B101
    assert isinstance(err.raw, httpx.RemoteProtocolError)  # nosec B101
    assert pipe.phase is StreamPhase.FAILED  # nosec B101
    assert resp.is_closed  # nosec B101


def test_eof_without_sentinel_is_connection_closed():
    resp = make_response([sse_body(DELTAS, done=False)])
    with pytest.raises(ConnectionClosedError) as info:
        _pipeline(resp).run()
    assert info.value.chunk_count == 3  # nosec B101
    assert resp.is_closed  # nosec B101


@pytest.mark.parametrize("k", [0, 1, 2])
def test_malformed_frame_at_position_k(k):
    frames = [sse_frame(d) for d in DELTAS]
    frames.insert(k, b"data: {invalid_json}\n\n")
    resp = make_response(frames + [DONE_FRAME])
    seen = []
    with pytest.raises(MalformedFrameError) as info:
        _pipeline(resp, seen.append).run()
    err = info.value
    assert len(seen) == k  # nosec B101
    assert err.chunk_count == k  # nosec B101
    assert err.index == k  # nosec B101
    assert err.frame == "data: {invalid_json}"  # nosec B101
    assert resp.is_closed  # nosec B101


def test_sink_exception_propagates_unchanged(log_events):
    resp = make_response([sse_body(DELTAS)])

    def boom(text):
        if text == "Hello":
            raise RuntimeError("consumer failed")

    pipe = _pipeline(resp, boom)
    with pytest.raises(RuntimeError, match="consumer failed"):
        pipe.run()
    assert pipe.phase is StreamPhase.FAILED  # nosec B101
    assert len(pipe.chunks) == 1  # nosec B101
    assert resp.is_closed  # nosec B101
    assert any(e["event"] == "stream.sink_error" and e["index"] == 1 for e in log_events)  # nosec B101


def test_open_failure_is_classified():
    def opener():
        raise httpx.ConnectError("connection refused")

    pipe = StreamPipeline(opener)
    with pytest.raises(ProviderError) as info:
        pipe.run()
    assert info.value.code is ErrorCode.TRANSIENT  # nosec B101
    assert info.value.retryable  # nosec B101
    assert not isinstance(info.value, ConnectionClosedError)  # nosec B101
    assert pipe.phase is StreamPhase.FAILED  # nosec B101


def test_open_timeout_is_classified():
    def opener():
        raise httpx.ConnectTimeout("timed out")

    with pytest.raises(ProviderError) as info:
        StreamPipeline(opener).run()
    assert info.value.code is ErrorCode.TIMEOUT  # nosec B101


def test_events_end_with_one_terminal_event():
    resp = make_response([sse_body(DELTAS)])
    events = list(_pipeline(resp).events())
    assert [e.finish for e in events] == [False, False, False, True]  # nosec B101
    assert [e.chunk.index for e in events[:-1]] == [0, 1, 2]  # nosec B101
    assert events[1].chunk.content == "Hello"  # nosec B101
    terminal = events[-1]
    assert not terminal.is_error()  # nosec B101
    assert len(terminal.response) == 3  # nosec B101


def test_events_report_errors_instead_of_raising():
    source = dropped_stream([sse_body(DELTAS[:1], done=False)], httpx.ReadError("reset"))
    events = list(_pipeline(make_response(source)).events())
    assert len(events) == 2  # nosec B101
    assert events[-1].finish and events[-1].is_error()  # nosec B101
    assert isinstance(events[-1].error, ConnectionClosedError)  # nosec B101
    assert events[-1].response is None  # nosec B101


def test_abandoned_event_iteration_closes_response():
    resp = make_response([sse_body(DELTAS)])
    events = _pipeline(resp).events()
    next(events)
    events.close()
    assert resp.is_closed  # nosec B101


def test_unexpected_content_type_is_logged(log_events):
    resp = make_response([sse_body(DELTAS)], headers={"Content-Type": "application/json"})
    _pipeline(resp).run()
    warnings = [e for e in log_events if e["event"] == "stream.content_type"]
    assert len(warnings) == 1  # nosec B101
    assert warnings[0]["_level"] == logging.WARNING  # nosec B101
    assert warnings[0]["content_type"] == "application/json"  # nosec B101


def test_lifecycle_events_are_logged(log_events):
    _pipeline(make_response([sse_body(DELTAS)])).run()
    end = [e for e in log_events if e["event"] == "stream.end"]
    assert len(end) == 1  # nosec B101
    assert end[0]["emitted"] == 3  # nosec B101
    assert end[0]["phase"] == "finalize"  # nosec B101
    assert end[0]["model"] == "gpt-test"  # nosec B101


def test_failure_is_logged_with_error_code(log_events):
    with pytest.raises(HTTPStatusError):
        _pipeline(httpx.Response(401, text="bad key")).run()
    errors = [e for e in log_events if e["event"] == "stream.error"]
    assert len(errors) == 1  # nosec B101
    assert errors[0]["error_code"] == "auth"  # nosec B101
    assert errors[0]["phase"] == "start"  # nosec B101


def test_structured_callback_cannot_rewrite_the_aggregate():
    def mutate(chunk):
        chunk.data.pop("choices")

    resp = make_response([sse_body(DELTAS[1:2])])
    result = _pipeline(resp, StructuredCallback(mutate)).run()
    assert result.responses == ({"choices": [{"delta": {"content": "Hello"}}]},)  # nosec B101


def test_invalid_utf8_fails_as_malformed_frame():
    bad = b'data: {"choices":[{"delta":{"content":"a\xffb"}}]}\n\n'
    resp = make_response([sse_frame(DELTAS[0]), bad, DONE_FRAME])
    seen = []
    pipe = _pipeline(resp, seen.append)
    with pytest.raises(MalformedFrameError) as info:
        pipe.run()
    assert info.value.index == 1  # nosec B101
    assert info.value.chunk_count == 1  # nosec B101
    assert seen == [""]  # nosec B101
    assert pipe.phase is StreamPhase.FAILED  # nosec B101
    assert resp.is_closed  # nosec B101
