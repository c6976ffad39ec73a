"""Helpers shared by the streaming tests.

``streaming_handler`` builds a mock chat endpoint that streams SSE frames the
way an OpenAI-compatible server does, with knobs for a dropped connection,
malformed payloads and a rate-limit response.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

import httpx

SSE_HEADERS = {
    "Content-Type": "text/event-stream",
    "Connection": "keep-alive",
    "Cache-Control": "no-cache",
}
DONE_FRAME = b"data: [DONE]\n\n"


def sse_frame(delta: Dict[str, Any]) -> bytes:
    """Encode one delta as a chat completion chunk frame."""
    return f"data: {json.dumps({'choices': [{'delta': delta}]}, ensure_ascii=False)}\n\n".encode("utf-8")


def sse_body(deltas: Iterable[Dict[str, Any]], *, done: bool = True) -> bytes:
    body = b"".join(sse_frame(d) for d in deltas)
    return body + DONE_FRAME if done else body


def dropped_stream(parts: Iterable[bytes], exc: Exception) -> Iterator[bytes]:
    """Yield ``parts`` then fail like a peer closing the socket."""
    yield from parts
    raise exc


def make_response(
    parts: Iterable[bytes],
    *,
    status: int = 200,
    headers: Optional[Dict[str, str]] = None,
) -> httpx.Response:
    """Build an unread streaming response over ``parts``."""
    return httpx.Response(status, headers=SSE_HEADERS if headers is None else headers, content=iter(parts))


def streaming_handler(
    responses: List[Dict[str, Any]],
    *,
    error_after: Optional[int] = None,
    malformed_response: bool = False,
    seen: Optional[List[httpx.Request]] = None,
    opened: Optional[List[httpx.Response]] = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """Return a mock transport handler for ``POST /v1/chat/completions``.

    Parameters:
        responses: Deltas to stream, one frame each, then ``[DONE]``.
        error_after: Drop the connection after this many frames.
        malformed_response: Send ``data: {invalid_json}`` instead of each delta.
        seen: Collects the requests received.
        opened: Collects the responses handed out.
    """

    def body() -> Iterator[bytes]:
        for i, response in enumerate(responses, start=1):
            if error_after is not None and i > error_after:
                raise httpx.RemoteProtocolError("peer closed connection without sending complete message body")
            if malformed_response:
                yield b"data: {invalid_json}\n\n"
                continue
            yield sse_frame(response)
        yield DONE_FRAME

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.path != "/v1/chat/completions" or request.method != "POST":
            return httpx.Response(404, text="Not Found")
        if "x-test-rate-limit" in request.headers:
            return httpx.Response(429, text="Too Many Requests")
        resp = httpx.Response(200, headers=SSE_HEADERS, content=body())
        if opened is not None:
            opened.append(resp)
        return resp

    return handler
