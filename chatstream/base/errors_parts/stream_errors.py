"""
Caller-visible failures of one chat request.

Three terminal kinds exist and none of them is retried by the library:

* :class:`ConnectionClosedError` - the transport dropped before ``[DONE]``.
* :class:`MalformedFrameError` - a frame payload was not a JSON object.
* :class:`HTTPStatusError` - the initial response status was >= 400.

Each carries the partial progress available at failure time so callers that
only look at the exception can still tell how far the stream got.
"""
from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

from .classification import RETRYABLE_CODES, code_for_status
from .error_code import ErrorCode
from .provider_error import ProviderError


class StreamError(ProviderError):
    """Base class for the request-terminating failures.

    ``chunks`` holds every chunk delivered to the sink and aggregator before
    the failure, in arrival order.
    """

    chunks: Tuple[Dict[str, Any], ...]

    def __init__(
        self,
        *,
        code: ErrorCode,
        message: str,
        provider: str,
        model: Optional[str] = None,
        chunks: Sequence[Dict[str, Any]] = (),
        raw: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            provider=provider,
            model=model,
            retryable=code in RETRYABLE_CODES,
            raw=raw,
        )
        self.chunks = tuple(chunks)

    @property
    def chunk_count(self) -> int:
        """Number of chunks processed before the failure."""
        return len(self.chunks)


class ConnectionClosedError(StreamError):
    """The byte stream failed or ended before the terminal sentinel."""

    def __init__(
        self,
        message: str = "connection closed before [DONE]",
        *,
        provider: str = "openai",
        model: Optional[str] = None,
        chunks: Sequence[Dict[str, Any]] = (),
        frames_emitted: int = 0,
        raw: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.TRANSIENT,
            message=message,
            provider=provider,
            model=model,
            chunks=chunks,
            raw=raw,
        )
        self.frames_emitted = frames_emitted


class MalformedFrameError(StreamError):
    """A frame could not be decoded into a JSON object."""

    def __init__(
        self,
        message: str = "malformed frame",
        *,
        frame: str = "",
        index: int = 0,
        provider: str = "openai",
        model: Optional[str] = None,
        chunks: Sequence[Dict[str, Any]] = (),
        raw: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION,
            message=message,
            provider=provider,
            model=model,
            chunks=chunks,
            raw=raw,
        )
        self.frame = frame
        self.index = index


class HTTPStatusError(StreamError):
    """The initial response carried a status code >= 400."""

    def __init__(
        self,
        status: int,
        body: str = "",
        *,
        provider: str = "openai",
        model: Optional[str] = None,
        raw: Optional[Exception] = None,
    ) -> None:
        snippet = body[:260]
        super().__init__(
            code=code_for_status(status),
            message=f"request status {status}" + (f": {snippet}" if snippet else ""),
            provider=provider,
            model=model,
            raw=raw,
        )
        self.status = status
        self.body = body


__all__ = [
    "StreamError",
    "ConnectionClosedError",
    "MalformedFrameError",
    "HTTPStatusError",
]
