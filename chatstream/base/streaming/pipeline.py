"""Streaming request pipeline.

Drives one streamed request from the opened HTTP response to its terminal
outcome::

    IDLE -> CONNECTING -> STREAMING -> DONE
                     \\            \\
                      +-> FAILED    +-> FAILED

* ``CONNECTING -> FAILED``: initial status >= 400 (:class:`HTTPStatusError`,
  no chunk processed) or the request could not be sent.
* ``STREAMING -> FAILED``: read failure or truncated stream
  (:class:`ConnectionClosedError`), or the first malformed frame
  (:class:`MalformedFrameError`). Chunks delivered before the failure stay
  delivered and are attached to the error.
* ``STREAMING -> DONE``: ``data: [DONE]`` observed.

The sink runs synchronously inside the pull loop, before the next read. The
response is closed on every exit path. Nothing is retried.
"""
from __future__ import annotations

import copy
import logging
import time
from contextlib import ExitStack
from enum import Enum
from typing import Any, Callable, Iterator, Optional

import httpx

from ..errors import (
    ConnectionClosedError,
    ErrorCode,
    HTTPStatusError,
    MalformedFrameError,
    ProviderError,
    StreamError,
    classify_exception,
)
from ..errors_parts.classification import RETRYABLE_CODES
from ..logging import LogContext, get_logger, normalized_log_event
from ..models import AggregateResponse, ProviderMetadata
from .aggregator import ResponseAggregator
from .frames import READ_FAILURES, FrameDecoder
from .parser import parse_frame
from .sinks import resolve_sink
from .streaming import StreamChunk, StreamEvent
from .streaming_metrics import StreamMetrics

EVENT_STREAM_CONTENT_TYPE = "text/event-stream"


class StreamPhase(str, Enum):
    """Lifecycle of one streamed request."""

    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"


class StreamPipeline:
    """Decode, parse, deliver and aggregate one streamed response.

    Parameters:
        opener: Zero-argument callable returning an open, not yet read
            ``httpx.Response`` (e.g. ``client.send(request, stream=True)``).
        consumer: Caller consumer; resolved once via :func:`resolve_sink`.
        provider: Provider key used in errors and logs.
        model: Model name used in errors and logs.
        logger: Logger for structured events.
        ctx: Log context; derived from provider/model when omitted.
    """

    def __init__(
        self,
        opener: Callable[[], httpx.Response],
        *,
        consumer: Any = None,
        provider: str = "openai",
        model: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self._opener = opener
        self._sink = resolve_sink(consumer)
        self.provider = provider
        self.model = model
        self._logger = logger or get_logger("chatstream.stream")
        self.ctx = ctx or LogContext(provider=provider, model=model)
        self.phase = StreamPhase.IDLE
        self.metrics = StreamMetrics()
        self._aggregator = ResponseAggregator()

    @property
    def chunks(self):
        """Chunks delivered so far, in arrival order."""
        return self._aggregator.chunks

    def run(self) -> AggregateResponse:
        """Consume the stream and return the aggregate, or raise its error."""
        for event in self.events():
            if not event.finish:
                continue
            if event.error is not None:
                raise event.error from event.error.raw
            if event.response is not None:
                return event.response
        raise ProviderError(  # pragma: no cover - events() always ends with a terminal event
            code=ErrorCode.UNKNOWN,
            message="stream ended without a terminal event",
            provider=self.provider,
            model=self.model,
        )

    def events(self) -> Iterator[StreamEvent]:
        """Yield one event per chunk, then exactly one terminal event."""
        t0 = time.perf_counter()
        self.phase = StreamPhase.CONNECTING
        with ExitStack() as stack:
            try:
                response = self._opener()
            except Exception as exc:
                yield self._fail(self._open_error(exc), t0)
                return
            stack.callback(response.close)

            status = response.status_code
            if status >= 400:
                yield self._fail(
                    HTTPStatusError(status, self._read_body(response), provider=self.provider, model=self.model),
                    t0,
                )
                return
            self._check_content_type(response)

            self.phase = StreamPhase.STREAMING
            decoder = FrameDecoder(response.iter_bytes(), logger=self._logger, ctx=self.ctx)
            error: Optional[StreamError] = None
            try:
                for frame in decoder:
                    index = len(self._aggregator)
                    data = parse_frame(frame, index=index)
                    chunk = StreamChunk(index=index, data=copy.deepcopy(data), frame=frame)
                    self._deliver(chunk)
                    self._aggregator.add(data)
                    self.metrics.record_chunk((time.perf_counter() - t0) * 1000.0)
                    yield StreamEvent(provider=self.provider, model=self.model, chunk=chunk)
            except ConnectionClosedError as exc:
                error = ConnectionClosedError(
                    exc.message,
                    provider=self.provider,
                    model=self.model,
                    chunks=self._aggregator.chunks,
                    frames_emitted=exc.frames_emitted,
                    raw=exc.raw or exc,
                )
            except MalformedFrameError as exc:
                error = MalformedFrameError(
                    exc.message,
                    frame=exc.frame,
                    index=exc.index,
                    provider=self.provider,
                    model=self.model,
                    chunks=self._aggregator.chunks,
                    raw=exc.raw or exc,
                )
            if error is None and not decoder.saw_sentinel:
                error = ConnectionClosedError(
                    f"stream ended before [DONE] after {decoder.frames_emitted} frame(s)",
                    provider=self.provider,
                    model=self.model,
                    chunks=self._aggregator.chunks,
                    frames_emitted=decoder.frames_emitted,
                )
            if error is not None:
                yield self._fail(error, t0)
                return

            self.phase = StreamPhase.DONE
            self.metrics.total_duration_ms = (time.perf_counter() - t0) * 1000.0
            meta = ProviderMetadata(
                provider_name=self.provider,
                model_name=self.model,
                http_status=status,
                request_id=response.headers.get("x-request-id"),
                latency_ms=self.metrics.total_duration_ms,
                extra={"stream_chunks": len(self._aggregator), **self.metrics.to_dict()},
            )
            normalized_log_event(
                self._logger,
                "stream.end",
                self.ctx,
                phase="finalize",
                emitted=self.metrics.emitted,
                http_status=status,
                metrics=self.metrics.to_dict(),
            )
            yield StreamEvent(
                provider=self.provider,
                model=self.model,
                finish=True,
                response=self._aggregator.build(status, headers=response.headers, meta=meta),
            )

    # ----- helpers -----

    def _deliver(self, chunk: StreamChunk) -> None:
        try:
            self._sink(chunk)
        except Exception as exc:
            self.phase = StreamPhase.FAILED
            normalized_log_event(
                self._logger,
                "stream.sink_error",
                self.ctx,
                phase="mid_stream",
                emitted=self.metrics.emitted,
                level=logging.ERROR,
                error=str(exc),
                index=chunk.index,
            )
            raise

    def _fail(self, error: ProviderError, t0: float) -> StreamEvent:
        phase = "start" if self.phase is StreamPhase.CONNECTING else "mid_stream"
        self.phase = StreamPhase.FAILED
        self.metrics.total_duration_ms = (time.perf_counter() - t0) * 1000.0
        normalized_log_event(
            self._logger,
            "stream.error",
            self.ctx,
            phase=phase,
            emitted=self.metrics.emitted,
            error_code=error.code.value,
            level=logging.WARNING,
            error=error.message,
            error_type=type(error).__name__,
            metrics=self.metrics.to_dict(),
        )
        return StreamEvent(provider=self.provider, model=self.model, finish=True, error=error)

    def _open_error(self, exc: Exception) -> ProviderError:
        if isinstance(exc, ProviderError):
            return exc
        code = classify_exception(exc)
        return ProviderError(
            code=code,
            message=str(exc) or type(exc).__name__,
            provider=self.provider,
            model=self.model,
            retryable=code in RETRYABLE_CODES,
            raw=exc,
        )

    def _read_body(self, response: httpx.Response) -> str:
        try:
            response.read()
        except READ_FAILURES as exc:
            normalized_log_event(
                self._logger,
                "stream.error_body_unreadable",
                self.ctx,
                phase="start",
                level=logging.DEBUG,
                error=str(exc),
            )
            return ""
        return response.text

    def _check_content_type(self, response: httpx.Response) -> None:
        content_type = response.headers.get("content-type", "")
        if content_type.split(";")[0].strip().lower() == EVENT_STREAM_CONTENT_TYPE:
            return
        normalized_log_event(
            self._logger,
            "stream.content_type",
            self.ctx,
            phase="start",
            level=logging.WARNING,
            content_type=content_type or None,
            expected=EVENT_STREAM_CONTENT_TYPE,
        )


__all__ = ["StreamPhase", "StreamPipeline", "EVENT_STREAM_CONTENT_TYPE"]
