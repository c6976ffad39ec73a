"""Consumer adapter: normalize caller consumption styles into one sink.

Callers hand a streaming request one consumer. :func:`resolve_sink` maps it,
once per request, onto a closed set of variants:

==========================================  =====================
consumer                                    sink
==========================================  =====================
``None``                                    :class:`NullSink`
a :class:`ConsumerSink` instance            itself
object with a ``write`` method              :class:`ByteSink`
any other callable                          :class:`StringCallback`
==========================================  =====================

Wrap a callable in :class:`StructuredCallback` to receive the parsed
:class:`StreamChunk` instead of its text.
"""
from __future__ import annotations

import io
from abc import ABC, abstractmethod
from typing import Any, Callable

from .streaming import StreamChunk


class ConsumerSink(ABC):
    """Receives every parsed chunk of one request, in arrival order."""

    @abstractmethod
    def __call__(self, chunk: StreamChunk) -> None:
        raise NotImplementedError


class NullSink(ConsumerSink):
    """Discard chunks; the aggregate is still built."""

    def __call__(self, chunk: StreamChunk) -> None:
        return None


class StringCallback(ConsumerSink):
    """Call ``fn(text)`` for every chunk, with ``""`` when it has no content."""

    def __init__(self, fn: Callable[[str], Any]) -> None:
        self._fn = fn

    def __call__(self, chunk: StreamChunk) -> None:
        self._fn(chunk.text)


class StructuredCallback(ConsumerSink):
    """Call ``fn(chunk)`` with the parsed :class:`StreamChunk`."""

    def __init__(self, fn: Callable[[StreamChunk], Any]) -> None:
        self._fn = fn

    def __call__(self, chunk: StreamChunk) -> None:
        self._fn(chunk)


class ByteSink(ConsumerSink):
    """Append each chunk's text to a writable stream.

    Text streams (``io.TextIOBase``) receive ``str``; binary streams receive
    UTF-8 bytes. Other writers are treated as binary when they are an
    ``io.IOBase`` or expose a ``mode`` containing ``"b"``. No separators are
    written between chunks.
    """

    def __init__(self, target: Any) -> None:
        self._target = target
        self._binary = not isinstance(target, io.TextIOBase) and (
            isinstance(target, io.IOBase) or "b" in str(getattr(target, "mode", ""))
        )

    def __call__(self, chunk: StreamChunk) -> None:
        text = chunk.text
        if not text:
            return
        self._target.write(text.encode("utf-8") if self._binary else text)
        flush = getattr(self._target, "flush", None)
        if callable(flush):
            flush()


def resolve_sink(consumer: Any) -> ConsumerSink:
    """Return the sink variant for ``consumer``.

    Raises:
        TypeError: ``consumer`` is neither callable nor writable.
    """
    if consumer is None:
        return NullSink()
    if isinstance(consumer, ConsumerSink):
        return consumer
    if callable(getattr(consumer, "write", None)):
        return ByteSink(consumer)
    if callable(consumer):
        return StringCallback(consumer)
    raise TypeError(
        f"stream consumer must be a callable, a writable stream or a ConsumerSink, got {type(consumer).__name__}"
    )


def wants_stream(consumer: Any) -> bool:
    """Whether a request carrying ``consumer`` must ask for a streamed response."""
    return consumer is not None


__all__ = [
    "ConsumerSink",
    "NullSink",
    "StringCallback",
    "StructuredCallback",
    "ByteSink",
    "resolve_sink",
    "wants_stream",
]
