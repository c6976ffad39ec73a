"""SSE frame decoder.

Splits a live byte stream into discrete SSE event blocks ("frames"). The
decoder is byte/line oriented only: it never interprets JSON.

Framing rules:
  * A frame ends at a blank line. CRLF and lone CR line endings are
    normalized to LF first, including a CRLF pair split across two reads.
  * Framing happens on bytes; each complete frame is then decoded as strict
    UTF-8, so a sequence split across reads is reassembled first. Invalid
    UTF-8 raises :class:`MalformedFrameError` for that frame.
  * Comment lines (leading ``:``, used for keep-alives) are dropped; a block
    made only of comments or whitespace is skipped and not counted.
  * ``data: [DONE]`` stops decoding; anything after it is ignored.
  * End of input ends iteration; an unterminated trailing fragment is
    discarded.
  * A read failure raises :class:`ConnectionClosedError` carrying the number
    of frames already emitted.
"""
from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

import httpx

from ..errors import ConnectionClosedError, MalformedFrameError
from ..logging import LogContext, get_logger, normalized_log_event

DATA_FIELD = "data:"
DONE_SENTINEL = "[DONE]"

# Failures of the byte source that end the stream early.
READ_FAILURES = (httpx.TransportError, httpx.StreamError, OSError)


def data_value(frame: str) -> Optional[str]:
    """Return the value of a ``data:`` frame, ``None`` for other frames.

    One space after the field name is optional and not part of the value.
    """
    if not frame.startswith(DATA_FIELD):
        return None
    value = frame[len(DATA_FIELD):]
    return value[1:] if value.startswith(" ") else value


def is_done_frame(frame: str) -> bool:
    """Return True for the terminal ``data: [DONE]`` frame."""
    return data_value(frame.strip()) == DONE_SENTINEL


def _strip_comments(block: bytes) -> bytes:
    return b"\n".join(line for line in block.split(b"\n") if not line.startswith(b":"))


class FrameDecoder:
    """Lazily turn an iterable of byte chunks into SSE frames.

    Attributes:
        frames_emitted: Number of frames yielded so far.
        saw_sentinel: Whether the ``[DONE]`` frame was observed.
    """

    def __init__(
        self,
        byte_stream: Iterable[bytes],
        *,
        logger: Optional[logging.Logger] = None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self._source = byte_stream
        self._buffer = b""
        self._pending_cr = False
        self._logger = logger or get_logger("chatstream.stream")
        self._ctx = ctx
        self.frames_emitted = 0
        self.saw_sentinel = False

    def __iter__(self) -> Iterator[str]:
        try:
            for raw in self._source:
                if not raw:
                    continue
                self._feed(raw)
                yield from self._drain()
                if self.saw_sentinel:
                    return
        except READ_FAILURES as exc:
            raise ConnectionClosedError(
                f"connection closed after {self.frames_emitted} frame(s): {exc}",
                frames_emitted=self.frames_emitted,
                raw=exc,
            ) from exc
        self._feed(b"", final=True)
        yield from self._drain()
        if not self.saw_sentinel and self._buffer.strip():
            normalized_log_event(
                self._logger,
                "stream.decode_truncated",
                self._ctx,
                phase="mid_stream",
                emitted=self.frames_emitted,
                level=logging.WARNING,
                discarded_bytes=len(self._buffer),
            )
        self._buffer = b""

    def _feed(self, data: bytes, *, final: bool = False) -> None:
        if self._pending_cr:
            data = b"\r" + data
            self._pending_cr = False
        if data.endswith(b"\r") and not final:
            data = data[:-1]
            self._pending_cr = True
        self._buffer += data.replace(b"\r\n", b"\n").replace(b"\r", b"\n")

    def _drain(self) -> Iterator[str]:
        while not self.saw_sentinel:
            idx = self._buffer.find(b"\n\n")
            if idx < 0:
                return
            block = _strip_comments(self._buffer[:idx]).strip(b"\n")
            self._buffer = self._buffer[idx + 2:]
            if not block.strip():
                continue
            frame = self._decode(block)
            if is_done_frame(frame):
                self.saw_sentinel = True
                return
            self.frames_emitted += 1
            yield frame

    def _decode(self, block: bytes) -> str:
        try:
            return block.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedFrameError(
                f"invalid UTF-8 in frame {self.frames_emitted}: {exc.reason} at byte {exc.start}",
                frame=block.decode("utf-8", errors="replace"),
                index=self.frames_emitted,
                raw=exc,
            ) from exc


def iter_frames(byte_stream: Iterable[bytes]) -> Iterator[str]:
    """Yield frames from ``byte_stream`` (see :class:`FrameDecoder`)."""
    yield from FrameDecoder(byte_stream)


__all__ = [
    "DATA_FIELD",
    "DONE_SENTINEL",
    "READ_FAILURES",
    "FrameDecoder",
    "data_value",
    "is_done_frame",
    "iter_frames",
]
