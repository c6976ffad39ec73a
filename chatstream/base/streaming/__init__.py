"""Streaming package.

Exposes the frame decoder, event parser, consumer sinks, aggregator and the
request pipeline under a single namespace.
"""

from .frames import DATA_FIELD, DONE_SENTINEL, FrameDecoder, data_value, is_done_frame, iter_frames
from .parser import content_text, parse_frame
from .streaming import StreamChunk, StreamEvent
from .sinks import (
    ByteSink,
    ConsumerSink,
    NullSink,
    StringCallback,
    StructuredCallback,
    resolve_sink,
    wants_stream,
)
from .aggregator import ResponseAggregator, merge_deltas
from .streaming_metrics import StreamMetrics
from .pipeline import StreamPhase, StreamPipeline

__all__ = [
    "DATA_FIELD",
    "DONE_SENTINEL",
    "FrameDecoder",
    "data_value",
    "is_done_frame",
    "iter_frames",
    "parse_frame",
    "content_text",
    "StreamChunk",
    "StreamEvent",
    "ConsumerSink",
    "NullSink",
    "StringCallback",
    "StructuredCallback",
    "ByteSink",
    "resolve_sink",
    "wants_stream",
    "ResponseAggregator",
    "merge_deltas",
    "StreamMetrics",
    "StreamPhase",
    "StreamPipeline",
]
