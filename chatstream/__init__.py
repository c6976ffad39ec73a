"""chatstream - chat-completion client with an SSE streaming pipeline.

Public surface:
- ``ChatClient`` / ``create_chat``: streamed and buffered chat completions
- ``ProviderConfig`` / ``load_provider_config``: explicit configuration
- ``AggregateResponse`` / ``APIResponse``: call results
- ``StructuredCallback`` and friends: stream consumers
- ``ConnectionClosedError`` / ``MalformedFrameError`` / ``HTTPStatusError``:
  terminal failures carrying partial progress
"""

from .base.errors import (
    ConnectionClosedError,
    ErrorCode,
    HTTPStatusError,
    MalformedFrameError,
    ProviderError,
    StreamError,
    classify_exception,
)
from .base.logging import configure_logger, get_logger
from .base.models import AggregateResponse, APIResponse, ProviderMetadata
from .base.streaming import (
    ByteSink,
    ConsumerSink,
    NullSink,
    StreamChunk,
    StreamEvent,
    StreamPhase,
    StreamPipeline,
    StringCallback,
    StructuredCallback,
    merge_deltas,
)
from .config import ProviderConfig, load_provider_config
from .openai import ChatClient, create_chat

__all__ = [
    "ChatClient",
    "create_chat",
    "ProviderConfig",
    "load_provider_config",
    "AggregateResponse",
    "APIResponse",
    "ProviderMetadata",
    "StreamChunk",
    "StreamEvent",
    "StreamPhase",
    "StreamPipeline",
    "ConsumerSink",
    "NullSink",
    "StringCallback",
    "StructuredCallback",
    "ByteSink",
    "merge_deltas",
    "ErrorCode",
    "ProviderError",
    "StreamError",
    "ConnectionClosedError",
    "MalformedFrameError",
    "HTTPStatusError",
    "classify_exception",
    "configure_logger",
    "get_logger",
]
