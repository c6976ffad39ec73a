"""Unified error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``chatstream.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.classification import classify_exception, code_for_status
from .errors_parts.stream_errors import (
    ConnectionClosedError,
    HTTPStatusError,
    MalformedFrameError,
    StreamError,
)

__all__ = [
    "ErrorCode",
    "ProviderError",
    "classify_exception",
    "code_for_status",
    "StreamError",
    "ConnectionClosedError",
    "MalformedFrameError",
    "HTTPStatusError",
]
