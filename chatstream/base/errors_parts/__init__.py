"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `chatstream.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .classification import classify_exception, code_for_status
from .stream_errors import ConnectionClosedError, HTTPStatusError, MalformedFrameError, StreamError

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
