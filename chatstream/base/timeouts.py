"""Timeout configuration for the HTTP transport.

The streaming pipeline itself has no timeout logic: the only blocking point
is the byte read, and its deadline belongs to the transport. This module
centralizes the values handed to ``httpx`` so no numeric literals leak into
call sites.

Supported environment variables (all optional, seconds, must be > 0):
    CHATSTREAM_TIMEOUT_CONNECT_SECONDS
    CHATSTREAM_TIMEOUT_READ_SECONDS
    CHATSTREAM_TIMEOUT_WRITE_SECONDS
    CHATSTREAM_TIMEOUT_POOL_SECONDS

A read timeout while streaming surfaces as ``httpx.ReadTimeout`` from the byte
iterator, which the frame decoder reports as a closed connection.
"""
from __future__ import annotations

from dataclasses import dataclass
import os

import httpx


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Deadline for establishing the TCP/TLS session.
        read_timeout_seconds: Idle deadline between two reads; for streams this
            is the longest tolerated gap between SSE frames.
        write_timeout_seconds: Deadline for sending the request body.
        pool_timeout_seconds: Deadline for acquiring a pooled connection.
    """

    connect_timeout_seconds: float = 10.0
    read_timeout_seconds: float = 60.0
    write_timeout_seconds: float = 30.0
    pool_timeout_seconds: float = 10.0

    def to_httpx_timeout(self) -> httpx.Timeout:
        """Return the equivalent ``httpx.Timeout``."""
        return httpx.Timeout(
            connect=self.connect_timeout_seconds,
            read=self.read_timeout_seconds,
            write=self.write_timeout_seconds,
            pool=self.pool_timeout_seconds,
        )


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None
_ENV_NAMES = (
    "CHATSTREAM_TIMEOUT_CONNECT_SECONDS",
    "CHATSTREAM_TIMEOUT_READ_SECONDS",
    "CHATSTREAM_TIMEOUT_WRITE_SECONDS",
    "CHATSTREAM_TIMEOUT_POOL_SECONDS",
)


def _parse_env_float(name: str, default: float) -> float:
    """Parse an environment variable as a positive float with a fallback default."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached `TimeoutConfig` instance.

    The cache is refreshed when any of the supported environment variables
    changed since the last call.
    """
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    cur_guard = "/".join(os.getenv(name, "") for name in _ENV_NAMES)
    if _CACHED is not None and _ENV_GUARD == cur_guard:
        return _CACHED

    defaults = TimeoutConfig()
    _CACHED = TimeoutConfig(
        connect_timeout_seconds=_parse_env_float(_ENV_NAMES[0], defaults.connect_timeout_seconds),
        read_timeout_seconds=_parse_env_float(_ENV_NAMES[1], defaults.read_timeout_seconds),
        write_timeout_seconds=_parse_env_float(_ENV_NAMES[2], defaults.write_timeout_seconds),
        pool_timeout_seconds=_parse_env_float(_ENV_NAMES[3], defaults.pool_timeout_seconds),
    )
    _ENV_GUARD = cur_guard
    return _CACHED


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
]
