"""Pytest configuration for the chatstream test suite.

Provides an explicit provider configuration, a factory for ``httpx.Client``
instances backed by ``httpx.MockTransport`` (the stand-in for the remote
server), and a capture of the library's structured log events.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, Dict, Iterator, List

import httpx
import pytest

from chatstream.base.http import close_all_clients
from chatstream.base.logging import get_logger
from chatstream.config import ProviderConfig


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep developer environment settings out of the tests."""

    for name in ("CHATSTREAM_LOG_LEVEL", "OPENAI_API_KEY", "OPENAI_BASE_URL", "OPENAI_MODEL"):
        monkeypatch.delenv(name, raising=False)
    yield
    close_all_clients()


@pytest.fixture()
def provider_config() -> ProviderConfig:
    """Configuration pointing at the mock server."""

    return ProviderConfig(api_key="test", base_url="http://127.0.0.1:8444/v1")


@pytest.fixture()
def mock_http() -> Iterator[Callable[[Callable[[httpx.Request], httpx.Response]], httpx.Client]]:
    """Return a factory building clients around a request handler."""

    clients: List[httpx.Client] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture()
def log_events() -> Iterator[List[Dict]]:
    """Capture structured events emitted through the ``chatstream`` logger."""

    events: List[Dict] = []
    base = get_logger()

    class _Collector(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            try:
                payload = json.loads(record.getMessage())
            except ValueError:
                return
            if isinstance(payload, dict):
                payload["_level"] = record.levelno
                events.append(payload)

    handler = _Collector()
    base.addHandler(handler)
    try:
        yield events
    finally:
        base.removeHandler(handler)
