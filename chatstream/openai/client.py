"""Chat client for OpenAI-compatible endpoints.

``ChatClient`` is the caller-facing surface. A call made with a stream
consumer (callable, writable stream or ``ConsumerSink``) asks the server for
an SSE response and runs it through :class:`StreamPipeline`; any other call is
buffered and decoded as JSON.

Configuration is explicit: every client is built from a ``ProviderConfig``
value. HTTP connections come from the shared pool unless an
``httpx.Client`` is injected (tests inject one backed by
``httpx.MockTransport``).
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Union

import httpx

from ..base.http import get_httpx_client
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import AggregateResponse, APIResponse
from ..base.streaming import StreamEvent, StreamPipeline, wants_stream
from ..config import ProviderConfig
from ..config.defaults import CHAT_COMPLETIONS_API
from .chat_helpers import HeaderPairs, build_chat_body, build_headers, buffered_call

ChatResult = Union[AggregateResponse, APIResponse]


class ChatClient:
    """Send chat completion requests, streamed or buffered.

    Parameters:
        config: Provider configuration (API key, base URL, default model).
        http_client: Optional ``httpx.Client``; defaults to the pooled client.
        logger_name: Child logger used for structured events.
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        http_client: Optional[httpx.Client] = None,
        logger_name: str = "chatstream.openai",
    ) -> None:
        self.config = config
        self._http_client = http_client
        self._logger = get_logger(logger_name)

    @property
    def provider_name(self) -> str:
        return self.config.provider

    def _client(self) -> httpx.Client:
        return self._http_client or get_httpx_client(None, purpose="chat")

    # ----- public surface -----

    def create_chat(
        self,
        model: Optional[str],
        messages: Iterable[Mapping[str, Any]],
        *,
        stream_callback: Any = None,
        additional_headers: HeaderPairs = None,
        **params: Any,
    ) -> ChatResult:
        """Create a chat completion.

        Returns an :class:`AggregateResponse` when ``stream_callback`` is given
        (or ``stream=True`` is passed) and an :class:`APIResponse` otherwise.

        Raises:
            HTTPStatusError: Initial status >= 400.
            ConnectionClosedError: The stream dropped before ``[DONE]``.
            MalformedFrameError: A streamed frame was not a JSON object.
            ProviderError: Transport failure before any response.
        """
        model = self._resolve_model(model)
        stream = bool(params.pop("stream", False)) or wants_stream(stream_callback)
        return self.request(
            CHAT_COMPLETIONS_API,
            body=build_chat_body(model, messages, params),
            stream=stream,
            stream_callback=stream_callback,
            additional_headers=additional_headers,
            model=model,
        )

    def stream_chat_events(
        self,
        model: Optional[str],
        messages: Iterable[Mapping[str, Any]],
        *,
        stream_callback: Any = None,
        additional_headers: HeaderPairs = None,
        **params: Any,
    ) -> Iterator[StreamEvent]:
        """Stream a chat completion as typed events instead of raising.

        Yields one event per chunk and a terminal event carrying either the
        ``AggregateResponse`` or the error.
        """
        model = self._resolve_model(model)
        params.pop("stream", None)
        body = build_chat_body(model, messages, params)
        body["stream"] = True
        pipeline = self._pipeline(
            CHAT_COMPLETIONS_API,
            method="POST",
            body=body,
            consumer=stream_callback,
            additional_headers=additional_headers,
            query=None,
            model=model,
        )
        yield from pipeline.events()

    def request(
        self,
        api: str,
        *,
        method: str = "POST",
        body: Optional[Dict[str, Any]] = None,
        stream: Optional[bool] = None,
        stream_callback: Any = None,
        additional_headers: HeaderPairs = None,
        query: Optional[Mapping[str, Any]] = None,
        model: Optional[str] = None,
    ) -> ChatResult:
        """Send one request to ``api`` (relative to the base URL).

        ``stream`` defaults to whether a ``stream_callback`` is supplied; when
        streaming, ``"stream": true`` is set in the body.
        """
        if stream is None:
            stream = wants_stream(stream_callback)
        ctx = LogContext(provider=self.provider_name, model=model, api=api)
        if stream:
            payload = dict(body or {})
            payload["stream"] = True
            pipeline = self._pipeline(
                api,
                method=method,
                body=payload,
                consumer=stream_callback,
                additional_headers=additional_headers,
                query=query,
                model=model,
                ctx=ctx,
            )
            return pipeline.run()

        normalized_log_event(self._logger, "chat.start", ctx, phase="start", method=method)
        return buffered_call(
            self._client(),
            method=method,
            url=self.config.build_url(api),
            body=body,
            headers=build_headers(self.config, additional_headers, stream=False),
            query=query,
            config=self.config,
            model=model,
            ctx=ctx,
            logger=self._logger,
        )

    # ----- helpers -----

    def _resolve_model(self, model: Optional[str]) -> str:
        resolved = model or self.config.default_model
        if not resolved:
            raise ValueError("model cannot be empty")
        return resolved

    def _pipeline(
        self,
        api: str,
        *,
        method: str,
        body: Dict[str, Any],
        consumer: Any,
        additional_headers: HeaderPairs,
        query: Optional[Mapping[str, Any]],
        model: Optional[str],
        ctx: Optional[LogContext] = None,
    ) -> StreamPipeline:
        ctx = ctx or LogContext(provider=self.provider_name, model=model, api=api)
        client = self._client()
        request = client.build_request(
            method,
            self.config.build_url(api),
            json=body,
            headers=build_headers(self.config, additional_headers, stream=True),
            params=query,
        )

        def _open() -> httpx.Response:
            normalized_log_event(self._logger, "stream.start", ctx, phase="start", method=method)
            return client.send(request, stream=True)

        return StreamPipeline(
            _open,
            consumer=consumer,
            provider=self.provider_name,
            model=model,
            logger=self._logger,
            ctx=ctx,
        )


def create_chat(
    config: ProviderConfig,
    model: Optional[str],
    messages: Iterable[Mapping[str, Any]],
    *,
    stream_callback: Any = None,
    additional_headers: HeaderPairs = None,
    http_client: Optional[httpx.Client] = None,
    **params: Any,
) -> ChatResult:
    """One-shot form of :meth:`ChatClient.create_chat`."""
    return ChatClient(config, http_client=http_client).create_chat(
        model,
        messages,
        stream_callback=stream_callback,
        additional_headers=additional_headers,
        **params,
    )


__all__ = ["ChatClient", "ChatResult", "create_chat"]
