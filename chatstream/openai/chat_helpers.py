"""Helpers for building chat requests and shaping buffered responses.

Purpose
-------
- Assemble the JSON body and headers for OpenAI-compatible calls.
- Run a buffered (non-streaming) call and map failures onto the error
  taxonomy with structured logging.

No retries are performed here; a failed call raises immediately.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

import httpx

from ..base.errors import ErrorCode, HTTPStatusError, ProviderError, classify_exception
from ..base.errors_parts.classification import RETRYABLE_CODES
from ..base.logging import LogContext, normalized_log_event
from ..base.models import APIResponse, ProviderMetadata
from ..base.streaming.pipeline import EVENT_STREAM_CONTENT_TYPE
from ..config import ProviderConfig

HeaderPairs = Union[Mapping[str, str], Iterable[Tuple[str, str]], None]


def build_chat_body(model: str, messages: Iterable[Mapping[str, Any]], params: Mapping[str, Any]) -> Dict[str, Any]:
    """Return the chat completions body ``{"model", "messages", **params}``."""
    body: Dict[str, Any] = {"model": model, "messages": [dict(m) for m in messages]}
    body.update(params)
    return body


def build_headers(config: ProviderConfig, additional_headers: HeaderPairs, *, stream: bool) -> Dict[str, str]:
    """Merge auth headers with caller headers; streaming calls accept SSE."""
    headers = config.auth_headers()
    if stream:
        headers["Accept"] = EVENT_STREAM_CONTENT_TYPE
        headers["Cache-Control"] = "no-cache"
    if additional_headers:
        headers.update(dict(additional_headers))
    return headers


def buffered_call(
    client: httpx.Client,
    *,
    method: str,
    url: str,
    body: Optional[Dict[str, Any]],
    headers: Dict[str, str],
    query: Optional[Mapping[str, Any]],
    config: ProviderConfig,
    model: Optional[str],
    ctx: LogContext,
    logger: logging.Logger,
) -> APIResponse:
    """Perform one buffered request and decode its JSON body.

    Raises:
        HTTPStatusError: The response status is >= 400.
        ProviderError: The request failed in transport or the body is not JSON.
    """
    t0 = time.perf_counter()
    try:
        resp = client.request(method, url, json=body, headers=headers, params=query)
    except httpx.HTTPError as exc:
        code = classify_exception(exc)
        _log_error(logger, ctx, code, str(exc))
        raise ProviderError(
            code=code,
            message=str(exc) or type(exc).__name__,
            provider=config.provider,
            model=model,
            retryable=code in RETRYABLE_CODES,
            raw=exc,
        ) from exc
    latency_ms = (time.perf_counter() - t0) * 1000.0

    if resp.status_code >= 400:
        err = HTTPStatusError(resp.status_code, resp.text, provider=config.provider, model=model)
        _log_error(logger, ctx, err.code, err.message, http_status=resp.status_code)
        raise err

    try:
        data = resp.json() if resp.content else None
    except ValueError as exc:
        _log_error(logger, ctx, ErrorCode.VALIDATION, "response body is not valid JSON", http_status=resp.status_code)
        raise ProviderError(
            code=ErrorCode.VALIDATION,
            message=f"response body is not valid JSON: {exc}",
            provider=config.provider,
            model=model,
            raw=exc,
        ) from exc

    normalized_log_event(
        logger,
        "chat.end",
        ctx,
        phase="finalize",
        emitted=True,
        http_status=resp.status_code,
        latency_ms=latency_ms,
    )
    meta = ProviderMetadata(
        provider_name=config.provider,
        model_name=model,
        http_status=resp.status_code,
        request_id=resp.headers.get("x-request-id"),
        latency_ms=latency_ms,
    )
    return APIResponse(status=resp.status_code, response=data, headers=dict(resp.headers), meta=meta)


def _log_error(logger: logging.Logger, ctx: LogContext, code: ErrorCode, message: str, **fields: Any) -> None:
    normalized_log_event(
        logger,
        "chat.error",
        ctx,
        phase="finalize",
        emitted=False,
        error_code=code.value,
        level=logging.WARNING,
        error=message,
        **fields,
    )


__all__ = [
    "HeaderPairs",
    "build_chat_body",
    "build_headers",
    "buffered_call",
]
