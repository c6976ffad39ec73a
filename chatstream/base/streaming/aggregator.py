"""Response aggregator for streamed chat completions."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..models import AggregateResponse, ProviderMetadata


class ResponseAggregator:
    """Record parsed chunks in arrival order.

    Chunks are kept as discrete elements; content deltas are not merged.
    """

    def __init__(self) -> None:
        self._chunks: List[Dict[str, Any]] = []

    def add(self, chunk: Dict[str, Any]) -> int:
        """Append ``chunk`` and return its index."""
        self._chunks.append(chunk)
        return len(self._chunks) - 1

    @property
    def chunks(self) -> Tuple[Dict[str, Any], ...]:
        return tuple(self._chunks)

    def __len__(self) -> int:
        return len(self._chunks)

    def build(
        self,
        status: int,
        *,
        headers: Optional[Mapping[str, str]] = None,
        meta: Optional[ProviderMetadata] = None,
    ) -> AggregateResponse:
        """Wrap the recorded chunks into an :class:`AggregateResponse`."""
        return AggregateResponse(
            status=status,
            responses=self.chunks,
            headers=dict(headers or {}),
            meta=meta,
        )


def merge_deltas(responses: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Collapse the first choice's deltas into one message-like mapping.

    Returns ``{"role", "content", "finish_reason"}``. ``role`` is the first
    role seen, ``content`` the concatenation of every content delta and
    ``finish_reason`` the last non-null finish reason. Missing values are
    ``None`` (``""`` for content).
    """
    role: Optional[str] = None
    finish_reason: Optional[str] = None
    parts: List[str] = []
    for chunk in responses:
        choices = chunk.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            continue
        choice = choices[0]
        delta = choice.get("delta")
        if isinstance(delta, dict):
            if role is None and isinstance(delta.get("role"), str):
                role = delta["role"]
            if isinstance(delta.get("content"), str):
                parts.append(delta["content"])
        if choice.get("finish_reason") is not None:
            finish_reason = choice["finish_reason"]
    return {"role": role, "content": "".join(parts), "finish_reason": finish_reason}


__all__ = ["ResponseAggregator", "merge_deltas"]
