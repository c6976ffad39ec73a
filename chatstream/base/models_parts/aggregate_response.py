"""
Aggregate result of one streamed call.

``responses`` holds every parsed chunk exactly as decoded from the wire, in
arrival order. Deltas are never merged here; see
``chatstream.base.streaming.aggregator.merge_deltas`` for a higher-level view.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple

from .provider_metadata import ProviderMetadata


@dataclass(frozen=True)
class AggregateResponse:
    """Status plus ordered chunks of a completed stream.

    Attributes:
        status: HTTP status code of the initial response.
        responses: Parsed chunks in arrival order.
        headers: Response headers.
        meta: Optional request metadata.
    """

    status: int
    responses: Tuple[Dict[str, Any], ...]
    headers: Dict[str, str] = field(default_factory=dict)
    meta: Optional[ProviderMetadata] = None

    def __len__(self) -> int:
        return len(self.responses)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self.responses)

    def deltas(self) -> Tuple[Dict[str, Any], ...]:
        """Return the first choice's ``delta`` of every chunk (``{}`` when absent)."""
        out = []
        for chunk in self.responses:
            choices = chunk.get("choices")
            first = choices[0] if isinstance(choices, list) and choices and isinstance(choices[0], dict) else {}
            delta = first.get("delta")
            out.append(delta if isinstance(delta, dict) else {})
        return tuple(out)


__all__ = [
    "AggregateResponse",
]
