"""Streaming primitives shared by the pipeline, sinks and client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..errors import ProviderError
from ..models import AggregateResponse
from .parser import content_text


@dataclass(frozen=True)
class StreamChunk:
    """Structured view of one parsed chunk.

    Fields:
      index: zero-based arrival position
      data: the decoded JSON object, untouched
      frame: the raw SSE frame it was decoded from
    """

    index: int
    data: Dict[str, Any]
    frame: str

    @property
    def delta(self) -> Dict[str, Any]:
        """First choice's ``delta`` mapping, ``{}`` when absent."""
        choices = self.data.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            delta = choices[0].get("delta")
            if isinstance(delta, dict):
                return delta
        return {}

    @property
    def role(self) -> Optional[str]:
        return self.delta.get("role")

    @property
    def content(self) -> Optional[str]:
        return self.delta.get("content")

    @property
    def text(self) -> str:
        return content_text(self.data)


@dataclass
class StreamEvent:
    """One step of a streamed request.

    Non-terminal events carry a ``chunk``. Exactly one terminal event
    (``finish=True``) ends every stream and carries either the final
    ``response`` or the ``error`` that ended the request.
    """

    provider: str
    model: Optional[str]
    chunk: Optional[StreamChunk] = None
    finish: bool = False
    response: Optional[AggregateResponse] = None
    error: Optional[ProviderError] = None

    def is_error(self) -> bool:
        return self.error is not None


__all__ = [
    "StreamChunk",
    "StreamEvent",
]
