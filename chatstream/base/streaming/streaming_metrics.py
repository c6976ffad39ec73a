"""Streaming metrics data structures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class StreamMetrics:
    """Collected metrics for a single streamed request.

    ``emitted`` counts chunks delivered to the sink; times are milliseconds
    measured from the moment the request was opened.
    """

    emitted: int = 0
    time_to_first_chunk_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None

    def record_chunk(self, elapsed_ms: float) -> None:
        if self.time_to_first_chunk_ms is None:
            self.time_to_first_chunk_ms = elapsed_ms
        self.emitted += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "emitted_count": self.emitted,
            "time_to_first_chunk_ms": self.time_to_first_chunk_ms,
            "total_duration_ms": self.total_duration_ms,
        }


__all__ = ["StreamMetrics"]
