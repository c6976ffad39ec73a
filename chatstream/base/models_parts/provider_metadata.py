"""
Request metadata model.

Encapsulates diagnostic metadata for one request (HTTP status, request
identifier, latency, chunk counts). Attached to responses to support
observability.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional


@dataclass
class ProviderMetadata:
    """Execution metadata for a provider call.

    Attributes:
        provider_name: Canonical provider key (e.g., ``"openai"``).
        model_name: Model name sent with the request, when known.
        http_status: HTTP status code of the initial response.
        request_id: Provider request identifier (``x-request-id``) when sent.
        latency_ms: End-to-end latency for the operation, in milliseconds.
        extra: Opaque, JSON-serializable map for call-specific diagnostics.
    """

    provider_name: str
    model_name: Optional[str] = None
    http_status: Optional[int] = None
    request_id: Optional[str] = None
    latency_ms: Optional[float] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary of the metadata fields."""
        return asdict(self)


__all__ = [
    "ProviderMetadata",
]
