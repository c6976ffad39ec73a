"""
Buffered (non-streaming) response model.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .provider_metadata import ProviderMetadata


@dataclass(frozen=True)
class APIResponse:
    """Decoded JSON body of a buffered call together with its status.

    Attributes:
        status: HTTP status code (always < 400; failures raise instead).
        response: Decoded JSON body.
        headers: Response headers.
        meta: Optional request metadata.
    """

    status: int
    response: Any
    headers: Dict[str, str] = field(default_factory=dict)
    meta: Optional[ProviderMetadata] = None


__all__ = [
    "APIResponse",
]
