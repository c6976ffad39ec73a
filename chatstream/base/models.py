"""Response models public surface.

Re-exports the one-class-per-file implementations under
``chatstream.base.models_parts``.
"""

from .models_parts import AggregateResponse, APIResponse, ProviderMetadata

__all__ = ["AggregateResponse", "APIResponse", "ProviderMetadata"]
