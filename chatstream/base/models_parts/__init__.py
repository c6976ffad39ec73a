"""Response model parts (one class per file)."""

from .provider_metadata import ProviderMetadata
from .api_response import APIResponse
from .aggregate_response import AggregateResponse

__all__ = ["ProviderMetadata", "APIResponse", "AggregateResponse"]
