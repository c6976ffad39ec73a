"""Explicit provider configuration.

A :class:`ProviderConfig` value is passed to every client; there is no
process-wide default provider. :func:`load_provider_config` builds one from
the environment when asked to, merging sources in this order:

    1. Built-in defaults
    2. Environment variables (OPENAI_API_KEY, OPENAI_BASE_URL, OPENAI_MODEL,
       OPENAI_ORGANIZATION)
    3. Keyword overrides passed to the helper

The model is frozen, so one instance can be shared across threads and
concurrent requests.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .defaults import DEFAULT_PROVIDER, OPENAI_DEFAULT_BASE_URL
from .env import ENV_MAP, get_env_value, is_placeholder


class ProviderConfig(BaseModel):
    """Connection settings for an OpenAI-compatible endpoint.

    Attributes
    ----------
    provider:
        Provider key used in errors and logs.
    api_key:
        Bearer token. May be empty at construction; :meth:`auth_headers`
        rejects an empty key.
    base_url:
        API root without trailing slash (e.g. ``https://api.openai.com/v1``).
    organization:
        Optional ``OpenAI-Organization`` header value.
    default_model:
        Model used when a call does not name one.
    headers:
        Extra static headers sent with every request.
    """

    model_config = ConfigDict(frozen=True)

    provider: str = DEFAULT_PROVIDER
    api_key: str = ""
    base_url: str = OPENAI_DEFAULT_BASE_URL
    organization: Optional[str] = None
    default_model: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)

    @field_validator("base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("base_url cannot be empty")
        return value

    def auth_headers(self, api_key: Optional[str] = None) -> Dict[str, str]:
        """Return authorization and content headers.

        Raises:
            ValueError: The effective API key is empty.
        """
        key = self.api_key if api_key is None else api_key
        if not key:
            raise ValueError("api_key cannot be empty")
        headers = {
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }
        if self.organization:
            headers["OpenAI-Organization"] = self.organization
        headers.update(self.headers)
        return headers

    def build_url(self, api: str) -> str:
        """Join ``api`` (e.g. ``"chat/completions"``) onto the base URL.

        Raises:
            ValueError: ``api`` is empty.
        """
        api = api.strip().lstrip("/")
        if not api:
            raise ValueError("api cannot be empty")
        return f"{self.base_url}/{api}"


def load_provider_config(env: Optional[Mapping[str, str]] = None, **overrides: Any) -> ProviderConfig:
    """Build a :class:`ProviderConfig` from ``env`` (default ``os.environ``).

    ``overrides`` win over environment values; ``None`` overrides are ignored.
    """
    data: Dict[str, Any] = {}
    for field in ENV_MAP:
        value = get_env_value(field, env)
        if value is not None:
            data[field] = value
    data.update({k: v for k, v in overrides.items() if v is not None})
    return ProviderConfig(**data)


__all__ = [
    "ProviderConfig",
    "load_provider_config",
    "is_placeholder",
]
