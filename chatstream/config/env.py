"""chatstream.config.env
=====================

Environment variable names and small lookup helpers for provider settings.

Helpers never raise on unset variables; they return ``None`` and leave the
fallback decision to the caller. Nothing here reads the environment at import
time.
"""

from __future__ import annotations

import os
from typing import Dict, Mapping, Optional

# Config field -> environment variable
ENV_MAP: Dict[str, str] = {
    "api_key": "OPENAI_API_KEY",  # pragma: allowlist secret - env var name, not a secret
    "base_url": "OPENAI_BASE_URL",
    "default_model": "OPENAI_MODEL",
    "organization": "OPENAI_ORGANIZATION",
}


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the provided string looks like a placeholder value.

    Heuristics: contains 'placeholder', 'changeme', 'example', or starts with
    'test_'. The check is case-insensitive and resilient to surrounding spaces.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return (
        "placeholder" in v
        or "changeme" in v
        or "example" in v
        or v.startswith("test_")
    )


def get_env_value(field: str, env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Return the environment value for a config ``field``.

    Blank and placeholder values are treated as unset.
    """
    name = ENV_MAP.get(field)
    if name is None:
        return None
    source = os.environ if env is None else env
    value = (source.get(name) or "").strip()
    if not value or is_placeholder(value):
        return None
    return value


__all__ = [
    "ENV_MAP",
    "is_placeholder",
    "get_env_value",
]
