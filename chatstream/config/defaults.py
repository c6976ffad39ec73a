"""chatstream.config.defaults
==========================

Central place for small, stable default values. Plain constants only; no I/O
and no imports from other chatstream packages.
"""

from __future__ import annotations

# Default provider key used in errors and logs.
DEFAULT_PROVIDER = "openai"

OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"

# Path of the chat completions endpoint, relative to the base URL.
CHAT_COMPLETIONS_API = "chat/completions"

__all__ = [
    "DEFAULT_PROVIDER",
    "OPENAI_DEFAULT_BASE_URL",
    "CHAT_COMPLETIONS_API",
]
