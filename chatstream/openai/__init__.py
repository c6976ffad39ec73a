"""
OpenAI-compatible chat client package.

Exports:
- ChatClient: streamed and buffered chat completions
- create_chat: one-shot helper
"""

from .client import ChatClient, ChatResult, create_chat

__all__ = ["ChatClient", "ChatResult", "create_chat"]
