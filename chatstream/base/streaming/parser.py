"""Event parser: one SSE frame in, one chunk out."""
from __future__ import annotations

import json
from typing import Any, Dict, Mapping

from ..errors import MalformedFrameError
from .frames import data_value


def parse_frame(frame: str, *, index: int = 0) -> Dict[str, Any]:
    """Decode the JSON object carried by ``frame``.

    The ``data:`` field name and one optional space are stripped when present;
    a frame without them is decoded whole. The returned mapping holds exactly
    the decoded keys.

    Raises:
        MalformedFrameError: The payload is not valid JSON or not an object.
    """
    value = data_value(frame)
    payload = frame if value is None else value
    try:
        obj = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise MalformedFrameError(
            f"invalid JSON in frame {index}: {exc.msg}",
            frame=frame,
            index=index,
            raw=exc,
        ) from exc
    if not isinstance(obj, dict):
        raise MalformedFrameError(
            f"frame {index} is not a JSON object (got {type(obj).__name__})",
            frame=frame,
            index=index,
        )
    return obj


def content_text(chunk: Mapping[str, Any]) -> str:
    """Return the textual projection of a chunk.

    Concatenates every ``choices[i].delta.content`` string; ``""`` when the
    chunk carries no text (role-only or empty deltas).
    """
    choices = chunk.get("choices")
    if not isinstance(choices, list):
        return ""
    parts = []
    for choice in choices:
        if not isinstance(choice, dict):
            continue
        delta = choice.get("delta")
        if isinstance(delta, dict) and isinstance(delta.get("content"), str):
            parts.append(delta["content"])
    return "".join(parts)


__all__ = ["parse_frame", "content_text"]
