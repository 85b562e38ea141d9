"""Utilities for reading and writing Server-Sent Events (SSE)."""

import json
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


def format_sse_chunk(data: Dict[str, Any], event: Optional[str] = None) -> str:
    """Format a data chunk as Server-Sent Events (SSE) format.

    Args:
        data: The data to send as a JSON object
        event: Optional event type

    Returns:
        SSE-formatted string
    """
    lines = []

    if event:
        lines.append(f"event: {event}")

    json_str = json.dumps(data, separators=(",", ":"))
    lines.append(f"data: {json_str}")

    # SSE requires double newline after data
    return "\n".join(lines) + "\n\n"


def parse_sse_data_line(line: str) -> Optional[str]:
    """Return the payload of a `data:` line, or None for any other line.

    Comment/keep-alive lines (starting with ':'), `event:`/`id:` fields and
    blank separators carry no data and yield None.
    """
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX) :]
    # A single space after the colon is part of the framing, not the payload
    if payload.startswith(" "):
        payload = payload[1:]
    return payload.rstrip("\r")


def is_done_sentinel(payload: str) -> bool:
    return payload.strip() == DONE_SENTINEL


def extract_delta_content(envelope: Any) -> Optional[str]:
    """Pull `choices[0].delta.content` out of a streaming chat-completion chunk.

    Returns None when any step of the path is missing or has the wrong type
    (role-only first chunks, finish chunks, usage chunks).
    """
    if not isinstance(envelope, dict):
        return None
    choices = envelope.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    return content if isinstance(content, str) else None
