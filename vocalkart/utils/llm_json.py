# vocalkart/utils/llm_json.py
"""
Pull a JSON payload out of free-form generated text.

The generator may wrap the payload in prose or ``` fences; we take the span
from the first opening bracket to the last closing one and parse it.
"""
from __future__ import annotations
from typing import Any, Dict, List
import json
import re

from vocalkart.core.errors import MalformedLLMOutputError

_ARRAY_RE = re.compile(r"\[[\s\S]*\]")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_INT_RE = re.compile(r"\d+")


def extract_json_array(text: str) -> List[Any]:
    """Raises MalformedLLMOutputError when no parseable array is present."""
    match = _ARRAY_RE.search(text or "")
    if not match:
        raise MalformedLLMOutputError("No JSON array found in generated text")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise MalformedLLMOutputError(f"Invalid JSON array in generated text: {e}") from e
    if not isinstance(parsed, list):
        raise MalformedLLMOutputError("Generated JSON is not an array")
    return parsed


def extract_json_object(text: str) -> Dict[str, Any]:
    """Raises MalformedLLMOutputError when no parseable object is present."""
    match = _OBJECT_RE.search(text or "")
    if not match:
        raise MalformedLLMOutputError("No JSON object found in generated text")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise MalformedLLMOutputError(f"Invalid JSON object in generated text: {e}") from e
    if not isinstance(parsed, dict):
        raise MalformedLLMOutputError("Generated JSON is not an object")
    return parsed


def first_int(text: str) -> int | None:
    match = _INT_RE.search(text or "")
    return int(match.group(0)) if match else None


def json_preview(obj: Any, limit: int = 1000) -> str:
    """Minify and truncate JSON for debug logs."""
    try:
        s = json.dumps(obj, separators=(",", ":"), ensure_ascii=False, default=str)
        return s if len(s) <= limit else s[:limit] + "…[truncated]"
    except (TypeError, ValueError):
        return "<unserializable>"
