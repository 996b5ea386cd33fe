"""
Turning raw LLM text into validated objects.

The error strings produced here are fed back to the model by the Fix step, so
they name the offending field path and echo the value that was received.
"""
from __future__ import annotations
import json
import re
from typing import Any, Optional, Tuple
from pydantic import TypeAdapter, ValidationError

NO_RAW_OUTPUT = "No raw JSON string to validate."

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?|\n?```\s*$")


def clean_json_string(raw: str) -> str:
    """Strip markdown code fences and surrounding whitespace."""
    return _FENCE_RE.sub("", raw.strip()).strip()


def _field_path(loc: Tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc) or "<root>"


def _received(error: dict) -> str:
    if error.get("type") == "missing":
        return "<missing>"
    return json.dumps(error.get("input"), ensure_ascii=False, default=str)


def format_validation_error(error: Exception) -> str:
    if isinstance(error, ValidationError):
        issues = [
            f"Validation Error for field '{_field_path(e['loc'])}': {e['msg']}. Received: {_received(e)}"
            for e in error.errors()
        ]
        return "Schema Validation Failed:\n- " + "\n- ".join(issues)
    if isinstance(error, json.JSONDecodeError):
        return f"JSON Parsing Failed: {error}. The JSON is malformed."
    return f"An unknown error occurred: {error}"


def validate_and_parse(raw: Optional[str], schema: TypeAdapter) -> Tuple[Optional[Any], Optional[str]]:
    """Parse ``raw`` as JSON and validate it. Returns ``(data, None)`` or ``(None, error)``."""
    if not raw:
        return None, NO_RAW_OUTPUT
    try:
        cleaned = clean_json_string(raw)
        json.loads(cleaned)
        # JSON mode: nested objects stay valid input for strict models
        return schema.validate_json(cleaned), None
    except (json.JSONDecodeError, ValidationError) as e:
        return None, format_validation_error(e)
