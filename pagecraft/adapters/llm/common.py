"""Shared helpers for turning raw model text into JSON."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

_FENCE_RE = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*\n(?P<body>.*?)\n?\s*```\s*$", re.DOTALL)

_SMART_QUOTES = {
    "“": '"',
    "”": '"',
    "‘": "'",
    "’": "'",
}


@dataclass(frozen=True)
class ParsedResponse:
    success: bool
    data: Any = None
    error: str | None = None


def strip_code_fences(text: str) -> str:
    """Remove a single surrounding markdown code fence, if present."""
    match = _FENCE_RE.match(text)
    if match:
        return match.group("body").strip()
    return text.strip()


def normalize_output(text: str) -> str:
    """Replace typographic quotes some models emit around JSON keys."""
    for smart, plain in _SMART_QUOTES.items():
        text = text.replace(smart, plain)
    return text


def try_parse_json(text: str) -> tuple[Any, str | None]:
    """Parse ``text`` as JSON, returning ``(data, error)``."""
    try:
        return json.loads(text), None
    except (json.JSONDecodeError, TypeError) as e:
        return None, str(e)


def parse_json_response(text: str | None) -> ParsedResponse:
    """
    Decode a model completion as JSON.

    Only a surrounding code fence and typographic quotes are tolerated; text
    that is still not valid JSON after that is reported as a failure.
    """
    if text is None or not text.strip():
        return ParsedResponse(success=False, error="empty response")

    cleaned = strip_code_fences(text)
    data, error = try_parse_json(cleaned)
    if error is not None:
        # Retry once with typographic quotes replaced
        normalized = normalize_output(cleaned)
        if normalized == cleaned:
            return ParsedResponse(success=False, error=error)
        data, retry_error = try_parse_json(normalized)
        if retry_error is not None:
            return ParsedResponse(success=False, error=error)
    return ParsedResponse(success=True, data=data)
