from .common import (ParsedResponse, normalize_output, parse_json_response,
                     strip_code_fences, try_parse_json)
from .openai import OpenAIChatAdapter

__all__ = [
    "strip_code_fences",
    "try_parse_json",
    "ParsedResponse",
    "normalize_output",
    "parse_json_response",
    "OpenAIChatAdapter",
]
