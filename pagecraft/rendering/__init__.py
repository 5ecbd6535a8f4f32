"""Template rendering for generated test code."""

from .helpers import (
    ACTION_METHODS,
    ASSERTION_METHODS,
    DEFAULT_HELPERS,
    comment_text,
    format_action,
    format_assertion,
    pascal_case,
    string_literal,
)
from .template_engine import GENERATOR_NAME, JinjaTemplateEngine

__all__ = [
    "JinjaTemplateEngine",
    "GENERATOR_NAME",
    "format_action",
    "format_assertion",
    "pascal_case",
    "string_literal",
    "comment_text",
    "ACTION_METHODS",
    "ASSERTION_METHODS",
    "DEFAULT_HELPERS",
]
