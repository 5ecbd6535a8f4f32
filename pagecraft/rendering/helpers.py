"""
Formatting helpers exposed to code-generation templates.

The action and assertion helpers map a model-provided verb to a Playwright .NET
call name through a fixed table, with a default rule for anything not in the
table. The rest make free text safe to place in identifiers, strings and comments.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

ACTION_METHODS: dict[str, str] = {
    "click": "ClickAsync",
    "fill": "FillAsync",
    "check": "CheckAsync",
    "uncheck": "UncheckAsync",
    "press": "PressAsync",
    "type": "TypeAsync",
}

ASSERTION_METHODS: dict[str, str] = {
    "visible": "ToBeVisibleAsync",
    "hidden": "ToBeHiddenAsync",
    "enabled": "ToBeEnabledAsync",
    "disabled": "ToBeDisabledAsync",
    "contains": "ToContainTextAsync",
}


def _lowered(value: Any) -> str:
    return "" if value is None else str(value).lower()


def format_action(action: Any) -> str:
    """Map an action verb to its call name; unknown verbs become ``{verb}Async``."""
    verb = _lowered(action)
    return ACTION_METHODS.get(verb, f"{verb}Async")


def format_assertion(assertion: Any) -> str:
    """Map an assertion to its call name; unknown ones become ``ToBe{Assertion}Async``."""
    name = _lowered(assertion)
    return ASSERTION_METHODS.get(name, f"ToBe{name[:1].upper()}{name[1:]}Async")


_WORD_PATTERN = re.compile(r"[A-Za-z0-9]+")


def pascal_case(value: Any, fallback: str = "Generated") -> str:
    """
    Turn free text into a PascalCase identifier.

    ``"login with valid credentials"`` becomes ``LoginWithValidCredentials``.
    Identifiers that would start with a digit get a leading underscore.
    """
    words = _WORD_PATTERN.findall("" if value is None else str(value))
    identifier = "".join(word[:1].upper() + word[1:] for word in words) or fallback
    if identifier[0].isdigit():
        identifier = f"_{identifier}"
    return identifier


def string_literal(value: Any) -> str:
    """Escape text for use inside a double-quoted C# string."""
    text = "" if value is None else str(value)
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\r", "\\r")
        .replace("\n", "\\n")
    )


_LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")


def comment_text(value: Any) -> str:
    """Flatten text onto one line so it stays inside a single-line comment."""
    text = "" if value is None else str(value)
    return _LINE_BREAKS.sub(" ", text).strip()


# Names are what templates call; they match the camelCase the templates use
DEFAULT_HELPERS: dict[str, Callable[..., Any]] = {
    "formatAction": format_action,
    "formatAssertion": format_assertion,
    "pascalCase": pascal_case,
    "stringLiteral": string_literal,
    "commentText": comment_text,
}
