"""
Per-stage decoders for model completions.

Each decoder turns raw completion text into typed domain objects. Malformed
JSON and payloads of the wrong shape never raise: element and task decoding
fall back to an empty list, structure decoding falls back to a structure
holding only the already-known elements and tasks. Unknown fields are ignored.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import Field, ValidationError

from ..adapters.llm.common import parse_json_response
from ..domain.models import DomainModel, PageElement, TestStructure, UserTask

logger = logging.getLogger(__name__)


class ElementsResponse(DomainModel):
    """Stage-1 payload: ``{"elements": [...]}``."""

    elements: list[PageElement] = Field(default_factory=list)


class TasksResponse(DomainModel):
    """Stage-2 payload: ``{"tasks": [...]}``."""

    tasks: list[UserTask] = Field(default_factory=list)


def _decode_object(content: str | None, what: str) -> dict[str, Any] | None:
    parsed = parse_json_response(content)
    if not parsed.success:
        logger.warning("Could not decode %s response as JSON: %s", what, parsed.error)
        return None
    if not isinstance(parsed.data, dict):
        logger.warning(
            "Unexpected %s response shape: expected an object, got %s",
            what,
            type(parsed.data).__name__,
        )
        return None
    return parsed.data


def parse_elements_response(content: str | None) -> list[PageElement]:
    """Decode a stage-1 completion into page elements (empty on failure)."""
    data = _decode_object(content, "element extraction")
    if data is None:
        return []
    try:
        return ElementsResponse.model_validate(data).elements
    except ValidationError as e:
        logger.warning("Element extraction response failed validation: %s", e)
        return []


def parse_tasks_response(content: str | None) -> list[UserTask]:
    """Decode a stage-2 completion into user tasks (empty on failure)."""
    data = _decode_object(content, "task extraction")
    if data is None:
        return []
    try:
        return TasksResponse.model_validate(data).tasks
    except ValidationError as e:
        logger.warning("Task extraction response failed validation: %s", e)
        return []


_CARRIED_KEYS = frozenset({"elements", "tasks"})


def _without_carried_lists(data: dict[str, Any]) -> dict[str, Any]:
    # Matched the way DomainModel.normalize_keys matches field names
    return {
        key: value
        for key, value in data.items()
        if str(key).replace("_", "").lower() not in _CARRIED_KEYS
    }


def parse_test_structure_response(
    content: str | None,
    elements: list[PageElement],
    tasks: list[UserTask],
) -> TestStructure:
    """
    Decode a stage-3 completion into a test structure.

    Whatever the payload says about elements and tasks is dropped before
    validation, so a malformed list there cannot discard the page name or test
    cases; the result always carries the ``elements`` and ``tasks`` given here.
    When decoding fails the result carries only those, with an empty page name
    and no test cases.
    """
    data = _decode_object(content, "test structure")
    if data is not None:
        try:
            return TestStructure.model_validate(
                {
                    **_without_carried_lists(data),
                    "elements": list(elements),
                    "tasks": list(tasks),
                }
            )
        except ValidationError as e:
            logger.warning("Test structure response failed validation: %s", e)
    return TestStructure(elements=list(elements), tasks=list(tasks))
