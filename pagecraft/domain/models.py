"""
Domain models for the pagecraft system.

This module contains the core domain models using Pydantic for validation
and serialization. They describe the page under test (elements), the user
workflows it supports (tasks) and the test structure assembled from both.

Models read the camelCase keys the extraction prompts ask the model to emit
(``elementName``, ``expectedResults``, ``pageName``, ``testCases``) and also
accept their snake_case field names. Unknown keys are ignored so newer model
output keeps decoding.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class DomainModel(BaseModel):
    """Base model with the shared wire conventions."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def normalize_keys(cls, data: Any) -> Any:
        """Match keys case-insensitively and let nulls fall back to defaults."""
        if not isinstance(data, dict):
            return data
        known = {
            field_name.replace("_", "").lower(): field_name
            for field_name in cls.model_fields
        }
        normalized: dict[str, Any] = {}
        for key, value in data.items():
            if value is None:
                continue
            target = known.get(str(key).replace("_", "").lower(), key)
            normalized[target] = value
        return normalized

    def to_wire(self) -> dict:
        """Serialize using the camelCase wire names."""
        return self.model_dump(by_alias=True, mode="json")


def _stringify_mapping(value: object) -> object:
    # Models occasionally emit numbers or booleans as parameter values
    if isinstance(value, dict):
        return {
            str(k): v if isinstance(v, str) else ("" if v is None else str(v))
            for k, v in value.items()
        }
    if value is None:
        return {}
    return value


class PageElement(DomainModel):
    """
    A named, typed UI element on the page.

    ``name`` is the key later stages use to reference the element. Uniqueness
    is expected but not enforced.
    """

    name: str = Field(default="", description="Identifier used to reference the element")
    selector: str = Field(default="", description="Locator for the element (id, css, xpath)")
    type: str = Field(default="", description="Kind of element (button, input, label...)")
    description: str = Field(default="", description="Free-text description")
    properties: dict[str, str] = Field(
        default_factory=dict, description="Extra string properties"
    )

    @field_validator("properties", mode="before")
    @classmethod
    def normalize_properties(cls, v: object) -> object:
        """Coerce property values to strings."""
        return _stringify_mapping(v)


class TaskStep(DomainModel):
    """
    One action in a workflow.

    ``element_name`` is not checked against the extracted elements; unresolved
    references pass through to the template layer untouched.
    """

    description: str = Field(default="(N/A)", description="What the step does")
    element_name: str | None = Field(default=None, description="PageElement.name this step targets")
    action: str | None = Field(default=None, description="Action verb, interpreted by templates")
    parameters: dict[str, str] = Field(default_factory=dict, description="Action parameters")

    @field_validator("parameters", mode="before")
    @classmethod
    def normalize_parameters(cls, v: object) -> object:
        """Coerce parameter values to strings."""
        return _stringify_mapping(v)


class UserTask(DomainModel):
    """A named user workflow made of ordered steps."""

    name: str = Field(default="", description="Task name")
    description: str = Field(default="", description="Task description")
    steps: list[TaskStep] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    expected_results: list[str] = Field(default_factory=list)


class TestCase(DomainModel):
    """A named test case with setup, steps, assertions and cleanup."""

    __test__ = False  # not a pytest test class

    name: str = Field(default="", description="Test case name")
    description: str = Field(default="", description="Test case description")
    tags: list[str] = Field(default_factory=list)
    setup: list[TaskStep] = Field(default_factory=list)
    steps: list[TaskStep] = Field(default_factory=list)
    assertions: list[TaskStep] = Field(default_factory=list)
    cleanup: list[TaskStep] = Field(default_factory=list)


class TestStructure(DomainModel):
    """
    Aggregate produced by the extraction pipeline.

    This is the only artifact handed from the pipeline to the template engine.
    """

    __test__ = False

    page_name: str = Field(default="", description="Name of the page under test")
    elements: list[PageElement] = Field(default_factory=list)
    tasks: list[UserTask] = Field(default_factory=list)
    test_cases: list[TestCase] = Field(default_factory=list)


class TemplateOptions(DomainModel):
    """Per-render options for the template engine."""

    ns: str | None = Field(default=None, description="Target namespace; engine default when unset")
    base_url: str | None = Field(default=None, description="Base URL; engine default when unset")
    template_path: str = Field(..., description="Template identifier relative to the templates root")
    include_comments: bool = Field(
        default=True, description="Emit descriptions as comments in the generated code"
    )

    @field_validator("template_path")
    @classmethod
    def validate_template_path(cls, v: str) -> str:
        """Reject blank template identifiers."""
        if not v or not v.strip():
            raise ValueError("template_path must not be empty")
        return v


class GenerationOptions(DomainModel):
    """Options for a full generate-and-render request."""

    include_comments: bool = True
    output_path: str | None = None
    ns: str | None = None
    base_url: str | None = None
    template_path: str = "CSTest.cs.j2"

    def template_options(self) -> TemplateOptions:
        """Return the subset of options the template engine consumes."""
        return TemplateOptions(
            ns=self.ns,
            base_url=self.base_url,
            template_path=self.template_path,
            include_comments=self.include_comments,
        )


class GenerationRequest(DomainModel):
    """A page description plus extra context and generation options."""

    page_description: str = Field(..., description="Free-text description of the page")
    additional_context: dict[str, str] = Field(default_factory=dict)
    options: GenerationOptions = Field(default_factory=GenerationOptions)

    @field_validator("additional_context", mode="before")
    @classmethod
    def normalize_context(cls, v: object) -> object:
        """Coerce context values to strings."""
        return _stringify_mapping(v)
