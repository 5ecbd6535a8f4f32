"""Domain models and errors for pagecraft."""

from .errors import (
    GenerationPipelineError,
    MissingCompletionError,
    PageCraftError,
    PipelineCancelledError,
    TemplateConfigurationError,
    TemplateNotFoundError,
    TemplateRenderError,
    TestGenerationError,
)
from .models import (
    GenerationOptions,
    GenerationRequest,
    PageElement,
    TaskStep,
    TemplateOptions,
    TestCase,
    TestStructure,
    UserTask,
)

__all__ = [
    "PageElement",
    "TaskStep",
    "UserTask",
    "TestCase",
    "TestStructure",
    "TemplateOptions",
    "GenerationOptions",
    "GenerationRequest",
    "PageCraftError",
    "GenerationPipelineError",
    "MissingCompletionError",
    "PipelineCancelledError",
    "TemplateNotFoundError",
    "TemplateRenderError",
    "TemplateConfigurationError",
    "TestGenerationError",
]
