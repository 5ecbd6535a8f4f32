"""
Exception hierarchy for pagecraft.

Decode failures from model output never surface here; the response parsers
recover from them locally. Everything a caller can observe derives from
``PageCraftError``.
"""

from __future__ import annotations


class PageCraftError(Exception):
    """Base exception for pagecraft domain errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} | Cause: {self.cause}"
        return self.message


class GenerationPipelineError(PageCraftError):
    """Base exception for extraction pipeline failures."""

    def __init__(
        self,
        message: str,
        stage: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.stage = stage

    def __str__(self) -> str:
        parts = [self.message]
        if self.stage:
            parts.append(f"Stage: {self.stage}")
        if self.cause is not None:
            parts.append(f"Cause: {self.cause}")
        return " | ".join(parts)


class MissingCompletionError(GenerationPipelineError):
    """Raised when the model returns no completion text for a stage."""


class PipelineCancelledError(GenerationPipelineError):
    """Raised when the caller's cancel signal fires during the pipeline."""


class TemplateNotFoundError(PageCraftError):
    """Raised when a template file does not exist under the templates root."""


class TemplateRenderError(PageCraftError):
    """Raised when the template layer fails to compile or execute a template."""


class TemplateConfigurationError(PageCraftError):
    """Raised when the template engine cannot be configured (helper registration)."""


class TestGenerationError(PageCraftError):
    """Catch-all for unexpected failures while generating test code."""

    __test__ = False
