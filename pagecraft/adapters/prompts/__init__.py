"""Prompt loading adapters."""

from .file_loader import DEFAULT_PROMPTS_PATH, FilePromptLoader, PromptNotFoundError

__all__ = ["FilePromptLoader", "PromptNotFoundError", "DEFAULT_PROMPTS_PATH"]
