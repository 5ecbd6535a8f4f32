"""File-backed prompt loader.

Prompts live as ``{name}.md`` files under a root directory. The packaged
``pagecraft/prompts`` directory is used when no root is configured.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ...ports.prompt_port import PromptPort

logger = logging.getLogger(__name__)

DEFAULT_PROMPTS_PATH = Path(__file__).resolve().parents[2] / "prompts"


class PromptNotFoundError(FileNotFoundError):
    """Raised when a named prompt has no backing file."""


class FilePromptLoader(PromptPort):
    """
    Load prompts from markdown files and memoize them by name.

    The first successful load of a name is kept for the loader's lifetime.
    Failed loads are not cached, so a prompt file that appears later is picked
    up on the next call.
    """

    SUFFIX = ".md"

    def __init__(self, prompts_path: str | Path | None = None) -> None:
        self.prompts_path = Path(prompts_path) if prompts_path else DEFAULT_PROMPTS_PATH
        self._cache: dict[str, str] = {}

    def load_prompt(self, name: str) -> str:
        cached = self._cache.get(name)
        if cached is not None:
            return cached

        path = self.prompts_path / f"{name}{self.SUFFIX}"
        if not path.is_file():
            logger.error("Prompt file not found: %s", path)
            raise PromptNotFoundError(f"Prompt file not found: {path}")

        content = path.read_text(encoding="utf-8")
        self._cache[name] = content
        logger.debug("Loaded prompt %s from %s", name, path)
        return content

    def clear_cache(self) -> None:
        """Drop all memoized prompts."""
        self._cache.clear()
