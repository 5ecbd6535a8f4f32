from abc import abstractmethod
from typing import Protocol

"""Prompt loading port."""


class PromptPort(Protocol):
    """Port interface for resolving named system prompts."""

    @abstractmethod
    def load_prompt(self, name: str) -> str:
        """Return the text of the prompt called ``name``.

        Raises:
            PromptNotFoundError: If no prompt resource exists for ``name``
        """
        ...
