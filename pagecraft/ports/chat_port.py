"""Chat capability port.

The extraction pipeline only needs one thing from a language model: given an
ordered conversation of role-tagged messages, return one text completion.
"""

from __future__ import annotations

import asyncio
from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

ChatRole = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """A single role-tagged message in a conversation."""

    role: ChatRole
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ChatCompletion:
    """One completion returned by the model.

    ``text`` is None when the provider returned no message content.
    """

    text: str | None
    model: str | None = None
    finish_reason: str | None = None
    usage: dict[str, Any] = field(default_factory=dict)


class ChatPort(Protocol):
    """Port interface for chat completion."""

    @abstractmethod
    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> ChatCompletion:
        """
        Complete a conversation.

        Args:
            messages: Ordered conversation, typically a system then a user message
            cancel_event: Optional signal; adapters may refuse to start when it is set

        Returns:
            The model's completion

        Raises:
            LLMError: If the provider call fails
            PipelineCancelledError: If ``cancel_event`` is already set
        """
        ...
