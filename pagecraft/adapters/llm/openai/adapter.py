"""OpenAI chat adapter implementing the ChatPort."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from ....config.credentials import CredentialManager
from ....domain.errors import PipelineCancelledError
from ....ports.chat_port import ChatCompletion, ChatMessage, ChatPort
from ....ports.llm_error import LLMError
from .client import OpenAIClient, OpenAIError

logger = logging.getLogger(__name__)


class OpenAIChatAdapter(ChatPort):
    """
    Chat adapter over the OpenAI chat completions API.

    Defaults target a local Ollama server through its OpenAI-compatible
    endpoint with deterministic sampling, matching how page descriptions are
    usually processed. Point ``base_url`` at any other compatible service.
    """

    def __init__(
        self,
        model: str = "llama3.1",
        base_url: str | None = "http://localhost:11434/v1",
        timeout: float = 180.0,
        max_tokens: int | None = None,
        temperature: float = 0.0,
        max_retries: int = 3,
        provider: str = "openai",
        credential_manager: CredentialManager | None = None,
        client: OpenAIClient | None = None,
        **kwargs: Any,
    ):
        """Initialize the chat adapter.

        Args:
            model: Model name served by the endpoint
            base_url: OpenAI-compatible API base URL (None for api.openai.com)
            timeout: Request timeout in seconds
            max_tokens: Maximum completion tokens (provider default if None)
            temperature: Sampling temperature
            max_retries: SDK-level transport retries
            provider: Provider key reported in errors and logs
            credential_manager: Custom credential manager (optional)
            client: Pre-built OpenAIClient (optional, mainly for tests)
            **kwargs: Additional AsyncOpenAI client parameters
        """
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.provider = provider
        self._openai_client = client or OpenAIClient(
            model=model,
            timeout=timeout,
            max_retries=max_retries,
            base_url=base_url,
            credential_manager=credential_manager,
            **kwargs,
        )

    async def complete(
        self,
        messages: list[ChatMessage],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> ChatCompletion:
        """Send the conversation and return the first choice's text."""
        if cancel_event is not None and cancel_event.is_set():
            raise PipelineCancelledError("Chat request cancelled before it was sent")

        started = time.perf_counter()
        try:
            response = await self._openai_client.chat_completion(
                [message.to_dict() for message in messages],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except OpenAIError as e:
            raise LLMError(
                message=f"Chat completion failed: {e}",
                provider=self.provider,
                operation="chat_completion",
                model=self.model,
                status_code=e.status_code,
            ) from e

        elapsed = time.perf_counter() - started
        completion = self._to_completion(response)
        logger.debug(
            "Chat completion from %s in %.2fs (tokens=%s, finish_reason=%s)",
            completion.model or self.model,
            elapsed,
            completion.usage.get("total_tokens"),
            completion.finish_reason,
        )
        return completion

    def _to_completion(self, response: Any) -> ChatCompletion:
        choices = getattr(response, "choices", None) or []
        text: str | None = None
        finish_reason: str | None = None
        if choices:
            message = getattr(choices[0], "message", None)
            text = getattr(message, "content", None) if message is not None else None
            finish_reason = getattr(choices[0], "finish_reason", None)

        usage: dict[str, Any] = {}
        raw_usage = getattr(response, "usage", None)
        if raw_usage is not None:
            usage = {
                "prompt_tokens": getattr(raw_usage, "prompt_tokens", None),
                "completion_tokens": getattr(raw_usage, "completion_tokens", None),
                "total_tokens": getattr(raw_usage, "total_tokens", None),
            }

        return ChatCompletion(
            text=text,
            model=getattr(response, "model", None),
            finish_reason=finish_reason,
            usage=usage,
        )

    async def aclose(self) -> None:
        """Release the underlying HTTP client."""
        await self._openai_client.close()
