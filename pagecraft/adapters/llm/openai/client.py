"""Thin wrapper around ``AsyncOpenAI`` used by the chat adapter."""

from __future__ import annotations

import logging
from typing import Any

import openai
from openai import AsyncOpenAI

from ....config.credentials import CredentialManager

logger = logging.getLogger(__name__)


class OpenAIError(Exception):
    """An SDK failure, with the HTTP status when the server sent one."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OpenAIClient:
    """
    Owns one ``AsyncOpenAI`` instance bound to a model.

    The SDK client is built lazily from ``CredentialManager`` unless one is
    injected. An explicit ``base_url`` takes precedence over the one found in
    the environment; with neither, requests go to api.openai.com.
    """

    def __init__(
        self,
        model: str,
        timeout: float = 180.0,
        max_retries: int = 3,
        base_url: str | None = None,
        credential_manager: CredentialManager | None = None,
        client: AsyncOpenAI | None = None,
        **client_options: Any,
    ):
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_url = base_url
        self.credential_manager = credential_manager or CredentialManager()
        self._client_options = client_options
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = self._build_client()
        return self._client

    def _build_client(self) -> AsyncOpenAI:
        credentials = self.credential_manager.get_provider_credentials("openai")
        base_url = self.base_url or credentials["base_url"]
        logger.info("Using model %s at %s", self.model, base_url or "api.openai.com")
        return AsyncOpenAI(
            api_key=credentials["api_key"],
            base_url=base_url,
            timeout=self.timeout,
            max_retries=self.max_retries,
            **self._client_options,
        )

    async def chat_completion(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        temperature: float | None = None,
        **extra: Any,
    ) -> Any:
        """Create a chat completion; unset sampling options are left to the server."""
        optional = {"max_tokens": max_tokens, "temperature": temperature}
        request = {
            "model": self.model,
            "messages": messages,
            **{key: value for key, value in optional.items() if value is not None},
            **extra,
        }
        try:
            return await self.client.chat.completions.create(**request)
        except openai.APIError as e:
            status = getattr(e, "status_code", None)
            logger.error("Chat request to %s failed (status=%s): %s", self.model, status, e)
            raise OpenAIError(str(e), status_code=status) from e

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
