"""API key and endpoint lookup for the chat model."""

import logging
import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, SecretStr

logger = logging.getLogger(__name__)

# Ollama ignores the key, but AsyncOpenAI will not start without one
LOCAL_PLACEHOLDER_API_KEY = "ollama"

SUPPORTED_PROVIDERS = frozenset({"openai", "ollama"})


class CredentialError(Exception):
    """Raised when credentials cannot be resolved for a provider."""


class LLMCredentials(BaseModel):
    """Resolved chat endpoint credentials; the key never appears in repr."""

    openai_api_key: SecretStr | None = None
    openai_base_url: str | None = None

    def get_openai_api_key(self) -> str | None:
        if self.openai_api_key is None:
            return None
        return self.openai_api_key.get_secret_value()


class CredentialManager:
    """
    Looks up the chat endpoint's API key and base URL.

    Each field is taken from the first non-blank variable in its lookup list,
    so ``PAGECRAFT_OPENAI_API_KEY`` beats ``OPENAI_API_KEY``. Values passed in
    ``config_overrides`` are used only when the environment has none.
    """

    LOOKUP = {
        "openai_api_key": ("PAGECRAFT_OPENAI_API_KEY", "OPENAI_API_KEY"),
        "openai_base_url": ("PAGECRAFT_OPENAI_BASE_URL", "OPENAI_BASE_URL"),
    }

    def __init__(self, config_overrides: Mapping[str, Any] | None = None) -> None:
        self.config_overrides = dict(config_overrides or {})
        self._credentials: LLMCredentials | None = None

    def load_credentials(self, reload: bool = False) -> LLMCredentials:
        """Resolve credentials once and reuse them until ``reload`` or ``clear_cache``."""
        if self._credentials is None or reload:
            values = {field: self._resolve(field, names) for field, names in self.LOOKUP.items()}
            self._credentials = LLMCredentials.model_validate(values)
            if self._credentials.openai_api_key is None:
                logger.debug("No API key in the environment, using the local placeholder")
        return self._credentials

    def _resolve(self, field: str, env_names: tuple[str, ...]) -> str | None:
        for name in env_names:
            value = os.environ.get(name, "").strip()
            if value:
                return value
        fallback = self.config_overrides.get(field)
        return (str(fallback).strip() or None) if fallback else None

    def get_provider_credentials(self, provider: str) -> dict[str, Any]:
        """
        Return ``{"api_key": ..., "base_url": ...}`` for ``provider``.

        Raises:
            CredentialError: If the provider is not an OpenAI-compatible one
        """
        if provider not in SUPPORTED_PROVIDERS:
            raise CredentialError(f"Unknown provider: {provider}")
        credentials = self.load_credentials()
        return {
            "api_key": credentials.get_openai_api_key() or LOCAL_PLACEHOLDER_API_KEY,
            "base_url": credentials.openai_base_url,
        }

    def clear_cache(self) -> None:
        self._credentials = None
