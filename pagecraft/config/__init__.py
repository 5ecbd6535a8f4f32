"""Configuration management for pagecraft."""

from .credentials import CredentialError, CredentialManager, LLMCredentials
from .loader import ConfigLoader, ConfigurationError, load_config
from .models import (
    LLMProviderConfig,
    LoggingConfig,
    PageCraftConfig,
    PromptConfig,
    TemplateConfig,
)

__all__ = [
    "PageCraftConfig",
    "LLMProviderConfig",
    "PromptConfig",
    "TemplateConfig",
    "LoggingConfig",
    "ConfigLoader",
    "ConfigurationError",
    "load_config",
    "CredentialManager",
    "LLMCredentials",
    "CredentialError",
]
