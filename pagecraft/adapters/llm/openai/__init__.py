"""OpenAI-compatible chat adapter."""

from .adapter import OpenAIChatAdapter
from .client import OpenAIClient, OpenAIError

__all__ = ["OpenAIChatAdapter", "OpenAIClient", "OpenAIError"]
