"""
Port interfaces for the pagecraft system.

This module contains the interface definitions, written as Python Protocols,
that define the contracts between the application layer and adapters.
"""

from .chat_port import ChatCompletion, ChatMessage, ChatPort
from .llm_error import LLMError
from .pipeline_port import ChainOfThoughtPort
from .prompt_port import PromptPort
from .template_port import TemplatePort

__all__ = [
    "ChatPort",
    "ChatMessage",
    "ChatCompletion",
    "LLMError",
    "ChainOfThoughtPort",
    "PromptPort",
    "TemplatePort",
]
