"""
Adapters for the pagecraft system.

This module contains the adapter implementations that provide concrete
implementations of the port interfaces defined in the ports module.
"""

from . import io, llm, prompts

__all__ = [
    "io",
    "llm",
    "prompts",
]
