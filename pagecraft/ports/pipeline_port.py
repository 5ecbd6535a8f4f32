import asyncio
from abc import abstractmethod
from typing import Protocol

from ..domain.models import TestStructure

"""Extraction pipeline port."""


class ChainOfThoughtPort(Protocol):
    """Port interface for turning a page description into a test structure."""

    @abstractmethod
    async def process(
        self, description: str, cancel_event: asyncio.Event | None = None
    ) -> TestStructure:
        """Run the extraction stages for ``description``.

        Raises:
            MissingCompletionError: If a stage receives no completion text
            PipelineCancelledError: If ``cancel_event`` is set before completion
        """
        ...
