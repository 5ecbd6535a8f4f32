"""
Chain-of-thought extraction pipeline.

Turns a free-text page description into a ``TestStructure`` through three
dependent chat calls:

1. ELEMENTS: extract the page's UI elements.
2. TASKS: extract user workflows, given the elements.
3. STRUCTURE: generate test cases, given the elements and tasks.

Each stage hands a typed result to the next. Decode failures degrade to empty
or partial results (see ``parsers``); a missing completion aborts the run.
The stage-3 structure always carries the stage-1 elements and stage-2 tasks,
whatever the model put in its payload.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from enum import Enum

from ..domain.errors import MissingCompletionError, PipelineCancelledError
from ..domain.models import PageElement, TestStructure, UserTask
from ..ports.chat_port import ChatCompletion, ChatMessage, ChatPort
from ..ports.pipeline_port import ChainOfThoughtPort
from ..ports.prompt_port import PromptPort
from .parsers import (
    parse_elements_response,
    parse_tasks_response,
    parse_test_structure_response,
)

logger = logging.getLogger(__name__)

MISSING_COMPLETION_MESSAGE = "Did not receive response from AI."


class PipelineStage(str, Enum):
    """Named stages of the extraction pipeline, in execution order."""

    ELEMENTS = "elements"
    TASKS = "tasks"
    STRUCTURE = "structure"

    @property
    def prompt_name(self) -> str:
        return _STAGE_PROMPTS[self]


_STAGE_PROMPTS = {
    PipelineStage.ELEMENTS: "ElementExtraction",
    PipelineStage.TASKS: "TaskExtraction",
    PipelineStage.STRUCTURE: "TestStructureGeneration",
}


def serialize_elements(elements: list[PageElement]) -> str:
    return json.dumps([e.to_wire() for e in elements], indent=2, ensure_ascii=False)


def serialize_tasks(tasks: list[UserTask]) -> str:
    return json.dumps([t.to_wire() for t in tasks], indent=2, ensure_ascii=False)


@dataclass(frozen=True)
class ElementsExtracted:
    """Output of the ELEMENTS stage."""

    description: str
    elements: list[PageElement]

    def task_context(self) -> str:
        return (
            f"Page Description:\n{self.description}\n\n"
            f"Available Elements:\n{serialize_elements(self.elements)}"
        )

    def with_tasks(self, tasks: list[UserTask]) -> TasksExtracted:
        return TasksExtracted(self.description, self.elements, tasks)


@dataclass(frozen=True)
class TasksExtracted:
    """Output of the TASKS stage."""

    description: str
    elements: list[PageElement]
    tasks: list[UserTask]

    def structure_context(self) -> str:
        return (
            f"Page Description:\n{self.description}\n\n"
            f"Available Elements:\n{serialize_elements(self.elements)}\n\n"
            f"Available Tasks:\n{serialize_tasks(self.tasks)}"
        )

    def finish(self, completion_text: str) -> TestStructure:
        """Decode the stage-3 completion, keeping this stage's elements and tasks."""
        return parse_test_structure_response(completion_text, self.elements, self.tasks)


class ChainOfThoughtPipeline(ChainOfThoughtPort):
    """
    Drives a chat model through the three extraction stages.

    Stages run strictly in sequence. A single ``asyncio.Event`` passed to
    ``process`` is checked at every stage boundary and raced against the
    outstanding chat call; once set, the run stops with
    ``PipelineCancelledError``. No retries are attempted.
    """

    def __init__(self, chat: ChatPort, prompt_loader: PromptPort) -> None:
        """
        Initialize the pipeline.

        Args:
            chat: Chat capability used for every stage
            prompt_loader: Source of the per-stage system prompts
        """
        self._chat = chat
        self._prompts = prompt_loader

    async def process(
        self, description: str, cancel_event: asyncio.Event | None = None
    ) -> TestStructure:
        logger.info("Starting extraction pipeline")

        extracted = await self.extract_elements(description, cancel_event)
        with_tasks = await self.extract_tasks(extracted, cancel_event)
        structure = await self.generate_structure(with_tasks, cancel_event)

        logger.info(
            "Extraction pipeline finished for page %r: %d elements, %d tasks, %d test cases",
            structure.page_name,
            len(structure.elements),
            len(structure.tasks),
            len(structure.test_cases),
        )
        return structure

    async def extract_elements(
        self, description: str, cancel_event: asyncio.Event | None = None
    ) -> ElementsExtracted:
        """Run the ELEMENTS stage."""
        text = await self._run_stage(PipelineStage.ELEMENTS, description, cancel_event)
        elements = parse_elements_response(text)
        logger.info("Extracted %d page elements", len(elements))
        return ElementsExtracted(description, elements)

    async def extract_tasks(
        self, extracted: ElementsExtracted, cancel_event: asyncio.Event | None = None
    ) -> TasksExtracted:
        """Run the TASKS stage using the extracted elements as context."""
        text = await self._run_stage(
            PipelineStage.TASKS, extracted.task_context(), cancel_event
        )
        tasks = parse_tasks_response(text)
        logger.info("Extracted %d user tasks", len(tasks))
        return extracted.with_tasks(tasks)

    async def generate_structure(
        self, extracted: TasksExtracted, cancel_event: asyncio.Event | None = None
    ) -> TestStructure:
        """Run the STRUCTURE stage using elements and tasks as context."""
        text = await self._run_stage(
            PipelineStage.STRUCTURE, extracted.structure_context(), cancel_event
        )
        return extracted.finish(text)

    async def _run_stage(
        self,
        stage: PipelineStage,
        user_content: str,
        cancel_event: asyncio.Event | None,
    ) -> str:
        self._raise_if_cancelled(stage, cancel_event)
        logger.debug("Running %s stage", stage.value)

        messages = [
            ChatMessage(role="system", content=self._prompts.load_prompt(stage.prompt_name)),
            ChatMessage(role="user", content=user_content),
        ]

        if cancel_event is None:
            completion = await self._chat.complete(messages)
        else:
            completion = await self._until_cancelled(
                stage,
                self._chat.complete(messages, cancel_event=cancel_event),
                cancel_event,
            )

        text = completion.text if completion is not None else None
        if not text:
            logger.error("No completion text received in %s stage", stage.value)
            raise MissingCompletionError(MISSING_COMPLETION_MESSAGE, stage=stage.value)
        return text

    @staticmethod
    def _raise_if_cancelled(
        stage: PipelineStage, cancel_event: asyncio.Event | None
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.info("Extraction pipeline cancelled before %s stage", stage.value)
            raise PipelineCancelledError("Extraction pipeline cancelled", stage=stage.value)

    @staticmethod
    async def _until_cancelled(
        stage: PipelineStage,
        call: Awaitable[ChatCompletion],
        cancel_event: asyncio.Event,
    ) -> ChatCompletion:
        call_task = asyncio.ensure_future(call)
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {call_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            pending = [task for task in (call_task, cancel_task) if not task.done()]
            for task in pending:
                task.cancel()
            # Let an abandoned request finish unwinding before reporting
            await asyncio.gather(*pending, return_exceptions=True)

        if call_task in done:
            try:
                return call_task.result()
            except PipelineCancelledError as e:
                e.stage = e.stage or stage.value
                raise

        logger.info("Extraction pipeline cancelled during %s stage", stage.value)
        raise PipelineCancelledError("Extraction pipeline cancelled", stage=stage.value)
