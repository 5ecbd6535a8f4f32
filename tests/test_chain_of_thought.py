"""Tests for the three-stage extraction pipeline."""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from pagecraft.application.chain_of_thought import (
    ChainOfThoughtPipeline,
    ElementsExtracted,
    PipelineStage,
)
from pagecraft.domain.errors import (
    GenerationPipelineError,
    MissingCompletionError,
    PipelineCancelledError,
)
from pagecraft.domain.models import PageElement
from pagecraft.ports.chat_port import ChatCompletion
from pagecraft.ports.llm_error import LLMError


@pytest.fixture
def make_pipeline(prompt_loader):
    def _make(chat):
        return ChainOfThoughtPipeline(chat=chat, prompt_loader=prompt_loader)

    return _make


class TestPipelineStage:
    def test_prompt_names(self):
        assert PipelineStage.ELEMENTS.prompt_name == "ElementExtraction"
        assert PipelineStage.TASKS.prompt_name == "TaskExtraction"
        assert PipelineStage.STRUCTURE.prompt_name == "TestStructureGeneration"

    def test_task_context_format(self):
        extracted = ElementsExtracted("A page", [PageElement(name="a")])
        context = extracted.task_context()
        assert context.startswith("Page Description:\nA page\n\nAvailable Elements:\n")
        assert json.loads(context.split("Available Elements:\n", 1)[1])[0]["name"] == "a"


class TestProcess:
    @pytest.mark.asyncio
    async def test_happy_path(self, make_pipeline, scripted_chat, login_completions,
                              login_description):
        chat = scripted_chat(*login_completions)
        structure = await make_pipeline(chat).process(login_description)

        assert chat.call_count == 3
        assert structure.page_name == "Login Page"
        assert [e.name for e in structure.elements] == [
            "usernameInput", "passwordInput", "loginButton"
        ]
        assert [t.name for t in structure.tasks] == ["Login"]
        assert [c.name for c in structure.test_cases] == ["Login with valid credentials"]

    @pytest.mark.asyncio
    async def test_stage_messages(self, make_pipeline, scripted_chat, login_completions,
                                  login_description):
        chat = scripted_chat(*login_completions)
        await make_pipeline(chat).process(login_description)

        first, second, third = chat.calls
        assert [m.role for m in first] == ["system", "user"]
        assert first[0].content == "ElementExtraction system prompt"
        assert first[1].content == login_description

        assert second[0].content == "TaskExtraction system prompt"
        assert second[1].content.startswith(f"Page Description:\n{login_description}")
        assert "Available Elements:" in second[1].content
        assert "usernameInput" in second[1].content
        assert "Available Tasks:" not in second[1].content

        assert third[0].content == "TestStructureGeneration system prompt"
        assert "Available Elements:" in third[1].content
        assert "Available Tasks:" in third[1].content
        assert '"expectedResults"' in third[1].content

    @pytest.mark.asyncio
    async def test_stage_three_payload_cannot_override_elements_or_tasks(
        self, make_pipeline, scripted_chat, login_completions
    ):
        elements, tasks, _ = login_completions
        structure_payload = json.dumps(
            {
                "pageName": "Login",
                "elements": [{"name": "bogus"}],
                "tasks": [{"name": "bogus"}, {"name": "bogus2"}],
                "testCases": [],
            }
        )
        chat = scripted_chat(elements, tasks, structure_payload)
        structure = await make_pipeline(chat).process("page")

        assert [e.name for e in structure.elements] == [
            "usernameInput", "passwordInput", "loginButton"
        ]
        assert [t.name for t in structure.tasks] == ["Login"]

    @pytest.mark.asyncio
    async def test_malformed_elements_still_runs_later_stages(
        self, make_pipeline, scripted_chat, login_completions
    ):
        _, tasks, structure_payload = login_completions
        chat = scripted_chat("this is not json", tasks, structure_payload)
        structure = await make_pipeline(chat).process("page")

        assert chat.call_count == 3
        assert structure.elements == []
        assert "Available Elements:\n[]" in chat.calls[1][1].content
        assert [t.name for t in structure.tasks] == ["Login"]

    @pytest.mark.asyncio
    async def test_malformed_structure_keeps_elements_and_tasks(
        self, make_pipeline, scripted_chat, login_completions
    ):
        elements, tasks, _ = login_completions
        chat = scripted_chat(elements, tasks, "{broken")
        structure = await make_pipeline(chat).process("page")

        assert structure.page_name == ""
        assert structure.test_cases == []
        assert len(structure.elements) == 3
        assert len(structure.tasks) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", [None, ""])
    async def test_missing_first_completion_stops_pipeline(
        self, make_pipeline, scripted_chat, missing
    ):
        chat = scripted_chat(missing, "unused", "unused")
        with pytest.raises(MissingCompletionError) as exc_info:
            await make_pipeline(chat).process("page")

        assert chat.call_count == 1
        assert exc_info.value.stage == PipelineStage.ELEMENTS.value
        assert exc_info.value.message == "Did not receive response from AI."

    @pytest.mark.asyncio
    async def test_missing_second_completion_stops_pipeline(
        self, make_pipeline, scripted_chat, login_completions
    ):
        chat = scripted_chat(login_completions[0], None, "unused")
        with pytest.raises(MissingCompletionError) as exc_info:
            await make_pipeline(chat).process("page")

        assert chat.call_count == 2
        assert exc_info.value.stage == "tasks"

    @pytest.mark.asyncio
    async def test_missing_completion_is_not_a_decode_fallback(
        self, make_pipeline, scripted_chat, login_completions
    ):
        chat = scripted_chat(*login_completions[:2], None)
        with pytest.raises(GenerationPipelineError):
            await make_pipeline(chat).process("page")

    @pytest.mark.asyncio
    async def test_chat_errors_propagate(self, make_pipeline, scripted_chat):
        chat = scripted_chat(LLMError(message="boom", provider="openai"))
        with pytest.raises(LLMError):
            await make_pipeline(chat).process("page")

    @pytest.mark.asyncio
    async def test_works_with_async_mock_chat(self, make_pipeline, login_completions):
        chat = AsyncMock()
        chat.complete.side_effect = [ChatCompletion(text=t) for t in login_completions]

        structure = await make_pipeline(chat).process("page")

        assert chat.complete.await_count == 3
        assert structure.page_name == "Login Page"


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, make_pipeline, scripted_chat):
        chat = scripted_chat("unused")
        cancel = asyncio.Event()
        cancel.set()

        with pytest.raises(PipelineCancelledError) as exc_info:
            await make_pipeline(chat).process("page", cancel)

        assert chat.call_count == 0
        assert exc_info.value.stage == "elements"

    @pytest.mark.asyncio
    async def test_cancelled_during_chat_call(self, make_pipeline, scripted_chat):
        gate = asyncio.Event()
        chat = scripted_chat(gate, "never returned")
        cancel = asyncio.Event()

        task = asyncio.create_task(make_pipeline(chat).process("page", cancel))
        while chat.call_count == 0:
            await asyncio.sleep(0)
        cancel.set()

        with pytest.raises(PipelineCancelledError) as exc_info:
            await task
        assert exc_info.value.stage == "elements"
        assert chat.call_count == 1

    @pytest.mark.asyncio
    async def test_abandoned_chat_call_is_unwound_before_raising(self, make_pipeline):
        started = asyncio.Event()
        unwound = []

        async def complete(messages, *, cancel_event=None):
            started.set()
            try:
                await asyncio.Event().wait()
            finally:
                await asyncio.sleep(0)
                unwound.append(True)

        chat = AsyncMock()
        chat.complete.side_effect = complete
        cancel = asyncio.Event()

        task = asyncio.create_task(make_pipeline(chat).process("page", cancel))
        await started.wait()
        cancel.set()

        with pytest.raises(PipelineCancelledError):
            await task
        assert unwound == [True]

    @pytest.mark.asyncio
    async def test_adapter_refusal_is_tagged_with_stage(self, make_pipeline):
        chat = AsyncMock()
        chat.complete.side_effect = PipelineCancelledError("refused")
        cancel = asyncio.Event()

        with pytest.raises(PipelineCancelledError) as exc_info:
            await make_pipeline(chat).process("page", cancel)
        assert exc_info.value.stage == "elements"

    @pytest.mark.asyncio
    async def test_cancelled_between_stages(self, make_pipeline, login_completions):
        cancel = asyncio.Event()

        async def complete(messages, *, cancel_event=None):
            cancel.set()
            return ChatCompletion(text=login_completions[0])

        chat = AsyncMock()
        chat.complete.side_effect = complete

        with pytest.raises(PipelineCancelledError) as exc_info:
            await make_pipeline(chat).process("page", cancel)

        assert chat.complete.await_count == 1
        assert exc_info.value.stage == "tasks"

    @pytest.mark.asyncio
    async def test_unset_event_does_not_interfere(
        self, make_pipeline, scripted_chat, login_completions
    ):
        chat = scripted_chat(*login_completions)
        structure = await make_pipeline(chat).process("page", asyncio.Event())
        assert structure.page_name == "Login Page"
