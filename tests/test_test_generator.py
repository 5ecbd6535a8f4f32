"""End-to-end tests for the test generator facade."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from pagecraft.adapters.io.writer import TestFileWriter
from pagecraft.application.chain_of_thought import ChainOfThoughtPipeline
from pagecraft.application.test_generator import TestGenerator, build_description
from pagecraft.config.models import TemplateConfig
from pagecraft.domain.errors import MissingCompletionError, TemplateNotFoundError
from pagecraft.domain.models import GenerationOptions, GenerationRequest, TestStructure
from pagecraft.rendering import JinjaTemplateEngine


@pytest.fixture
def engine():
    return JinjaTemplateEngine(
        TemplateConfig(
            default_template_values={"Ns": "Engine.Default", "BaseUrl": "http://engine-default"}
        )
    )


@pytest.fixture
def make_generator(prompt_loader, engine):
    def _make(chat, **kwargs):
        pipeline = ChainOfThoughtPipeline(chat=chat, prompt_loader=prompt_loader)
        return TestGenerator(pipeline=pipeline, template_engine=engine, **kwargs)

    return _make


def test_build_description_without_context():
    request = GenerationRequest(page_description="A page")
    assert build_description(request) == "A page"


def test_build_description_appends_context():
    request = GenerationRequest(
        page_description="A page", additional_context={"role": "admin", "locale": "en"}
    )
    assert build_description(request) == (
        "A page\n\nAdditional Context:\nrole: admin\nlocale: en"
    )


class TestLoginScenario:
    """Username field and login button through all three stages."""

    elements = {
        "elements": [
            {"name": "usernameInput", "selector": "#username", "type": "input"},
            {"name": "loginButton", "selector": "#login", "type": "button"},
        ]
    }
    tasks = {
        "tasks": [
            {
                "name": "Login",
                "steps": [
                    {"description": "Type name", "elementName": "usernameInput",
                     "action": "fill", "parameters": {"value": "alice"}},
                    {"description": "Submit", "elementName": "loginButton",
                     "action": "click"},
                ],
            }
        ]
    }
    structure = {
        "pageName": "Login",
        "testCases": [
            {
                "name": "Valid login",
                "steps": [
                    {"description": "Type name", "elementName": "usernameInput",
                     "action": "fill", "parameters": {"value": "alice"}},
                    {"description": "Submit", "elementName": "loginButton",
                     "action": "click"},
                ],
            }
        ],
    }

    def completions(self):
        return [json.dumps(self.elements), json.dumps(self.tasks), json.dumps(self.structure)]

    @pytest.mark.asyncio
    async def test_render_options_override_engine_defaults(self, make_generator,
                                                           scripted_chat):
        chat = scripted_chat(*self.completions())
        generator = make_generator(chat)
        request = GenerationRequest(
            page_description="Login page with a username field and a login button",
            options=GenerationOptions(
                ns="ExampleApp.LoginTests", base_url="http://example.com"
            ),
        )

        code = await generator.generate_test(request)

        assert chat.call_count == 3
        assert "namespace ExampleApp.LoginTests;" in code
        assert "http://example.com" in code
        assert "Engine.Default" not in code
        assert "http://engine-default" not in code
        assert 'Page.Locator("#username").FillAsync("alice")' in code

    @pytest.mark.asyncio
    async def test_plain_description_uses_default_options(self, make_generator,
                                                          scripted_chat):
        generator = make_generator(scripted_chat(*self.completions()))
        code = await generator.generate_test("Login page")
        assert "namespace Engine.Default;" in code

    @pytest.mark.asyncio
    async def test_writes_output_file(self, make_generator, scripted_chat, tmp_path):
        output = tmp_path / "Generated" / "LoginTests.cs"
        generator = make_generator(scripted_chat(*self.completions()))
        request = GenerationRequest(
            page_description="Login page",
            options=GenerationOptions(output_path=str(output)),
        )

        result = await generator.generate(request)

        assert result.output_path == output
        assert output.read_text(encoding="utf-8") == result.code
        assert result.structure.page_name == "Login"
        assert len(result.structure.elements) == 2

    @pytest.mark.asyncio
    async def test_context_reaches_first_stage(self, make_generator, scripted_chat):
        chat = scripted_chat(*self.completions())
        request = GenerationRequest(
            page_description="Login page", additional_context={"auth": "SSO"}
        )
        await make_generator(chat).generate_test(request)
        assert chat.calls[0][1].content.endswith("Additional Context:\nauth: SSO")


class TestFailures:
    @pytest.mark.asyncio
    async def test_pipeline_failure_skips_rendering(self, prompt_loader, scripted_chat):
        engine = MagicMock()
        pipeline = ChainOfThoughtPipeline(scripted_chat(None), prompt_loader)
        generator = TestGenerator(pipeline=pipeline, template_engine=engine)

        with pytest.raises(MissingCompletionError):
            await generator.generate_test("page")
        engine.render_test.assert_not_called()

    @pytest.mark.asyncio
    async def test_template_errors_propagate(self, engine):
        pipeline = AsyncMock()
        pipeline.process.return_value = TestStructure(page_name="x")
        generator = TestGenerator(pipeline=pipeline, template_engine=engine)
        request = GenerationRequest(
            page_description="page", options=GenerationOptions(template_path="nope.j2")
        )
        with pytest.raises(TemplateNotFoundError):
            await generator.generate_test(request)

    def test_render_existing_structure(self, engine, tmp_path):
        writer = TestFileWriter(dry_run=True)
        generator = TestGenerator(
            pipeline=AsyncMock(), template_engine=engine, writer=writer
        )
        output = tmp_path / "out.cs"
        result = generator.render(
            TestStructure(page_name="Home"), GenerationOptions(output_path=str(output))
        )
        assert "class HomeTests" in result.code
        assert not output.exists()
