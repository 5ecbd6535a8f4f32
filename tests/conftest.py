"""Global fixtures and utilities for the pagecraft test suite.

Provides a scripted chat double, a temporary prompts directory and canned
model completions for a simple login page.
"""

import asyncio
import json
from pathlib import Path

import pytest

from pagecraft.adapters.prompts import FilePromptLoader
from pagecraft.config.models import TemplateConfig
from pagecraft.ports.chat_port import ChatCompletion, ChatMessage


# ================================================================================
# Chat doubles
# ================================================================================


class ScriptedChat:
    """Chat double that replays completions in order and records every call.

    Entries may be strings, None (no completion text), exceptions (raised) or
    ``asyncio.Event`` instances (the call blocks until the event is set).
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[list[ChatMessage]] = []

    async def complete(self, messages, *, cancel_event=None):
        self.calls.append(list(messages))
        response = self.responses.pop(0)
        if isinstance(response, asyncio.Event):
            await response.wait()
            response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return ChatCompletion(text=response, model="scripted")

    @property
    def call_count(self) -> int:
        return len(self.calls)


@pytest.fixture
def scripted_chat():
    """Factory for ScriptedChat instances."""
    return ScriptedChat


# ================================================================================
# Prompt and template fixtures
# ================================================================================

PROMPT_NAMES = ("ElementExtraction", "TaskExtraction", "TestStructureGeneration")


@pytest.fixture
def prompts_dir(tmp_path: Path) -> Path:
    """Directory holding one short prompt per stage."""
    directory = tmp_path / "prompts"
    directory.mkdir()
    for name in PROMPT_NAMES:
        (directory / f"{name}.md").write_text(f"{name} system prompt", encoding="utf-8")
    return directory


@pytest.fixture
def prompt_loader(prompts_dir: Path) -> FilePromptLoader:
    return FilePromptLoader(prompts_dir)


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "templates"
    directory.mkdir()
    return directory


@pytest.fixture
def template_config(templates_dir: Path) -> TemplateConfig:
    return TemplateConfig(templates_path=templates_dir)


# ================================================================================
# Canned completions for a login page
# ================================================================================

LOGIN_DESCRIPTION = (
    "The login page has a username input, a password input and a login button. "
    "Entering valid credentials and clicking login shows a welcome message."
)

LOGIN_ELEMENTS = {
    "elements": [
        {"name": "usernameInput", "selector": "#username", "type": "input",
         "description": "Username field", "properties": {}},
        {"name": "passwordInput", "selector": "#password", "type": "input",
         "description": "Password field", "properties": {}},
        {"name": "loginButton", "selector": "#login", "type": "button",
         "description": "Submits the form", "properties": {}},
    ]
}

LOGIN_TASKS = {
    "tasks": [
        {
            "name": "Login",
            "description": "Log in with valid credentials",
            "steps": [
                {"description": "Enter username", "elementName": "usernameInput",
                 "action": "fill", "parameters": {"value": "alice"}},
                {"description": "Enter password", "elementName": "passwordInput",
                 "action": "fill", "parameters": {"value": "secret"}},
                {"description": "Submit", "elementName": "loginButton",
                 "action": "click", "parameters": {}},
            ],
            "prerequisites": [],
            "expectedResults": ["Welcome message shown"],
        }
    ]
}

LOGIN_STRUCTURE = {
    "pageName": "Login Page",
    "elements": [],
    "tasks": [],
    "testCases": [
        {
            "name": "Login with valid credentials",
            "description": "User can log in",
            "tags": ["smoke"],
            "setup": [],
            "steps": [
                {"description": "Enter username", "elementName": "usernameInput",
                 "action": "fill", "parameters": {"value": "alice"}},
                {"description": "Submit", "elementName": "loginButton",
                 "action": "click", "parameters": {}},
            ],
            "assertions": [
                {"description": "Login button visible", "elementName": "loginButton",
                 "action": "visible", "parameters": {}},
            ],
            "cleanup": [],
        }
    ],
}


@pytest.fixture
def login_description() -> str:
    return LOGIN_DESCRIPTION


@pytest.fixture
def login_completions() -> tuple[str, str, str]:
    """Stage completions for the login page, in pipeline order."""
    return (
        json.dumps(LOGIN_ELEMENTS),
        json.dumps(LOGIN_TASKS),
        json.dumps(LOGIN_STRUCTURE),
    )
