"""Dependency injection container for CLI commands."""

from typing import Any

from ..adapters.io.writer import TestFileWriter
from ..adapters.llm.openai.adapter import OpenAIChatAdapter
from ..adapters.prompts.file_loader import FilePromptLoader
from ..application.chain_of_thought import ChainOfThoughtPipeline
from ..application.test_generator import TestGenerator
from ..config.credentials import CredentialManager
from ..config.models import PageCraftConfig
from ..domain.models import GenerationOptions
from ..rendering.template_engine import JinjaTemplateEngine


class DependencyError(Exception):
    """Raised when dependency injection fails."""

    pass


def create_dependency_container(
    config: PageCraftConfig, dry_run: bool = False
) -> dict[str, Any]:
    """
    Create a dependency injection container with all required services.

    Args:
        config: pagecraft configuration
        dry_run: Build a writer that only logs what it would write

    Returns:
        Dictionary containing all service instances

    Raises:
        DependencyError: If dependency creation fails
    """
    try:
        container: dict[str, Any] = {"config": config}

        container["credential_manager"] = CredentialManager()
        container["chat_adapter"] = OpenAIChatAdapter(
            model=config.llm.model,
            base_url=config.llm.base_url,
            timeout=config.llm.timeout,
            max_tokens=config.llm.max_tokens,
            temperature=config.llm.temperature,
            max_retries=config.llm.max_retries,
            provider=config.llm.provider,
            credential_manager=container["credential_manager"],
        )
        container["prompt_loader"] = FilePromptLoader(config.prompts.prompts_path)
        container["template_engine"] = JinjaTemplateEngine(config.templates)
        container["writer"] = TestFileWriter(dry_run=dry_run)

    except Exception as e:
        raise DependencyError(f"Failed to create adapters: {e}") from e

    try:
        container["pipeline"] = ChainOfThoughtPipeline(
            chat=container["chat_adapter"],
            prompt_loader=container["prompt_loader"],
        )
        container["test_generator"] = TestGenerator(
            pipeline=container["pipeline"],
            template_engine=container["template_engine"],
            writer=container["writer"],
            default_options=GenerationOptions(
                template_path=config.templates.default_template
            ),
        )
    except Exception as e:
        raise DependencyError(f"Failed to create use cases: {e}") from e

    return container
