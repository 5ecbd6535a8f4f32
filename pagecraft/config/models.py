"""Configuration models for pagecraft."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_TEMPLATES_PATH = Path(__file__).resolve().parents[1] / "templates"


class LLMProviderConfig(BaseModel):
    """Configuration for the chat model endpoint."""

    provider: Literal["openai", "ollama"] = Field(
        default="ollama",
        description="Provider key; both use the OpenAI-compatible chat API",
    )

    model: str = Field(default="llama3.1", description="Model name served by the endpoint")

    base_url: str | None = Field(
        default="http://localhost:11434/v1",
        description="OpenAI-compatible base URL (null for api.openai.com)",
    )

    temperature: float = Field(
        default=0.0, ge=0.0, le=2.0, description="Sampling temperature"
    )

    max_tokens: int | None = Field(
        default=None, ge=1, description="Maximum completion tokens (provider default if null)"
    )

    timeout: float = Field(
        default=180.0, gt=0.0, description="Request timeout in seconds"
    )

    max_retries: int = Field(
        default=3, ge=0, le=10, description="SDK-level transport retries"
    )


class PromptConfig(BaseModel):
    """Configuration for system prompt loading."""

    prompts_path: Path | None = Field(
        default=None,
        description="Directory holding {name}.md prompt files (packaged prompts if null)",
    )


class TemplateConfig(BaseModel):
    """Configuration for the template engine."""

    templates_path: Path = Field(
        default=DEFAULT_TEMPLATES_PATH,
        description="Root directory template identifiers are resolved against",
    )

    use_template_cache: bool = Field(
        default=True,
        description="Reuse compiled templates for the engine's lifetime",
    )

    default_template_values: dict[str, str] = Field(
        default_factory=lambda: {
            "Ns": "PlaywrightTests",
            "BaseUrl": "http://localhost",
        },
        description="Fallback values for options left unset per render",
    )

    default_template: str = Field(
        default="CSTest.cs.j2",
        description="Template used when a request does not name one",
    )

    @field_validator("default_template_values")
    @classmethod
    def validate_default_values(cls, v: dict[str, str]) -> dict[str, str]:
        """Require the keys the engine falls back to."""
        missing = [key for key in ("Ns", "BaseUrl") if not v.get(key)]
        if missing:
            raise ValueError(
                f"default_template_values must define: {', '.join(missing)}"
            )
        return v


class LoggingConfig(BaseModel):
    """Configuration for logging behavior."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Root log level"
    )

    suppress_modules: list[str] = Field(
        default=["asyncio", "httpx", "httpcore", "openai", "urllib3"],
        description="External library modules to suppress debug logs from in non-verbose mode",
    )


class PageCraftConfig(BaseModel):
    """Main configuration model for pagecraft."""

    llm: LLMProviderConfig = Field(
        default_factory=LLMProviderConfig,
        description="Chat model configuration",
    )

    prompts: PromptConfig = Field(
        default_factory=PromptConfig,
        description="System prompt configuration",
    )

    templates: TemplateConfig = Field(
        default_factory=TemplateConfig,
        description="Template engine configuration",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging behavior configuration",
    )
