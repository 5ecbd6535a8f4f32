"""
Configuration loading for pagecraft.

Sources, lowest priority first:

1. A TOML or YAML file, either given explicitly or found in the working
   directory under one of ``ConfigLoader.DEFAULT_CONFIG_FILES``.
2. ``PAGECRAFT_*`` environment variables, with ``__`` separating nested keys
   (``PAGECRAFT_LLM__MODEL=mistral`` sets ``llm.model``).
3. Overrides passed by the caller, typically CLI options. ``None`` values are
   treated as "not given".

The merged mapping is validated into a ``PageCraftConfig``.
"""

import logging
import os
import tomllib
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import PageCraftConfig

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""


def _read_toml(path: Path) -> Any:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e


def _read_yaml(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e


_READERS: dict[str, Callable[[Path], Any]] = {
    ".toml": _read_toml,
    ".yml": _read_yaml,
    ".yaml": _read_yaml,
}


def merge_settings(base: Mapping[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``updates`` over ``base`` without mutating either."""
    merged = dict(base)
    for key, value in updates.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_settings(current, value)
        else:
            merged[key] = value
    return merged


def drop_unset(values: Any) -> Any:
    """Remove ``None`` entries from nested mappings."""
    if not isinstance(values, Mapping):
        return values
    return {key: drop_unset(value) for key, value in values.items() if value is not None}


def coerce_env_value(raw: str) -> Any:
    """Interpret an environment string as a bool, int, float or plain string."""
    lowered = raw.strip().lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    for convert in (int, float):
        try:
            return convert(raw)
        except ValueError:
            continue
    return raw


class ConfigLoader:
    """Builds a validated ``PageCraftConfig`` from files, environment and overrides."""

    DEFAULT_CONFIG_FILES = (
        ".pagecraft.toml",
        ".pagecraft.yml",
        ".pagecraft.yaml",
        "pagecraft.toml",
        "pagecraft.yml",
        "pagecraft.yaml",
    )

    ENV_PREFIX = "PAGECRAFT_"
    ENV_NESTING = "__"

    # Read by CredentialManager, not part of PageCraftConfig
    ENV_EXCLUDE = frozenset({"PAGECRAFT_OPENAI_API_KEY", "PAGECRAFT_OPENAI_BASE_URL"})

    def __init__(self, config_file: str | Path | None = None):
        """
        Args:
            config_file: Explicit config file; it must exist. When None the
                working directory is searched for a default file.
        """
        self.config_file = Path(config_file) if config_file else None
        self._config: PageCraftConfig | None = None

    def load_config(
        self,
        env_overrides: dict[str, Any] | None = None,
        cli_overrides: dict[str, Any] | None = None,
        reload: bool = False,
    ) -> PageCraftConfig:
        """
        Load, merge and validate configuration.

        Args:
            env_overrides: Nested settings used instead of reading ``os.environ``
            cli_overrides: Highest-priority nested settings; None values are ignored
            reload: Rebuild even if a configuration was already loaded

        Raises:
            ConfigurationError: If a source cannot be read or validation fails
        """
        if self._config is not None and not reload:
            return self._config

        env_settings = env_overrides if env_overrides is not None else self.read_environment()
        layers = [
            ("config file", self.read_config_file()),
            ("environment", env_settings),
            ("CLI overrides", drop_unset(cli_overrides or {})),
        ]

        settings: dict[str, Any] = {}
        for source, layer in layers:
            if layer:
                logger.debug("Applying configuration from %s", source)
                settings = merge_settings(settings, layer)

        try:
            self._config = PageCraftConfig.model_validate(settings)
        except ValidationError as e:
            logger.error("Configuration validation failed: %s", e)
            raise ConfigurationError(f"Configuration validation failed: {e}") from e
        return self._config

    def find_config_file(self) -> Path | None:
        """Return the explicit config file, or the first default file present."""
        if self.config_file:
            return self.config_file
        return next(
            (Path(name) for name in self.DEFAULT_CONFIG_FILES if Path(name).exists()),
            None,
        )

    def read_config_file(self) -> dict[str, Any]:
        """Read the config file into a mapping (empty when there is none)."""
        path = self.find_config_file()
        if path is None:
            logger.debug("No configuration file found, using defaults")
            return {}
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        reader = _READERS.get(path.suffix.lower())
        if reader is None:
            raise ConfigurationError(f"Unsupported configuration file type: {path}")

        try:
            content = reader(path)
        except OSError as e:
            raise ConfigurationError(f"Failed to read {path}: {e}") from e

        if content is None:
            logger.warning("Configuration file %s is empty", path)
            return {}
        if not isinstance(content, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a mapping")
        logger.debug("Loaded configuration from %s", path)
        return content

    def read_environment(self) -> dict[str, Any]:
        """Collect ``PAGECRAFT_*`` variables into nested settings."""
        settings: dict[str, Any] = {}
        for name, raw in os.environ.items():
            if not name.startswith(self.ENV_PREFIX) or name in self.ENV_EXCLUDE:
                continue
            path = name[len(self.ENV_PREFIX):].lower().split(self.ENV_NESTING)
            node = settings
            for key in path[:-1]:
                child = node.get(key)
                if not isinstance(child, dict):
                    child = node[key] = {}
                node = child
            node[path[-1]] = coerce_env_value(raw)
        return settings

    def create_sample_config(self, filepath: str | Path | None = None) -> Path:
        """Write a commented sample TOML configuration and return its path."""
        target = Path(filepath) if filepath else Path(self.DEFAULT_CONFIG_FILES[0])
        target.write_text(SAMPLE_TOML_CONFIG, encoding="utf-8")
        logger.info("Sample configuration written to %s", target)
        return target


SAMPLE_TOML_CONFIG = """# pagecraft configuration

[llm]
provider = "ollama"                    # "ollama" or "openai" (both use the OpenAI-compatible API)
model = "llama3.1"
base_url = "http://localhost:11434/v1" # remove to use api.openai.com
temperature = 0.0
timeout = 180.0
max_retries = 3

[prompts]
# prompts_path = "prompts"             # directory of {name}.md system prompts

[templates]
# templates_path = "templates"         # root that template identifiers resolve against
use_template_cache = true
default_template = "CSTest.cs.j2"

[templates.default_template_values]
Ns = "PlaywrightTests"
BaseUrl = "http://localhost"

[logging]
level = "INFO"
"""


def load_config(
    config_file: str | Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> PageCraftConfig:
    """Convenience wrapper around ``ConfigLoader.load_config``."""
    return ConfigLoader(config_file).load_config(cli_overrides=cli_overrides)
