"""
Jinja2 template engine for turning a ``TestStructure`` into source code.

Templates are resolved against a configured root, compiled once and, when
caching is enabled, kept for the engine's lifetime under their full path.
Failures are reported in three classes: a missing template
(``TemplateNotFoundError``), an error raised by Jinja2 while compiling or
rendering (``TemplateRenderError``), and anything else
(``TestGenerationError``).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import jinja2

from ..config.models import TemplateConfig
from ..domain.errors import (
    TemplateConfigurationError,
    TemplateNotFoundError,
    TemplateRenderError,
    TestGenerationError,
)
from ..domain.models import TemplateOptions, TestStructure
from ..ports.template_port import TemplatePort
from .helpers import DEFAULT_HELPERS

logger = logging.getLogger(__name__)

GENERATOR_NAME = "Playwright Test Generator"


class JinjaTemplateEngine(TemplatePort):
    """
    Renders test structures with Jinja2 templates.

    Unresolved variables raise instead of rendering empty (``StrictUndefined``).
    Output is not HTML-escaped since templates produce source code. The
    compiled-template cache is lock-guarded and never invalidated: concurrent
    first renders of the same template may both compile, and the first stored
    template wins.
    """

    def __init__(
        self,
        config: TemplateConfig | None = None,
        helpers: Mapping[str, Callable[..., Any]] | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            config: Templates root, cache flag and default values
            helpers: Extra helpers registered alongside formatAction/formatAssertion

        Raises:
            TemplateConfigurationError: If helper registration fails
        """
        self._config = config or TemplateConfig()
        self._templates_path = Path(self._config.templates_path)
        self._template_cache: dict[Path, jinja2.Template] = {}
        self._cache_lock = threading.Lock()
        self._environment = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(self._templates_path)),
            undefined=jinja2.StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._register_helpers({**DEFAULT_HELPERS, **(helpers or {})})

    @property
    def templates_path(self) -> Path:
        return self._templates_path

    @property
    def use_template_cache(self) -> bool:
        return self._config.use_template_cache

    def render_test(self, structure: TestStructure, options: TemplateOptions) -> str:
        try:
            logger.info("Starting test code generation for page: %s", structure.page_name)

            template = self._get_template(options.template_path)
            data = self._create_template_data(structure, options)
            result = template.render(**data)

            logger.info("Successfully generated test code for page: %s", structure.page_name)
            return result

        except (FileNotFoundError, jinja2.TemplateNotFound) as e:
            logger.error("Template file not found: %s", options.template_path)
            raise TemplateNotFoundError(
                f"Template file not found: {options.template_path}", cause=e
            ) from e
        except jinja2.TemplateError as e:
            logger.error(
                "Error compiling or rendering template for page: %s: %s",
                structure.page_name,
                e,
            )
            raise TemplateRenderError("Error rendering template", cause=e) from e
        except Exception as e:
            logger.exception(
                "Unexpected error during test generation for page: %s", structure.page_name
            )
            raise TestGenerationError("Failed to generate test code", cause=e) from e

    def resolve_template_path(self, template_path: str) -> Path:
        """Return the lookup key for a template identifier."""
        return self._templates_path / template_path

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._template_cache.clear()

    def close(self) -> None:
        """Release compiled templates."""
        self.clear_cache()

    def __enter__(self) -> JinjaTemplateEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _get_template(self, template_path: str) -> jinja2.Template:
        full_path = self.resolve_template_path(template_path)

        if self.use_template_cache:
            with self._cache_lock:
                cached = self._template_cache.get(full_path)
            if cached is not None:
                return cached

        if not full_path.is_file():
            raise FileNotFoundError(f"Template file not found: {full_path}")

        template = self._compile(full_path)

        if self.use_template_cache:
            with self._cache_lock:
                template = self._template_cache.setdefault(full_path, template)
        return template

    def _compile(self, full_path: Path) -> jinja2.Template:
        source = full_path.read_text(encoding="utf-8")
        logger.debug("Compiling template %s", full_path)
        return self._environment.from_string(source)

    def _create_template_data(
        self, structure: TestStructure, options: TemplateOptions
    ) -> dict[str, Any]:
        defaults = self._config.default_template_values
        return {
            "ns": options.ns if options.ns is not None else defaults["Ns"],
            "baseUrl": options.base_url if options.base_url is not None else defaults["BaseUrl"],
            "pageName": structure.page_name,
            "elements": [element.to_wire() for element in structure.elements],
            "tasks": [task.to_wire() for task in structure.tasks],
            "testCases": [case.to_wire() for case in structure.test_cases],
            "includeComments": options.include_comments,
            "timestamp": datetime.now(timezone.utc),
            "generator": GENERATOR_NAME,
        }

    def _register_helpers(self, helpers: Mapping[str, Callable[..., Any]]) -> None:
        try:
            for name, helper in helpers.items():
                if not isinstance(name, str) or not name.isidentifier():
                    raise ValueError(f"Invalid helper name: {name!r}")
                if not callable(helper):
                    raise TypeError(f"Helper {name!r} is not callable")
                self._environment.filters[name] = helper
                self._environment.globals[name] = helper
            logger.debug("Registered template helpers: %s", ", ".join(helpers))
        except Exception as e:
            logger.error("Failed to register template helpers: %s", e)
            raise TemplateConfigurationError(
                "Failed to register template helpers", cause=e
            ) from e
