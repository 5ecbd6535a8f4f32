"""
Rich-backed logging setup.

Every module logs through ``logging.getLogger(__name__)``; this module installs
a single ``RichHandler`` on the root logger for console output and quiets
chatty third-party loggers.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

PAGECRAFT_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "bold red",
        "muted": "dim",
        "accent": "magenta",
    }
)

DEFAULT_SUPPRESSED_MODULES = ("asyncio", "httpx", "httpcore", "openai", "urllib3")


class LoggerManager:
    """Owns the process-wide console and root handler."""

    _console: Console | None = None
    _handler: RichHandler | None = None
    _setup_lock = threading.Lock()

    @classmethod
    def setup_global_logging(
        cls,
        console: Console | None = None,
        level: int = logging.INFO,
        suppress_modules: Iterable[str] = DEFAULT_SUPPRESSED_MODULES,
    ) -> RichHandler:
        """Install the rich handler on the root logger. Idempotent."""
        with cls._setup_lock:
            root_logger = logging.getLogger()

            if cls._handler is not None and cls._handler in root_logger.handlers:
                if console is None or console is cls._console:
                    root_logger.setLevel(level)
                    cls._quiet(suppress_modules, level)
                    return cls._handler
                root_logger.removeHandler(cls._handler)

            # Drop foreign RichHandlers so records are not printed twice
            for handler in list(root_logger.handlers):
                if isinstance(handler, RichHandler):
                    root_logger.removeHandler(handler)

            cls._console = console or Console(theme=PAGECRAFT_THEME, stderr=True)
            rich_handler = RichHandler(
                console=cls._console,
                show_time=True,
                show_path=False,
                markup=False,
                rich_tracebacks=True,
            )
            rich_handler.setFormatter(logging.Formatter(fmt="%(message)s"))

            root_logger.addHandler(rich_handler)
            root_logger.setLevel(level)
            cls._handler = rich_handler
            cls._quiet(suppress_modules, level)
            return rich_handler

    @staticmethod
    def _quiet(modules: Iterable[str], level: int) -> None:
        # Library debug output is only useful when we are debugging too
        floor = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
        for name in modules:
            logging.getLogger(name).setLevel(max(floor, level))

    @classmethod
    def get_console(cls) -> Console:
        """Return the shared console, creating one if logging is not set up."""
        if cls._console is None:
            cls._console = Console(theme=PAGECRAFT_THEME, stderr=True)
        return cls._console


def setup_logging(
    level: int | str = logging.INFO,
    console: Console | None = None,
    suppress_modules: Iterable[str] = DEFAULT_SUPPRESSED_MODULES,
) -> logging.Logger:
    """Set up logging and return the top-level ``pagecraft`` logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    LoggerManager.setup_global_logging(console, level, suppress_modules)
    return logging.getLogger("pagecraft")
