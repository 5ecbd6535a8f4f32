"""
IO adapters: console logging and generated-file output.
"""

from .logging_setup import PAGECRAFT_THEME, LoggerManager, setup_logging
from .writer import TestFileWriter, WriterError

__all__ = [
    "PAGECRAFT_THEME",
    "LoggerManager",
    "setup_logging",
    "TestFileWriter",
    "WriterError",
]
