"""
Writer adapter for generated test files.

Generated code is written atomically: content goes to a temporary sibling file
that replaces the target once fully written.
"""

import logging
import os
import tempfile
from pathlib import Path


class WriterError(Exception):
    """Exception raised when writing generated code fails."""

    pass


class TestFileWriter:
    """Writes generated test source to disk, with dry-run support."""

    __test__ = False

    def __init__(self, dry_run: bool = False, overwrite: bool = True) -> None:
        """
        Initialize the writer.

        Args:
            dry_run: Log what would be written without touching the filesystem
            overwrite: Whether an existing file may be replaced
        """
        self.dry_run = dry_run
        self.overwrite = overwrite
        self.logger = logging.getLogger(__name__)

    def write(self, path: str | Path, content: str) -> Path:
        """
        Write ``content`` to ``path``, creating parent directories.

        Returns:
            The resolved target path

        Raises:
            WriterError: If the file exists and overwriting is disabled, or on IO failure
        """
        target = Path(path)
        if target.exists() and not self.overwrite:
            raise WriterError(f"Refusing to overwrite existing file: {target}")

        if self.dry_run:
            self.logger.info("[dry-run] Would write %d characters to %s", len(content), target)
            return target

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(content)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise WriterError(f"Failed to write {target}: {e}") from e

        self.logger.info("Wrote generated test code to %s", target)
        return target
