"""Error raised by chat adapters when a model call fails."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass
class LLMError(Exception):
    """A failed chat request, independent of the SDK that made it.

    Adapters chain the SDK exception as ``__cause__``; the fields here are
    what the CLI and logs report.
    """

    message: str
    provider: str | None = None
    operation: str | None = None
    model: str | None = None
    status_code: int | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def context(self) -> dict[str, Any]:
        """Known request details, omitting the ones that were not recorded."""
        details = {
            "provider": self.provider,
            "operation": self.operation,
            "model": self.model,
            "status": self.status_code,
        }
        return {key: value for key, value in details.items() if value is not None}

    def __str__(self) -> str:
        details = ", ".join(f"{key}={value}" for key, value in self.context().items())
        return f"{self.message} ({details})" if details else self.message
