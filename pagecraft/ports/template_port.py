from abc import abstractmethod
from typing import Protocol

from ..domain.models import TemplateOptions, TestStructure

"""Template rendering port."""


class TemplatePort(Protocol):
    """Port interface for rendering a test structure into source code."""

    @abstractmethod
    def render_test(self, structure: TestStructure, options: TemplateOptions) -> str:
        """Render ``structure`` with the template named in ``options``.

        Raises:
            TemplateNotFoundError: If the template does not exist
            TemplateRenderError: If the template fails to compile or execute
            TestGenerationError: For any other failure
        """
        ...
