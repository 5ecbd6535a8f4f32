"""Application layer: the extraction pipeline and the test generator."""

from .chain_of_thought import (
    ChainOfThoughtPipeline,
    ElementsExtracted,
    PipelineStage,
    TasksExtracted,
)
from .parsers import (
    parse_elements_response,
    parse_tasks_response,
    parse_test_structure_response,
)
from .test_generator import GenerationResult, TestGenerator, build_description

__all__ = [
    "ChainOfThoughtPipeline",
    "PipelineStage",
    "ElementsExtracted",
    "TasksExtracted",
    "parse_elements_response",
    "parse_tasks_response",
    "parse_test_structure_response",
    "TestGenerator",
    "GenerationResult",
    "build_description",
]
