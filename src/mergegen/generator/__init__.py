"""Generation runs — walk a template tree and materialize its outputs."""

from mergegen.generator.report import GenerationReport, Outcome
from mergegen.generator.walker import TreeWalker

__all__ = [
    "GenerationReport",
    "Outcome",
    "TreeWalker",
]
