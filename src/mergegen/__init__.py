"""mergegen — template generation that keeps hand-written edits.

Renders Jinja2 template trees against a data dictionary. Regeneration keeps
the bodies of manual sections found in the previous output, and ``.inj``
templates patch existing files at regex-located insertion points.
"""

from mergegen.errors import MergegenError
from mergegen.generator import GenerationReport, Outcome
from mergegen.render_helper import RenderHelper
from mergegen.sections import ManualSectionConfig, OrphanPolicy

__version__ = "0.3.0"

__all__ = [
    "GenerationReport",
    "ManualSectionConfig",
    "MergegenError",
    "OrphanPolicy",
    "Outcome",
    "RenderHelper",
    "__version__",
]
