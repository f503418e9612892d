"""RenderHelper — the one-object entry point for library users.

    helper = RenderHelper({"name": "World"}, "context")
    helper.generate(Path("templates/simple/template.j2"), Path("output/simple"))

With a context name the data is exposed to templates under that name
(``{{ context.name }}``); without one its keys are exposed at the top level.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
from pathlib import Path
from typing import Any, Mapping

from mergegen.engine import TemplateEngine
from mergegen.errors import InitError
from mergegen.formatting import Formatter
from mergegen.generator import GenerationReport, TreeWalker
from mergegen.sections import ManualSectionConfig


def build_context(data: Any, context_name: str | None = None) -> dict[str, Any]:
    """Adapt caller data into the mapping templates are rendered against.

    The data is deep-copied so a generation run never observes caller-side
    mutation.

    Raises:
        InitError: *context_name* is not an identifier, the data cannot be
            copied, or (without a context name) it is not a string-keyed mapping.
    """
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        data = dataclasses.asdict(data)
    try:
        data = copy.deepcopy(data)
    except (TypeError, copy.Error) as e:
        raise InitError(f"data cannot be copied for rendering: {e}") from e

    if context_name is not None:
        if not isinstance(context_name, str) or not context_name.isidentifier():
            raise InitError(f"context name {context_name!r} is not a valid identifier")
        return {context_name: data}

    if not isinstance(data, Mapping):
        raise InitError(
            f"data of type {type(data).__name__} needs a context name; "
            "only mappings can be exposed at the top level"
        )
    bad_keys = [k for k in data if not isinstance(k, str)]
    if bad_keys:
        raise InitError(f"top-level data keys must be strings, got {bad_keys!r}")
    return dict(data)


class RenderHelper:
    """Owns the data dictionary and generation options for repeated runs."""

    def __init__(
        self,
        data: Any,
        context_name: str | None = None,
        *,
        logger: logging.Logger | None = None,
        dry_run: bool = False,
        sections: ManualSectionConfig | None = None,
        formatter: Formatter | None = None,
        engine: TemplateEngine | None = None,
    ) -> None:
        self.context = build_context(data, context_name)
        self.context_name = context_name
        self.log = logger or logging.getLogger("mergegen")
        self.dry_run = dry_run
        self.sections = sections or ManualSectionConfig()
        self.formatter = formatter
        self.engine = engine or TemplateEngine()

    def generate(self, template_path: Path | str, output_root: Path | str) -> GenerationReport:
        """Render *template_path* (a file or a whole tree) into *output_root*.

        Raises:
            MergegenError: The first failure of the run, naming the path and
                failure kind. Output written before the failure is kept.
        """
        walker = TreeWalker(
            self.engine,
            self.context,
            sections=self.sections,
            formatter=self.formatter,
            dry_run=self.dry_run,
            logger=self.log,
        )
        return walker.run(Path(template_path), Path(output_root))
