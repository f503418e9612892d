"""Dynamic path naming.

Template trees name their outputs with template expressions, one path
segment at a time: ``{{ module }}/{{ name | snakecase }}.py.j2``. Each
segment is rendered on its own, so a directory level can depend on the data
independently of the file name below it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

from mergegen.engine import TemplateEngine
from mergegen.errors import InvalidNameError

TEMPLATE_SUFFIX = ".j2"
INJECTION_SUFFIX = ".inj"

_ALWAYS_INVALID = {"/", "\0"}
_WINDOWS_INVALID = {"\\", "<", ">", ":", '"', "|", "?", "*"}


def invalid_characters(name: str) -> set[str]:
    """Return the characters of *name* the current filesystem cannot store."""
    bad = {ch for ch in name if ch in _ALWAYS_INVALID or ord(ch) < 32}
    if os.name == "nt":
        bad |= {ch for ch in name if ch in _WINDOWS_INVALID}
    return bad


def strip_template_suffix(name: str) -> str:
    """Drop a trailing ``.j2`` / ``.inj`` from a template file name."""
    for suffix in (TEMPLATE_SUFFIX, INJECTION_SUFFIX):
        if name.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return name


def render_segment(
    segment: str,
    context: Mapping[str, Any],
    engine: TemplateEngine,
    source: Path | None = None,
) -> str:
    """Render a single path segment and check the result is a usable name.

    Args:
        segment: One file or directory name, possibly holding expressions.
        context: Rendering context (the data dictionary as exposed to templates).
        engine: Engine that evaluates the expressions.
        source: Template path, attached to errors.

    Returns:
        The concrete segment.

    Raises:
        UndefinedKeyError: The segment references a missing key.
        InvalidNameError: The rendered name is empty, ``.``/``..``, or holds
            characters the filesystem rejects.
    """
    if "{" not in segment:
        rendered = segment
    else:
        rendered = engine.render_string(segment, context, name=source)

    if rendered.strip() in ("", ".", ".."):
        raise InvalidNameError(
            f"segment '{segment}' rendered to unusable name '{rendered}'", source,
        )
    bad = invalid_characters(rendered)
    if bad:
        shown = ", ".join(repr(ch) for ch in sorted(bad))
        raise InvalidNameError(
            f"segment '{segment}' rendered to '{rendered}' containing invalid characters {shown}",
            source,
        )
    return rendered
