"""Apply parsed injection blocks to target content."""

from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Iterable

from mergegen.errors import AmbiguousMatchError, NoMatchError
from mergegen.injection import INJECTION_GROUP
from mergegen.injection.parser import InjectionSpec

logger = logging.getLogger(__name__)


class InjectionOutcome(str, Enum):
    INJECTED = "injected"
    NOOP = "noop"


def apply_injection(
    content: str,
    spec: InjectionSpec,
    path: Path | str | None = None,
) -> tuple[str, InjectionOutcome]:
    """Insert ``spec.payload`` after the ``injection`` group of the single match.

    Returns:
        (new_content, outcome). When the payload is already in place the
        content is returned unchanged with ``InjectionOutcome.NOOP``; see
        ``_already_applied``.

    Raises:
        NoMatchError: The regex does not match, or the group did not take part.
        AmbiguousMatchError: The regex matches more than once.
    """
    matches = list(spec.regex.finditer(content))
    if _already_applied(content, spec, matches):
        return content, InjectionOutcome.NOOP
    if not matches:
        raise NoMatchError(
            f"injection '{spec.pattern_name}': pattern '{spec.regex.pattern}' does not match", path,
        )
    if len(matches) > 1:
        raise AmbiguousMatchError(
            f"injection '{spec.pattern_name}': pattern '{spec.regex.pattern}' "
            f"matches {len(matches)} times",
            path,
        )

    start, end = matches[0].span(INJECTION_GROUP)
    if start == -1:
        raise NoMatchError(
            f"injection '{spec.pattern_name}': group '{INJECTION_GROUP}' did not participate in the match",
            path,
        )

    return content[:end] + spec.payload + content[end:], InjectionOutcome.INJECTED


def _already_applied(content: str, spec: InjectionSpec, matches: list[re.Match]) -> bool:
    """True if the payload already sits at the insertion point.

    Either the payload follows (or closes) the captured span of some match,
    or taking one occurrence of the payload out of *content* leaves a text in
    which the regex matches exactly once with its insertion point right there.
    The second form covers patterns that, once applied, stop matching or
    start matching the payload itself.
    """
    payload = spec.payload
    for match in matches:
        start, end = match.span(INJECTION_GROUP)
        if start == -1:
            continue
        if content.startswith(payload, end) or content[start:end].endswith(payload):
            return True
    if not payload:
        return False

    pos = content.find(payload)
    while pos != -1:
        without = content[:pos] + content[pos + len(payload):]
        candidates = list(spec.regex.finditer(without))
        if len(candidates) == 1:
            start, end = candidates[0].span(INJECTION_GROUP)
            if start != -1 and end == pos:
                return True
        pos = content.find(payload, pos + 1)
    return False


def apply_all(
    content: str,
    specs: Iterable[InjectionSpec],
    path: Path | str | None = None,
) -> tuple[str, InjectionOutcome]:
    """Apply *specs* in order; the outcome is INJECTED if any block changed the text."""
    outcome = InjectionOutcome.NOOP
    for spec in specs:
        content, result = apply_injection(content, spec, path)
        logger.debug("Injection '%s' into %s: %s", spec.pattern_name, path, result.value)
        if result is InjectionOutcome.INJECTED:
            outcome = InjectionOutcome.INJECTED
    return content, outcome
