"""Parse injection templates into ``InjectionSpec`` blocks."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from mergegen.errors import BadPatternError, MissingGroupError
from mergegen.injection import INJECTION_GROUP, PATTERN_MARKER, STRING_END, STRING_START

_PATTERN_RE = re.compile(
    r"<!--\s*" + re.escape(PATTERN_MARKER) + r":\s*(?P<name>[A-Za-z0-9_.-]+)\s*-->"
)


@dataclass(frozen=True)
class InjectionSpec:
    pattern_name: str
    regex: re.Pattern
    payload: str


def compile_pattern(name: str, pattern_text: str, path: Path | str | None = None) -> re.Pattern:
    """Compile *pattern_text*, requiring a single capture group named ``injection``."""
    if not pattern_text:
        raise BadPatternError(f"injection '{name}' has an empty pattern", path)
    try:
        regex = re.compile(pattern_text)
    except re.error as e:
        raise BadPatternError(f"injection '{name}': invalid regex '{pattern_text}': {e}", path) from e

    if INJECTION_GROUP not in regex.groupindex or regex.groups != 1:
        raise MissingGroupError(
            f"injection '{name}': pattern '{pattern_text}' must define exactly one "
            f"capture group, named '{INJECTION_GROUP}'",
            path,
        )
    return regex


def _payload_start(text: str, marker_end: int) -> int:
    # Payload begins on the line after the start marker, unless the marker
    # line carries text of its own.
    newline = text.find("\n", marker_end)
    if newline != -1 and not text[marker_end:newline].strip():
        return newline + 1
    return marker_end


def _payload_end(text: str, payload_start: int, marker_start: int) -> int:
    line_start = text.rfind("\n", payload_start, marker_start) + 1
    if line_start == 0:
        line_start = payload_start
    if not text[line_start:marker_start].strip():
        return line_start
    return marker_start


def parse_injection(text: str, path: Path | str | None = None) -> list[InjectionSpec]:
    """Parse every injection block in *text*, in order.

    Raises:
        BadPatternError: No block found, a block is missing its payload
            markers, or its regex does not compile.
        MissingGroupError: A regex lacks the ``injection`` group, or has
            additional capture groups.
    """
    specs: list[InjectionSpec] = []
    pos = 0
    while True:
        header = _PATTERN_RE.search(text, pos)
        if header is None:
            break
        name = header.group("name")

        start = text.find(STRING_START, header.end())
        if start == -1:
            raise BadPatternError(f"injection '{name}' has no '{STRING_START}' marker", path)
        body_start = _payload_start(text, start + len(STRING_START))

        end = text.find(STRING_END, body_start)
        if end == -1:
            raise BadPatternError(f"injection '{name}' has no '{STRING_END}' marker", path)
        body_end = _payload_end(text, body_start, end)

        regex = compile_pattern(name, text[header.end():start].strip(), path)
        specs.append(InjectionSpec(name, regex, text[body_start:body_end]))
        pos = end + len(STRING_END)

    if not specs:
        raise BadPatternError("no '<!-- injection-pattern: <name> -->' block found", path)
    return specs
