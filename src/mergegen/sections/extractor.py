"""Locate and extract manual sections from arbitrary text.

Extraction is line oriented and knows nothing about the host language: a
line holding ``<start marker>: <id>`` opens a section, the next line holding
the end marker closes it. Anything else on those lines (comment leaders,
``-->`` and so on) is ignored. The id must be followed by whitespace or the
end of the line; a start marker with any other id is not a start line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from mergegen.errors import DuplicateSectionError, UnterminatedSectionError
from mergegen.sections import SECTION_ID_PATTERN, ManualSectionConfig

_DEFAULT_CONFIG = ManualSectionConfig()


@dataclass(frozen=True)
class SectionSpan:
    """Location of one section, as zero-based indexes into ``split_lines``."""

    section_id: str
    start: int
    end: int


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping line endings, so ``"".join`` round-trips."""
    parts = text.split("\n")
    lines = [p + "\n" for p in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _start_regex(config: ManualSectionConfig) -> re.Pattern:
    return re.compile(re.escape(config.start_marker) + r":\s*(" + SECTION_ID_PATTERN + r")(?=\s|$)")


def scan_sections(
    text: str,
    config: ManualSectionConfig = _DEFAULT_CONFIG,
    path: Path | str | None = None,
) -> list[SectionSpan]:
    """Return the sections of *text* in order of appearance.

    Raises:
        DuplicateSectionError: An id is opened twice.
        UnterminatedSectionError: A section is still open at the next start
            marker or at end of text, or an end marker has no open section.
    """
    start_re = _start_regex(config)
    spans: list[SectionSpan] = []
    seen: set[str] = set()
    open_id: str | None = None
    open_line = 0

    for index, line in enumerate(split_lines(text)):
        match = start_re.search(line)
        if match:
            section_id = match.group(1)
            if open_id is not None:
                raise UnterminatedSectionError(
                    f"section '{open_id}' (line {open_line + 1}) is not closed "
                    f"before section '{section_id}' starts (line {index + 1})",
                    path,
                )
            if section_id in seen:
                raise DuplicateSectionError(section_id, path)
            seen.add(section_id)
            open_id, open_line = section_id, index
            continue

        if config.end_marker in line:
            if open_id is None:
                raise UnterminatedSectionError(
                    f"end marker on line {index + 1} has no matching start marker", path,
                )
            spans.append(SectionSpan(open_id, open_line, index))
            open_id = None

    if open_id is not None:
        raise UnterminatedSectionError(
            f"section '{open_id}' (line {open_line + 1}) is never closed", path,
        )
    return spans


def extract_sections(
    text: str | None,
    config: ManualSectionConfig = _DEFAULT_CONFIG,
    path: Path | str | None = None,
) -> dict[str, str]:
    """Map section id → body for every manual section in *text*.

    The body is the text strictly between the marker lines. ``None`` (no
    previous output) yields an empty mapping.
    """
    if text is None:
        return {}
    lines = split_lines(text)
    return {
        span.section_id: "".join(lines[span.start + 1 : span.end])
        for span in scan_sections(text, config, path)
    }
