"""Error taxonomy for mergegen.

Every failure surfaced by ``RenderHelper.generate`` is a ``MergegenError``.
Each subclass carries a stable ``kind`` string and, once known, the path of
the file it concerns, so callers can report "what failed, where".
"""

from __future__ import annotations

from pathlib import Path


class MergegenError(Exception):
    """Base class for all mergegen failures."""

    kind = "error"

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        if self.path is None:
            return f"[{self.kind}] {self.message}"
        return f"[{self.kind}] {self.path}: {self.message}"


class InitError(MergegenError):
    kind = "init"


class ConfigError(MergegenError):
    kind = "config"


# ── Rendering ────────────────────────────────────────────────────


class RenderError(MergegenError):
    kind = "render"


class UndefinedKeyError(RenderError):
    kind = "undefined_key"


class InvalidExpressionError(RenderError):
    kind = "invalid_expression"


class InvalidNameError(RenderError):
    kind = "invalid_name"


# ── Manual sections ──────────────────────────────────────────────


class SectionError(MergegenError):
    kind = "section"


class DuplicateSectionError(SectionError):
    kind = "duplicate_id"

    def __init__(self, section_id: str, path: Path | str | None = None) -> None:
        super().__init__(f"manual section '{section_id}' appears more than once", path)
        self.section_id = section_id


class UnterminatedSectionError(SectionError):
    kind = "unterminated"


class OrphanedSectionError(SectionError):
    kind = "orphaned"

    def __init__(self, section_ids: list[str], path: Path | str | None = None) -> None:
        joined = ", ".join(section_ids)
        super().__init__(
            f"manual section(s) {joined} from the existing file are missing in the new output",
            path,
        )
        self.section_ids = section_ids


# ── Injection ────────────────────────────────────────────────────


class InjectionError(MergegenError):
    kind = "injection"


class TargetMissingError(InjectionError):
    kind = "target_missing"


class NoMatchError(InjectionError):
    kind = "no_match"


class AmbiguousMatchError(InjectionError):
    kind = "ambiguous_match"


class BadPatternError(InjectionError):
    kind = "bad_pattern"


class MissingGroupError(InjectionError):
    kind = "missing_group"


# ── I/O ──────────────────────────────────────────────────────────


class GenerationIOError(MergegenError, OSError):
    """Read, write or directory-creation failure."""

    kind = "io"
