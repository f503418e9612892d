"""Template tree entries — one variant per kind of thing a template tree holds."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from mergegen.paths import INJECTION_SUFFIX, TEMPLATE_SUFFIX, strip_template_suffix


@dataclass(frozen=True)
class StandardTemplate:
    """``*.j2``: rendered, merged with the previous output, written."""

    source: Path


@dataclass(frozen=True)
class InjectionTemplate:
    """``*.inj``: patches the sibling output sharing its base name."""

    source: Path


@dataclass(frozen=True)
class StaticFile:
    """Anything else, copied byte for byte under its rendered name."""

    source: Path


@dataclass(frozen=True)
class Directory:
    source: Path


TemplateEntry = Union[StandardTemplate, InjectionTemplate, StaticFile, Directory]


def classify(path: Path) -> TemplateEntry:
    if path.is_dir():
        return Directory(path)
    if path.name.endswith(TEMPLATE_SUFFIX):
        return StandardTemplate(path)
    if path.name.endswith(INJECTION_SUFFIX):
        return InjectionTemplate(path)
    return StaticFile(path)


def output_stem(entry: TemplateEntry) -> str:
    """Unrendered output name: the source name minus any template suffix."""
    if isinstance(entry, (StandardTemplate, InjectionTemplate)):
        return strip_template_suffix(entry.source.name)
    return entry.source.name
