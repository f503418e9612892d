"""Splice preserved manual-section bodies into a fresh render."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping

from mergegen.errors import OrphanedSectionError
from mergegen.sections import ManualSectionConfig, OrphanPolicy
from mergegen.sections.extractor import scan_sections, split_lines

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = ManualSectionConfig()


def merge_sections(
    rendered: str,
    preserved: Mapping[str, str],
    config: ManualSectionConfig = _DEFAULT_CONFIG,
    path: Path | str | None = None,
) -> str:
    """Replace section bodies in *rendered* with the bodies in *preserved*.

    Only ids present in both are substituted; sections new to the render keep
    their default body. Ids that exist only in *preserved* are orphans and
    are handled according to ``config.orphans``.

    Args:
        rendered: Fresh template output, with default section bodies.
        preserved: id → body, as returned by ``extract_sections`` on the
            previous version of the same file.
        config: Marker strings and orphan policy.
        path: Output path, attached to errors.

    Returns:
        The merged text.

    Raises:
        SectionError: *rendered* is structurally invalid, or orphans exist
            under ``OrphanPolicy.ERROR``.
    """
    lines = split_lines(rendered)
    spans = scan_sections(rendered, config, path)

    out: list[str] = []
    last = 0
    for span in spans:
        out.extend(lines[last : span.start + 1])
        if span.section_id in preserved:
            out.append(preserved[span.section_id])
        else:
            out.extend(lines[span.start + 1 : span.end])
        last = span.end
    out.extend(lines[last:])
    merged = "".join(out)

    present = {span.section_id for span in spans}
    orphans = [sid for sid in preserved if sid not in present]
    if not orphans:
        return merged

    if config.orphans is OrphanPolicy.ERROR:
        raise OrphanedSectionError(orphans, path)
    if config.orphans is OrphanPolicy.DROP:
        logger.debug("Dropping orphaned manual sections %s in %s", orphans, path)
        return merged

    logger.info("Keeping orphaned manual sections %s at the end of %s", orphans, path)
    if merged and not merged.endswith("\n"):
        merged += "\n"
    for sid in orphans:
        merged += f"{config.start_marker}: {sid}\n{preserved[sid]}{config.end_marker}\n"
    return merged
