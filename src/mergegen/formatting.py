"""Run generated output through external formatters.

Formatters are plain commands that read source on stdin and write the
formatted source to stdout (``black -q -``, ``clang-format``, ``prettier
--stdin-filepath x.ts``). Manual-section bodies belong to the user, so by
default they are lifted out before formatting and put back afterwards.
"""

from __future__ import annotations

import fnmatch
import logging
import subprocess
from pathlib import Path

from mergegen.config import FormatConfig, FormatterConfig
from mergegen.errors import SectionError
from mergegen.sections import ManualSectionConfig, OrphanPolicy
from mergegen.sections.extractor import extract_sections
from mergegen.sections.merge import merge_sections

logger = logging.getLogger(__name__)


def matches_pattern(filename: str, pattern: str) -> bool:
    """``*.ext`` and other globs match the file name; plain patterns match a suffix."""
    name = Path(filename).name
    if any(ch in pattern for ch in "*?["):
        return fnmatch.fnmatch(name, pattern)
    return filename == pattern or filename.endswith(pattern)


class Formatter:
    def __init__(
        self,
        config: FormatConfig,
        sections: ManualSectionConfig | None = None,
        timeout: float = 60.0,
    ) -> None:
        self.config = config
        # A formatter that loses a section is treated as a failed formatter.
        base = sections or ManualSectionConfig()
        self.sections = ManualSectionConfig(base.start_marker, base.end_marker, OrphanPolicy.ERROR)
        self.timeout = timeout

    def formatter_for(self, filename: str) -> FormatterConfig | None:
        if not self.config.enabled:
            return None
        if any(matches_pattern(filename, p) for p in self.config.ignore_patterns):
            logger.debug("Formatting ignored for %s", filename)
            return None
        for pattern, fmt in self.config.formatters.items():
            if fmt.enabled and matches_pattern(filename, pattern):
                return fmt
        return None

    def format(self, content: str, filename: str) -> str:
        """Return *content* formatted for *filename*, or unchanged if no formatter applies."""
        fmt = self.formatter_for(filename)
        if fmt is None:
            return content

        bodies = {}
        if self.config.preserve_manual_sections:
            bodies = extract_sections(content, self.sections, filename)

        formatted = self._run(content, fmt, filename)
        if not bodies or formatted is content:
            return formatted
        try:
            return merge_sections(formatted, bodies, self.sections, filename)
        except SectionError as e:
            logger.error("Formatter broke manual sections in %s (%s); keeping unformatted output", filename, e)
            return content

    def _run(self, content: str, fmt: FormatterConfig, filename: str) -> str:
        if fmt.type != "command":
            logger.warning("Unsupported formatter type '%s' for %s", fmt.type, filename)
            return content
        if not fmt.command:
            return content

        cmd = [fmt.command, *fmt.args]
        logger.debug("Running formatter %s on %s", " ".join(cmd), filename)
        try:
            result = subprocess.run(
                cmd,
                input=content,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.error("Formatter %s failed to run on %s: %s", fmt.command, filename, e)
            return content

        if result.returncode != 0:
            logger.error("Formatter %s failed on %s: %s", fmt.command, filename, result.stderr.strip())
            return content
        return result.stdout
