"""Manual sections — hand-written regions that survive regeneration.

A manual section is delimited by plain-text markers, usually wrapped in
whatever comment syntax the generated language uses:

    // MANUAL SECTION START: init-custom-variables
    custom_variable = 1;
    // MANUAL SECTION END

The lines strictly between the marker lines belong to the user. On
regeneration they are lifted from the previous output and spliced back into
the fresh render in place of the template's default body.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

MANUAL_START = "MANUAL SECTION START"
MANUAL_END = "MANUAL SECTION END"

# Section ids: letters, digits, underscore, hyphen
SECTION_ID_PATTERN = r"[A-Za-z0-9_-]+"


class OrphanPolicy(str, Enum):
    """What to do with a section that exists in the old file but not the new render."""

    DROP = "drop"
    PRESERVE = "preserve"
    ERROR = "error"


@dataclass(frozen=True)
class ManualSectionConfig:
    start_marker: str = MANUAL_START
    end_marker: str = MANUAL_END
    orphans: OrphanPolicy = OrphanPolicy.DROP
