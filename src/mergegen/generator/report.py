"""Per-run record of what happened to each output path."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Outcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    COPIED = "copied"
    INJECTED = "injected"
    NOOP = "noop"


@dataclass
class GenerationReport:
    """Outcomes of one ``generate`` call, in the order they happened."""

    dry_run: bool = False
    entries: list[tuple[Path, Outcome]] = field(default_factory=list)

    def record(self, path: Path, outcome: Outcome) -> None:
        self.entries.append((path, outcome))

    def paths(self, outcome: Outcome) -> list[Path]:
        return [p for p, o in self.entries if o is outcome]

    def outcome_for(self, path: Path) -> Outcome | None:
        """Last outcome recorded for *path* (an injection follows its render)."""
        for p, o in reversed(self.entries):
            if p == path:
                return o
        return None

    def merge(self, other: GenerationReport) -> None:
        self.entries.extend(other.entries)

    def counts(self) -> dict[str, int]:
        result: dict[str, int] = {}
        for _, outcome in self.entries:
            result[outcome.value] = result.get(outcome.value, 0) + 1
        return result

    def summary(self) -> str:
        counts = self.counts()
        lines = [f"Generation: {len(self.entries)} operations"]
        for outcome in Outcome:
            if counts.get(outcome.value):
                lines.append(f"  {outcome.value.capitalize():<10} {counts[outcome.value]}")
        if self.dry_run:
            lines.append("[DRY RUN] No files were modified.")
        return "\n".join(lines)
