"""Recursive template-tree walker.

The walk runs in two passes:
1. Depth-first over the template tree: directories are created under their
   rendered names, ``.j2`` templates are rendered and merged with the
   previous output, other files are copied. ``.inj`` templates are only
   located and queued.
2. Queued injections are applied, in the order they were found.

Every ``.j2`` output of the run therefore exists before any injection that
targets it. The first failure stops the walk; whatever was already written
stays on disk.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Callable, Mapping

from mergegen.engine import TemplateEngine
from mergegen.errors import GenerationIOError, MergegenError, TargetMissingError
from mergegen.formatting import Formatter
from mergegen.generator.entries import (
    Directory,
    InjectionTemplate,
    StandardTemplate,
    StaticFile,
    TemplateEntry,
    classify,
    output_stem,
)
from mergegen.generator.report import GenerationReport, Outcome
from mergegen.injection.applier import InjectionOutcome, apply_all
from mergegen.injection.parser import parse_injection
from mergegen.paths import render_segment
from mergegen.sections import ManualSectionConfig
from mergegen.sections.extractor import extract_sections
from mergegen.sections.merge import merge_sections


class TreeWalker:
    """Drives one generation run over a template file or directory."""

    def __init__(
        self,
        engine: TemplateEngine,
        context: Mapping[str, Any],
        *,
        sections: ManualSectionConfig | None = None,
        formatter: Formatter | None = None,
        dry_run: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self.engine = engine
        self.context = context
        self.sections = sections or ManualSectionConfig()
        self.formatter = formatter
        self.dry_run = dry_run
        self.log = logger or logging.getLogger(__name__)
        self._handlers: dict[type, Callable[[Any, Path], None]] = {
            Directory: self._visit_directory,
            StandardTemplate: self._visit_template,
            InjectionTemplate: self._visit_injection,
            StaticFile: self._visit_static,
        }
        self._report = GenerationReport(dry_run=dry_run)
        self._queued: list[tuple[InjectionTemplate, Path]] = []
        # Content written during a dry run, so later steps see it
        self._pending: dict[Path, str] = {}

    def run(self, template_path: Path, output_root: Path) -> GenerationReport:
        """Generate from *template_path* into *output_root*.

        A directory maps onto *output_root* itself; a single file produces one
        output inside *output_root*.
        """
        if not template_path.exists():
            raise GenerationIOError("template path does not exist", template_path)

        self._report = GenerationReport(dry_run=self.dry_run)
        self._queued = []
        self._pending = {}

        self._make_dir(output_root)
        if template_path.is_dir():
            self._walk(template_path, output_root)
        else:
            self._visit(classify(template_path), output_root)

        for entry, target in self._queued:
            self._guarded(entry, lambda: self._inject(entry, target))
        return self._report

    # Pass one ---------------------------------------------------------------

    def _walk(self, directory: Path, out_dir: Path) -> None:
        try:
            children = sorted(directory.iterdir())
        except OSError as e:
            raise GenerationIOError(f"cannot list directory: {e}", directory) from e
        for child in children:
            self._visit(classify(child), out_dir)

    def _visit(self, entry: TemplateEntry, out_dir: Path) -> None:
        handler = self._handlers[type(entry)]
        self._guarded(entry, lambda: handler(entry, out_dir))

    def _guarded(self, entry: TemplateEntry, action: Callable[[], None]) -> None:
        try:
            action()
        except MergegenError as e:
            if e.path is None:
                e.path = entry.source
            raise
        except OSError as e:
            raise GenerationIOError(str(e), e.filename or entry.source) from e

    def _target(self, entry: TemplateEntry, out_dir: Path) -> Path:
        return out_dir / render_segment(output_stem(entry), self.context, self.engine, entry.source)

    def _visit_directory(self, entry: Directory, out_dir: Path) -> None:
        target = self._target(entry, out_dir)
        self._make_dir(target)
        self._walk(entry.source, target)

    def _visit_template(self, entry: StandardTemplate, out_dir: Path) -> None:
        target = self._target(entry, out_dir)
        previous = self._read(target)
        preserved = extract_sections(previous, self.sections, target)

        rendered = self.engine.render_file(entry.source, self.context)
        merged = merge_sections(rendered, preserved, self.sections, target)
        if self.formatter is not None:
            merged = self.formatter.format(merged, str(target))

        if previous is None:
            outcome = Outcome.CREATED
        elif previous == merged:
            outcome = Outcome.UNCHANGED
        else:
            outcome = Outcome.UPDATED
        if outcome is not Outcome.UNCHANGED:
            self._write(target, merged)
        self._record(target, outcome)

    def _visit_static(self, entry: StaticFile, out_dir: Path) -> None:
        target = self._target(entry, out_dir)
        data = entry.source.read_bytes()
        if target.is_file() and target.read_bytes() == data:
            self._record(target, Outcome.UNCHANGED)
            return
        if self.dry_run:
            self._pending[target] = data.decode("utf-8", errors="replace")
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(entry.source, target)
        self._record(target, Outcome.COPIED)

    def _visit_injection(self, entry: InjectionTemplate, out_dir: Path) -> None:
        target = self._target(entry, out_dir)
        self.log.debug("Queued injection %s -> %s", entry.source, target)
        self._queued.append((entry, target))

    # Pass two ---------------------------------------------------------------

    def _inject(self, entry: InjectionTemplate, target: Path) -> None:
        source = self.engine.render_file(entry.source, self.context)
        specs = parse_injection(source, entry.source)

        content = self._read(target)
        if content is None:
            raise TargetMissingError("injection target does not exist", target)

        patched, result = apply_all(content, specs, target)
        if result is InjectionOutcome.INJECTED:
            self._write(target, patched)
            self._record(target, Outcome.INJECTED)
        else:
            self._record(target, Outcome.NOOP)

    # Filesystem -------------------------------------------------------------

    def _read(self, path: Path) -> str | None:
        if path in self._pending:
            return self._pending[path]
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise GenerationIOError(f"cannot read existing output: {e}", path) from e

    def _write(self, path: Path, text: str) -> None:
        if self.dry_run:
            self._pending[path] = text
            return
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise GenerationIOError(f"cannot write output: {e}", path) from e

    def _make_dir(self, path: Path) -> None:
        if self.dry_run:
            return
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise GenerationIOError(f"cannot create directory: {e}", path) from e

    def _record(self, path: Path, outcome: Outcome) -> None:
        prefix = "[dry-run] " if self.dry_run else ""
        if outcome in (Outcome.UNCHANGED, Outcome.NOOP):
            self.log.debug("%s%s: %s", prefix, outcome.value, path)
        else:
            self.log.info("%s%s: %s", prefix, outcome.value, path)
        self._report.record(path, outcome)
