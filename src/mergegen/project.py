"""Project runs — every enabled template set of a config.yaml, per context.

The run process:
1. Load extra data files once
2. Build the base context (globals, dd, extra data, flattened data)
3. For each enabled template set that passes the include/exclude filters,
   expand its iteration (if any) and generate once per resulting context

Stops at the first failure; outputs already written are kept.
"""

from __future__ import annotations

import fnmatch
import json
import logging
import re
from pathlib import Path
from typing import Any, Sequence

from mergegen.config import ProjectConfig, load_data
from mergegen.engine import TemplateEngine
from mergegen.errors import ConfigError
from mergegen.formatting import Formatter
from mergegen.generator import GenerationReport
from mergegen.iteration import DATA_ROOT, iterate_contexts, parse_iteration
from mergegen.render_helper import RenderHelper
from mergegen.sections import MANUAL_END, MANUAL_START

logger = logging.getLogger(__name__)


def load_extra_data(config: ProjectConfig) -> dict[str, Any]:
    """Load ``extra_data`` files keyed by their configured name.

    Raises:
        ConfigError: A required file is missing or cannot be parsed.
    """
    extra: dict[str, Any] = {}
    for entry in config.extra_data:
        path = config.resolve(entry.path)
        try:
            value = load_data(path)
        except ConfigError as e:
            if entry.required:
                raise
            logger.warning("Optional extra data '%s' unavailable: %s", entry.key, e)
            continue
        if value is None:
            if entry.required:
                raise ConfigError(f"required extra data '{entry.key}' is empty", path)
            logger.warning("Optional extra data '%s' is empty: %s", entry.key, path)
            continue
        extra[entry.key] = value
    return extra


def build_base_context(
    config: ProjectConfig,
    data: Any,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    context: dict[str, Any] = {}
    if config.globals:
        context["globals"] = config.globals
    context[DATA_ROOT] = data
    context.update(extra or {})
    if config.flatten_data and isinstance(data, dict):
        context.update(data)
    return context


def matches_name(name: str, pattern: str) -> bool:
    """Exact name, ``*`` glob, or ``regex:<pattern>``."""
    if pattern.startswith("regex:"):
        try:
            return re.search(pattern[len("regex:"):], name) is not None
        except re.error as e:
            raise ConfigError(f"invalid filter regex '{pattern}': {e}") from e
    if any(ch in pattern for ch in "*?["):
        return fnmatch.fnmatchcase(name, pattern)
    return name == pattern


def should_skip(name: str | None, include: Sequence[str] = (), exclude: Sequence[str] = ()) -> bool:
    """Filters apply to named template sets only."""
    if name is None:
        return False
    if include and not any(matches_name(name, p) for p in include):
        return True
    return any(matches_name(name, p) for p in exclude)


def run_project(
    config: ProjectConfig,
    data: Any,
    output: Path | str | None = None,
    dry_run: bool = False,
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
    log: logging.Logger | None = None,
) -> dict[str, Any]:
    """Generate every enabled template set of *config*.

    Args:
        config: Parsed project configuration.
        data: The data dictionary (usually the parsed --data file).
        output: Base output directory. Defaults to the config file's directory.
        dry_run: Compute everything, write nothing.
        include: Only run template sets whose name matches one of these.
        exclude: Skip template sets whose name matches one of these.
        log: Logger handed to each generation run.

    Returns:
        Summary dict with generated and skipped set names and the merged report.
    """
    log = log or logging.getLogger("mergegen")
    output_base = Path(output) if output else config.base_dir
    base_context = build_base_context(config, data, load_extra_data(config))

    engine = TemplateEngine()
    formatter = Formatter(config.format, config.manual_sections) if config.format.enabled else None
    report = GenerationReport(dry_run=dry_run)
    generated: list[str] = []
    skipped: list[str] = []

    for template_set in config.templates:
        if not template_set.enabled or should_skip(template_set.name, include, exclude):
            log.info("Skipping template set: %s", template_set.label)
            skipped.append(template_set.label)
            continue

        folder = config.resolve(template_set.folder)
        target = output_base / template_set.output if template_set.output else output_base
        steps = parse_iteration(template_set.iterate) if template_set.iterate else []

        runs = 0
        for context in iterate_contexts(steps, base_context, engine):
            helper = RenderHelper(
                context,
                logger=log,
                dry_run=dry_run,
                sections=config.manual_sections,
                formatter=formatter,
                engine=engine,
            )
            report.merge(helper.generate(folder, target))
            runs += 1
        log.info("Template set %s: %d run(s)", template_set.label, runs)
        generated.append(template_set.label)

    return {
        "generated": generated,
        "skipped": skipped,
        "report": report,
        "dry_run": dry_run,
    }


# ── Project scaffolding ─────────────────────────────────────────

_SAMPLE_CONFIG = """\
globals:
  version: "1.0.0"
  project: "MyProject"

manual_sections:
  start_marker: "{start}"
  end_marker: "{end}"
  orphans: drop

templates:
  - name: "Example"
    folder: "templates"
    output: "output"
    iterate: "item in items"
    enabled: true
"""

_SAMPLE_DATA = {
    "items": [
        {"name": "item1", "value": 100},
        {"name": "item2", "value": 200},
    ],
}

_SAMPLE_TEMPLATE = """\
# {{{{ item.name }}}}

Value: {{{{ item.value }}}}

<!-- {start}: custom -->
Add your custom content here
<!-- {end} -->
"""

SAMPLE_TEMPLATE_NAME = "{{ item.name }}.md.j2"


def init_project(path: Path | str) -> dict[str, list[str]]:
    """Scaffold a project (config, data, sample template) under *path*.

    Existing files are left alone.

    Returns:
        Dict with ``created`` and ``skipped`` path lists.
    """
    root = Path(path)
    (root / "templates").mkdir(parents=True, exist_ok=True)
    (root / "output").mkdir(parents=True, exist_ok=True)

    files = {
        root / "config.yaml": _SAMPLE_CONFIG.format(start=MANUAL_START, end=MANUAL_END),
        root / "data.json": json.dumps(_SAMPLE_DATA, indent=2) + "\n",
        root / "templates" / SAMPLE_TEMPLATE_NAME: _SAMPLE_TEMPLATE.format(
            start=MANUAL_START, end=MANUAL_END,
        ),
    }
    created: list[str] = []
    skipped: list[str] = []
    for file_path, content in files.items():
        if file_path.exists():
            skipped.append(str(file_path))
            continue
        file_path.write_text(content)
        created.append(str(file_path))
    logger.info("Initialized project at %s (%d files)", root, len(created))
    return {"created": created, "skipped": skipped}
