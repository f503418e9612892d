"""Project configuration — config.yaml and data files.

A project file lists template sets and the knobs shared by all of them:

    globals:
      version: "1.0.0"
    manual_sections:
      start_marker: MANUAL SECTION START
      end_marker: MANUAL SECTION END
      orphans: drop
    templates:
      - name: services
        folder: templates/service
        output: out
        iterate: "svc in services if svc.enabled"

Relative paths (template folders, extra data files) are resolved against the
directory holding the config file.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from mergegen.errors import ConfigError
from mergegen.sections import MANUAL_END, MANUAL_START, ManualSectionConfig, OrphanPolicy

# Environment fallbacks for the CLI's --config / --data flags
CONFIG_ENV = "MERGEGEN_CONFIG"
DATA_ENV = "MERGEGEN_DATA"


@dataclass
class FormatterConfig:
    command: str | None = None
    args: list[str] = field(default_factory=list)
    type: str = "command"
    enabled: bool = True


@dataclass
class FormatConfig:
    enabled: bool = False
    formatters: dict[str, FormatterConfig] = field(default_factory=dict)
    ignore_patterns: list[str] = field(default_factory=list)
    preserve_manual_sections: bool = True


@dataclass
class ExtraDataConfig:
    key: str
    path: str
    required: bool = False


@dataclass
class TemplateSet:
    folder: str
    name: str | None = None
    output: str | None = None
    iterate: str | None = None
    enabled: bool = True

    @property
    def label(self) -> str:
        return self.name or self.folder


@dataclass
class ProjectConfig:
    """Parsed config.yaml."""

    templates: list[TemplateSet] = field(default_factory=list)
    globals: dict[str, Any] = field(default_factory=dict)
    flatten_data: bool = True
    manual_sections: ManualSectionConfig = field(default_factory=ManualSectionConfig)
    extra_data: list[ExtraDataConfig] = field(default_factory=list)
    format: FormatConfig = field(default_factory=FormatConfig)
    base_dir: Path = field(default_factory=Path)

    def resolve(self, relative: str) -> Path:
        """Resolve *relative* against the config file's directory."""
        p = Path(relative).expanduser()
        return p if p.is_absolute() else self.base_dir / p


def default_config_path() -> Path | None:
    env = os.environ.get(CONFIG_ENV)
    return Path(env) if env else None


def default_data_path() -> Path | None:
    env = os.environ.get(DATA_ENV)
    return Path(env) if env else None


def load_config(path: Path | str) -> ProjectConfig:
    """Read and parse a config.yaml file.

    Raises:
        ConfigError: The file is missing, not valid YAML, or has the wrong shape.
    """
    config_path = Path(path)
    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config: {e}", config_path) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML: {e}", config_path) from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("config is not a YAML mapping", config_path)
    try:
        return parse_config(raw, base_dir=config_path.parent)
    except ConfigError as e:
        e.path = e.path or config_path
        raise


def parse_config(raw: dict, base_dir: Path | str = ".") -> ProjectConfig:
    """Build a ``ProjectConfig`` from an already-parsed mapping."""
    templates = []
    for i, entry in enumerate(_as_list(raw.get("templates"), "templates")):
        if not isinstance(entry, dict) or not entry.get("folder"):
            raise ConfigError(f"templates[{i}] must be a mapping with a 'folder'")
        templates.append(TemplateSet(
            folder=str(entry["folder"]),
            name=entry.get("name"),
            output=entry.get("output"),
            iterate=entry.get("iterate"),
            enabled=bool(entry.get("enabled", True)),
        ))

    globals_ = raw.get("globals") or {}
    if not isinstance(globals_, dict):
        raise ConfigError("'globals' must be a mapping")

    extra = []
    for i, entry in enumerate(_as_list(raw.get("extra_data"), "extra_data")):
        if not isinstance(entry, dict) or "key" not in entry or "path" not in entry:
            raise ConfigError(f"extra_data[{i}] needs 'key' and 'path'")
        extra.append(ExtraDataConfig(
            key=str(entry["key"]),
            path=str(entry["path"]),
            required=bool(entry.get("required", False)),
        ))

    return ProjectConfig(
        templates=templates,
        globals=globals_,
        flatten_data=bool(raw.get("flatten_data", True)),
        manual_sections=_parse_sections(raw.get("manual_sections") or {}),
        extra_data=extra,
        format=_parse_format(raw.get("format") or {}),
        base_dir=Path(base_dir),
    )


def _as_list(value: Any, name: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"'{name}' must be a list")
    return value


def _parse_sections(raw: dict) -> ManualSectionConfig:
    if not isinstance(raw, dict):
        raise ConfigError("'manual_sections' must be a mapping")
    orphans = raw.get("orphans", OrphanPolicy.DROP.value)
    try:
        policy = OrphanPolicy(str(orphans).lower())
    except ValueError:
        valid = ", ".join(p.value for p in OrphanPolicy)
        raise ConfigError(f"manual_sections.orphans must be one of {valid}, got '{orphans}'") from None
    return ManualSectionConfig(
        start_marker=str(raw.get("start_marker", MANUAL_START)),
        end_marker=str(raw.get("end_marker", MANUAL_END)),
        orphans=policy,
    )


def _parse_format(raw: dict) -> FormatConfig:
    if not isinstance(raw, dict):
        raise ConfigError("'format' must be a mapping")
    defaults = raw.get("defaults") or {}
    formatters = {}
    for pattern, entry in (raw.get("formatters") or {}).items():
        if not isinstance(entry, dict):
            raise ConfigError(f"format.formatters['{pattern}'] must be a mapping")
        formatters[str(pattern)] = FormatterConfig(
            command=entry.get("command"),
            args=[str(a) for a in entry.get("args") or []],
            type=str(entry.get("type", "command")),
            enabled=bool(entry.get("enabled", True)),
        )
    return FormatConfig(
        enabled=bool(raw.get("enabled", False)),
        formatters=formatters,
        ignore_patterns=[str(p) for p in defaults.get("ignore_patterns") or []],
        preserve_manual_sections=bool(defaults.get("preserve_manual_sections", True)),
    )


def load_data(path: Path | str) -> Any:
    """Load a JSON or YAML data file, chosen by extension.

    Raises:
        ConfigError: The file cannot be read or parsed.
    """
    data_path = Path(path)
    try:
        with open(data_path) as f:
            if data_path.suffix.lower() in (".yaml", ".yml"):
                return yaml.safe_load(f)
            return json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read data file: {e}", data_path) from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot parse data file: {e}", data_path) from e
