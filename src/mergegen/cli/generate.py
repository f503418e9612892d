"""Generate CLI command."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from mergegen.config import default_config_path, default_data_path, load_config, load_data
from mergegen.errors import MergegenError


def cmd_generate(args: argparse.Namespace) -> int:
    from mergegen.project import run_project

    config_path = getattr(args, "config", None) or default_config_path()
    data_path = getattr(args, "data", None) or default_data_path()
    if not config_path:
        print("error: --config is required (or set MERGEGEN_CONFIG)", file=sys.stderr)
        return 1
    if not data_path:
        print("error: --data is required (or set MERGEGEN_DATA)", file=sys.stderr)
        return 1

    try:
        config = load_config(config_path)
        data = load_data(data_path)
        result = run_project(
            config,
            data,
            output=getattr(args, "output", None),
            dry_run=getattr(args, "dry_run", False),
            include=getattr(args, "include", None) or [],
            exclude=getattr(args, "exclude", None) or [],
        )
    except MergegenError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"Generated from {Path(config_path)}")
    print("─" * 40)
    print(f"  Template sets: {len(result['generated'])}")
    if result["skipped"]:
        print(f"  Skipped:       {len(result['skipped'])}")
    print(result["report"].summary())
    return 0
