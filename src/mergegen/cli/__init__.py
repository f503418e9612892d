"""Command-line interface for mergegen.

Usage:
    mergegen generate -c config.yaml -d data.json [-o OUT] [--dry-run]
                      [--include P]... [--exclude P]...
    mergegen -c config.yaml -d data.json          (generate is the default)
    mergegen init [PATH]
"""

import argparse
import logging
import sys

from mergegen.cli.generate import cmd_generate
from mergegen.cli.init import cmd_init


def _add_generate_options(parser: argparse.ArgumentParser, default=None) -> None:
    # Subcommand copies use SUPPRESS so they don't clobber top-level values.
    parser.add_argument(
        "-c", "--config", default=default,
        help="Path to the YAML configuration file (env: MERGEGEN_CONFIG)",
    )
    parser.add_argument(
        "-d", "--data", default=default,
        help="Path to the JSON or YAML data file (env: MERGEGEN_DATA)",
    )
    parser.add_argument(
        "-o", "--output", default=default,
        help="Base output directory (default: the config file's directory)",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        default=default if default is not None else False,
        help="Render and merge without writing files",
    )
    parser.add_argument(
        "--include", action="append", default=default,
        help="Only run template sets matching this name, glob or regex:pattern",
    )
    parser.add_argument(
        "--exclude", action="append", default=default,
        help="Skip template sets matching this name, glob or regex:pattern",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mergegen",
        description="Template generator that keeps hand-written sections across regeneration",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Debug logging",
    )
    _add_generate_options(parser)
    sub = parser.add_subparsers(dest="command")

    gen = sub.add_parser("generate", help="Generate files from templates")
    _add_generate_options(gen, default=argparse.SUPPRESS)
    gen.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="Debug logging")

    init = sub.add_parser("init", help="Scaffold a new project")
    init.add_argument("path", nargs="?", default=".", help="Project directory")

    return parser


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    dispatch = {
        "generate": cmd_generate,
        "init": cmd_init,
    }

    command = args.command
    if command is None:
        if not args.config:
            parser.print_help()
            return 0
        command = "generate"
    return dispatch[command](args)


if __name__ == "__main__":
    sys.exit(main())
