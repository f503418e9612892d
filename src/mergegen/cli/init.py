"""Init CLI command."""

import argparse


def cmd_init(args: argparse.Namespace) -> int:
    from mergegen.project import init_project

    result = init_project(args.path)
    for path in result["created"]:
        print(f"  created  {path}")
    for path in result["skipped"]:
        print(f"  exists   {path}")
    print(f"\nRun: mergegen generate -c {args.path}/config.yaml -d {args.path}/data.json")
    return 0
