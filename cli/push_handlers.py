"""Handlers for the push and diff commands."""

from __future__ import annotations

from typing import Any

from buildplan.config import load_push_config

from .orchestration import PushOptions, run_diff, run_push


def handle_help(parser: Any) -> int:
    """Print command overview and detailed argparse help."""
    print("buildplan: incremental rebuild planner for package repositories")
    print()
    print("Commands:")
    print("  push <old> <new>   plan the rebuild and publish it in build order")
    print("  diff <old> <new>   list changed packages and how they are classified")
    print()
    print("  Snapshots are given as src:<dir>, bin:<dir> or repo:<index>.")
    print("  push is a dry run unless --no-dry-run is given.")
    print()
    parser.print_help()
    return 0


def handle_push(args: Any) -> int:
    cfg = load_push_config()
    options = PushOptions(
        force=bool(getattr(args, "force", False)),
        dry_run=bool(getattr(args, "dry_run", True)),
        dot_path=getattr(args, "dot", None),
    )
    return run_push(args.old, args.new, options, cfg)


def handle_diff(args: Any) -> int:
    return run_diff(args.old, args.new, as_json=bool(getattr(args, "json", False)))
