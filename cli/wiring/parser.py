"""Parser wiring for the buildplan entrypoint."""

from __future__ import annotations

import argparse
from pathlib import Path

TPATH_HELP = "[src|bin|repo]:path"


def build_parser(*, version: str) -> argparse.ArgumentParser:
    """Configure top-level CLI parser and subcommands."""
    parser = argparse.ArgumentParser(
        prog="buildplan",
        description="buildplan: plan and publish incremental package rebuilds",
        epilog="Commands: push | diff. Use buildplan help for an overview.",
    )
    parser.add_argument("--version", "-V", action="version", version=f"%(prog)s {version}")
    subparsers = parser.add_subparsers(dest="command")

    _add_push_command(subparsers)
    _add_diff_command(subparsers)

    subparsers.add_parser("help", help="Show buildplan command overview")

    return parser


def _add_output_flags(sub: argparse.ArgumentParser) -> None:
    sub.add_argument("--quiet", "-q", action="store_true", help="Only warnings and errors")
    sub.add_argument("--verbose", "-v", action="store_true", help="Debug output")


def _add_push_command(subparsers: argparse._SubParsersAction) -> None:
    push_parser = subparsers.add_parser(
        "push",
        help="Push package changes to the build server",
        usage=f"%(prog)s [options] <{TPATH_HELP}-to-old> <{TPATH_HELP}-to-new>",
    )
    push_parser.add_argument("old", type=str, help=f"Old snapshot ({TPATH_HELP})")
    push_parser.add_argument("new", type=str, help=f"New snapshot ({TPATH_HELP})")
    push_parser.add_argument("--force", "-f", action="store_true", default=False, help="Continue past anomalies and unresolved dependencies")
    push_parser.add_argument("--dry-run", "-n", action="store_true", default=True, dest="dry_run", help="Don't publish anything (default)")
    push_parser.add_argument("--no-dry-run", action="store_false", dest="dry_run", help="Publish the build order to the build server")
    push_parser.add_argument("--dot", type=Path, default=None, metavar="PATH", help="Where to write the lifted graph on a cycle (default: BUILDPLAN_DOT_PATH or lifted.gv)")
    _add_output_flags(push_parser)


def _add_diff_command(subparsers: argparse._SubParsersAction) -> None:
    diff_parser = subparsers.add_parser("diff", help="Show classified package changes between two snapshots")
    diff_parser.add_argument("old", type=str, help=f"Old snapshot ({TPATH_HELP})")
    diff_parser.add_argument("new", type=str, help=f"New snapshot ({TPATH_HELP})")
    diff_parser.add_argument("--json", action="store_true", help="Output JSON (machine-readable)")
    _add_output_flags(diff_parser)
