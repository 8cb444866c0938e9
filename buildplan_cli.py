"""
buildplan CLI

Entry point: environment loading, argument parsing and dispatch only.
Command logic lives in cli.handlers and cli.orchestration.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from buildplan import __version__
from cli.wiring import build_parser, dispatch_command


def _load_environment(env_file: Optional[Path] = None) -> None:
    """Load BUILDPLAN_* settings from .env; variables already exported win."""
    path = env_file if env_file is not None else Path.cwd() / ".env"
    if path.is_file():
        load_dotenv(dotenv_path=path, override=False)


def main(argv: Optional[Sequence[str]] = None) -> int:
    _load_environment()
    parser = build_parser(version=__version__)
    args = parser.parse_args(argv)
    return dispatch_command(parser, args)


if __name__ == "__main__":
    sys.exit(main())
