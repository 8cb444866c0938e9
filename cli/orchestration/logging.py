"""Centralized logging helpers for CLI and planning paths."""

from __future__ import annotations

import logging
import os
import sys

_configured = False


def _resolve_level() -> int:
    raw = os.environ.get("BUILDPLAN_LOG_LEVEL", "").strip().upper()
    if raw:
        return getattr(logging, raw, logging.INFO)
    return logging.INFO


def _root_logger() -> logging.Logger:
    """The buildplan logger owns the only stderr handler; nothing reaches the host's root logger."""
    root = logging.getLogger("buildplan")
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.propagate = False
    return root


def configure_cli_logging(*, quiet: bool = False, verbose: bool = False) -> None:
    """Set buildplan.* logger levels from CLI flags. --quiet/--verbose override env."""
    global _configured
    env_level = _resolve_level()
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = env_level
    _root_logger().setLevel(level)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a buildplan.<name> logger; handlers live on the buildplan root."""
    root = _root_logger()
    if not _configured:
        root.setLevel(_resolve_level())
    return logging.getLogger(f"buildplan.{name}")
