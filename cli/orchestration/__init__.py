"""Command flows behind the CLI handlers (push, diff)."""

from .diff_flow import run_diff
from .push_flow import PushOptions, load_snapshot, run_push

__all__ = ["PushOptions", "load_snapshot", "run_diff", "run_push"]
