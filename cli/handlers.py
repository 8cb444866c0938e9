"""CLI handlers facade.

Re-exports the concrete handler implementations so wiring only depends on
`cli.handlers.handle_*`.
"""
from __future__ import annotations

from .push_handlers import handle_diff, handle_help, handle_push

__all__ = ["handle_help", "handle_push", "handle_diff"]
