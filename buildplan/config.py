"""Runtime configuration for publishing, resolved from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_TIMEOUT = 30
DEFAULT_DOT_PATH = "lifted.gv"


@dataclass(slots=True, frozen=True)
class PushConfig:
    server_url: str | None
    token: str | None
    timeout: int = DEFAULT_TIMEOUT
    dot_path: Path = Path(DEFAULT_DOT_PATH)

    @property
    def can_publish(self) -> bool:
        return bool(self.server_url)


def _env_str(name: str) -> str | None:
    value = os.environ.get(name, "").strip()
    return value or None


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def load_push_config() -> PushConfig:
    """BUILDPLAN_SERVER_URL, BUILDPLAN_TOKEN, BUILDPLAN_TIMEOUT, BUILDPLAN_DOT_PATH."""
    server = _env_str("BUILDPLAN_SERVER_URL")
    return PushConfig(
        server_url=server.rstrip("/") if server else None,
        token=_env_str("BUILDPLAN_TOKEN"),
        timeout=max(1, _env_int("BUILDPLAN_TIMEOUT", DEFAULT_TIMEOUT)),
        dot_path=Path(_env_str("BUILDPLAN_DOT_PATH") or DEFAULT_DOT_PATH),
    )


__all__ = ["PushConfig", "load_push_config"]
