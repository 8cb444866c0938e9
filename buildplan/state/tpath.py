"""Snapshot reference ("tpath") parsing: ``<kind>:<path>``."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

KINDS: tuple[str, ...] = ("src", "bin", "repo")


class InvalidTPathError(ValueError):
    def __init__(self, tpath: str):
        self.tpath = tpath
        super().__init__(f'invalid tpath {tpath!r}: must be in the form "[src|bin|repo]:path"')


@dataclass(frozen=True)
class TPath:
    kind: str
    path: Path

    def __str__(self) -> str:
        return f"{self.kind}:{self.path}"


def valid_tpath(tpath: str) -> bool:
    parts = tpath.split(":")
    return len(parts) == 2 and parts[0] in KINDS and bool(parts[1])


def parse_tpath(tpath: str) -> TPath:
    """Split a reference into kind and path. The path itself is not checked."""
    if not valid_tpath(tpath):
        raise InvalidTPathError(tpath)
    kind, raw = tpath.split(":")
    return TPath(kind=kind, path=Path(raw))


__all__ = ["KINDS", "InvalidTPathError", "TPath", "parse_tpath", "valid_tpath"]
