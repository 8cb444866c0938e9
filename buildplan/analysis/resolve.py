"""Build-dependency resolution check for rebuild candidates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List

if TYPE_CHECKING:
    from buildplan.state.models import Snapshot


@dataclass(frozen=True)
class UnresolvedDependencies:
    idx: int
    name: str
    missing: tuple[str, ...]


def find_unresolved(snapshot: "Snapshot", candidates: Iterable[int]) -> List[UnresolvedDependencies]:
    """
    For each candidate position, collect build dependencies that do not name
    any package in snapshot (rebuilt or not). Only failing candidates are
    returned, in candidate order, so callers can report the whole batch.
    """
    report: List[UnresolvedDependencies] = []
    for idx in candidates:
        pkg = snapshot.packages[idx]
        missing = pkg.missing_deps(snapshot.dep_index)
        if missing:
            report.append(UnresolvedDependencies(idx=idx, name=pkg.name, missing=tuple(missing)))
    return report


def format_unresolved(report: List[UnresolvedDependencies]) -> List[str]:
    return [f"{item.name}: {' '.join(item.missing)}" for item in report]


__all__ = ["UnresolvedDependencies", "find_unresolved", "format_unresolved"]
