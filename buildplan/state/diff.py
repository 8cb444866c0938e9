"""
Snapshot diffing.

Compares two snapshots package by package (by name) and reports what
changed, in the order of the new snapshot. Unchanged packages are not
reported. Versions are opaque strings and are only compared for equality;
releases are integers and decide the classification.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional

if TYPE_CHECKING:
    from buildplan.state.models import Snapshot


class DiffKind(str, Enum):
    NEW = "new"
    NEW_RELEASE = "new-release"
    ANOMALY = "anomaly"
    DOWNGRADE = "downgrade"


@dataclass(frozen=True)
class Diff:
    idx: int
    release: int
    version: str
    old_idx: Optional[int] = None
    old_release: Optional[int] = None
    old_version: Optional[str] = None

    @property
    def is_new(self) -> bool:
        return self.old_idx is None

    @property
    def is_new_release(self) -> bool:
        """Eligible for rebuild. Packages missing from the old snapshot count."""
        return self.is_new or self.release > self.old_release

    @property
    def is_same_release(self) -> bool:
        return not self.is_new and self.release == self.old_release

    @property
    def is_anomaly(self) -> bool:
        return self.is_same_release and self.version != self.old_version

    @property
    def is_downgrade(self) -> bool:
        return not self.is_new and self.release < self.old_release

    @property
    def kind(self) -> DiffKind:
        if self.is_new:
            return DiffKind.NEW
        if self.release > self.old_release:
            return DiffKind.NEW_RELEASE
        if self.release < self.old_release:
            return DiffKind.DOWNGRADE
        if self.version != self.old_version:
            return DiffKind.ANOMALY
        raise ValueError(f"diff for position {self.idx} has no change")

    def to_dict(self) -> Dict[str, object]:
        return {
            "idx": self.idx,
            "kind": self.kind.value,
            "release": self.release,
            "version": self.version,
            "old_idx": self.old_idx,
            "old_release": self.old_release,
            "old_version": self.old_version,
        }


@dataclass
class Classified:
    """Diffs split by what the planner does with them."""

    candidates: List[Diff] = field(default_factory=list)
    anomalies: List[Diff] = field(default_factory=list)
    downgrades: List[Diff] = field(default_factory=list)


def changed(old: "Snapshot", new: "Snapshot") -> List[Diff]:
    """Diff every package of new against old, in new's order."""
    res: List[Diff] = []
    for idx, pkg in enumerate(new.packages):
        old_idx = old.name_index.get(pkg.name)
        if old_idx is None:
            res.append(Diff(idx=idx, release=pkg.release, version=pkg.version))
            continue

        old_pkg = old.packages[old_idx]
        if old_pkg.release == pkg.release and old_pkg.version == pkg.version:
            continue
        res.append(
            Diff(
                idx=idx,
                release=pkg.release,
                version=pkg.version,
                old_idx=old_idx,
                old_release=old_pkg.release,
                old_version=old_pkg.version,
            )
        )
    return res


def classify(changes: List[Diff]) -> Classified:
    out = Classified()
    for diff in changes:
        if diff.is_new_release:
            out.candidates.append(diff)
        elif diff.is_anomaly:
            out.anomalies.append(diff)
        elif diff.is_downgrade:
            out.downgrades.append(diff)
    return out


__all__ = ["Classified", "Diff", "DiffKind", "changed", "classify"]
