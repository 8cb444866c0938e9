"""
Rebuild planning.

Composes diffing, the resolution check, lifting and ordering into one
RebuildPlan. Pure: no I/O, no publishing, and cycles are recorded on the
plan instead of raised, so callers decide how to report and gate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from buildplan.analysis.graph import DependencyGraph
from buildplan.analysis.order import BuildOrderError, build_order, build_ranks
from buildplan.analysis.resolve import UnresolvedDependencies, find_unresolved
from buildplan.state.diff import Diff, changed, classify
from buildplan.state.models import Package, Snapshot

logger = logging.getLogger(__name__)


@dataclass
class RebuildPlan:
    new: Snapshot
    changes: List[Diff]
    candidates: List[int]
    anomalies: List[Diff] = field(default_factory=list)
    downgrades: List[Diff] = field(default_factory=list)
    unresolved: List[UnresolvedDependencies] = field(default_factory=list)
    lifted: Optional[DependencyGraph] = None
    order: Optional[List[int]] = None
    cycles: List[List[int]] = field(default_factory=list)

    @property
    def has_work(self) -> bool:
        return bool(self.candidates)

    @property
    def ordered(self) -> bool:
        return self.order is not None

    def packages_in_order(self) -> List[Package]:
        if self.order is None:
            return []
        return [self.new.packages[idx] for idx in self.order]

    def names(self, positions: List[int]) -> List[str]:
        return self.new.names(positions)

    def ranks(self) -> List[List[int]]:
        """Candidates grouped by dependency depth (empty when unordered)."""
        if self.lifted is None or self.order is None:
            return []
        return build_ranks(self.lifted)


def plan_rebuild(old: Snapshot, new: Snapshot) -> RebuildPlan:
    changes = changed(old, new)
    split = classify(changes)
    candidates = [d.idx for d in split.candidates]
    plan = RebuildPlan(
        new=new,
        changes=changes,
        candidates=candidates,
        anomalies=split.anomalies,
        downgrades=split.downgrades,
    )
    logger.debug(
        "diff: %d changed, %d candidates, %d anomalies, %d downgrades",
        len(changes),
        len(candidates),
        len(split.anomalies),
        len(split.downgrades),
    )
    if not candidates:
        return plan

    plan.unresolved = find_unresolved(new, candidates)
    plan.lifted = new.dep_graph.lift(candidates)
    try:
        plan.order = build_order(plan.lifted)
    except BuildOrderError as e:
        plan.cycles = e.cycles
    return plan


__all__ = ["RebuildPlan", "plan_rebuild"]
