"""
Push flow: load two snapshots, plan the rebuild, gate, publish.

Returns process exit codes; all reporting goes through the buildplan
logger (diagnostics) and stdout (the plan itself).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from buildplan.analysis.graph import write_dot
from buildplan.analysis.resolve import format_unresolved
from buildplan.config import PushConfig
from buildplan.planning.plan import RebuildPlan, plan_rebuild
from buildplan.push.client import HttpPublisher, Job, PublishError, Publisher
from buildplan.push.publish import publish_all
from buildplan.state.diff import Diff
from buildplan.state.loaders import load_state
from buildplan.state.models import LoadError, Snapshot
from buildplan.state.tpath import InvalidTPathError

from .logging import get_logger

_log = get_logger("push")


@dataclass
class PushOptions:
    force: bool = False
    dry_run: bool = True
    dot_path: Optional[Path] = None


def load_snapshot(tpath: str, label: str) -> Optional[Snapshot]:
    """Load one snapshot; log and return None on any load failure."""
    try:
        snapshot = load_state(tpath)
    except InvalidTPathError as e:
        _log.error("buildplan: %s", e)
        return None
    except LoadError as e:
        _log.error("buildplan: failed to load %s state %s: %s", label, tpath, e)
        return None
    _log.info("Successfully parsed %s state! (%d packages)", label, len(snapshot))
    return snapshot


def _names(plan: RebuildPlan, diffs: List[Diff]) -> str:
    return " ".join(plan.new.packages[d.idx].name for d in diffs)


def report_anomalies(plan: RebuildPlan) -> None:
    if plan.anomalies:
        _log.warning(
            "The following packages have the same release number but different version: %s",
            _names(plan, plan.anomalies),
        )
    if plan.downgrades:
        _log.warning(
            "The following packages have older release numbers: %s",
            _names(plan, plan.downgrades),
        )


def report_unresolved(plan: RebuildPlan) -> None:
    _log.error("The following packages have nonexistent build dependencies:")
    for line in format_unresolved(plan.unresolved):
        _log.error("  %s", line)


def report_cycles(plan: RebuildPlan, dot_path: Path) -> None:
    for num, cycle in enumerate(plan.cycles, start=1):
        _log.error("Cycle %d: %s", num, " ".join(plan.names(cycle)))
    labels = [pkg.name for pkg in plan.new.packages]
    if plan.lifted is not None and write_dot(plan.lifted, dot_path, labels=labels):
        _log.info("Wrote lifted dependency graph to %s", dot_path)


def print_order(plan: RebuildPlan) -> None:
    print("Here's the build order:")
    for pkg in plan.packages_in_order():
        print(pkg.name)
    for num, rank in enumerate(plan.ranks()):
        _log.debug("rank %d: %s", num, " ".join(plan.names(rank)))


def run_push(
    old_ref: str,
    new_ref: str,
    options: PushOptions,
    cfg: PushConfig,
    publisher_factory: Callable[[PushConfig], Publisher] = HttpPublisher.from_config,
) -> int:
    old = load_snapshot(old_ref, "old")
    if old is None:
        return 1
    new = load_snapshot(new_ref, "new")
    if new is None:
        return 1

    _log.info("Diffing...")
    plan = plan_rebuild(old, new)

    report_anomalies(plan)
    if plan.anomalies and not options.force:
        return 1

    if not plan.has_work:
        _log.info("No packages to update. Exiting...")
        return 0

    if plan.unresolved:
        report_unresolved(plan)
        if not options.force:
            return 1

    _log.info("The following packages will be updated: %s", " ".join(plan.names(plan.candidates)))

    if not plan.ordered:
        report_cycles(plan, options.dot_path or cfg.dot_path)
        _log.error("buildplan: failed to compute build order: %d dependency cycle(s)", len(plan.cycles))
        return 1

    print_order(plan)
    if options.dry_run:
        return 0
    return publish_plan(plan, cfg, publisher_factory)


def publish_plan(
    plan: RebuildPlan,
    cfg: PushConfig,
    publisher_factory: Callable[[PushConfig], Publisher],
) -> int:
    try:
        publisher = publisher_factory(cfg)
    except ValueError as e:
        _log.error("buildplan: cannot publish: %s", e)
        return 1

    def _done(job: Job) -> None:
        _log.info("Published package %s with job ID %d", job.package, job.id)

    try:
        publish_all(plan.packages_in_order(), publisher, on_published=_done)
    except PublishError as e:
        _log.error("buildplan: %s (%d package(s) already published)", e, len(e.published))
        return 1
    return 0


__all__ = [
    "PushOptions",
    "load_snapshot",
    "publish_plan",
    "run_push",
]
