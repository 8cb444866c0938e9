"""Diff flow: list every classified change between two snapshots."""

from __future__ import annotations

import json
from typing import List

from buildplan.state.diff import Diff, changed
from buildplan.state.models import Snapshot

from .push_flow import load_snapshot


def diff_rows(old: Snapshot, new: Snapshot, changes: List[Diff]) -> List[dict]:
    rows: List[dict] = []
    for diff in changes:
        row = diff.to_dict()
        row["name"] = new.packages[diff.idx].name
        rows.append(row)
    return rows


def diff_to_text(rows: List[dict]) -> str:
    if not rows:
        return "No changes."
    lines: List[str] = []
    width = max(len(r["name"]) for r in rows)
    for r in rows:
        if r["old_idx"] is None:
            before = "(none)"
        else:
            before = f"{r['old_version']}-{r['old_release']}"
        after = f"{r['version']}-{r['release']}"
        lines.append(f"{r['kind']:<12} {r['name']:<{width}}  {before} -> {after}")
    return "\n".join(lines)


def run_diff(old_ref: str, new_ref: str, *, as_json: bool = False) -> int:
    old = load_snapshot(old_ref, "old")
    if old is None:
        return 1
    new = load_snapshot(new_ref, "new")
    if new is None:
        return 1
    rows = diff_rows(old, new, changed(old, new))
    if as_json:
        print(json.dumps(rows, indent=2, ensure_ascii=False))
    else:
        print(diff_to_text(rows))
    return 0


__all__ = ["diff_rows", "diff_to_text", "run_diff"]
