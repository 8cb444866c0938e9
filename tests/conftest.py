"""Pytest configuration. Ensures project root is in sys.path for buildplan_cli and cli."""
import logging
from pathlib import Path
import sys

import pytest


ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from buildplan.state.models import Package, Snapshot  # noqa: E402


@pytest.fixture(autouse=True)
def _capture_buildplan_logs(caplog, monkeypatch):
    """buildplan logs do not propagate; hand caplog's handler to the buildplan logger."""
    logger = logging.getLogger("buildplan")
    monkeypatch.setattr(logger, "propagate", False)
    logger.addHandler(caplog.handler)
    yield
    logger.removeHandler(caplog.handler)


def make_snapshot(*entries) -> Snapshot:
    """Build an in-memory snapshot from (name, version, release[, deps]) tuples."""
    packages = []
    for entry in entries:
        name, version, release = entry[:3]
        deps = tuple(entry[3]) if len(entry) > 3 else ()
        packages.append(Package(name=name, version=version, release=release, build_deps=deps))
    return Snapshot(packages)


def write_recipe(root: Path, name: str, version: str, release: int, deps=()) -> Path:
    """Write <root>/<name>/package.yml."""
    pkg_dir = root / name
    pkg_dir.mkdir(parents=True, exist_ok=True)
    lines = [f"name: {name}", f"version: '{version}'", f"release: {release}"]
    if deps:
        lines.append("builddeps:")
        lines.extend(f"  - {d}" for d in deps)
    path = pkg_dir / "package.yml"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
