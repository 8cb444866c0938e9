"""
Package snapshot model.

A Snapshot is an immutable, ordered collection of packages. Positions in
that order are the package identities used everywhere downstream (diffs,
dependency graph, build order). The name index and dependency graph are
derived once at construction and cached.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from buildplan.analysis.graph import DependencyGraph, build_dependency_graph


class LoadError(RuntimeError):
    """Snapshot metadata is unreadable or malformed."""


@dataclass(frozen=True)
class Package:
    name: str
    version: str
    release: int
    build_deps: tuple[str, ...] = ()
    provides: tuple[str, ...] = ()

    def resolves(self, name_index: Mapping[str, int]) -> bool:
        """True if every build dependency names a package in name_index."""
        return all(dep in name_index for dep in self.build_deps)

    def missing_deps(self, name_index: Mapping[str, int]) -> list[str]:
        return [dep for dep in self.build_deps if dep not in name_index]


class Snapshot:
    """
    Point-in-time set of packages.

    Subclasses only record where the packages came from; the contract
    (packages, name_index, dep_index, dep_graph) is identical for every
    source kind.
    """

    kind = "memory"

    def __init__(self, packages: Iterable[Package], origin: Path | None = None):
        self._packages: tuple[Package, ...] = tuple(packages)
        self.origin = origin
        index: dict[str, int] = {}
        for idx, pkg in enumerate(self._packages):
            if pkg.name in index:
                where = f" in {origin}" if origin is not None else ""
                raise LoadError(f"duplicate package name {pkg.name!r}{where}")
            index[pkg.name] = idx
        self._name_index: Mapping[str, int] = MappingProxyType(index)
        deps_index = dict(index)
        for idx, pkg in enumerate(self._packages):
            for alias in pkg.provides:
                deps_index.setdefault(alias, idx)
        self._dep_index: Mapping[str, int] = MappingProxyType(deps_index)
        self._graph: DependencyGraph | None = None

    @property
    def packages(self) -> tuple[Package, ...]:
        return self._packages

    @property
    def name_index(self) -> Mapping[str, int]:
        return self._name_index

    @property
    def dep_index(self) -> Mapping[str, int]:
        """name_index plus binary names each source package provides."""
        return self._dep_index

    @property
    def dep_graph(self) -> DependencyGraph:
        if self._graph is None:
            self._graph = build_dependency_graph(self._packages, self._dep_index)
        return self._graph

    def get(self, name: str) -> Package | None:
        idx = self._name_index.get(name)
        if idx is None:
            return None
        return self._packages[idx]

    def index_of(self, name: str) -> int:
        """Position of name, or -1 when the package is not in this snapshot."""
        return self._name_index.get(name, -1)

    def names(self, positions: Iterable[int]) -> list[str]:
        return [self._packages[idx].name for idx in positions]

    def __contains__(self, name: object) -> bool:
        return name in self._name_index

    def __len__(self) -> int:
        return len(self._packages)

    def __iter__(self) -> Iterator[Package]:
        return iter(self._packages)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.kind}:{self.origin} packages={len(self)}>"


class SourceSnapshot(Snapshot):
    kind = "src"


class BinarySnapshot(Snapshot):
    kind = "bin"


class RepoSnapshot(Snapshot):
    kind = "repo"


__all__ = [
    "LoadError",
    "Package",
    "Snapshot",
    "SourceSnapshot",
    "BinarySnapshot",
    "RepoSnapshot",
]
