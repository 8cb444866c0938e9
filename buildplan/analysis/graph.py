"""
Dependency graph over package positions.

Nodes are **package positions** in a snapshot (stable integer identities).
Edges point from a package to each of its build dependencies:
``u -> v`` means "u depends on v, v must be built first".
Dependencies that do not resolve to a local package are not edges.

One adjacency-list representation backs lifting, ordering and cycle
diagnosis (see buildplan.analysis.order).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

KeepSpec = Union[Callable[[int], bool], Iterable[int]]


class GraphError(ValueError):
    """Structurally invalid graph operation (e.g. unknown node)."""


class DependencyGraph:
    """
    Immutable directed graph.

    Node ids are kept as given, so a lifted subgraph still speaks in
    positions of the snapshot it was derived from.
    """

    __slots__ = ("_succ", "_pred")

    def __init__(self, nodes: Iterable[int], edges: Iterable[Tuple[int, int]] = ()):
        succ: Dict[int, List[int]] = {n: [] for n in sorted(set(nodes))}
        pred: Dict[int, List[int]] = {n: [] for n in succ}
        seen: set[Tuple[int, int]] = set()
        for u, v in edges:
            if u not in succ or v not in succ:
                raise GraphError(f"edge ({u}, {v}) references a node outside the graph")
            if (u, v) in seen:
                continue
            seen.add((u, v))
            succ[u].append(v)
            pred[v].append(u)
        self._succ: Dict[int, Tuple[int, ...]] = {n: tuple(vs) for n, vs in succ.items()}
        self._pred: Dict[int, Tuple[int, ...]] = {n: tuple(us) for n, us in pred.items()}

    @property
    def nodes(self) -> Tuple[int, ...]:
        return tuple(self._succ)

    def successors(self, node: int) -> Tuple[int, ...]:
        """Dependencies of node (outgoing edges)."""
        try:
            return self._succ[node]
        except KeyError:
            raise GraphError(f"unknown node {node}") from None

    def predecessors(self, node: int) -> Tuple[int, ...]:
        """Dependents of node (incoming edges)."""
        try:
            return self._pred[node]
        except KeyError:
            raise GraphError(f"unknown node {node}") from None

    def has_edge(self, u: int, v: int) -> bool:
        return v in self._succ.get(u, ())

    def edges(self) -> Iterator[Tuple[int, int]]:
        for u, vs in self._succ.items():
            for v in vs:
                yield (u, v)

    def edge_count(self) -> int:
        return sum(len(vs) for vs in self._succ.values())

    def lift(self, keep: KeepSpec) -> "DependencyGraph":
        """
        Induced subgraph on the kept nodes.

        ``keep`` is either a predicate over node ids or an explicit
        collection of node ids. Edges survive only when both ends are kept.
        An empty result is valid.
        """
        if callable(keep):
            kept = {n for n in self._succ if keep(n)}
        else:
            kept = set(keep)
            unknown = sorted(kept.difference(self._succ))
            if unknown:
                raise GraphError(f"cannot lift unknown node(s): {unknown}")
        edges = [(u, v) for u in kept for v in self._succ[u] if v in kept]
        return DependencyGraph(kept, edges)

    def __contains__(self, node: object) -> bool:
        return node in self._succ

    def __len__(self) -> int:
        return len(self._succ)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencyGraph):
            return NotImplemented
        return self._succ.keys() == other._succ.keys() and set(self.edges()) == set(other.edges())

    def __hash__(self) -> int:
        return hash((frozenset(self._succ), frozenset(self.edges())))

    def __repr__(self) -> str:
        return f"<DependencyGraph nodes={len(self)} edges={self.edge_count()}>"


def build_dependency_graph(packages: Sequence, name_index: Mapping[str, int]) -> DependencyGraph:
    """
    One node per package position, edge P -> D for each build dependency D
    of P that resolves in name_index. Self-references add no edge.
    """
    edges: List[Tuple[int, int]] = []
    unresolved = 0
    for idx, pkg in enumerate(packages):
        for dep in pkg.build_deps:
            dep_idx = name_index.get(dep)
            if dep_idx is None:
                unresolved += 1
                continue
            if dep_idx == idx:
                continue
            edges.append((idx, dep_idx))
    graph = DependencyGraph(range(len(packages)), edges)
    logger.debug(
        "dependency graph: %d nodes, %d edges, %d external dependency references",
        len(graph),
        graph.edge_count(),
        unresolved,
    )
    return graph


def to_dot(graph: DependencyGraph, labels: Mapping[int, str] | Sequence[str] | None = None) -> str:
    """Render graph as Graphviz DOT (debugging aid, not a stable format)."""

    def _label(node: int) -> str:
        if labels is None:
            return str(node)
        try:
            return str(labels[node])
        except (IndexError, KeyError):
            return str(node)

    lines = ["strict digraph {"]
    for node in graph.nodes:
        name = _label(node).replace('"', '\\"')
        lines.append(f'  "{node}" [ label="{name}" ];')
    for u, v in graph.edges():
        lines.append(f'  "{u}" -> "{v}";')
    lines.append("}")
    return "\n".join(lines) + "\n"


def write_dot(
    graph: DependencyGraph,
    path: Path,
    labels: Mapping[int, str] | Sequence[str] | None = None,
) -> bool:
    """Write DOT export to path. Returns False (and logs) when writing fails."""
    try:
        path.write_text(to_dot(graph, labels), encoding="utf-8")
    except OSError as e:
        logger.warning("could not write graph to %s: %s", path, e)
        return False
    return True


__all__ = [
    "DependencyGraph",
    "GraphError",
    "build_dependency_graph",
    "to_dot",
    "write_dot",
]
