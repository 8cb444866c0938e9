"""
Build order planning over a (lifted) dependency graph.

Edges follow the graph convention ``u -> v``: u depends on v. A build order
therefore lists v before u. When no order exists the graph is diagnosed
with strongly connected components; only components with two or more
members are cycles worth reporting.
"""

from __future__ import annotations

import heapq
from typing import Dict, Iterator, List, Set, Tuple

from buildplan.analysis.graph import DependencyGraph


class BuildOrderError(RuntimeError):
    """No build order exists; ``cycles`` lists the offending components."""

    def __init__(self, cycles: List[List[int]]):
        self.cycles = cycles
        super().__init__(
            f"dependency graph contains {len(cycles)} cycle(s); no build order exists"
        )


def build_order(graph: DependencyGraph) -> List[int]:
    """
    Topological order with dependencies first.

    Among nodes that are ready at the same time the lowest position goes
    first, so the result only depends on the graph.
    """
    remaining: Dict[int, int] = {n: len(graph.successors(n)) for n in graph.nodes}
    ready = [n for n, count in remaining.items() if count == 0]
    heapq.heapify(ready)

    order: List[int] = []
    while ready:
        node = heapq.heappop(ready)
        order.append(node)
        for dependent in graph.predecessors(node):
            remaining[dependent] -= 1
            if remaining[dependent] == 0:
                heapq.heappush(ready, dependent)

    if len(order) != len(graph):
        raise BuildOrderError(find_cycles(graph))
    return order


def strongly_connected_components(graph: DependencyGraph) -> List[List[int]]:
    """
    Tarjan's algorithm, iterative so deep dependency chains do not hit the
    recursion limit. Components come out dependencies-first; members of each
    component are sorted.
    """
    index: Dict[int, int] = {}
    low: Dict[int, int] = {}
    stack: List[int] = []
    on_stack: Set[int] = set()
    components: List[List[int]] = []
    counter = 0

    for root in graph.nodes:
        if root in index:
            continue
        index[root] = low[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        work: List[Tuple[int, Iterator[int]]] = [(root, iter(graph.successors(root)))]

        while work:
            node, successors = work[-1]
            descended = False
            for nxt in successors:
                if nxt not in index:
                    index[nxt] = low[nxt] = counter
                    counter += 1
                    stack.append(nxt)
                    on_stack.add(nxt)
                    work.append((nxt, iter(graph.successors(nxt))))
                    descended = True
                    break
                if nxt in on_stack:
                    low[node] = min(low[node], index[nxt])
            if descended:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                low[parent] = min(low[parent], low[node])
            if low[node] == index[node]:
                component: List[int] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                components.append(sorted(component))

    return components


def find_cycles(graph: DependencyGraph) -> List[List[int]]:
    """Non-trivial strongly connected components, ordered by lowest member."""
    cycles = [c for c in strongly_connected_components(graph) if len(c) > 1]
    cycles.sort(key=lambda c: c[0])
    return cycles


def build_ranks(graph: DependencyGraph) -> List[List[int]]:
    """
    Group an acyclic graph into ranks.

    Rank 0 holds nodes with no dependencies inside the graph; every other
    node sits one rank above its highest dependency. Nodes within a rank do
    not depend on each other. Raises BuildOrderError on cycles.
    """
    rank: Dict[int, int] = {}
    for node in build_order(graph):
        deps = graph.successors(node)
        rank[node] = 1 + max(rank[d] for d in deps) if deps else 0
    ranks: List[List[int]] = [[] for _ in range(max(rank.values()) + 1 if rank else 0)]
    for node in sorted(rank):
        ranks[rank[node]].append(node)
    return ranks


__all__ = [
    "BuildOrderError",
    "build_order",
    "build_ranks",
    "find_cycles",
    "strongly_connected_components",
]
