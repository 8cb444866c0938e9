"""Analysis layer: dependency graph, resolution check, build order."""

from .graph import DependencyGraph, GraphError, build_dependency_graph, to_dot, write_dot
from .order import BuildOrderError, build_order, build_ranks, find_cycles, strongly_connected_components
from .resolve import UnresolvedDependencies, find_unresolved

__all__ = [
    "DependencyGraph",
    "GraphError",
    "build_dependency_graph",
    "to_dot",
    "write_dot",
    "BuildOrderError",
    "build_order",
    "build_ranks",
    "find_cycles",
    "strongly_connected_components",
    "UnresolvedDependencies",
    "find_unresolved",
]
