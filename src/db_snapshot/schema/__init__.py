"""Dependency graph construction and table ordering.

Usage:
    from db_snapshot.schema import build_dependency_graph, topological_sort

    graph = build_dependency_graph("app", source)
    order = topological_sort(graph)
"""

from db_snapshot.schema.graph import DependencyGraph, build_dependency_graph
from db_snapshot.schema.sorter import (
    SortResult,
    VisitState,
    order_tables,
    topological_sort,
)

__all__ = [
    "DependencyGraph",
    "build_dependency_graph",
    "SortResult",
    "VisitState",
    "order_tables",
    "topological_sort",
]
