"""Topological ordering of tables with cycle detection.

Computes a total order over the tables of a ``DependencyGraph`` in which
every table comes after all tables it references.  Uses an iterative
depth-first search with an explicit stack, so very deep dependency chains
do not hit the interpreter's recursion limit.

Self-references (a table with a foreign key to itself) are legal and are
skipped during the walk.  Any other loop raises ``CyclicDependencyError``.

Usage:
    from db_snapshot.schema.sorter import order_tables, topological_sort

    order = topological_sort(graph)          # raises on cycles

    result = order_tables(graph)             # never raises on cycles
    if not result.success:
        print(result.error)
"""

from enum import Enum

from pydantic import BaseModel, Field

from db_snapshot.errors import CyclicDependencyError
from db_snapshot.schema.graph import DependencyGraph


class VisitState(Enum):
    """Per-table state during a sort."""

    UNVISITED = "unvisited"
    IN_PROGRESS = "in_progress"  # on the active DFS path
    DONE = "done"


class SortResult(BaseModel):
    """Result of order_tables().

    Example:
        >>> result = SortResult(success=True, order=["users", "projects"])
        >>> result.cycle_table is None
        True
    """

    success: bool
    order: list[str] = Field(default_factory=list)
    cycle_table: str | None = None
    cycle: list[str] = Field(default_factory=list)
    error: str | None = None


def topological_sort(graph: DependencyGraph) -> list[str]:
    """Order tables so that referenced tables come before dependents.

    Tables are visited in graph order and each table's dependencies in
    their recorded order, so the same graph always yields the same order.

    Args:
        graph: Dependency graph from ``build_dependency_graph()``.

    Returns:
        Every table exactly once, dependencies first.

    Raises:
        CyclicDependencyError: If a dependency chain returns to a table that
            is still in progress.
        ValueError: If a table references a table that is not in the graph.

    Example:
        >>> g = DependencyGraph.from_metadata(
        ...     ["issues", "projects", "users"],
        ...     [("issues", "projects"), ("projects", "users")],
        ... )
        >>> topological_sort(g)
        ['users', 'projects', 'issues']
    """
    state = {table: VisitState.UNVISITED for table in graph.tables}
    order: list[str] = []

    for root in graph.tables:
        if state[root] is not VisitState.UNVISITED:
            continue

        state[root] = VisitState.IN_PROGRESS
        stack = [(root, iter(graph.dependencies[root]))]

        while stack:
            table, pending = stack[-1]
            for dep in pending:
                if dep == table:
                    continue
                if dep not in state:
                    raise ValueError(
                        f"Table '{table}' references unknown table '{dep}'"
                    )
                if state[dep] is VisitState.IN_PROGRESS:
                    path = [t for t, _ in stack]
                    cycle = path[path.index(dep):] + [dep]
                    raise CyclicDependencyError(dep, cycle)
                if state[dep] is VisitState.UNVISITED:
                    state[dep] = VisitState.IN_PROGRESS
                    stack.append((dep, iter(graph.dependencies[dep])))
                    break
            else:
                stack.pop()
                state[table] = VisitState.DONE
                order.append(table)

    return order


def order_tables(graph: DependencyGraph) -> SortResult:
    """Result-returning variant of ``topological_sort()``.

    Args:
        graph: Dependency graph.

    Returns:
        ``SortResult`` with the order on success, or the cycle on failure.
    """
    try:
        order = topological_sort(graph)
    except CyclicDependencyError as e:
        return SortResult(
            success=False,
            cycle_table=e.table,
            cycle=e.cycle,
            error=str(e),
        )
    return SortResult(success=True, order=order)
