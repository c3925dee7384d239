"""Foreign-key dependency graph construction.

Turns table and foreign-key metadata into a ``DependencyGraph``: a mapping
from every table to the tables it references.  Pure logic apart from the
two metadata calls on the ``SchemaSource``.

Usage:
    from db_snapshot.schema.graph import build_dependency_graph

    graph = build_dependency_graph("app", source)
    graph.dependencies_of("issues")
    # ['projects', 'users']
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from db_snapshot.sources.base import SchemaSource

logger = logging.getLogger(__name__)


@dataclass
class DependencyGraph:
    """Directed graph of table dependencies.

    An edge ``dependent -> referenced`` means ``dependent`` has at least one
    foreign key pointing at ``referenced``.  Dependency lists keep first-seen
    order and never hold duplicates, so iteration is deterministic.

    Example:
        graph = DependencyGraph()
        graph.add_table("users")
        graph.add_table("projects")
        graph.add_edge("projects", "users")
        graph.edges()
        # [('projects', 'users')]
    """

    dependencies: dict[str, list[str]] = field(default_factory=dict)

    @property
    def tables(self) -> list[str]:
        """All tables, in insertion order."""
        return list(self.dependencies)

    def __contains__(self, table: object) -> bool:
        return table in self.dependencies

    def __len__(self) -> int:
        return len(self.dependencies)

    def add_table(self, table: str) -> None:
        """Add a table with no dependencies (no-op if already present)."""
        self.dependencies.setdefault(table, [])

    def add_edge(self, dependent: str, referenced: str) -> bool:
        """Record that ``dependent`` references ``referenced``.

        Both tables must already be in the graph.

        Returns:
            ``True`` if the edge is new, ``False`` if it already existed.

        Raises:
            KeyError: If either table is unknown.
        """
        if referenced not in self.dependencies:
            raise KeyError(referenced)
        deps = self.dependencies[dependent]
        if referenced in deps:
            return False
        deps.append(referenced)
        return True

    def dependencies_of(self, table: str) -> list[str]:
        """Tables directly referenced by ``table``."""
        return list(self.dependencies[table])

    def edges(self) -> list[tuple[str, str]]:
        """All ``(dependent, referenced)`` edges."""
        return [
            (table, dep)
            for table, deps in self.dependencies.items()
            for dep in deps
        ]

    def self_referencing(self) -> list[str]:
        """Tables with a foreign key to themselves (e.g. ``parent_id``)."""
        return [t for t, deps in self.dependencies.items() if t in deps]

    @classmethod
    def from_metadata(
        cls,
        tables: Iterable[str],
        foreign_keys: Iterable[tuple[str, str]],
    ) -> "DependencyGraph":
        """Build a graph from a table list and foreign-key pairs.

        Every table becomes a node, even without edges.  Pairs that mention
        a table outside ``tables`` (views, other schemas) are skipped.

        Args:
            tables: Table names.
            foreign_keys: ``(dependent, referenced)`` pairs; duplicates collapse.

        Returns:
            The populated graph.
        """
        graph = cls()
        for table in tables:
            graph.add_table(table)

        for dependent, referenced in foreign_keys:
            if referenced is None:
                continue
            if dependent not in graph or referenced not in graph:
                logger.warning(
                    "Ignoring foreign key %s -> %s: table not in schema",
                    dependent,
                    referenced,
                )
                continue
            graph.add_edge(dependent, referenced)

        return graph


def build_dependency_graph(schema_name: str, source: "SchemaSource") -> DependencyGraph:
    """Discover tables and foreign keys and build the dependency graph.

    Args:
        schema_name: Schema (database) to inspect.
        source: Metadata source.

    Returns:
        ``DependencyGraph`` containing every discovered table.
    """
    tables = source.list_tables(schema_name)
    foreign_keys = source.list_foreign_keys(schema_name)
    graph = DependencyGraph.from_metadata(tables, foreign_keys)
    logger.debug(
        "Built dependency graph for %s: %d tables, %d edges",
        schema_name,
        len(graph),
        len(graph.edges()),
    )
    return graph
