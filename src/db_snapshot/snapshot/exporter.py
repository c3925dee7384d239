"""End-to-end snapshot export.

Wires the pipeline: discover tables and foreign keys -> build the
dependency graph -> sort -> serialize each table in order into a sink.
Each call is independent; no graph or sort state outlives it.

Usage:
    from db_snapshot.snapshot.exporter import build_snapshot, write_snapshot
    from db_snapshot.snapshot.sinks import FileSink

    # Whole script as one string
    script = build_snapshot("app", source, source)

    # Streaming to a file
    with FileSink("dumps/app.sql") as sink:
        summary = write_snapshot("app", source, source, sink)
    print(summary.total_rows)
"""

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from db_snapshot.errors import SchemaDiscoveryError, SnapshotError
from db_snapshot.schema.graph import DependencyGraph, build_dependency_graph
from db_snapshot.schema.sorter import topological_sort
from db_snapshot.snapshot.dialects import MYSQL, SqlDialect
from db_snapshot.snapshot.serializer import (
    DEFAULT_BATCH_SIZE,
    SerializationStats,
    SnapshotSerializer,
)
from db_snapshot.snapshot.sinks import SnapshotSink, StringSink

if TYPE_CHECKING:
    from db_snapshot.sources.base import RowSource, SchemaSource

logger = logging.getLogger(__name__)


class SnapshotSummary(BaseModel):
    """Result of write_snapshot().

    Example:
        >>> summary = SnapshotSummary(schema_name="app", dialect="mysql")
        >>> summary.total_rows
        0
    """

    schema_name: str
    dialect: str
    table_order: list[str] = Field(default_factory=list)
    row_counts: dict[str, int] = Field(default_factory=dict)
    insert_statements: int = 0

    @property
    def total_rows(self) -> int:
        """Rows written across all tables."""
        return sum(self.row_counts.values())


def discover_graph(
    schema_name: str,
    source: "SchemaSource",
    exclude_tables: list[str] | None = None,
) -> DependencyGraph:
    """Build the dependency graph, wrapping source failures.

    Args:
        schema_name: Schema to inspect.
        source: Metadata source.
        exclude_tables: Tables to leave out of the graph entirely.

    Raises:
        SchemaDiscoveryError: If the source fails.
    """
    try:
        if not exclude_tables:
            return build_dependency_graph(schema_name, source)
        excluded = set(exclude_tables)
        tables = [t for t in source.list_tables(schema_name) if t not in excluded]
        return DependencyGraph.from_metadata(
            tables, source.list_foreign_keys(schema_name)
        )
    except SnapshotError:
        raise
    except Exception as e:
        raise SchemaDiscoveryError(
            f"Failed to discover schema '{schema_name}': {e}"
        ) from e


def resolve_table_order(
    schema_name: str,
    source: "SchemaSource",
    exclude_tables: list[str] | None = None,
) -> list[str]:
    """Return the schema's tables in dependency order.

    Raises:
        SchemaDiscoveryError: If the source fails.
        CyclicDependencyError: If foreign keys form a cycle.
    """
    graph = discover_graph(schema_name, source, exclude_tables)
    order = topological_sort(graph)
    logger.info("Table order for dump: %s", ", ".join(order))
    return order


def write_snapshot(
    schema_name: str,
    schema_source: "SchemaSource",
    row_source: "RowSource",
    sink: SnapshotSink,
    dialect: SqlDialect = MYSQL,
    batch_size: int = DEFAULT_BATCH_SIZE,
    exclude_tables: list[str] | None = None,
) -> SnapshotSummary:
    """Export a full schema snapshot into ``sink``.

    The table order is computed before anything is written, so a cycle
    fails the run with an empty sink.

    Args:
        schema_name: Schema to export.
        schema_source: Provides tables, foreign keys, and DDL.
        row_source: Provides table rows.
        sink: Receives the script text.
        dialect: Target SQL dialect.
        batch_size: Rows per ``INSERT`` statement.
        exclude_tables: Tables to skip.

    Returns:
        ``SnapshotSummary`` with per-table row counts.

    Raises:
        CyclicDependencyError: If foreign keys form a cycle.
        SchemaDiscoveryError: If metadata or DDL cannot be read.
        RowFetchError: If rows for a table cannot be read.
        SinkWriteError: If the sink fails.
    """
    serializer = SnapshotSerializer(dialect=dialect, batch_size=batch_size)
    order = resolve_table_order(schema_name, schema_source, exclude_tables)

    stats = SerializationStats()
    for chunk in serializer.serialize(
        schema_name,
        order,
        schema_source.get_create_statement,
        row_source.get_all_rows,
        stats=stats,
    ):
        sink.write(chunk)

    summary = SnapshotSummary(
        schema_name=schema_name,
        dialect=dialect.name,
        table_order=order,
        row_counts=stats.row_counts,
        insert_statements=stats.insert_statements,
    )
    logger.info(
        "Snapshot of %s complete: %d tables, %d rows",
        schema_name,
        len(order),
        summary.total_rows,
    )
    return summary


def build_snapshot(
    schema_name: str,
    schema_source: "SchemaSource",
    row_source: "RowSource",
    dialect: SqlDialect = MYSQL,
    batch_size: int = DEFAULT_BATCH_SIZE,
    exclude_tables: list[str] | None = None,
) -> str:
    """Export a full schema snapshot and return it as one string.

    Same arguments and errors as ``write_snapshot()``.  Prefer
    ``write_snapshot()`` with a ``FileSink`` for large databases.
    """
    sink = StringSink()
    write_snapshot(
        schema_name,
        schema_source,
        row_source,
        sink,
        dialect=dialect,
        batch_size=batch_size,
        exclude_tables=exclude_tables,
    )
    return sink.getvalue()
