"""db-snapshot: Dependency-ordered relational database snapshot exporter.

Discovers tables and foreign keys, orders tables so that referenced tables
come first (failing fast on cycles), and writes schema + data as a single
replayable SQL script with batched, type-correct INSERT statements.

Usage:
    from db_snapshot import SqlSnapshotSource, build_snapshot, write_snapshot
    from db_snapshot import FileSink, topological_sort, build_dependency_graph
    from db_snapshot import load_db_config, get_source
"""

__version__ = "0.1.0"

# Errors
from db_snapshot.errors import (
    CyclicDependencyError,
    RowFetchError,
    SchemaDiscoveryError,
    SinkWriteError,
    SnapshotError,
)

# Graph + ordering
from db_snapshot.schema.graph import DependencyGraph, build_dependency_graph
from db_snapshot.schema.sorter import SortResult, order_tables, topological_sort

# Serialization + export
from db_snapshot.snapshot.dialects import MYSQL, SQLITE, SqlDialect, get_dialect
from db_snapshot.snapshot.encoding import encode_value
from db_snapshot.snapshot.exporter import (
    SnapshotSummary,
    build_snapshot,
    resolve_table_order,
    write_snapshot,
)
from db_snapshot.snapshot.serializer import SnapshotSerializer
from db_snapshot.snapshot.sinks import FileSink, SnapshotSink, StringSink

# Sources
from db_snapshot.sources.base import RowSource, SchemaSource
from db_snapshot.sources.sql import SqlSnapshotSource

# Config + factory
from db_snapshot.config.loader import load_db_config
from db_snapshot.config.models import DatabaseProfile, SnapshotConfig
from db_snapshot.factory import ProfileNotFoundError, get_source, resolve_url

__all__ = [
    # Errors
    "SnapshotError",
    "CyclicDependencyError",
    "SchemaDiscoveryError",
    "RowFetchError",
    "SinkWriteError",
    # Graph + ordering
    "DependencyGraph",
    "build_dependency_graph",
    "SortResult",
    "order_tables",
    "topological_sort",
    # Serialization + export
    "MYSQL",
    "SQLITE",
    "SqlDialect",
    "get_dialect",
    "encode_value",
    "SnapshotSerializer",
    "SnapshotSummary",
    "build_snapshot",
    "resolve_table_order",
    "write_snapshot",
    "FileSink",
    "SnapshotSink",
    "StringSink",
    # Sources
    "SchemaSource",
    "RowSource",
    "SqlSnapshotSource",
    # Config + factory
    "load_db_config",
    "DatabaseProfile",
    "SnapshotConfig",
    "get_source",
    "resolve_url",
    "ProfileNotFoundError",
]
