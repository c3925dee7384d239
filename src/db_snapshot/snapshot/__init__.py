"""Snapshot serialization, sinks, and the export pipeline.

Usage:
    from db_snapshot.snapshot import build_snapshot, write_snapshot, FileSink
"""

from db_snapshot.snapshot.dialects import MYSQL, SQLITE, SqlDialect, get_dialect
from db_snapshot.snapshot.encoding import encode_value
from db_snapshot.snapshot.exporter import (
    SnapshotSummary,
    build_snapshot,
    resolve_table_order,
    write_snapshot,
)
from db_snapshot.snapshot.serializer import (
    DEFAULT_BATCH_SIZE,
    SerializationStats,
    SnapshotSerializer,
)
from db_snapshot.snapshot.sinks import FileSink, SnapshotSink, StringSink

__all__ = [
    "MYSQL",
    "SQLITE",
    "SqlDialect",
    "get_dialect",
    "encode_value",
    "SnapshotSummary",
    "build_snapshot",
    "resolve_table_order",
    "write_snapshot",
    "DEFAULT_BATCH_SIZE",
    "SerializationStats",
    "SnapshotSerializer",
    "FileSink",
    "SnapshotSink",
    "StringSink",
]
