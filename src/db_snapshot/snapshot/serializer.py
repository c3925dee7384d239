"""Serialize an ordered set of tables into a replayable SQL script.

The script layout is:

1. version header (comments)
2. schema creation preamble
3. foreign-key enforcement off
4. per table, in dependency order: ``DROP TABLE IF EXISTS``, the table's
   own ``CREATE TABLE`` text, then batched multi-row ``INSERT`` statements
5. foreign-key enforcement on
6. completion marker comment

Output is produced as a stream of text chunks so large tables never have
to be held in memory as one string.

Usage:
    from db_snapshot.snapshot.serializer import SnapshotSerializer

    serializer = SnapshotSerializer(batch_size=100)
    for chunk in serializer.serialize(
        "app",
        ["users", "projects"],
        source.get_create_statement,
        source.get_all_rows,
    ):
        sink.write(chunk)
"""

import logging
from collections.abc import Callable, Generator, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from itertools import islice
from typing import Any

from db_snapshot.errors import RowFetchError, SchemaDiscoveryError, SnapshotError
from db_snapshot.snapshot.dialects import MYSQL, SqlDialect
from db_snapshot.snapshot.encoding import encode_row

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100
FORMAT_VERSION = 1

Row = Mapping[str, Any]


@dataclass
class SerializationStats:
    """Counters filled in while a snapshot is serialized."""

    tables: list[str] = field(default_factory=list)
    row_counts: dict[str, int] = field(default_factory=dict)
    insert_statements: int = 0

    @property
    def total_rows(self) -> int:
        return sum(self.row_counts.values())


def batched(rows: Iterable[Row], size: int) -> Iterator[list[Row]]:
    """Split rows into lists of at most ``size`` rows."""
    iterator = iter(rows)
    while batch := list(islice(iterator, size)):
        yield batch


class SnapshotSerializer:
    """Produces the snapshot script for one schema.

    Args:
        dialect: Target SQL dialect.
        batch_size: Rows per ``INSERT`` statement.
        created_at: Timestamp written in the header (defaults to now, UTC).

    Raises:
        ValueError: If ``batch_size`` is less than 1.
    """

    def __init__(
        self,
        dialect: SqlDialect = MYSQL,
        batch_size: int = DEFAULT_BATCH_SIZE,
        created_at: datetime | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.dialect = dialect
        self.batch_size = batch_size
        self.created_at = created_at

    def serialize(
        self,
        schema_name: str,
        ordered_tables: Iterable[str],
        ddl_for: Callable[[str], str],
        rows_for: Callable[[str], Iterable[Row]],
        stats: SerializationStats | None = None,
    ) -> Iterator[str]:
        """Yield the snapshot script chunk by chunk.

        Args:
            schema_name: Schema being exported.
            ordered_tables: Tables in dependency order.
            ddl_for: Returns the ``CREATE TABLE`` text for a table.
            rows_for: Returns the rows of a table.
            stats: Optional counters updated as tables are written.

        Yields:
            Text chunks that concatenate to the full script.

        Raises:
            SchemaDiscoveryError: If a table's DDL cannot be read.
            RowFetchError: If a table's rows cannot be read.
        """
        stats = stats if stats is not None else SerializationStats()

        yield self.header(schema_name)

        for table in ordered_tables:
            logger.info("Processing table: %s", table)
            stats.tables.append(table)
            stats.row_counts[table] = 0
            yield self.table_definition(table, self._fetch_ddl(table, ddl_for))

            rows = self._fetch_rows(table, rows_for)
            try:
                for index, batch in enumerate(batched(rows, self.batch_size)):
                    if index == 0:
                        yield f"-- Inserting data into {self.dialect.quote_identifier(table)}\n"
                    logger.debug("Writing batch %d of %s (%d rows)", index + 1, table, len(batch))
                    stats.row_counts[table] += len(batch)
                    stats.insert_statements += 1
                    yield self.insert_statement(table, batch)
            finally:
                # Releases the source cursor if the table is abandoned midway
                rows.close()

        yield self.footer(stats)

    # ------------------------------------------------------------------
    # Statement builders
    # ------------------------------------------------------------------

    def header(self, schema_name: str) -> str:
        """Version header, schema preamble, and integrity disable."""
        created_at = self.created_at or datetime.now(timezone.utc)
        lines = [
            f"-- db-snapshot format {FORMAT_VERSION}",
            f"-- Schema: {schema_name}",
            f"-- Dialect: {self.dialect.name}",
            f"-- Created: {created_at.isoformat()}",
            "",
            "-- Create database",
            *self.dialect.schema_preamble(schema_name),
            "",
            "-- Disable foreign key checks",
            self.dialect.disable_integrity,
            "",
            "",
        ]
        return "\n".join(lines)

    def table_definition(self, table: str, ddl: str) -> str:
        """Drop-if-exists followed by the table's creation DDL."""
        quoted = self.dialect.quote_identifier(table)
        ddl = ddl.rstrip()
        if not ddl.endswith(";"):
            ddl += ";"
        return (
            f"-- Drop table if exists {quoted}\n"
            f"DROP TABLE IF EXISTS {quoted};\n\n"
            f"-- Create table {quoted}\n"
            f"{ddl}\n\n"
        )

    def insert_statement(self, table: str, batch: list[Row]) -> str:
        """One multi-row ``INSERT`` for a batch.

        Columns come from the first row of the batch and the same order is
        used for every value tuple.

        Raises:
            RowFetchError: If a row lacks one of the first row's columns.
        """
        columns = list(batch[0].keys())
        quote = self.dialect.quote_identifier
        column_list = ", ".join(quote(c) for c in columns)
        try:
            values = ",\n".join(
                encode_row([row[c] for c in columns], self.dialect) for row in batch
            )
        except KeyError as e:
            raise RowFetchError(table, f"row is missing column {e}") from e
        return f"INSERT INTO {quote(table)} ({column_list}) VALUES\n{values};\n\n"

    def footer(self, stats: SerializationStats) -> str:
        """Integrity re-enable and completion marker."""
        return (
            "-- Re-enable foreign key checks\n"
            f"{self.dialect.enable_integrity}\n"
            f"-- Snapshot complete: {len(stats.tables)} tables, {stats.total_rows} rows\n"
        )

    # ------------------------------------------------------------------
    # Source access
    # ------------------------------------------------------------------

    def _fetch_ddl(self, table: str, ddl_for: Callable[[str], str]) -> str:
        try:
            return ddl_for(table)
        except SnapshotError:
            raise
        except Exception as e:
            raise SchemaDiscoveryError(
                f"Failed to read CREATE statement for table '{table}': {e}",
                table=table,
            ) from e

    def _fetch_rows(
        self, table: str, rows_for: Callable[[str], Iterable[Row]]
    ) -> Generator[Row, None, None]:
        """Iterate a table's rows, wrapping driver errors in RowFetchError."""
        try:
            rows = iter(rows_for(table))
        except SnapshotError:
            raise
        except Exception as e:
            raise RowFetchError(table, str(e)) from e

        try:
            while True:
                try:
                    row = next(rows)
                except StopIteration:
                    return
                except SnapshotError:
                    raise
                except Exception as e:
                    raise RowFetchError(table, str(e)) from e
                yield row
        finally:
            close = getattr(rows, "close", None)
            if close is not None:
                close()
