"""Source protocol definitions.

Defines the ``SchemaSource`` and ``RowSource`` Protocols the exporter reads
from.  All methods are synchronous -- the export pipeline is a strictly
sequential read of one database.

Usage:
    from db_snapshot.sources.base import RowSource, SchemaSource

    def count_rows(schema: str, source: SchemaSource, rows: RowSource) -> int:
        return sum(
            sum(1 for _ in rows.get_all_rows(table))
            for table in source.list_tables(schema)
        )
"""

from collections.abc import Iterable, Mapping
from typing import Any, Protocol


class SchemaSource(Protocol):
    """Schema metadata interface that all sources must implement.

    Implementations may raise any exception on connectivity, permission, or
    metadata problems -- the exporter wraps them in ``SchemaDiscoveryError``.
    """

    def list_tables(self, schema: str) -> list[str]:
        """List all base table names in the schema.

        Args:
            schema: Schema (database) name.

        Returns:
            Table names in a stable order.  Each name appears once.

        Example:
            tables = source.list_tables("app")
            # ['issues', 'projects', 'users']
        """
        ...

    def list_foreign_keys(self, schema: str) -> list[tuple[str, str]]:
        """List ``(table, referenced_table)`` foreign-key pairs in the schema.

        Foreign keys without a resolvable referenced table are excluded.
        A pair may repeat when two foreign keys link the same tables.

        Args:
            schema: Schema (database) name.

        Returns:
            List of ``(dependent, referenced)`` tuples.

        Example:
            fks = source.list_foreign_keys("app")
            # [('issues', 'projects'), ('issues', 'users'), ('projects', 'users')]
        """
        ...

    def get_create_statement(self, table: str) -> str:
        """Return the table's creation DDL exactly as the database reports it.

        Args:
            table: Table name.

        Returns:
            ``CREATE TABLE`` statement text.
        """
        ...


class RowSource(Protocol):
    """Row data interface that all sources must implement."""

    def get_all_rows(self, table: str) -> Iterable[Mapping[str, Any]]:
        """Return every row of a table.

        Args:
            table: Table name.

        Returns:
            Iterable of mappings of column name to typed value, with keys in
            column order.  May be a lazy iterator.

        Example:
            for row in source.get_all_rows("users"):
                print(row["id"], row["email"])
        """
        ...
