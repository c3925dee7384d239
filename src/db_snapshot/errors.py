"""Exception hierarchy for snapshot exports.

Every failure is fatal to the current export run.  Errors carry enough
context (schema or table name) for the caller to identify what failed;
the original exception, if any, is chained as ``__cause__``.
"""


class SnapshotError(Exception):
    """Base class for all snapshot export errors."""

    pass


class CyclicDependencyError(SnapshotError):
    """Raised when foreign keys form a cycle between tables.

    Attributes:
        table: The table that was reached again while still in progress.
        cycle: Tables along the cycle, starting and ending with ``table``.
    """

    def __init__(self, table: str, cycle: list[str] | None = None) -> None:
        self.table = table
        self.cycle = cycle or [table]
        super().__init__(
            f"Circular dependency detected at table '{table}': "
            f"{' -> '.join(self.cycle)}"
        )


class SchemaDiscoveryError(SnapshotError):
    """Raised when schema metadata (tables, foreign keys, DDL) cannot be read."""

    def __init__(self, message: str, table: str | None = None) -> None:
        self.table = table
        super().__init__(message)


class RowFetchError(SnapshotError):
    """Raised when rows for a table cannot be retrieved."""

    def __init__(self, table: str, reason: str = "") -> None:
        self.table = table
        message = f"Failed to fetch rows for table '{table}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class SinkWriteError(SnapshotError):
    """Raised when snapshot output cannot be persisted."""

    pass
