"""SQL text that differs between target engines.

Usage:
    from db_snapshot.snapshot.dialects import get_dialect

    dialect = get_dialect("mysql")
    dialect.quote_identifier("users")
    # '`users`'
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SqlDialect:
    """Engine-specific statements used by the serializer.

    Attributes:
        name: Dialect name (matches SQLAlchemy's ``engine.dialect.name``).
        quote_char: Identifier quote character.
        disable_integrity: Statement that turns off foreign-key enforcement.
        enable_integrity: Statement that turns it back on.
        backslash_escapes: True if ``\\`` is a metacharacter inside string
            literals and must itself be escaped.
        has_schemas: True if the preamble creates and selects the schema.
    """

    name: str
    quote_char: str
    disable_integrity: str
    enable_integrity: str
    backslash_escapes: bool = False
    has_schemas: bool = True

    def quote_identifier(self, name: str) -> str:
        """Quote a table or column name, doubling embedded quote characters."""
        q = self.quote_char
        return f"{q}{name.replace(q, q * 2)}{q}"

    def schema_preamble(self, schema_name: str) -> list[str]:
        """Statements that create (if needed) and select the schema."""
        if not self.has_schemas:
            return [f"-- Target database: {schema_name}"]
        quoted = self.quote_identifier(schema_name)
        return [
            f"CREATE DATABASE IF NOT EXISTS {quoted} "
            f"CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;",
            f"USE {quoted};",
        ]


MYSQL = SqlDialect(
    name="mysql",
    quote_char="`",
    disable_integrity="SET FOREIGN_KEY_CHECKS=0;",
    enable_integrity="SET FOREIGN_KEY_CHECKS=1;",
    backslash_escapes=True,
)

SQLITE = SqlDialect(
    name="sqlite",
    quote_char='"',
    disable_integrity="PRAGMA foreign_keys=OFF;",
    enable_integrity="PRAGMA foreign_keys=ON;",
    has_schemas=False,
)

DIALECTS: dict[str, SqlDialect] = {d.name: d for d in (MYSQL, SQLITE)}


def get_dialect(name: str) -> SqlDialect:
    """Look up a dialect by name.

    Raises:
        ValueError: If the dialect is not supported.
    """
    try:
        return DIALECTS[name]
    except KeyError:
        raise ValueError(
            f"Unsupported dialect '{name}'. Supported: {', '.join(DIALECTS)}"
        ) from None
