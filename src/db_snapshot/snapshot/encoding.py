"""SQL literal encoding for row values.

Each cell falls into exactly one kind and is encoded by one rule:

- ``None`` -> ``NULL``
- ``bool`` -> ``1`` / ``0`` (checked before numbers: ``bool`` subclasses ``int``)
- ``int`` / ``float`` / ``Decimal`` -> numeric text, unquoted
- ``datetime`` / ``date`` -> ``'YYYY-MM-DD HH:MM:SS'``, whole seconds, no offset
- ``time`` / ``timedelta`` -> ``'HH:MM:SS'``
- bytes-like -> hex literal ``X'..'``
- everything else -> quoted text with ``'`` doubled

Usage:
    from db_snapshot.snapshot.encoding import encode_value

    encode_value("O'Brien")
    # "'O''Brien'"
"""

import json
import math
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any

from db_snapshot.snapshot.dialects import MYSQL, SqlDialect

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def quote_text(text: str, dialect: SqlDialect = MYSQL) -> str:
    """Quote a string literal.

    Single quotes are doubled.  On dialects where backslash is an escape
    character, backslashes are doubled first.
    """
    if dialect.backslash_escapes:
        text = text.replace("\\", "\\\\")
    return "'" + text.replace("'", "''") + "'"


def format_timestamp(value: datetime | date) -> str:
    """Format a date or datetime as ``YYYY-MM-DD HH:MM:SS``.

    Timezone-aware values are converted to UTC before the offset is dropped;
    naive values are taken as already being wall-clock time.  Fractional
    seconds are truncated.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None and value.utcoffset() is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value.replace(microsecond=0).strftime(TIMESTAMP_FORMAT)
    return datetime(value.year, value.month, value.day).strftime(TIMESTAMP_FORMAT)


def _format_duration(value: time | timedelta) -> str:
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    # MySQL TIME columns come back as timedelta and may be negative or > 24h
    total = int(value.total_seconds())
    sign = "-" if total < 0 else ""
    hours, rest = divmod(abs(total), 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"


def encode_value(value: Any, dialect: SqlDialect = MYSQL) -> str:
    """Encode one cell as a SQL literal.

    Args:
        value: Cell value as returned by the database driver.
        dialect: Target dialect (controls backslash escaping).

    Returns:
        SQL literal text.

    Raises:
        ValueError: For non-finite floats, which have no SQL literal.

    Examples:
        >>> encode_value(None)
        'NULL'
        >>> encode_value(True)
        '1'
        >>> encode_value(3.14)
        '3.14'
        >>> encode_value(datetime(2024, 1, 15, 10, 30))
        "'2024-01-15 10:30:00'"
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Cannot encode non-finite float {value!r}")
        return repr(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Cannot encode non-finite decimal {value!r}")
        return str(value)
    if isinstance(value, (datetime, date)):
        return f"'{format_timestamp(value)}'"
    if isinstance(value, (time, timedelta)):
        return f"'{_format_duration(value)}'"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"X'{bytes(value).hex().upper()}'"
    if isinstance(value, (dict, list)):
        return quote_text(json.dumps(value, default=str), dialect)
    return quote_text(str(value), dialect)


def encode_row(row: list[Any], dialect: SqlDialect = MYSQL) -> str:
    """Encode a row's values as a parenthesized tuple."""
    return "(" + ", ".join(encode_value(v, dialect) for v in row) + ")"
