"""Destinations for snapshot text.

``FileSink`` never leaves a file that looks complete after a failure:
output goes to ``<path>.partial`` and is only renamed to ``<path>`` on
``commit()``.  A failed run keeps the ``.partial`` file for diagnostics.

Usage:
    from db_snapshot.snapshot.sinks import FileSink

    with FileSink("dumps/app.sql") as sink:
        sink.write("SET FOREIGN_KEY_CHECKS=0;\\n")
    # dumps/app.sql and dumps/app.sql.sha256 now exist
"""

import hashlib
import io
import os
from pathlib import Path
from typing import IO, Protocol

from db_snapshot.errors import SinkWriteError

PARTIAL_SUFFIX = ".partial"
CHECKSUM_SUFFIX = ".sha256"


class SnapshotSink(Protocol):
    """Anything that accepts snapshot text chunks."""

    def write(self, chunk: str) -> None:
        """Append a chunk of snapshot text.

        Raises:
            SinkWriteError: If the chunk cannot be persisted.
        """
        ...


class StringSink:
    """Collects snapshot text in memory."""

    def __init__(self) -> None:
        self._buffer = io.StringIO()

    def write(self, chunk: str) -> None:
        self._buffer.write(chunk)

    def getvalue(self) -> str:
        return self._buffer.getvalue()


class FileSink:
    """Writes snapshot text to a file, atomically promoted on commit.

    Args:
        path: Final path of the snapshot file.
        encoding: Text encoding (default UTF-8).

    Example:
        sink = FileSink("dumps/app.sql")
        try:
            for chunk in chunks:
                sink.write(chunk)
        except Exception:
            sink.abort()
            raise
        sink.commit()
    """

    def __init__(self, path: str | Path, encoding: str = "utf-8") -> None:
        self.path = Path(path)
        self.partial_path = self.path.with_name(self.path.name + PARTIAL_SUFFIX)
        self.checksum_path = self.path.with_name(self.path.name + CHECKSUM_SUFFIX)
        self._encoding = encoding
        self._hash = hashlib.sha256()
        self._file: IO[str] | None = None
        self._closed = False

    def __enter__(self) -> "FileSink":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.abort()

    @property
    def hexdigest(self) -> str:
        """SHA-256 of everything written so far."""
        return self._hash.hexdigest()

    def write(self, chunk: str) -> None:
        if self._closed:
            raise SinkWriteError(f"Sink for {self.path} is already closed")
        try:
            if self._file is None:
                self.partial_path.parent.mkdir(parents=True, exist_ok=True)
                self._file = open(self.partial_path, "w", encoding=self._encoding)
            self._file.write(chunk)
        except OSError as e:
            raise SinkWriteError(f"Failed to write {self.partial_path}: {e}") from e
        self._hash.update(chunk.encode(self._encoding))

    def commit(self) -> Path:
        """Finish the file: rename it into place and write the checksum.

        Returns:
            Final snapshot path.

        Raises:
            SinkWriteError: If the file cannot be finalized.
        """
        if self._closed:
            raise SinkWriteError(f"Sink for {self.path} is already closed")
        try:
            if self._file is None:
                # Nothing written yet; still produce an (empty) artifact
                self.write("")
            self._file.flush()
            os.fsync(self._file.fileno())
            self._file.close()
            os.replace(self.partial_path, self.path)
            self.checksum_path.write_text(
                f"{self.hexdigest}  {self.path.name}\n", encoding="utf-8"
            )
        except OSError as e:
            raise SinkWriteError(f"Failed to finalize {self.path}: {e}") from e
        finally:
            self._closed = True
        return self.path

    def abort(self) -> Path | None:
        """Close without promoting the file.

        Returns:
            Path of the leftover ``.partial`` file, or ``None`` if nothing
            was written.
        """
        if self._closed:
            return None
        self._closed = True
        if self._file is None:
            return None
        self._file.close()
        return self.partial_path
