"""Export search outcomes to a SQLite table."""

from __future__ import annotations

import re
import sqlite3
from pathlib import Path

from ...errors import SinkOpenError
from ..outcomes import SearchOutcome
from .base import BaseExporter

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SQLiteExporter(BaseExporter):
    """Persist one row per outcome, committing after every insert."""

    write_errors = (OSError, ValueError, sqlite3.Error)

    def __init__(self, path: Path, table: str = "results") -> None:
        super().__init__()
        if not _TABLE_NAME.match(table):
            raise SinkOpenError(f"Invalid table name: {table!r}")
        self.path = Path(path)
        self.table = table
        self._closed = False
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(self.path, check_same_thread=False)
            # Each run starts from an empty table, like the file sinks.
            self.conn.execute(f"DROP TABLE IF EXISTS {self.table}")
            self.conn.execute(
                f"""
                CREATE TABLE {self.table} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    url TEXT NOT NULL,
                    result TEXT NOT NULL,
                    error TEXT NOT NULL DEFAULT ''
                )
                """
            )
            self.conn.commit()
        except (OSError, sqlite3.Error) as exc:
            raise SinkOpenError(f"Cannot open SQLite output {self.path}: {exc}") from exc

    def _write(self, outcome: SearchOutcome) -> None:
        self.conn.execute(
            f"INSERT INTO {self.table}(url, result, error) VALUES (?, ?, ?)",
            outcome.as_row(),
        )

    def _persist(self) -> None:
        self.conn.commit()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self.conn.commit()
            self.conn.close()


__all__ = ["SQLiteExporter"]
