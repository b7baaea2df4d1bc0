"""Lazy target list read from a CSV file."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterator

from ..errors import TargetSourceError


class CsvTargetSource:
    """Yield one target per data row, read lazily and exactly once.

    The target is taken from ``column`` (the second field by default); the
    first row is a header unless ``skip_header`` is false. Targets are yielded
    exactly as read. Empty lines are ignored, short rows are fatal; a row with
    an empty target field still yields ``""``.
    """

    def __init__(self, path: Path, column: int = 1, skip_header: bool = True) -> None:
        self.path = Path(path)
        self.column = column
        self.skip_header = skip_header
        self._consumed = False
        try:
            self._file = self.path.open("r", encoding="utf-8", newline="")
        except OSError as exc:
            raise TargetSourceError(f"Cannot open input file {self.path}: {exc}") from exc

    def __iter__(self) -> Iterator[str]:
        if self._consumed:
            raise TargetSourceError(f"Target source {self.path} was already drained")
        self._consumed = True
        return self._read()

    def _read(self) -> Iterator[str]:
        reader = csv.reader(self._file)
        header_pending = self.skip_header
        try:
            for row in reader:
                if not row:
                    continue
                if header_pending:
                    header_pending = False
                    continue
                if len(row) <= self.column:
                    raise TargetSourceError(
                        f"{self.path}:{reader.line_num}: expected at least "
                        f"{self.column + 1} fields, got {len(row)}"
                    )
                yield row[self.column]
        except (csv.Error, OSError, UnicodeDecodeError) as exc:
            raise TargetSourceError(
                f"{self.path}:{reader.line_num}: cannot read input: {exc}"
            ) from exc
        finally:
            self.close()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> "CsvTargetSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["CsvTargetSource"]
