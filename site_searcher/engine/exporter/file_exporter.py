"""File based sinks writing CSV or JSON lines."""

from __future__ import annotations

import csv
import json
from pathlib import Path

from ...errors import SinkOpenError
from ..outcomes import SearchOutcome
from .base import RESULT_HEADERS, BaseExporter


class _FileExporter(BaseExporter):
    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = Path(path)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self.path.open("w", encoding="utf-8", newline="")
        except OSError as exc:
            raise SinkOpenError(f"Cannot create output file {self.path}: {exc}") from exc

    def _persist(self) -> None:
        self._file.flush()

    def close(self) -> None:
        with self._lock:
            if not self._file.closed:
                self._file.flush()
                self._file.close()


class CsvExporter(_FileExporter):
    """Write a ``url,result,error`` header followed by one row per outcome."""

    def __init__(self, path: Path) -> None:
        super().__init__(path)
        self._writer = csv.writer(self._file)
        try:
            self._writer.writerow(RESULT_HEADERS)
            self._file.flush()
        except OSError as exc:
            self._file.close()
            raise SinkOpenError(f"Cannot write header to {self.path}: {exc}") from exc

    def _write(self, outcome: SearchOutcome) -> None:
        self._writer.writerow(outcome.as_row())


class JsonLinesExporter(_FileExporter):
    """One JSON object per outcome."""

    def _write(self, outcome: SearchOutcome) -> None:
        json.dump(outcome.as_dict(), self._file, ensure_ascii=False)
        self._file.write("\n")


__all__ = ["CsvExporter", "JsonLinesExporter"]
