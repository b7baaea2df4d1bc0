"""Result sinks."""

from __future__ import annotations

from pathlib import Path

from .base import RESULT_HEADERS, BaseExporter
from .file_exporter import CsvExporter, JsonLinesExporter
from .sqlite_exporter import SQLiteExporter

_EXPORTERS: dict[str, type[BaseExporter]] = {
    "csv": CsvExporter,
    "jsonl": JsonLinesExporter,
    "sqlite": SQLiteExporter,
}


def build_exporter(path: Path, fmt: str = "csv") -> BaseExporter:
    try:
        exporter_cls = _EXPORTERS[fmt]
    except KeyError:
        raise ValueError(f"Unsupported output format: {fmt}") from None
    return exporter_cls(path)


__all__ = [
    "BaseExporter",
    "CsvExporter",
    "JsonLinesExporter",
    "RESULT_HEADERS",
    "SQLiteExporter",
    "build_exporter",
]
