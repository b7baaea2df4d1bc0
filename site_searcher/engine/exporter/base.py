"""Result sink contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from threading import Lock
from typing import Iterable

from ...errors import SinkWriteError
from ..outcomes import SearchOutcome

RESULT_HEADERS = ("url", "result", "error")


class BaseExporter(ABC):
    """Uniform sink contract; ``record`` is safe to call from many threads.

    Writes are serialised by one lock per exporter and each accepted outcome
    is persisted before ``record`` returns. Any storage failure is raised as
    ``SinkWriteError``.
    """

    write_errors: tuple[type[Exception], ...] = (OSError, ValueError)

    def __init__(self) -> None:
        self._lock = Lock()
        self.count = 0

    def record(self, outcome: SearchOutcome) -> None:
        with self._lock:
            try:
                self._write(outcome)
                self._persist()
            except SinkWriteError:
                raise
            except self.write_errors as exc:
                raise SinkWriteError(f"Cannot persist result for {outcome.target}: {exc}") from exc
            self.count += 1

    def record_many(self, outcomes: Iterable[SearchOutcome]) -> None:
        for outcome in outcomes:
            self.record(outcome)

    @abstractmethod
    def _write(self, outcome: SearchOutcome) -> None:
        """Append a single outcome to the destination."""

    @abstractmethod
    def _persist(self) -> None:
        """Make previously written outcomes durable."""

    def flush(self) -> None:
        with self._lock:
            self._persist()

    @abstractmethod
    def close(self) -> None:
        """Release underlying resources."""

    def __enter__(self) -> "BaseExporter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["BaseExporter", "RESULT_HEADERS"]
