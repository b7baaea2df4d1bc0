"""Thread pool that bounds the number of in-flight tasks."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from threading import BoundedSemaphore, Lock
from typing import Any, Callable, TypeVar

T = TypeVar("T")


class BoundedThreadPool:
    """Run callables on ``max_in_flight`` workers, holding one token per task.

    ``submit`` blocks the caller while every token is taken, so a producer
    feeding this pool can never run ahead of the workers. The token is
    returned by a done-callback, whatever the task's outcome.
    """

    def __init__(self, max_in_flight: int, thread_name_prefix: str = "searcher") -> None:
        if max_in_flight < 1:
            raise ValueError("max_in_flight must be >= 1")
        self.max_in_flight = max_in_flight
        self._tokens = BoundedSemaphore(max_in_flight)
        self._executor = ThreadPoolExecutor(
            max_workers=max_in_flight, thread_name_prefix=thread_name_prefix
        )
        self._lock = Lock()
        self._in_flight = 0
        self._peak_in_flight = 0

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        with self._lock:
            return self._peak_in_flight

    def submit(self, fn: Callable[..., T], *args: Any) -> Future[T]:
        self._tokens.acquire()
        with self._lock:
            self._in_flight += 1
            self._peak_in_flight = max(self._peak_in_flight, self._in_flight)
        try:
            future = self._executor.submit(fn, *args)
        except BaseException:
            self._release()
            raise
        future.add_done_callback(self._on_done)
        return future

    def _on_done(self, _future: Future) -> None:
        self._release()

    def _release(self) -> None:
        with self._lock:
            self._in_flight -= 1
        self._tokens.release()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "BoundedThreadPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)


__all__ = ["BoundedThreadPool"]
