"""Bounded-concurrency fetch → match pipeline."""

from __future__ import annotations

import queue
from concurrent.futures import Future
from dataclasses import dataclass, field
from threading import Event, Lock, Thread
from typing import Iterable, Iterator, Protocol

from ..config import DEFAULT_CONCURRENCY
from ..errors import TargetSourceError
from .outcomes import FetchOutcome, SearchOutcome, TaskError, TaskState
from .thread_pool import BoundedThreadPool


class SupportsFetch(Protocol):
    def fetch(self, target: str) -> FetchOutcome: ...


class SupportsMatch(Protocol):
    def match(self, fetched: FetchOutcome) -> SearchOutcome: ...


@dataclass
class DispatchStats:
    """Live task accounting for one run."""

    submitted: int = 0
    completed: int = 0
    peak_active: int = 0
    states: dict[TaskState, int] = field(
        default_factory=lambda: {state: 0 for state in TaskState}
    )
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def queue(self) -> None:
        with self._lock:
            self.submitted += 1
            self.states[TaskState.QUEUED] += 1

    def move(self, current: TaskState, new: TaskState) -> None:
        with self._lock:
            self.states[current] -= 1
            self.states[new] += 1
            if new is TaskState.COMPLETED:
                self.completed += 1
            active = self.states[TaskState.FETCHING] + self.states[TaskState.MATCHING]
            self.peak_active = max(self.peak_active, active)

    @property
    def active(self) -> int:
        with self._lock:
            return self.states[TaskState.FETCHING] + self.states[TaskState.MATCHING]

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            data = {state.value: count for state, count in self.states.items()}
            data.update(
                submitted=self.submitted,
                completed=self.completed,
                peak_active=self.peak_active,
            )
            return data


@dataclass(frozen=True)
class _SourceDrained:
    submitted: int
    error: BaseException | None = None


class Dispatcher:
    """Schedule fetch+match tasks with at most ``concurrency`` in flight.

    ``run`` yields exactly one ``SearchOutcome`` per target, in completion
    order. A feeder thread drains the target iterable, taking a concurrency
    token before each submission; the consumer side ends once the source is
    exhausted and every submitted task has reported.
    """

    def __init__(
        self,
        fetcher: SupportsFetch,
        matcher: SupportsMatch,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.fetcher = fetcher
        self.matcher = matcher
        self.concurrency = concurrency
        self.stats = DispatchStats()

    def run(self, targets: Iterable[str]) -> Iterator[SearchOutcome]:
        self.stats = DispatchStats()
        results: queue.SimpleQueue = queue.SimpleQueue()
        stop = Event()
        pool = BoundedThreadPool(self.concurrency)
        feeder = Thread(
            target=self._feed,
            args=(targets, pool, results, stop),
            name="searcher-feeder",
            daemon=True,
        )
        feeder.start()
        submitted: int | None = None
        source_error: BaseException | None = None
        delivered = 0
        try:
            while submitted is None or delivered < submitted:
                item = results.get()
                if isinstance(item, _SourceDrained):
                    submitted = item.submitted
                    source_error = item.error
                    continue
                delivered += 1
                yield item
        finally:
            stop.set()
            feeder.join()
            pool.shutdown(wait=True)
        if isinstance(source_error, TargetSourceError):
            raise source_error
        if source_error is not None:
            raise TargetSourceError(f"Cannot read targets: {source_error}") from source_error

    def _feed(
        self,
        targets: Iterable[str],
        pool: BoundedThreadPool,
        results: queue.SimpleQueue,
        stop: Event,
    ) -> None:
        submitted = 0
        error: BaseException | None = None
        try:
            for target in targets:
                if stop.is_set():
                    break
                self.stats.queue()
                future = pool.submit(self._process, target)
                future.add_done_callback(
                    lambda done, target=target: results.put(self._outcome_of(done, target))
                )
                submitted += 1
        except Exception as exc:  # noqa: BLE001 - surfaced to the consumer
            error = exc
        finally:
            results.put(_SourceDrained(submitted=submitted, error=error))

    def _process(self, target: str) -> SearchOutcome:
        state = TaskState.QUEUED
        try:
            self.stats.move(state, TaskState.FETCHING)
            state = TaskState.FETCHING
            try:
                fetched = self.fetcher.fetch(target)
            except Exception as exc:  # noqa: BLE001
                return SearchOutcome.failed_with(
                    target, TaskError.from_exception(exc, default_kind="transport")
                )
            with fetched:
                if fetched.error is not None:
                    return SearchOutcome.failed_with(target, fetched.error)
                self.stats.move(state, TaskState.MATCHING)
                state = TaskState.MATCHING
                try:
                    return self.matcher.match(fetched)
                except Exception as exc:  # noqa: BLE001
                    return SearchOutcome.failed_with(
                        target, TaskError.from_exception(exc, default_kind="match")
                    )
        finally:
            self.stats.move(state, TaskState.COMPLETED)

    @staticmethod
    def _outcome_of(future: Future, target: str) -> SearchOutcome:
        exc = future.exception()
        if exc is not None:
            return SearchOutcome.failed_with(target, TaskError.from_exception(exc))
        return future.result()


__all__ = ["Dispatcher", "DispatchStats", "SupportsFetch", "SupportsMatch"]
