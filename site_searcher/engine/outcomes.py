"""Records passed between the fetch, match and export stages."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum

import httpx


class TaskState(str, Enum):
    """Lifecycle of a single fetch+match task."""

    QUEUED = "queued"
    FETCHING = "fetching"
    MATCHING = "matching"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class TaskError:
    """A per-target failure, kept as data instead of being raised."""

    kind: str
    message: str = ""

    def __str__(self) -> str:
        if not self.message:
            return self.kind
        return f"{self.kind}: {self.message}"

    @classmethod
    def from_exception(cls, exc: BaseException, default_kind: str = "internal") -> "TaskError":
        # Order matters: the httpx hierarchy nests these classes.
        if isinstance(exc, httpx.TimeoutException):
            kind = "timeout"
        elif isinstance(exc, httpx.ConnectError):
            kind = "connect"
        elif isinstance(exc, httpx.HTTPStatusError):
            kind = "http_status"
        elif isinstance(exc, httpx.InvalidURL):
            kind = "invalid_url"
        elif isinstance(exc, httpx.DecodingError):
            kind = "decode"
        elif isinstance(exc, (httpx.ReadError, httpx.StreamError)):
            kind = "read"
        elif isinstance(exc, httpx.TransportError):
            kind = "transport"
        else:
            kind = default_kind
        message = str(exc).strip() or exc.__class__.__name__
        return cls(kind=kind, message=message)


@dataclass(slots=True)
class FetchOutcome:
    """Result of fetching one target.

    A successful fetch carries either an already-read ``payload`` or an open,
    streamed ``response`` whose body is read during matching. An outcome that
    carries an ``error`` never exposes a response: any response handed in
    alongside the error is closed and dropped.

    ``deadline`` is a ``time.monotonic()`` instant bounding the whole request;
    reading the body past it raises ``httpx.ReadTimeout``.
    """

    target: str
    payload: bytes | None = None
    response: httpx.Response | None = field(default=None, repr=False)
    error: TaskError | None = None
    status_code: int | None = None
    deadline: float | None = None

    def __post_init__(self) -> None:
        if self.response is not None and self.status_code is None:
            self.status_code = self.response.status_code
        if self.error is not None:
            self.close()
            self.response = None
            self.payload = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def read(self) -> bytes:
        """Return the full body; may raise while reading a streamed response."""

        if self.payload is not None:
            return self.payload
        if self.response is None:
            raise httpx.StreamError(f"No payload available for {self.target}")
        chunks: list[bytes] = []
        for chunk in self.response.iter_bytes():
            chunks.append(chunk)
            self.check_deadline()
        self.payload = b"".join(chunks)
        return self.payload

    def check_deadline(self) -> None:
        if self.deadline is None or time.monotonic() <= self.deadline:
            return
        request = self.response.request if self.response is not None else None
        raise httpx.ReadTimeout(f"Response not completed in time for {self.target}", request=request)

    def close(self) -> None:
        if self.response is not None:
            self.response.close()

    def __enter__(self) -> "FetchOutcome":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


@dataclass(frozen=True, slots=True)
class SearchOutcome:
    """Terminal record for one target."""

    target: str
    matched: bool
    error: TaskError | None = None

    def __post_init__(self) -> None:
        if self.error is not None and self.matched:
            raise ValueError("An outcome carrying an error cannot be a match")

    @classmethod
    def failed_with(cls, target: str, error: TaskError) -> "SearchOutcome":
        return cls(target=target, matched=False, error=error)

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def error_text(self) -> str:
        return "" if self.error is None else str(self.error)

    def as_row(self) -> tuple[str, str, str]:
        return (self.target, "true" if self.matched else "false", self.error_text)

    def as_dict(self) -> dict[str, object]:
        return {"url": self.target, "result": self.matched, "error": self.error_text}


__all__ = ["FetchOutcome", "SearchOutcome", "TaskError", "TaskState"]
