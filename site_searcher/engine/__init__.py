"""Engine components orchestrating targets → fetch → match → export."""

from .dispatcher import Dispatcher, DispatchStats
from .fetcher import Fetcher
from .matcher import Matcher, compile_pattern
from .outcomes import FetchOutcome, SearchOutcome, TaskError, TaskState
from .targets import CsvTargetSource
from .thread_pool import BoundedThreadPool

__all__ = [
    "BoundedThreadPool",
    "CsvTargetSource",
    "DispatchStats",
    "Dispatcher",
    "FetchOutcome",
    "Fetcher",
    "Matcher",
    "SearchOutcome",
    "TaskError",
    "TaskState",
    "compile_pattern",
]
