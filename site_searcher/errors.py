"""Fatal error taxonomy for Site-Searcher.

Per-target failures are never raised; they travel as ``TaskError`` values on
the outcome records. Everything here aborts the run.
"""

from __future__ import annotations


class SiteSearcherError(Exception):
    """Base class for run-aborting errors."""


class PatternError(SiteSearcherError):
    """The search term could not be compiled into a pattern."""


class TargetSourceError(SiteSearcherError):
    """The target list could not be opened or parsed."""


class SinkError(SiteSearcherError):
    """Base class for result sink failures."""


class SinkOpenError(SinkError):
    """The output destination could not be created."""


class SinkWriteError(SinkError):
    """A result could not be persisted."""


__all__ = [
    "PatternError",
    "SinkError",
    "SinkOpenError",
    "SinkWriteError",
    "SiteSearcherError",
    "TargetSourceError",
]
