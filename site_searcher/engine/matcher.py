"""Pattern compilation and payload matching."""

from __future__ import annotations

import re

import httpx

from ..errors import PatternError
from .outcomes import FetchOutcome, SearchOutcome, TaskError


def compile_pattern(term: str, *, ignore_case: bool = False, literal: bool = False) -> re.Pattern[bytes]:
    """Compile ``term`` into a bytes pattern, raising ``PatternError`` on failure."""

    source = re.escape(term) if literal else term
    flags = re.IGNORECASE if ignore_case else 0
    try:
        return re.compile(source.encode("utf-8"), flags)
    except (re.error, UnicodeEncodeError) as exc:
        raise PatternError(f"Cannot compile search term {term!r}: {exc}") from exc


class Matcher:
    """Search fetched payloads for one precompiled pattern."""

    def __init__(self, pattern: re.Pattern[bytes]) -> None:
        self.pattern = pattern

    def matches(self, payload: bytes) -> bool:
        return self.pattern.search(payload) is not None

    def match(self, fetched: FetchOutcome) -> SearchOutcome:
        if fetched.error is not None:
            return SearchOutcome.failed_with(fetched.target, fetched.error)
        try:
            payload = fetched.read()
        except (httpx.HTTPError, httpx.StreamError, OSError) as exc:
            return SearchOutcome.failed_with(
                fetched.target, TaskError.from_exception(exc, default_kind="read")
            )
        return SearchOutcome(target=fetched.target, matched=self.matches(payload))


__all__ = ["Matcher", "compile_pattern"]
