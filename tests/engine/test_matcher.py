from __future__ import annotations

import time

import httpx
import pytest

from site_searcher.config import HttpConfig
from site_searcher.engine import FetchOutcome, Fetcher, Matcher, TaskError, compile_pattern
from site_searcher.errors import PatternError


def test_compile_pattern_rejects_invalid_regex() -> None:
    with pytest.raises(PatternError):
        compile_pattern("Treasure(")


def test_compile_pattern_literal_and_case_options() -> None:
    literal = Matcher(compile_pattern("a+b", literal=True))
    assert literal.matches(b"xx a+b yy")
    assert not literal.matches(b"aab")

    regex = Matcher(compile_pattern("a+b"))
    assert regex.matches(b"aab")

    folded = Matcher(compile_pattern("treasure", ignore_case=True))
    assert folded.matches(b"<h1>TREASURE</h1>")
    assert not Matcher(compile_pattern("treasure")).matches(b"<h1>TREASURE</h1>")


def test_matcher_handles_utf8_terms() -> None:
    matcher = Matcher(compile_pattern("café"))
    assert matcher.matches("menu: café crème".encode("utf-8"))


def test_match_reports_found_and_missing() -> None:
    matcher = Matcher(compile_pattern("Treasure"))
    found = matcher.match(FetchOutcome(target="a.test", payload=b"...Treasure..."))
    missing = matcher.match(FetchOutcome(target="c.test", payload=b"nothing here"))
    assert (found.target, found.matched, found.error) == ("a.test", True, None)
    assert (missing.target, missing.matched, missing.error) == ("c.test", False, None)


def test_match_passes_fetch_errors_through() -> None:
    matcher = Matcher(compile_pattern("Treasure"))
    error = TaskError("timeout", "timed out")
    outcome = matcher.match(FetchOutcome(target="b.test", error=error))
    assert not outcome.matched
    assert outcome.error == error


def test_match_converts_body_read_failures(mock_transport, respond) -> None:
    stream = respond.FailingStream()
    fetcher = Fetcher(HttpConfig(), transport=mock_transport({"a.test": respond.broken_body(stream)}))
    matcher = Matcher(compile_pattern("partial"))
    with fetcher.fetch("a.test") as fetched:
        outcome = matcher.match(fetched)
    fetcher.close()
    assert not outcome.matched
    assert outcome.error is not None
    assert outcome.error.kind == "read"
    assert stream.closed


def test_match_searches_decoded_content() -> None:
    import gzip

    compressed = gzip.compress(b"buried Treasure")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, content=compressed, headers={"Content-Encoding": "gzip"}, request=request
        )

    fetcher = Fetcher(HttpConfig(), transport=httpx.MockTransport(handler))
    with fetcher.fetch("a.test") as fetched:
        outcome = Matcher(compile_pattern("Treasure")).match(fetched)
    fetcher.close()
    assert outcome.matched


def test_match_reports_undecodable_bodies() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, content=b"not gzip at all", headers={"Content-Encoding": "gzip"}, request=request
        )

    fetcher = Fetcher(HttpConfig(), transport=httpx.MockTransport(handler))
    with fetcher.fetch("a.test") as fetched:
        outcome = Matcher(compile_pattern("gzip")).match(fetched)
    fetcher.close()
    assert outcome.error is not None
    assert outcome.error.kind == "decode"


def test_match_reports_timeout_once_deadline_passes() -> None:
    request = httpx.Request("GET", "http://late.test")
    fetched = FetchOutcome(
        target="late.test",
        response=httpx.Response(200, content=b"Treasure", request=request),
        deadline=time.monotonic() - 1,
    )
    with fetched:
        outcome = Matcher(compile_pattern("Treasure")).match(fetched)
    assert not outcome.matched
    assert outcome.error.kind == "timeout"
