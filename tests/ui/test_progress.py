from __future__ import annotations

import io

from rich.console import Console

from site_searcher.ui import ProgressReporter


def test_progress_reporter_counts() -> None:
    reporter = ProgressReporter(enabled=False)
    reporter.start()
    reporter.advance(matched=True, target="a.test")
    reporter.advance(failed=True, target="b.test")
    reporter.advance(target="c.test")
    reporter.advance(matched=True, failed=True)
    summary = reporter.summary()
    reporter.close()
    assert summary == {"matched": 1, "not_matched": 1, "failed": 2}
    assert reporter.state.done == 4
    assert reporter.state.current_target == "c.test"


def test_progress_reporter_disables_itself_off_terminal() -> None:
    console = Console(file=io.StringIO(), force_terminal=False)
    reporter = ProgressReporter(enabled=True, console=console)
    reporter.start("search")
    reporter.advance(matched=True, target="a.test")
    reporter.close()
    assert not reporter.enabled
    assert reporter.summary()["matched"] == 1
    assert console.file.getvalue() == ""


def test_progress_reporter_restart_resets_counters() -> None:
    reporter = ProgressReporter(enabled=False)
    reporter.start()
    reporter.advance(failed=True)
    reporter.start()
    assert reporter.summary() == {"matched": 0, "not_matched": 0, "failed": 0}
