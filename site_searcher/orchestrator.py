"""Run orchestrator wiring together targets, fetching, matching, export and progress."""

from __future__ import annotations

import time
from contextlib import closing
from dataclasses import asdict, dataclass
from pathlib import Path

import httpx
import structlog

from .config import SearchConfig
from .engine import CsvTargetSource, Dispatcher, Fetcher, Matcher, SearchOutcome, compile_pattern
from .engine.exporter import build_exporter
from .logging_conf import configure_logging
from .ui import ProgressReporter


@dataclass(slots=True)
class RunSummary:
    """Totals for one completed run."""

    output_path: Path
    total: int = 0
    matched: int = 0
    not_matched: int = 0
    failed: int = 0
    elapsed_seconds: float = 0.0
    peak_concurrency: int = 0

    def add(self, outcome: SearchOutcome) -> None:
        self.total += 1
        if outcome.failed:
            self.failed += 1
        elif outcome.matched:
            self.matched += 1
        else:
            self.not_matched += 1

    def as_dict(self) -> dict[str, object]:
        data = asdict(self)
        data["output_path"] = str(self.output_path)
        return data


class SearchOrchestrator:
    """Central coordinator for one batch search."""

    def __init__(
        self,
        config: SearchConfig,
        transport: httpx.BaseTransport | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.transport = transport
        self.logger = logger or configure_logging().bind(component="orchestrator")

    def run(self, progress_enabled: bool = False) -> RunSummary:
        """Search every target and record one outcome each.

        Startup checks run in order pattern → input → output so that a fatal
        error never leaves an output file behind. Fatal errors propagate.
        """

        config = self.config
        started = time.perf_counter()
        try:
            pattern = compile_pattern(
                config.search_term, ignore_case=config.ignore_case, literal=config.literal
            )
            source = CsvTargetSource(
                config.in_file, column=config.target_column, skip_header=config.skip_header
            )
        except Exception as exc:
            self.logger.error("startup_failed", error=str(exc))
            raise
        try:
            exporter = build_exporter(config.out_file, config.output_format)
        except Exception as exc:
            source.close()
            self.logger.error("startup_failed", error=str(exc))
            raise

        self.logger.info(
            "search_started",
            in_file=str(config.in_file),
            out_file=str(config.out_file),
            search_term=config.search_term,
            concurrency=config.concurrency,
            timeout=config.http.timeout,
        )
        fetcher = Fetcher(config.http, transport=self.transport, max_connections=config.concurrency)
        dispatcher = Dispatcher(fetcher, Matcher(pattern), concurrency=config.concurrency)
        progress = ProgressReporter(enabled=progress_enabled)
        summary = RunSummary(output_path=config.out_file)
        try:
            progress.start(label=config.search_term)
            with closing(dispatcher.run(source)) as outcomes:
                for outcome in outcomes:
                    exporter.record(outcome)
                    summary.add(outcome)
                    progress.advance(matched=outcome.matched, failed=outcome.failed, target=outcome.target)
                    if outcome.failed:
                        self.logger.warning("target_failed", target=outcome.target, error=outcome.error_text)
                    else:
                        self.logger.debug("target_searched", target=outcome.target, matched=outcome.matched)
        except Exception as exc:
            self.logger.error("search_aborted", error=str(exc), recorded=summary.total)
            raise
        finally:
            progress.close()
            exporter.close()
            fetcher.close()
            source.close()

        summary.elapsed_seconds = time.perf_counter() - started
        summary.peak_concurrency = dispatcher.stats.peak_active
        self.logger.info("search_finished", **summary.as_dict())
        return summary


__all__ = ["RunSummary", "SearchOrchestrator"]
