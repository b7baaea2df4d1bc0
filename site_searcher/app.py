"""Typer CLI entrypoint for Site-Searcher."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, SearchConfig
from .errors import SiteSearcherError
from .logging_conf import configure_logging, searcher_log_path, tail_log
from .orchestrator import RunSummary, SearchOrchestrator

app = typer.Typer(
    help="Site-Searcher: search a list of websites for a term.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Inspect searcher logs.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
app.add_typer(log_app, name="log")

console = Console()


def build_orchestrator(config: SearchConfig) -> SearchOrchestrator:
    return SearchOrchestrator(config)


def _progress_default_enabled() -> bool:
    return bool(getattr(sys.stdout, "isatty", lambda: False)())


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "config"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


def _render_summary(summary: RunSummary) -> Table:
    table = Table(title="Search results", box=box.SIMPLE_HEAD)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green", justify="right")
    table.add_row("Targets", str(summary.total))
    table.add_row("Matched", str(summary.matched))
    table.add_row("Not matched", str(summary.not_matched))
    table.add_row("Failed", str(summary.failed))
    table.add_row("Peak concurrency", str(summary.peak_concurrency))
    return table


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
) -> None:
    configure_logging(verbose=verbose)
    ctx.obj = {"verbose": verbose}


@app.command("search", help="Fetch every target and record whether it contains the search term.")
def search(
    in_file: Annotated[
        Optional[Path], typer.Option("--in-file", "-i", help="CSV input; targets in the second column.")
    ] = None,
    out_file: Annotated[
        Optional[Path], typer.Option("--out-file", "-o", help="Where results are written.")
    ] = None,
    search_term: Annotated[
        Optional[str],
        typer.Option("--search-term", "--regex", "-s", help="Regular expression to search for."),
    ] = None,
    concurrency: Annotated[
        Optional[int], typer.Option("--concurrency", "-k", help="Maximum concurrent requests.")
    ] = None,
    timeout: Annotated[
        Optional[float], typer.Option("--timeout", "-t", help="Per-request timeout in seconds.")
    ] = None,
    output_format: Annotated[
        Optional[str], typer.Option("--format", "-f", help="Output format: csv, jsonl or sqlite.")
    ] = None,
    ignore_case: Annotated[
        Optional[bool], typer.Option("--ignore-case/--match-case", help="Case-insensitive search.")
    ] = None,
    literal: Annotated[
        Optional[bool], typer.Option("--literal/--regex-mode", help="Treat the term as plain text.")
    ] = None,
    fail_on_http_error: Annotated[
        Optional[bool],
        typer.Option(
            "--fail-on-http-error/--search-any-status",
            help="Record 4xx/5xx responses as errors instead of searching them.",
        ),
    ] = None,
    config_file: Annotated[
        Optional[Path], typer.Option("--config", "-c", help="YAML or JSON configuration file.")
    ] = None,
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print a one-line summary."),
) -> None:
    overrides: dict[str, Any] = {
        "in_file": in_file,
        "out_file": out_file,
        "search_term": search_term,
        "concurrency": concurrency,
        "output_format": output_format,
        "ignore_case": ignore_case,
        "literal": literal,
        "http": {"timeout": timeout, "fail_on_http_error": fail_on_http_error},
    }
    try:
        config = ConfigRepository().load_search_config(config_file, overrides)
    except ValidationError as exc:
        console.print(f"Invalid configuration: {_format_validation_error(exc)}", style="red", markup=False)
        raise typer.Exit(code=2)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"Invalid configuration: {exc}", style="red", markup=False)
        raise typer.Exit(code=2)

    orchestrator = build_orchestrator(config)
    progress_flag = _progress_default_enabled() and not quiet
    try:
        summary = orchestrator.run(progress_enabled=progress_flag)
    except SiteSearcherError as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1)

    if quiet:
        console.print(
            f"Searched {summary.total} targets: {summary.matched} matched, "
            f"{summary.not_matched} not matched, {summary.failed} failed"
        )
    else:
        console.print(_render_summary(summary))
        console.print(f"Results written to {summary.output_path}", style="dim")
    console.print(f"Website search took: {summary.elapsed_seconds:.3f}s")


@log_app.command("show", help="Print the most recent searcher log lines.")
def log_show(
    tail: int = typer.Option(100, "--tail", help="Number of lines to show."),
) -> None:
    path = searcher_log_path()
    lines = tail_log(path, tail)
    if not lines:
        console.print("No log entries yet.", style="dim")
        return
    console.print(f"{path} (last {len(lines)} lines)", style="cyan")
    console.print("".join(lines), markup=False, highlight=False, end="")


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
