"""Terminal progress helpers with Rich-based rendering."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock

from rich.console import Console
from rich.errors import LiveError
from rich.progress import (
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text


@dataclass
class ProgressState:
    matched: int = 0
    not_matched: int = 0
    failed: int = 0
    current_target: str | None = None

    @property
    def done(self) -> int:
        return self.matched + self.not_matched + self.failed


class RateColumn(ProgressColumn):
    """Render the number of targets processed per second."""

    def render(self, task: Task) -> Text:
        speed = task.finished_speed or task.speed
        if speed is None:
            return Text("", style="progress.percentage")
        return Text(f"{speed:.1f} url/s", style="progress.percentage")


class ProgressReporter:
    """Render progress and maintain counters for CLI feedback.

    The total is unknown up front because targets are read lazily, so the bar
    only counts completed targets. Outside a terminal the reporter silently
    keeps counters.
    """

    def __init__(self, enabled: bool = True, console: Console | None = None) -> None:
        self.enabled = enabled
        self._console = console
        self._progress: Progress | None = None
        self._task_id: TaskID | None = None
        self._lock = Lock()
        self.state = ProgressState()

    def start(self, label: str = "search") -> None:
        self.state = ProgressState()
        if not self.enabled:
            return
        if self._console is None:
            self._console = Console()
        if not self._console.is_terminal:
            self.enabled = False
            return
        self._progress = Progress(
            SpinnerColumn(style="cyan"),
            TextColumn("[bold blue]{task.description}"),
            TextColumn("{task.completed} done"),
            TimeElapsedColumn(),
            RateColumn(),
            TextColumn("[green]✓{task.fields[matched]:>4}", justify="right"),
            TextColumn("[white]·{task.fields[not_matched]:>4}", justify="right"),
            TextColumn("[red]✗{task.fields[failed]:>4}", justify="right"),
            TextColumn("[dim]{task.fields[current]}", justify="left"),
            console=self._console,
            transient=True,
            refresh_per_second=12,
        )
        try:
            self._progress.start()
        except LiveError:
            # 同一控制台已有活动的进度条，退化为静默模式
            self.enabled = False
            self._progress = None
            return
        self._task_id = self._progress.add_task(
            label, total=None, matched=0, not_matched=0, failed=0, current=""
        )

    def advance(self, *, matched: bool = False, failed: bool = False, target: str | None = None) -> None:
        with self._lock:
            if failed:
                self.state.failed += 1
            elif matched:
                self.state.matched += 1
            else:
                self.state.not_matched += 1
            if target:
                self.state.current_target = target
            if self._progress is None or self._task_id is None:
                return
            current = self.state.current_target or ""
            if len(current) > 60:
                current = current[:57] + "..."
            self._progress.update(
                self._task_id,
                advance=1,
                matched=self.state.matched,
                not_matched=self.state.not_matched,
                failed=self.state.failed,
                current=current,
            )

    def close(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
        self._task_id = None

    def summary(self) -> dict[str, int]:
        return {
            "matched": self.state.matched,
            "not_matched": self.state.not_matched,
            "failed": self.state.failed,
        }


__all__ = ["ProgressReporter", "ProgressState", "RateColumn"]
