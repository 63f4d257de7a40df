"""Terminal rendering of suite summaries with rich."""

from __future__ import annotations

from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from tb_analytics.aggregate import TargetSummary, summarize
from tb_runner.models.benchmark import STEP_ORDER, Benchmark

LANGUAGE_STYLES = {
    "rust": "dark_orange",
    "javascript": "gold1",
    "typescript": "deep_sky_blue1",
    "elm": "dark_turquoise",
    "clojurescript": "medium_orchid",
    "haskell": "medium_purple",
}


def language_style(language: Optional[str]) -> str:
    return LANGUAGE_STYLES.get((language or "").lower(), "grey50")


def _ms(seconds: Optional[float]) -> str:
    if seconds is None:
        return "-"
    return f"{seconds * 1000:.0f}"


def build_summary_table(summaries: Sequence[TargetSummary], title: str = "TodoMVC benchmarks") -> Table:
    """Build a table with one row per target and one column per step (ms)."""
    table = Table(
        title=title,
        box=box.ROUNDED,
        border_style="blue",
        header_style="bold blue",
        title_style="bold blue",
    )
    table.add_column("Target", no_wrap=True)
    table.add_column("Language")
    for step in STEP_ORDER:
        table.add_column(step, justify="right")
    table.add_column("Total (ms)", justify="right", style="bold")
    table.add_column("Runs", justify="right")
    table.add_column("Errors")

    for summary in summaries:
        style = language_style(summary.language)
        durations = []
        for step in STEP_ORDER:
            span = summary.step_means.get(step)
            durations.append(_ms(span[1] - span[0]) if span else "-")
        if summary.has_error:
            errors = Text(f"{summary.failures}: {summary.last_failure}", style="red")
        else:
            errors = Text("")
        table.add_row(
            Text(summary.name, style=style),
            Text(summary.language or "-", style=style),
            *durations,
            _ms(summary.mean_total),
            f"{summary.successes}/{summary.runs}",
            errors,
        )
    return table


class SummaryTable:
    """Result sink that prints the averaged suite results as a table."""

    def __init__(self, console: Console | None = None, title: str = "TodoMVC benchmarks") -> None:
        self.console = console or Console()
        self.title = title
        self.last_table: Table | None = None

    def publish(self, benchmarks: Sequence[Benchmark]) -> None:
        self.last_table = build_summary_table(summarize(benchmarks), title=self.title)
        self.console.print(self.last_table)
