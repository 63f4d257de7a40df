"""
Aggregation of per-run benchmark records.

Per-run records stay authoritative; everything here is derived from them
and never written back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from tb_runner.models.benchmark import STEP_ORDER, Benchmark

logger = logging.getLogger(__name__)

FRAME_COLUMNS = [
    "run",
    "target",
    "language",
    "run_id",
    "step",
    "start",
    "end",
    "elapsed",
    "cycles",
    "failed",
]


@dataclass(frozen=True)
class TargetSummary:
    """Averages over the successful runs of one target."""

    name: str
    language: Optional[str] = None
    runs: int = 0
    failures: int = 0
    mean_total: Optional[float] = None
    step_means: Dict[str, Tuple[float, float]] = field(default_factory=dict)
    last_failure: Optional[str] = None

    @property
    def has_error(self) -> bool:
        return self.failures > 0

    @property
    def successes(self) -> int:
        return self.runs - self.failures


def benchmarks_frame(benchmarks: Sequence[Benchmark]) -> pd.DataFrame:
    """
    Flatten benchmarks into one row per (run, step).

    Open steps of failed runs are kept with ``end`` and ``elapsed`` as NaN.
    """
    rows = []
    for run_index, benchmark in enumerate(benchmarks):
        failed = benchmark.failed_message is not None
        for step in benchmark.steps:
            rows.append(
                {
                    "run": run_index,
                    "target": benchmark.name,
                    "language": benchmark.language,
                    "run_id": benchmark.run_id,
                    "step": step.name,
                    "start": step.start,
                    "end": step.end,
                    "elapsed": step.elapsed,
                    "cycles": step.cycles,
                    "failed": failed,
                }
            )
    frame = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    for column in ("start", "end", "elapsed"):
        frame[column] = pd.to_numeric(frame[column], errors="coerce")
    return frame


def _step_means(frame: pd.DataFrame) -> Dict[str, Tuple[float, float]]:
    if frame.empty:
        return {}
    grouped = frame.dropna(subset=["end"]).groupby("step")[["start", "end"]].mean()
    ordered = [name for name in STEP_ORDER if name in grouped.index]
    ordered += [name for name in grouped.index if name not in STEP_ORDER]
    return {
        name: (float(grouped.loc[name, "start"]), float(grouped.loc[name, "end"]))
        for name in ordered
    }


def summarize(benchmarks: Sequence[Benchmark]) -> List[TargetSummary]:
    """
    Group runs by target name and average them.

    Failed runs count towards ``runs`` and ``failures`` only. The result is
    ordered by mean total time, with any target that failed at least once
    placed last.
    """
    by_target: Dict[str, List[Benchmark]] = {}
    for benchmark in benchmarks:
        by_target.setdefault(benchmark.name, []).append(benchmark)

    summaries = []
    for name, runs in by_target.items():
        succeeded = [run for run in runs if run.failed_message is None]
        failed = [run for run in runs if run.failed_message is not None]
        mean_total = None
        if succeeded:
            mean_total = float(pd.Series([run.total() for run in succeeded]).mean())
        summaries.append(
            TargetSummary(
                name=name,
                language=runs[-1].language,
                runs=len(runs),
                failures=len(failed),
                mean_total=mean_total,
                step_means=_step_means(benchmarks_frame(succeeded)),
                last_failure=failed[-1].failed_message if failed else None,
            )
        )
    logger.debug("Summarized %d runs into %d targets", len(benchmarks), len(summaries))

    def sort_key(summary: TargetSummary) -> tuple:
        total = summary.mean_total if summary.mean_total is not None else float("inf")
        return (summary.has_error, total, summary.name)

    return sorted(summaries, key=sort_key)
