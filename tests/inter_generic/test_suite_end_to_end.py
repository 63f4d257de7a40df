"""End-to-end suite run over in-memory targets: config file to stored summary."""

import asyncio
from pathlib import Path

import pytest
from rich.console import Console

from tb_analytics import SummaryTable, summarize
from tb_runner import BenchmarkOrchestrator, ResultStore, SuiteConfig, SuiteScheduler
from tb_runner.models.benchmark import STEP_ORDER
from tb_runner.models.events import TargetState
from tests.helpers.clock import ManualClock
from tests.helpers.todo_surface import FakeTodoSurface, TodoBehavior

pytestmark = [pytest.mark.inter_generic]

SUITE_YAML = """\
avg_times: 3
seed: 11
pipeline:
  todo_count: 20
  input_timeout: 1.0
targets:
  - name: yew
    entry_point: fake://yew
    attributes: {language: rust, version: "0.17"}
    creation_trigger: input_and_keypress
  - name: vanilla
    entry_point: fake://vanilla
    attributes: {language: javascript}
  - name: blank
    entry_point: fake://blank
    attributes: {language: elm}
  - name: parked
    entry_point: fake://parked
    enabled: false
"""


@pytest.fixture
def suite_file(tmp_path: Path) -> Path:
    path = tmp_path / "suite.yaml"
    path.write_text(SUITE_YAML, encoding="utf-8")
    return path


def test_suite_runs_stores_and_reports(suite_file: Path, tmp_path: Path) -> None:
    config = SuiteConfig.load(suite_file)
    clock = ManualClock()
    surface = FakeTodoSurface(
        clock,
        TodoBehavior(load_latency=0.1),
        by_entry_point={"fake://blank": TodoBehavior(input_latency=None)},
    )
    store = ResultStore(tmp_path / "results.json")
    console = Console(record=True, width=200)
    events = []
    scheduler = SuiteScheduler(
        config,
        BenchmarkOrchestrator(surface, settings=config.pipeline, clock=clock),
        store=store,
        sinks=[SummaryTable(console=console)],
        progress_callback=events.append,
    )

    result = asyncio.run(scheduler.run_suite())

    assert len(result.benchmarks) == 9
    assert "fake://parked" not in surface.loads
    for benchmark in result.benchmarks:
        if benchmark.name == "blank":
            assert benchmark.failed_message == "todo input not found"
            assert [s.name for s in benchmark.completed_steps] == ["load"]
        else:
            assert benchmark.succeeded
            assert [s.name for s in benchmark.steps] == list(STEP_ORDER)

    statuses = scheduler.statuses
    assert statuses["blank"].state is TargetState.ERRED
    assert statuses["yew"].state is TargetState.DONE
    assert statuses["parked"].state is TargetState.READY

    assert store.read_results() == result.benchmarks
    summaries = summarize(store.read_results())
    assert [s.name for s in summaries][-1] == "blank"
    assert {s.name: s.runs for s in summaries} == {"yew": 3, "vanilla": 3, "blank": 3}

    output = console.export_text()
    assert "yew" in output and "blank" in output
    assert [e.status for e in events].count("erred") == 3
