"""Unit tests for BenchmarkOrchestrator."""

import asyncio

import pytest
import structlog

from tb_common.errors import RunInProgressError
from tb_runner.engine.orchestrator import BenchmarkOrchestrator
from tb_runner.models.benchmark import STEP_ORDER
from tb_runner.models.config import PipelineSettings, TargetDescriptor
from tb_runner.surface.interface import CreationTrigger
from tests.helpers.clock import ManualClock
from tests.helpers.todo_surface import FakeTodoSurface, TodoBehavior

pytestmark = [pytest.mark.unit, pytest.mark.unit_runner]

TARGET = TargetDescriptor(
    name="vanilla",
    entry_point="fake://vanilla",
    attributes={"language": "javascript"},
    creation_trigger=CreationTrigger.CHANGE,
)


def make_orchestrator(behavior=None, settings=None, callback=None):
    clock = ManualClock()
    surface = FakeTodoSurface(clock, behavior or TodoBehavior())
    orchestrator = BenchmarkOrchestrator(
        surface,
        settings=settings or PipelineSettings(todo_count=10),
        clock=clock,
        progress_callback=callback,
        run_id="run-unit",
    )
    return orchestrator, surface


class TestSuccessfulRun:
    def test_hundred_items_complete_every_step(self) -> None:
        """A well-behaved target yields five closed steps and no failure."""
        orchestrator, surface = make_orchestrator(
            TodoBehavior(load_latency=0.15), settings=PipelineSettings(todo_count=100)
        )

        benchmark = asyncio.run(orchestrator.run(TARGET))

        assert benchmark.failed_message is None
        assert benchmark.succeeded
        assert [step.name for step in benchmark.steps] == list(STEP_ORDER)
        assert all(step.end is not None for step in benchmark.steps)
        assert benchmark.step("load").elapsed <= 0.2
        assert benchmark.step("complete todos").elapsed <= 5.0
        assert benchmark.step("delete todos").elapsed <= 5.0
        assert surface.items == []
        assert max(surface.counts(".toggle")) == 100

    def test_benchmark_carries_target_identity(self) -> None:
        orchestrator, _ = make_orchestrator()

        benchmark = asyncio.run(orchestrator.run(TARGET))

        assert benchmark.name == "vanilla"
        assert benchmark.language == "javascript"
        assert benchmark.entry_point == "fake://vanilla"
        assert benchmark.run_id == "run-unit"

    def test_event_sequence(self) -> None:
        events = []
        orchestrator, _ = make_orchestrator(callback=events.append)

        result = asyncio.run(orchestrator.run(TARGET))

        statuses = [event.status for event in events]
        assert statuses == ["busy", "load"] + ["step"] * 5 + ["idle", "done"]
        assert events[1].message == "fake://vanilla"
        assert [event.step for event in events if event.status == "step"] == list(STEP_ORDER)
        assert events[-1].benchmark == result
        assert all(event.run_id == "run-unit" for event in events)

    def test_step_events_carry_growing_snapshots(self) -> None:
        events = []
        orchestrator, _ = make_orchestrator(callback=events.append)

        asyncio.run(orchestrator.run(TARGET))

        snapshots = [event.benchmark for event in events if event.status == "step"]
        assert [len(snapshot.completed_steps) for snapshot in snapshots] == [1, 2, 3, 4, 5]

    def test_returned_benchmark_is_independent(self) -> None:
        events = []
        orchestrator, _ = make_orchestrator(callback=events.append)

        result = asyncio.run(orchestrator.run(TARGET))
        result.steps.clear()

        assert len(events[-1].benchmark.steps) == 5

    def test_not_busy_after_run(self) -> None:
        orchestrator, _ = make_orchestrator()

        asyncio.run(orchestrator.run(TARGET))

        assert orchestrator.busy is False


class TestFailedRun:
    def test_missing_input_fails_after_load(self) -> None:
        events = []
        orchestrator, _ = make_orchestrator(
            TodoBehavior(input_latency=None),
            settings=PipelineSettings(todo_count=10, input_timeout=1.0),
            callback=events.append,
        )

        benchmark = asyncio.run(orchestrator.run(TARGET))

        assert benchmark.failed_message == "todo input not found"
        assert [step.name for step in benchmark.completed_steps] == ["load"]
        assert [step.name for step in benchmark.steps] == ["load", "await input"]
        assert benchmark.steps[1].end is None
        assert [event.status for event in events][-2:] == ["idle", "failed"]
        assert events[-1].message == "todo input not found"

    @pytest.mark.parametrize(
        "behavior, settings, failed_at",
        [
            (TodoBehavior(load_latency=None), PipelineSettings(todo_count=5, load_timeout=0.05), 0),
            (
                TodoBehavior(duplicate_on_item=1),
                PipelineSettings(todo_count=5),
                2,
            ),
            (
                TodoBehavior(show_clear_completed=False),
                PipelineSettings(todo_count=5),
                3,
            ),
            (
                TodoBehavior(stall_deletes_after=1),
                PipelineSettings(todo_count=5, delete_item_timeout=0.05),
                4,
            ),
        ],
    )
    def test_failure_truncates_later_steps(self, behavior, settings, failed_at) -> None:
        orchestrator, _ = make_orchestrator(behavior, settings=settings)

        benchmark = asyncio.run(orchestrator.run(TARGET))

        assert benchmark.failed_message
        assert [step.name for step in benchmark.completed_steps] == list(STEP_ORDER[:failed_at])
        assert len(benchmark.steps) <= failed_at + 1
        assert not benchmark.succeeded

    def test_unexpected_exception_is_recorded(self) -> None:
        orchestrator, _ = make_orchestrator(
            TodoBehavior(click_error=RuntimeError("surface crashed"))
        )

        benchmark = asyncio.run(orchestrator.run(TARGET))

        assert benchmark.failed_message == "unexpected error: surface crashed"
        assert [step.name for step in benchmark.completed_steps] == list(STEP_ORDER[:3])
        assert orchestrator.busy is False


class TestOrchestratorGuards:
    def test_concurrent_run_is_rejected(self) -> None:
        orchestrator, _ = make_orchestrator()

        async def scenario():
            first = asyncio.ensure_future(orchestrator.run(TARGET))
            await asyncio.sleep(0)
            assert orchestrator.busy is True
            with pytest.raises(RunInProgressError):
                await orchestrator.run(TARGET)
            return await first

        benchmark = asyncio.run(scenario())

        assert benchmark.succeeded

    def test_failing_callback_does_not_break_run(self) -> None:
        def explode(event):
            raise RuntimeError("listener bug")

        orchestrator, _ = make_orchestrator(callback=explode)

        benchmark = asyncio.run(orchestrator.run(TARGET))

        assert benchmark.succeeded

    def test_log_context_bound_during_run(self) -> None:
        seen = []

        def capture(event):
            seen.append(dict(structlog.contextvars.get_contextvars()))

        orchestrator, _ = make_orchestrator(callback=capture)

        asyncio.run(orchestrator.run(TARGET))

        assert seen
        assert all(ctx == {"run_id": "run-unit", "target": "vanilla"} for ctx in seen)
        assert structlog.contextvars.get_contextvars() == {}
