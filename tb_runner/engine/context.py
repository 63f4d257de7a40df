"""Per-run state shared by the pipeline steps."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tb_runner.engine.wait import Predicate, PollOutcome, wait_for, wait_until_next_for

if TYPE_CHECKING:
    from tb_runner.engine.clock import Clock
    from tb_runner.models.benchmark import Benchmark
    from tb_runner.models.config import PipelineSettings, TargetDescriptor
    from tb_runner.surface.interface import Handle, TargetSurface


@dataclass
class RunContext:
    """State owned by exactly one active orchestrator run.

    ``baseline`` is the clock reading every step timestamp is relative to.
    """

    run_id: str
    target: TargetDescriptor
    surface: TargetSurface
    clock: Clock
    settings: PipelineSettings
    benchmark: Benchmark
    baseline: float
    todo_input: Handle | None = None

    def since(self, instant: float | None = None) -> float:
        """Seconds from the baseline to ``instant`` (default: now)."""
        if instant is None:
            instant = self.clock.now()
        return instant - self.baseline

    def count(self, selector: str) -> int:
        return len(self.surface.query_all(selector))

    async def wait_for(self, timeout: float, predicate: Predicate[Any]) -> PollOutcome[Any]:
        return await wait_for(timeout, predicate, clock=self.clock)

    async def wait_for_event(self, timeout: float, source: Any) -> PollOutcome[Any]:
        return await wait_until_next_for(timeout, source, clock=self.clock)
