"""Timing records produced by one benchmark run."""

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

LOAD = "load"
AWAIT_INPUT = "await input"
CREATE_TODOS = "create todos"
COMPLETE_TODOS = "complete todos"
DELETE_TODOS = "delete todos"

STEP_ORDER: Tuple[str, ...] = (LOAD, AWAIT_INPUT, CREATE_TODOS, COMPLETE_TODOS, DELETE_TODOS)


class BenchmarkStep(BaseModel):
    """One timed step; ``end`` stays unset unless the step succeeded.

    ``start`` and ``end`` are seconds since the run's clock baseline.
    """

    name: str
    start: float
    end: Optional[float] = None
    cycles: Optional[int] = Field(default=None, ge=0)

    @property
    def is_complete(self) -> bool:
        return self.end is not None

    @property
    def elapsed(self) -> Optional[float]:
        if self.end is None:
            return None
        return self.end - self.start


class Benchmark(BaseModel):
    """All steps of one run against one target."""

    name: str = "unnamed"
    steps: List[BenchmarkStep] = Field(default_factory=list)
    failed_message: Optional[str] = None
    language: Optional[str] = None
    entry_point: Optional[str] = None
    run_id: Optional[str] = None

    def begin_step(self, name: str, start: float) -> BenchmarkStep:
        """Append a new, still open step.

        Steps must follow ``STEP_ORDER`` and nothing may be appended once the
        benchmark has failed.
        """
        if self.failed_message is not None:
            raise ValueError(f"benchmark '{self.name}' already failed; cannot add '{name}'")
        if name in STEP_ORDER and self.steps and self.steps[-1].name in STEP_ORDER:
            if STEP_ORDER.index(name) <= STEP_ORDER.index(self.steps[-1].name):
                raise ValueError(f"step '{name}' cannot follow '{self.steps[-1].name}'")
        if self.steps and not self.steps[-1].is_complete:
            raise ValueError(f"step '{self.steps[-1].name}' is still open")
        step = BenchmarkStep(name=name, start=start)
        self.steps.append(step)
        return step

    def fail(self, message: str) -> None:
        self.failed_message = message or "unknown failure"

    @property
    def succeeded(self) -> bool:
        return self.failed_message is None and all(step.is_complete for step in self.steps)

    @property
    def completed_steps(self) -> List[BenchmarkStep]:
        return [step for step in self.steps if step.is_complete]

    def step(self, name: str) -> Optional[BenchmarkStep]:
        for step in self.steps:
            if step.name == name:
                return step
        return None

    def total(self) -> float:
        """Seconds from the run baseline to the end of the last completed step."""
        completed = self.completed_steps
        if not completed:
            return 0.0
        return completed[-1].end or 0.0

    def event_deltas(self) -> List[Tuple[str, float, float]]:
        return [(step.name, step.start, step.end) for step in self.completed_steps]  # type: ignore[misc]
