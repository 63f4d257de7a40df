"""The five timed steps of a TodoMVC benchmark run.

Each step drives the surface through ``RunContext`` and suspends only in the
wait helpers. A step either returns its cycle count or raises a
``StepError``; ``StepPipeline`` stamps the timings around it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import partial
from typing import Callable, Sequence

from tb_common.errors import (
    CountMismatchError,
    NotFoundError,
    PreconditionFailedError,
    StepTimeoutError,
    TooManyError,
)
from tb_runner.engine.context import RunContext
from tb_runner.engine.wait import TimedOut
from tb_runner.models.benchmark import (
    AWAIT_INPUT,
    COMPLETE_TODOS,
    CREATE_TODOS,
    DELETE_TODOS,
    LOAD,
    Benchmark,
    BenchmarkStep,
)
from tb_runner.surface.interface import FOCUS_EVENT, LOAD_EVENT

logger = logging.getLogger(__name__)


class BenchStep(ABC):
    """A named, asynchronous unit of the pipeline."""

    name: str = ""

    @abstractmethod
    async def execute(self, ctx: RunContext) -> int | None:
        """Run the step; return how many item cycles it performed, if any."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class LoadStep(BenchStep):
    """Load the entry point and wait for the surface's load event."""

    name = LOAD

    async def execute(self, ctx: RunContext) -> int | None:
        subscription = ctx.surface.events(LOAD_EVENT)
        try:
            ctx.surface.load(ctx.target.entry_point)
            outcome = await ctx.wait_for_event(ctx.settings.load_timeout, subscription)
        finally:
            subscription.close()
        found = outcome.expect(
            StepTimeoutError(
                "target did not finish loading",
                context={"entry_point": ctx.target.entry_point, "elapsed": outcome.elapsed},
            )
        )
        logger.info("Loaded %s in %.3fs", ctx.target.entry_point, found.elapsed)
        return None


class AwaitInputStep(BenchStep):
    """Locate the new-todo input and focus it."""

    name = AWAIT_INPUT

    async def execute(self, ctx: RunContext) -> int | None:
        selectors = ctx.settings.selectors.todo_input
        outcome = await ctx.wait_for(
            ctx.settings.input_timeout, lambda: ctx.surface.query_one(selectors)
        )
        found = outcome.expect(
            NotFoundError(
                "todo input not found",
                context={"selectors": list(selectors), "elapsed": outcome.elapsed},
            )
        )
        ctx.todo_input = found.value
        logger.debug("Found todo input after %.3fs", found.elapsed)

        if not ctx.target.wait_for_focus:
            ctx.surface.focus(found.value)
            return None

        subscription = ctx.surface.events(FOCUS_EVENT)
        try:
            ctx.surface.focus(found.value)
            focused = await ctx.wait_for_event(ctx.settings.focus_timeout, subscription)
        finally:
            subscription.close()
        focused.expect(
            StepTimeoutError(
                "todo input never received focus",
                context={"elapsed": focused.elapsed},
            )
        )
        return None


class CreateTodosStep(BenchStep):
    """Submit ``todo_count`` items one at a time, confirming each."""

    name = CREATE_TODOS

    async def execute(self, ctx: RunContext) -> int | None:
        settings = ctx.settings
        toggle = settings.selectors.toggle
        todo_input = ctx.todo_input
        if todo_input is None:
            raise NotFoundError("todo input not found")

        existing = ctx.count(toggle)
        if existing:
            raise PreconditionFailedError(
                f"todo list is not empty before creation ({existing} items)",
                context={"observed": existing},
            )

        for index in range(settings.todo_count):
            expected = index + 1
            ctx.surface.set_value(todo_input, f"Something to do {index}")
            ctx.surface.dispatch_creation_trigger(todo_input, ctx.target.creation_trigger)
            outcome = await ctx.wait_for(
                settings.create_item_timeout,
                partial(self._confirm_count, ctx, toggle, expected),
            )
            if isinstance(outcome, TimedOut):
                raise StepTimeoutError(
                    f"todo {index} was not created",
                    context={
                        "expected": expected,
                        "observed": ctx.count(toggle),
                        "trigger": ctx.target.creation_trigger.value,
                    },
                )
        return settings.todo_count

    @staticmethod
    def _confirm_count(ctx: RunContext, selector: str, expected: int) -> int | None:
        observed = ctx.count(selector)
        if observed > expected:
            raise TooManyError(
                f"created too many todos: expected {expected}, found {observed}",
                context={"expected": expected, "observed": observed},
            )
        return observed if observed == expected else None


class CompleteTodosStep(BenchStep):
    """Click every completion toggle once all of them are present."""

    name = COMPLETE_TODOS

    async def execute(self, ctx: RunContext) -> int | None:
        settings = ctx.settings
        selectors = settings.selectors
        count = settings.todo_count

        def all_toggles() -> list | None:
            toggles = ctx.surface.query_all(selectors.toggle)
            return toggles if len(toggles) == count else None

        outcome = await ctx.wait_for(settings.complete_timeout, all_toggles)
        if isinstance(outcome, TimedOut):
            raise CountMismatchError(
                "todos could not be found to complete",
                context={"expected": count, "observed": ctx.count(selectors.toggle)},
            )
        toggles = outcome.found.value
        for toggle in toggles:
            ctx.surface.click(toggle)

        if settings.await_clear_completed:
            cleared = await ctx.wait_for(
                settings.clear_completed_timeout,
                lambda: ctx.surface.query_one((selectors.clear_completed,)),
            )
            cleared.expect(
                NotFoundError(
                    "clear completed control not found",
                    context={"selector": selectors.clear_completed},
                )
            )
        return len(toggles)


class DeleteTodosStep(BenchStep):
    """Delete items through the first destroy control until none remain.

    Some targets reuse elements, so the step never iterates over a stale
    list of buttons: it always looks up the first one again.
    """

    name = DELETE_TODOS

    async def execute(self, ctx: RunContext) -> int | None:
        settings = ctx.settings
        destroy = settings.selectors.destroy
        count = settings.todo_count

        present = await ctx.wait_for(
            settings.delete_confirm_timeout,
            lambda: True if ctx.count(destroy) == count else None,
        )
        if isinstance(present, TimedOut):
            raise CountMismatchError(
                "could not confirm destroy toggles exist",
                context={"expected": count, "observed": ctx.count(destroy)},
            )

        started = ctx.clock.now()
        remaining = count
        deleted = 0
        while remaining > 0:
            if ctx.clock.now() - started > settings.delete_timeout:
                raise StepTimeoutError(
                    "timed out during destroy todos",
                    context={"remaining": remaining, "budget": settings.delete_timeout},
                )
            button = ctx.surface.query_one((destroy,))
            if button is None:
                raise CountMismatchError(
                    "could not find todos to destroy",
                    context={"expected": remaining, "observed": 0},
                )
            ctx.surface.click(button)
            expected = remaining - 1
            outcome = await ctx.wait_for(
                settings.delete_item_timeout,
                partial(self._confirm_remaining, ctx, destroy, expected),
            )
            if isinstance(outcome, TimedOut):
                raise StepTimeoutError(
                    f"deletion of todo {deleted} was not confirmed",
                    context={"expected": expected, "observed": ctx.count(destroy)},
                )
            remaining = expected
            deleted += 1

        # Reused-element targets can briefly report zero before re-rendering.
        drained = await ctx.wait_for(
            settings.delete_confirm_timeout,
            lambda: True if ctx.count(destroy) == 0 else None,
        )
        if isinstance(drained, TimedOut):
            raise CountMismatchError(
                "could not destroy todos",
                context={"expected": 0, "observed": ctx.count(destroy)},
            )
        return deleted

    @staticmethod
    def _confirm_remaining(ctx: RunContext, selector: str, expected: int) -> int | None:
        observed = ctx.count(selector)
        if observed < expected:
            raise CountMismatchError(
                f"expected {expected} todos to remain, found {observed}",
                context={"expected": expected, "observed": observed},
            )
        return observed if observed == expected else None


StepCallback = Callable[[BenchmarkStep], None]


class StepPipeline:
    """Ordered steps run against one ``RunContext``.

    The first ``StepError`` propagates and leaves the failing step open
    (``end`` unset); later steps never start.
    """

    def __init__(self, steps: Sequence[BenchStep]) -> None:
        names = [step.name for step in steps]
        if len(names) != len(set(names)):
            raise ValueError(f"duplicate step names in pipeline: {names}")
        self.steps = list(steps)

    @property
    def names(self) -> list[str]:
        return [step.name for step in self.steps]

    async def run(self, ctx: RunContext, on_step_done: StepCallback | None = None) -> Benchmark:
        for step in self.steps:
            record = ctx.benchmark.begin_step(step.name, ctx.since())
            logger.debug("Starting step '%s'", step.name)
            cycles = await step.execute(ctx)
            record.end = ctx.since()
            record.cycles = cycles
            logger.info("Step '%s' took %.3fs", step.name, record.elapsed or 0.0)
            if on_step_done:
                on_step_done(record)
        return ctx.benchmark


def build_pipeline() -> StepPipeline:
    """Return the canonical load/input/create/complete/delete pipeline."""
    return StepPipeline(
        [
            LoadStep(),
            AwaitInputStep(),
            CreateTodosStep(),
            CompleteTodosStep(),
            DeleteTodosStep(),
        ]
    )
