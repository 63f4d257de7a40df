"""
Benchmark orchestrator: runs the step pipeline against one target at a time.

The orchestrator owns the surface for the duration of a run, turns step
errors into a failed ``Benchmark`` and reports progress through
``RunProgressEmitter``.
"""

from __future__ import annotations

import logging
from typing import Optional

from tb_common.errors import RunInProgressError, StepError
from tb_common.logging import run_log_context
from tb_runner.engine.clock import Clock, LoopClock
from tb_runner.engine.context import RunContext
from tb_runner.engine.planning import generate_run_id
from tb_runner.engine.progress import ProgressCallback, RunProgressEmitter
from tb_runner.engine.steps import StepPipeline, build_pipeline
from tb_runner.models.benchmark import Benchmark, BenchmarkStep
from tb_runner.models.config import PipelineSettings, TargetDescriptor
from tb_runner.surface.interface import TargetSurface

logger = logging.getLogger(__name__)


class BenchmarkOrchestrator:
    """Drive one target through load, input, create, complete and delete."""

    def __init__(
        self,
        surface: TargetSurface,
        settings: PipelineSettings | None = None,
        clock: Clock | None = None,
        progress_callback: Optional[ProgressCallback] = None,
        run_id: str | None = None,
        pipeline: StepPipeline | None = None,
    ) -> None:
        self.surface = surface
        self.settings = settings or PipelineSettings()
        self.clock = clock or LoopClock(self.settings.tick_interval)
        self.pipeline = pipeline or build_pipeline()
        self._progress = RunProgressEmitter(callback=progress_callback)
        self._progress.set_run_id(run_id or generate_run_id())
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def run_id(self) -> str:
        return self._progress.run_id

    def set_run_id(self, run_id: str) -> None:
        self._progress.set_run_id(run_id)

    async def run(self, target: TargetDescriptor) -> Benchmark:
        """
        Run the full pipeline against ``target``.

        Never raises for target misbehaviour: the returned benchmark carries
        ``failed_message`` instead. The returned value is a copy, so later
        runs cannot alter it.

        Raises:
            RunInProgressError: another run is active on this orchestrator.
        """
        if self._busy:
            raise RunInProgressError(
                "orchestrator is already running a target",
                context={"target": target.name, "run_id": self.run_id},
            )
        self._busy = True
        try:
            with run_log_context(run_id=self.run_id, target=target.name):
                return await self._run_target(target)
        finally:
            self._busy = False

    async def _run_target(self, target: TargetDescriptor) -> Benchmark:
        self._progress.emit(target.name, "busy")
        benchmark = Benchmark(
            name=target.name,
            language=target.language,
            entry_point=target.entry_point,
            run_id=self.run_id,
        )
        ctx = RunContext(
            run_id=self.run_id,
            target=target,
            surface=self.surface,
            clock=self.clock,
            settings=self.settings,
            benchmark=benchmark,
            baseline=self.clock.now(),
        )
        logger.info("Benchmarking '%s' at %s", target.name, target.entry_point)
        self._progress.emit(target.name, "load", message=target.entry_point)

        def on_step_done(step: BenchmarkStep) -> None:
            self._progress.emit(
                target.name,
                "step",
                step=step.name,
                benchmark=benchmark.model_copy(deep=True),
            )

        try:
            await self.pipeline.run(ctx, on_step_done=on_step_done)
        except StepError as exc:
            logger.error("Target '%s' failed (%s): %s", target.name, exc.kind, exc)
            benchmark.fail(str(exc))
        except Exception as exc:
            logger.exception("Unexpected error while benchmarking '%s'", target.name)
            benchmark.fail(f"unexpected error: {exc}")

        self._progress.emit(target.name, "idle")
        if benchmark.failed_message is None:
            logger.info("Target '%s' finished in %.3fs", target.name, benchmark.total())
            self._progress.emit(target.name, "done", benchmark=benchmark.model_copy(deep=True))
        else:
            self._progress.emit(
                target.name,
                "failed",
                message=benchmark.failed_message,
                benchmark=benchmark.model_copy(deep=True),
            )
        return benchmark.model_copy(deep=True)
