"""Suite scheduler: runs every enabled target ``avg_times`` times in turn."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from tb_common.errors import (
    ConfigurationError,
    ResultPersistenceError,
    RunInProgressError,
)
from tb_common.logging import run_log_context
from tb_runner.engine.orchestrator import BenchmarkOrchestrator
from tb_runner.engine.planning import generate_run_id, plan_run_queue
from tb_runner.engine.progress import ProgressCallback, RunProgressEmitter
from tb_runner.engine.stop_token import StopToken
from tb_runner.models.benchmark import Benchmark
from tb_runner.models.config import SuiteConfig, TargetDescriptor
from tb_runner.models.events import TargetState, TargetStatus
from tb_runner.services.store import ResultSink, ResultStore

logger = logging.getLogger(__name__)


@dataclass
class SuiteResult:
    """Benchmarks gathered by one suite, in execution order."""

    benchmarks: List[Benchmark] = field(default_factory=list)
    cancelled: bool = False
    run_id: str = ""

    @property
    def failed(self) -> List[Benchmark]:
        return [benchmark for benchmark in self.benchmarks if benchmark.failed_message]


class SuiteScheduler:
    """
    Sequence target runs through a single orchestrator.

    Targets never overlap. Cancellation is checked only between targets: a
    target already running completes (or fails) on its own timeouts.
    """

    def __init__(
        self,
        config: SuiteConfig,
        orchestrator: BenchmarkOrchestrator,
        *,
        store: ResultStore | None = None,
        sinks: Sequence[ResultSink] = (),
        stop_token: StopToken | None = None,
        rng: random.Random | None = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        self.config = config
        self.orchestrator = orchestrator
        self.store = store
        self.sinks = list(sinks)
        self.stop_token = stop_token or StopToken()
        self._rng = rng or random.Random(config.seed)
        self._progress = RunProgressEmitter(callback=progress_callback)
        self._targets: List[TargetDescriptor] = list(config.targets)
        self._avg_times = config.avg_times
        self._statuses: Dict[str, TargetStatus] = {
            target.name: TargetStatus() for target in self._targets
        }
        self._running = False

    @property
    def targets(self) -> List[TargetDescriptor]:
        return list(self._targets)

    @property
    def statuses(self) -> Dict[str, TargetStatus]:
        return dict(self._statuses)

    @property
    def avg_times(self) -> int:
        return self._avg_times

    @property
    def running(self) -> bool:
        return self._running

    def set_avg_times(self, avg_times: int) -> None:
        if avg_times < 1:
            raise ValueError("avg_times must be a positive integer")
        self._avg_times = avg_times

    def set_enabled(self, name: str, enabled: bool) -> TargetDescriptor:
        """Replace the named descriptor with one whose ``enabled`` flag is set."""
        index = self._index_of(name)
        updated = self._targets[index].model_copy(update={"enabled": enabled})
        self._targets[index] = updated
        self.config = self.config.model_copy(update={"targets": list(self._targets)})
        return updated

    def toggle_enabled(self, name: str) -> TargetDescriptor:
        return self.set_enabled(name, not self._targets[self._index_of(name)].enabled)

    def _index_of(self, name: str) -> int:
        for index, target in enumerate(self._targets):
            if target.name == name:
                return index
        raise ConfigurationError(f"Unknown target: {name}", context={"target": name})

    def cancel(self) -> None:
        """Ask the running suite to stop before its next target."""
        logger.info("Suite cancellation requested")
        self.stop_token.request_stop()

    def _set_status(self, name: str, state: TargetState, message: str = "") -> None:
        self._statuses[name] = TargetStatus(state=state, message=message)

    async def run_suite(self) -> SuiteResult:
        """
        Run the planned queue and hand the results to the store and sinks.

        Raises:
            RunInProgressError: a suite is already running.
            ResultPersistenceError: the store or a sink rejected the results.
        """
        if self._running:
            raise RunInProgressError("suite is already running")
        self._running = True
        run_id = generate_run_id()
        self._progress.set_run_id(run_id)
        self.orchestrator.set_run_id(run_id)
        self.stop_token.reset()
        result = SuiteResult(run_id=run_id)
        try:
            with run_log_context(run_id=run_id):
                queue = plan_run_queue(
                    self._targets,
                    self._avg_times,
                    self._rng,
                    shuffle=self.config.shuffle,
                )
                logger.info(
                    "Starting suite with %d runs over %d targets",
                    len(queue),
                    len({target.name for target in queue}),
                )
                for target in queue:
                    self._set_status(target.name, TargetState.READY)

                for position, target in enumerate(queue):
                    if self.stop_token.should_stop():
                        self._cancel_remaining(result, queue[position:])
                        break
                    result.benchmarks.append(await self._run_one(target))
                else:
                    if self.stop_token.should_stop():
                        self._cancel_remaining(result, [])

                failures = self._persist(result.benchmarks)
                if failures:
                    names = [name for name, _ in failures]
                    raise ResultPersistenceError(
                        "could not persist results",
                        context={"failed": names, "runs": len(result.benchmarks)},
                        cause=failures[0][1],
                        result=result,
                    )
        finally:
            self._running = False
        return result

    def _cancel_remaining(
        self, result: SuiteResult, remaining: Sequence[TargetDescriptor]
    ) -> None:
        result.cancelled = True
        logger.info("Suite cancelled with %d runs left", len(remaining))
        for target in remaining:
            if self._statuses[target.name].state is TargetState.READY:
                self._set_status(target.name, TargetState.CANCELLED)
        self._progress.emit(remaining[0].name if remaining else "", "cancelled")

    async def _run_one(self, target: TargetDescriptor) -> Benchmark:
        self._set_status(target.name, TargetState.RUNNING)
        self._progress.emit(target.name, "running")
        benchmark = await self.orchestrator.run(target)
        if benchmark.failed_message is None:
            self._set_status(target.name, TargetState.DONE)
            self._progress.emit(target.name, "done", benchmark=benchmark)
        else:
            self._set_status(target.name, TargetState.ERRED, benchmark.failed_message)
            self._progress.emit(
                target.name, "erred", message=benchmark.failed_message, benchmark=benchmark
            )
        return benchmark

    def _persist(self, benchmarks: List[Benchmark]) -> List[Tuple[str, Exception]]:
        """Hand results to the store and every sink; return the collaborators that failed."""
        failures: List[Tuple[str, Exception]] = []
        if self.store is not None:
            try:
                self.store.append_results(benchmarks)
            except Exception as exc:
                logger.error("Failed to store results at %s: %s", self.store.path, exc)
                failures.append(("store", exc))
        for sink in self.sinks:
            try:
                sink.publish(benchmarks)
            except Exception as exc:
                logger.error("Result sink %s failed: %s", type(sink).__name__, exc)
                failures.append((type(sink).__name__, exc))
        return failures
