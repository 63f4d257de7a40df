"""Helpers for emitting structured run progress events."""

from __future__ import annotations

import logging
import time
from typing import Callable

from tb_runner.models.benchmark import Benchmark
from tb_runner.models.events import RunEvent

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[RunEvent], None]


class RunProgressEmitter:
    """Deliver progress events to an optional callback.

    A failing callback is logged and ignored; progress reporting must never
    break a measurement.
    """

    def __init__(self, callback: ProgressCallback | None = None) -> None:
        self._callback = callback
        self._run_id = ""

    def set_run_id(self, run_id: str) -> None:
        self._run_id = run_id

    @property
    def run_id(self) -> str:
        return self._run_id

    def emit(
        self,
        target: str,
        status: str,
        *,
        message: str = "",
        step: str | None = None,
        benchmark: Benchmark | None = None,
    ) -> RunEvent:
        event = RunEvent(
            run_id=self._run_id,
            target=target,
            status=status,
            message=message,
            timestamp=time.time(),
            step=step,
            benchmark=benchmark,
        )
        logger.debug("event %s target=%s step=%s %s", status, target, step or "-", message)
        if self._callback:
            try:
                self._callback(event)
            except Exception as exc:
                logger.debug("Progress callback failed: %s", exc)
        return event
