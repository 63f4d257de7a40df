"""Clock adapter used by every wait in the runner."""

from __future__ import annotations

import asyncio
import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Monotonic time source plus cooperative suspension points."""

    def now(self) -> float:
        """Monotonic seconds."""

    async def next_tick(self) -> None:
        """Suspend until the scheduler's next tick."""

    async def sleep(self, seconds: float) -> None:
        ...


class LoopClock:
    """Clock backed by ``time.perf_counter`` and the running asyncio loop.

    ``tick_interval`` of zero resumes on the next loop iteration; a small
    positive value keeps long polls from saturating a core.
    """

    def __init__(self, tick_interval: float = 0.001) -> None:
        if tick_interval < 0:
            raise ValueError("tick_interval must be >= 0")
        self.tick_interval = tick_interval

    def now(self) -> float:
        return time.perf_counter()

    async def next_tick(self) -> None:
        await asyncio.sleep(self.tick_interval)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))
