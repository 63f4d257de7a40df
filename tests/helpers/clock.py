"""Virtual clock for deterministic wait tests."""

from __future__ import annotations

import asyncio


class ManualClock:
    """Clock whose time only moves when a wait ticks or sleeps.

    ``next_tick`` advances by one ``tick``. ``sleep`` advances one tick per
    loop iteration, yielding in between so racing tasks observe every step.
    """

    def __init__(self, tick: float = 0.001, start: float = 100.0) -> None:
        self.tick = tick
        self._now = start
        self.ticks = 0

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds

    async def next_tick(self) -> None:
        self.ticks += 1
        self.advance(self.tick)
        await asyncio.sleep(0)

    async def sleep(self, seconds: float) -> None:
        start = self._now
        while self._now - start < seconds:
            await asyncio.sleep(0)
            self.advance(self.tick)
