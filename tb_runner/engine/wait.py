"""Cooperative waits: poll a predicate once per tick, or await the next event.

Every wait produces exactly one outcome, ``Ready`` or ``TimedOut``; nothing
is retried after that. These are the only places the runner suspends.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable
from dataclasses import dataclass
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    NoReturn,
    Optional,
    Protocol,
    TypeVar,
    Union,
    runtime_checkable,
)

from tb_runner.engine.clock import Clock, LoopClock

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


@dataclass(frozen=True)
class Found(Generic[T]):
    """The value a wait produced and how long it took, in seconds."""

    value: T
    elapsed: float


@dataclass(frozen=True)
class Ready(Generic[T]):
    found: Found[T]

    ok = True

    @property
    def elapsed(self) -> float:
        return self.found.elapsed

    def expect(self, error: BaseException) -> Found[T]:
        return self.found


@dataclass(frozen=True)
class TimedOut:
    elapsed: float

    ok = False

    def expect(self, error: BaseException) -> NoReturn:
        """Raise ``error``; the wait produced nothing."""
        raise error


PollOutcome = Union[Ready[T], TimedOut]


@runtime_checkable
class Poller(Protocol[T_co]):
    """Polls once; returns None while the awaited thing is absent."""

    def poll(self) -> Optional[T_co]:
        ...


Predicate = Union[Callable[[], Optional[T]], Poller[T]]

_EXHAUSTED = object()


def _as_probe(predicate: Predicate[T]) -> Callable[[], Optional[T]]:
    if isinstance(predicate, Poller):
        return predicate.poll
    if callable(predicate):
        return predicate
    raise TypeError(f"expected a callable or Poller, got {type(predicate).__name__}")


async def wait_for(
    timeout: float,
    predicate: Predicate[T],
    *,
    clock: Clock | None = None,
) -> PollOutcome[T]:
    """Poll ``predicate`` once per clock tick until it returns a value.

    The first poll runs immediately and fixes the start time. Elapsed time
    is measured right after each poll; a value wins even when it arrives on
    the poll that also exhausts ``timeout``. Exceptions raised by the
    predicate abort the wait.
    """
    clock = clock or LoopClock()
    probe = _as_probe(predicate)
    start = clock.now()
    while True:
        value = probe()
        elapsed = clock.now() - start
        if value is not None:
            return Ready(Found(value, elapsed))
        if elapsed >= timeout:
            return TimedOut(elapsed)
        await clock.next_tick()


async def wait_while(
    timeout: float,
    predicate: Callable[[], bool],
    *,
    clock: Clock | None = None,
) -> PollOutcome[bool]:
    """Wait while ``predicate`` holds; succeed once it turns false."""
    return await wait_for(timeout, lambda: None if predicate() else True, clock=clock)


async def _first_item(source: Union[AsyncIterable[T], Awaitable[T]]) -> Any:
    if isinstance(source, AsyncIterable):
        try:
            return await anext(aiter(source))
        except StopAsyncIteration:
            return _EXHAUSTED
    return await source


async def wait_until_next_for(
    timeout: float,
    source: Union[AsyncIterable[T], Awaitable[T]],
    *,
    clock: Clock | None = None,
) -> PollOutcome[T]:
    """Race the first item of ``source`` against a ``timeout`` sleep.

    ``source`` may be an async iterable (an event subscription) or a single
    awaitable. A stream that ends without producing an item counts as a
    timeout. Errors raised by the source propagate.
    """
    clock = clock or LoopClock()
    start = clock.now()
    event_task = asyncio.ensure_future(_first_item(source))
    timer_task = asyncio.ensure_future(clock.sleep(timeout))
    try:
        done, _ = await asyncio.wait(
            {event_task, timer_task}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        for task in (event_task, timer_task):
            if not task.done():
                task.cancel()
        await asyncio.gather(event_task, timer_task, return_exceptions=True)

    if event_task in done:
        item = event_task.result()
        elapsed = clock.now() - start
        if item is not _EXHAUSTED:
            return Ready(Found(item, elapsed))
        return TimedOut(elapsed)
    # the timer may wake early; a timeout never reports less than its budget
    while clock.now() - start < timeout:
        await clock.next_tick()
    return TimedOut(clock.now() - start)
