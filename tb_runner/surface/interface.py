"""Boundary of the UI surface a benchmark drives.

The runner never talks to a browser directly. Adapters implement
``TargetSurface`` for whatever hosts the target (an embedded frame, a
remote-controlled page, an in-memory fake) and publish the ``"load"`` and
``"focus"`` events through an ``EventChannel``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Protocol, Sequence, TypeVar, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

Handle = Any

LOAD_EVENT = "load"
FOCUS_EVENT = "focus"


@dataclass(frozen=True)
class SyntheticSignal:
    """One synthetic DOM event dispatched while submitting a new item."""

    event: str
    keyboard_enter: bool = False
    on_form: bool = False


class CreationTrigger(str, Enum):
    """How a target expects to be told that new input was entered."""

    CHANGE = "change"
    INPUT_AND_KEYPRESS = "input_and_keypress"
    INPUT_AND_KEYUP = "input_and_keyup"
    INPUT_AND_KEYDOWN = "input_and_keydown"
    SUBMIT = "submit"

    def signals(self) -> tuple[SyntheticSignal, ...]:
        """Return the ordered signals an adapter must dispatch for this mode."""
        if self is CreationTrigger.CHANGE:
            return (SyntheticSignal("change"),)
        if self is CreationTrigger.SUBMIT:
            return (SyntheticSignal("input"), SyntheticSignal("submit", on_form=True))
        key_event = self.value.rsplit("_", 1)[-1]
        return (
            SyntheticSignal("input"),
            SyntheticSignal(key_event, keyboard_enter=True),
        )


class Selectors(BaseModel):
    """CSS selectors for the TodoMVC controls the pipeline touches."""

    model_config = ConfigDict(frozen=True)

    todo_input: tuple[str, ...] = Field(
        default=("#new-todo", ".new-todo"),
        min_length=1,
        description="Ordered fallbacks for the new-todo input",
    )
    toggle: str = Field(default=".toggle", description="Per-item completion checkbox")
    destroy: str = Field(default=".destroy", description="Per-item delete button")
    clear_completed: str = Field(
        default=".clear-completed", description="Button shown once items are completed"
    )


class EventSubscription(Generic[T]):
    """Queue-backed async iterator over the events of one channel.

    Registered with its channel on creation so no event published after
    ``subscribe()`` returns can be missed.
    """

    def __init__(self, channel: "EventChannel[T]") -> None:
        self._channel = channel
        self._queue: asyncio.Queue[T] = asyncio.Queue()
        self._closed = False

    def _deliver(self, event: T) -> None:
        if not self._closed:
            self._queue.put_nowait(event)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._channel._unsubscribe(self)

    def __aiter__(self) -> "EventSubscription[T]":
        return self

    async def __anext__(self) -> T:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        return await self._queue.get()


class EventChannel(Generic[T]):
    """Broadcast events to every open subscription."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._subscriptions: list[EventSubscription[T]] = []

    def subscribe(self) -> EventSubscription[T]:
        subscription = EventSubscription(self)
        self._subscriptions.append(subscription)
        return subscription

    def publish(self, event: T) -> None:
        for subscription in list(self._subscriptions):
            subscription._deliver(event)

    def _unsubscribe(self, subscription: EventSubscription[T]) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)


@runtime_checkable
class TargetSurface(Protocol):
    """Automation handle over one loaded target.

    Query and mutation methods are synchronous: they act on the current
    state of the surface and never suspend. Waiting is the runner's job.
    """

    def load(self, entry_point: str) -> None:
        """Begin loading ``entry_point``; completion is signalled on ``"load"``."""

    def events(self, name: str) -> EventSubscription[Any]:
        """Subscribe to ``"load"`` or ``"focus"`` events."""

    def query_one(self, selectors: Sequence[str]) -> Handle | None:
        """Return the first element matched by the ordered fallback selectors."""

    def query_all(self, selector: str) -> list[Handle]:
        """Return every element matching ``selector`` in document order."""

    def set_value(self, handle: Handle, text: str) -> None:
        ...

    def click(self, handle: Handle) -> None:
        ...

    def focus(self, handle: Handle) -> None:
        ...

    def dispatch_creation_trigger(self, handle: Handle, mode: CreationTrigger) -> None:
        """Dispatch ``mode.signals()`` against the input ``handle``."""
