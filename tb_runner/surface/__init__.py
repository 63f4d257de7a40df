"""Target automation boundary."""

from tb_runner.surface.interface import (
    FOCUS_EVENT,
    LOAD_EVENT,
    CreationTrigger,
    EventChannel,
    EventSubscription,
    Handle,
    Selectors,
    SyntheticSignal,
    TargetSurface,
)

__all__ = [
    "FOCUS_EVENT",
    "LOAD_EVENT",
    "CreationTrigger",
    "EventChannel",
    "EventSubscription",
    "Handle",
    "Selectors",
    "SyntheticSignal",
    "TargetSurface",
]
