"""Structured events for run progress and target status tracking."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from tb_runner.models.benchmark import Benchmark


class TargetState(str, Enum):
    """Lifecycle of a target within one suite run."""

    READY = "ready"
    RUNNING = "running"
    DONE = "done"
    ERRED = "erred"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class TargetStatus:
    state: TargetState = TargetState.READY
    message: str = ""


@dataclass
class RunEvent:
    """A structured event emitted during a run or a suite."""

    run_id: str
    target: str
    status: str  # busy | load | step | idle | done | failed | running | erred | cancelled
    message: str = ""
    timestamp: float = 0.0
    step: Optional[str] = None
    benchmark: Optional[Benchmark] = field(default=None, repr=False)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "run_id": self.run_id,
            "target": self.target,
            "status": self.status,
            "message": self.message,
            "timestamp": self.timestamp,
            "step": self.step,
        }
        if self.benchmark is not None:
            payload["benchmark"] = self.benchmark.model_dump()
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
