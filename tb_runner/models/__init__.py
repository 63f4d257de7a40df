"""Data models shared by the runner."""

from tb_runner.models.benchmark import STEP_ORDER, Benchmark, BenchmarkStep
from tb_runner.models.config import PipelineSettings, SuiteConfig, TargetDescriptor
from tb_runner.models.events import RunEvent, TargetState, TargetStatus

__all__ = [
    "STEP_ORDER",
    "Benchmark",
    "BenchmarkStep",
    "PipelineSettings",
    "RunEvent",
    "SuiteConfig",
    "TargetDescriptor",
    "TargetState",
    "TargetStatus",
]
