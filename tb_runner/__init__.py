"""Benchmark runner for TodoMVC implementations."""

from tb_common.api import configure_logging as _configure_logging

_configure_logging()

from tb_runner.api import (  # noqa: E402,F401
    Benchmark,
    BenchmarkOrchestrator,
    CreationTrigger,
    PipelineSettings,
    ResultStore,
    SuiteConfig,
    SuiteScheduler,
    TargetDescriptor,
    TargetSurface,
)

__all__ = [
    "Benchmark",
    "BenchmarkOrchestrator",
    "CreationTrigger",
    "PipelineSettings",
    "ResultStore",
    "SuiteConfig",
    "SuiteScheduler",
    "TargetDescriptor",
    "TargetSurface",
]
