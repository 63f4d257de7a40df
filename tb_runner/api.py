"""Stable runner API surface."""

from tb_runner.engine.clock import Clock, LoopClock
from tb_runner.engine.orchestrator import BenchmarkOrchestrator
from tb_runner.engine.planning import generate_run_id, plan_run_queue
from tb_runner.engine.steps import BenchStep, StepPipeline, build_pipeline
from tb_runner.engine.stop_token import StopToken
from tb_runner.engine.suite import SuiteResult, SuiteScheduler
from tb_runner.engine.wait import Found, Ready, TimedOut, wait_for, wait_until_next_for, wait_while
from tb_runner.models.benchmark import STEP_ORDER, Benchmark, BenchmarkStep
from tb_runner.models.config import PipelineSettings, SuiteConfig, TargetDescriptor
from tb_runner.models.events import RunEvent, TargetState, TargetStatus
from tb_runner.services.store import ResultSink, ResultStore
from tb_runner.surface.interface import (
    CreationTrigger,
    EventChannel,
    EventSubscription,
    Selectors,
    SyntheticSignal,
    TargetSurface,
)

__all__ = [
    "STEP_ORDER",
    "Benchmark",
    "BenchmarkOrchestrator",
    "BenchmarkStep",
    "BenchStep",
    "Clock",
    "CreationTrigger",
    "EventChannel",
    "EventSubscription",
    "Found",
    "LoopClock",
    "PipelineSettings",
    "Ready",
    "ResultSink",
    "ResultStore",
    "RunEvent",
    "Selectors",
    "StepPipeline",
    "StopToken",
    "SuiteConfig",
    "SuiteResult",
    "SuiteScheduler",
    "SyntheticSignal",
    "TargetDescriptor",
    "TargetState",
    "TargetStatus",
    "TargetSurface",
    "TimedOut",
    "build_pipeline",
    "generate_run_id",
    "plan_run_queue",
    "wait_for",
    "wait_until_next_for",
    "wait_while",
]
