"""Public API surface for tb_common."""

from tb_common.errors import (
    ConfigurationError,
    CountMismatchError,
    NotFoundError,
    PreconditionFailedError,
    ResultPersistenceError,
    RunInProgressError,
    StepError,
    StepTimeoutError,
    TBError,
    TooManyError,
)
from tb_common.logging import configure_logging, run_log_context

__all__ = [
    "ConfigurationError",
    "CountMismatchError",
    "NotFoundError",
    "PreconditionFailedError",
    "ResultPersistenceError",
    "RunInProgressError",
    "StepError",
    "StepTimeoutError",
    "TBError",
    "TooManyError",
    "configure_logging",
    "run_log_context",
]
