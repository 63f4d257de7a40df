"""Shared error taxonomy for todomvc-bench."""

from __future__ import annotations

from typing import Any, Mapping


def _normalize_context_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_context(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_context_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def normalize_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-friendly copy of an error context mapping."""
    return {key: _normalize_context_value(val) for key, val in context.items()}


class TBError(Exception):
    """Base error type for typed failure handling."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.context = normalize_context(context or {})
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.error_type, "message": str(self), "context": self.context}


class StepError(TBError):
    """A benchmark step could not complete against the target.

    ``kind`` is the short failure category reported next to the message.
    """

    kind = "StepError"


class NotFoundError(StepError):
    """An expected control never appeared within its timeout."""

    kind = "NotFound"


class CountMismatchError(StepError):
    """The observed element count diverged from the expected count."""

    kind = "CountMismatch"


class StepTimeoutError(StepError):
    """A wait ran out of budget."""

    kind = "Timeout"


class PreconditionFailedError(StepError):
    """The target was not in the expected empty-list state."""

    kind = "PreconditionFailed"


class TooManyError(StepError):
    """The target produced more items than were submitted."""

    kind = "TooMany"


class ConfigurationError(TBError):
    """Failure due to invalid configuration."""


class ResultPersistenceError(TBError):
    """Failure persisting or publishing results.

    ``result`` carries whatever the caller produced before persistence
    failed, so completed work stays reachable from the handler.
    """

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: Exception | None = None,
        result: Any = None,
    ) -> None:
        super().__init__(message, context=context, cause=cause)
        self.result = result


class RunInProgressError(TBError):
    """A run was requested while another one is still active."""

