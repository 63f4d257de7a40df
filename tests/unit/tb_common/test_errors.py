"""Unit tests for the shared error taxonomy."""

from pathlib import Path

import pytest

from tb_common.errors import (
    CountMismatchError,
    NotFoundError,
    PreconditionFailedError,
    ResultPersistenceError,
    StepError,
    StepTimeoutError,
    TBError,
    TooManyError,
)

pytestmark = [pytest.mark.unit, pytest.mark.unit_common]


@pytest.mark.parametrize(
    "error_cls, kind",
    [
        (NotFoundError, "NotFound"),
        (CountMismatchError, "CountMismatch"),
        (StepTimeoutError, "Timeout"),
        (PreconditionFailedError, "PreconditionFailed"),
        (TooManyError, "TooMany"),
    ],
)
def test_step_error_kinds(error_cls, kind) -> None:
    error = error_cls("message")

    assert isinstance(error, StepError)
    assert isinstance(error, TBError)
    assert error.kind == kind
    assert str(error) == "message"


def test_context_is_json_friendly() -> None:
    error = TBError(
        "bad",
        context={"path": Path("/tmp/x"), "nested": {"items": (1, "two")}, "none": None},
    )

    assert error.context == {"path": "/tmp/x", "nested": {"items": [1, "two"]}, "none": None}
    assert error.to_dict() == {"type": "TBError", "message": "bad", "context": error.context}


def test_persistence_error_keeps_partial_result() -> None:
    cause = OSError("disk full")
    partial = ["run-1", "run-2"]

    error = ResultPersistenceError("could not persist", cause=cause, result=partial)

    assert error.result is partial
    assert error.__cause__ is cause
    assert ResultPersistenceError("x").result is None
