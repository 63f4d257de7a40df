"""Shared logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

from tb_common.config.env import env_bool, env_str

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def _resolve_level(value: str | int | None, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    if value is None:
        return logging.WARNING
    if isinstance(value, int):
        return value
    if value.isdigit():
        return int(value)
    return logging.getLevelNamesMapping().get(value.upper(), logging.INFO)


def _make_formatter(as_json: bool) -> structlog.stdlib.ProcessorFormatter:
    renderer: structlog.types.Processor
    if as_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=_SHARED_PROCESSORS,
    )


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def configure_logging(
    *,
    level: str | int | None = None,
    debug: bool = False,
    log_file: str | None = None,
    json: bool | None = None,
    force: bool = False,
) -> None:
    """Configure stdlib logging and structlog with a shared formatter.

    Explicit arguments win over ``TB_LOG_LEVEL``, ``TB_LOG_JSON`` and
    ``TB_LOG_FILE``. When the root logger already has handlers they are left
    alone unless ``force`` is set.
    """
    root_logger = logging.getLogger()
    if root_logger.handlers and not force:
        _configure_structlog()
        return

    resolved_level = _resolve_level(level or env_str("TB_LOG_LEVEL"), debug)
    env_json = env_bool("TB_LOG_JSON")
    resolved_json = bool(env_json if json is None else json)
    resolved_log_file = log_file if log_file is not None else env_str("TB_LOG_FILE")

    formatter = _make_formatter(resolved_json)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if resolved_log_file:
        handlers.append(logging.FileHandler(resolved_log_file))

    if force:
        root_logger.handlers.clear()
    root_logger.setLevel(resolved_level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    _configure_structlog()


@contextmanager
def run_log_context(**values: Any) -> Iterator[None]:
    """Bind values (run id, target name) to every log record in scope."""
    with structlog.contextvars.bound_contextvars(**values):
        yield
