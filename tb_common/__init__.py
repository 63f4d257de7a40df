"""Shared helpers for todomvc-bench."""

from tb_common.api import TBError, configure_logging, run_log_context

__all__ = ["TBError", "configure_logging", "run_log_context"]
