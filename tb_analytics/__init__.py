"""Analytics over stored benchmark runs."""

from tb_common.api import configure_logging as _configure_logging

_configure_logging()

from tb_analytics.aggregate import TargetSummary, benchmarks_frame, summarize  # noqa: E402
from tb_analytics.report import SummaryTable, build_summary_table  # noqa: E402

__all__ = [
    "SummaryTable",
    "TargetSummary",
    "benchmarks_frame",
    "build_summary_table",
    "summarize",
]
