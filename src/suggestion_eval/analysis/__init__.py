"""Run-level statistics and reporting."""

from .statistics import (
    Z_95,
    MetricSummary,
    RunStatistics,
    format_statistics_table,
    print_statistics,
    summarize_metric,
    summarize_run,
)

__all__ = [
    "MetricSummary",
    "RunStatistics",
    "Z_95",
    "format_statistics_table",
    "print_statistics",
    "summarize_metric",
    "summarize_run",
]
