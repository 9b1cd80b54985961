"""Window resolution and aggregation components."""

from finance_reporter.processing.aggregator import (
    TransactionAggregator,
    generate_report,
    generate_report_async,
)
from finance_reporter.processing.time_window import (
    InvalidDateFormat,
    WindowRequest,
    resolve_window,
)

__all__ = [
    "InvalidDateFormat",
    "WindowRequest",
    "resolve_window",
    "TransactionAggregator",
    "generate_report",
    "generate_report_async",
]
