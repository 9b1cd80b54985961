"""Data models for transactions, categories, and reports."""

from finance_reporter.models.category import Category
from finance_reporter.models.report import (
    AppliedFilters,
    CategoryAggregate,
    ReportSummary,
    TimeSeriesPoint,
    TimeWindow,
)
from finance_reporter.models.transaction import Transaction, TransactionKind

__all__ = [
    "Transaction",
    "TransactionKind",
    "Category",
    "TimeWindow",
    "CategoryAggregate",
    "TimeSeriesPoint",
    "AppliedFilters",
    "ReportSummary",
]
