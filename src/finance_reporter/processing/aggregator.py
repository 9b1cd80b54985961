"""Aggregation of an owner's transactions into a report summary."""

import asyncio
from collections.abc import Awaitable
from datetime import datetime
from typing import TypeVar

from finance_reporter.models.report import ReportSummary, TimeWindow
from finance_reporter.models.transaction import TransactionKind
from finance_reporter.processing.grouping import normalize_time_series
from finance_reporter.processing.time_window import WindowRequest, resolve_window
from finance_reporter.store.base import StoreError, TransactionStore
from finance_reporter.utils.decimal_utils import format_currency
from finance_reporter.utils.logging_config import LogContext, get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def _read(operation: str, awaitable: Awaitable[T]) -> T:
    """Await one store read, normalizing failures to StoreError."""
    try:
        return await awaitable
    except StoreError:
        raise
    except Exception as e:
        raise StoreError(f"{operation} failed: {e}", operation=operation) from e


async def _gather_fail_fast(reads: dict[str, Awaitable[object]]) -> dict[str, object]:
    """Run named reads concurrently and return their results by name.

    The first failure cancels every read still in flight and is re-raised;
    no partial result is returned.
    """
    tasks = {
        name: asyncio.ensure_future(_read(name, awaitable))
        for name, awaitable in reads.items()
    }
    try:
        await asyncio.gather(*tasks.values())
    except BaseException:
        for task in tasks.values():
            task.cancel()
        await asyncio.gather(*tasks.values(), return_exceptions=True)
        raise
    return {name: task.result() for name, task in tasks.items()}


class TransactionAggregator:
    """Builds report summaries from a transaction store.

    The five store reads (expenses, deposits, category totals, monthly
    totals, categories) are independent and issued concurrently.
    """

    def __init__(self, store: TransactionStore):
        """Initialize the aggregator.

        Args:
            store: Read-only source of transactions and categories.
        """
        self.store = store

    async def aggregate(self, window: TimeWindow, owner_id: str) -> ReportSummary:
        """Aggregate one owner's transactions within a window.

        Args:
            window: Resolved time window (may be all time).
            owner_id: Identity of the owner.

        Returns:
            ReportSummary without the window/applied-filter echo.

        Raises:
            StoreError: If any read fails.
        """
        with LogContext(logger, "aggregation", owner=owner_id, store=self.store.name):
            results = await _gather_fail_fast({
                "find_expenses": self.store.find_transactions(
                    TransactionKind.EXPENSE, owner_id, window
                ),
                "find_deposits": self.store.find_transactions(
                    TransactionKind.DEPOSIT, owner_id, window
                ),
                "aggregate_expenses_by_category": self.store.aggregate_expenses_by_category(
                    owner_id, window
                ),
                "aggregate_expenses_by_month": self.store.aggregate_expenses_by_month(
                    owner_id, window
                ),
                "list_categories": self.store.list_categories(owner_id),
            })

        summary = ReportSummary.from_transactions(
            expenses=results["find_expenses"],  # type: ignore[arg-type]
            deposits=results["find_deposits"],  # type: ignore[arg-type]
            category_aggregates=list(results["aggregate_expenses_by_category"]),  # type: ignore[call-overload]
            time_series=normalize_time_series(results["aggregate_expenses_by_month"]),  # type: ignore[arg-type]
            categories=list(results["list_categories"]),  # type: ignore[call-overload]
        )

        logger.info(
            f"Aggregated {len(summary.expenses)} expenses and {len(summary.deposits)} deposits "
            f"for {owner_id}: balance {format_currency(summary.balance)}"
        )
        return summary


async def generate_report_async(
    store: TransactionStore,
    owner_id: str,
    request: WindowRequest,
    now: datetime | None = None,
) -> ReportSummary:
    """Resolve the window, aggregate, and echo the inputs into the summary.

    Raises:
        InvalidDateFormat: If the request carries a malformed date.
        StoreError: If any store read fails.
    """
    window = resolve_window(request, now=now)
    summary = await TransactionAggregator(store).aggregate(window, owner_id)
    summary.window = window
    summary.applied_filters = request.applied()
    return summary


def generate_report(
    store: TransactionStore,
    owner_id: str,
    request: WindowRequest,
    now: datetime | None = None,
) -> ReportSummary:
    """Synchronous entry point around generate_report_async."""
    return asyncio.run(generate_report_async(store, owner_id, request, now=now))
