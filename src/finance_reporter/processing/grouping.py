"""Grouping reductions shared by stores and the aggregator."""

from collections import defaultdict
from decimal import Decimal

from finance_reporter.models.category import Category
from finance_reporter.models.report import CategoryAggregate, TimeSeriesPoint
from finance_reporter.models.transaction import Transaction


def group_by_category(
    expenses: list[Transaction],
    categories: dict[str, Category],
) -> list[CategoryAggregate]:
    """Sum expenses per category and join the category display name.

    Groups whose category is missing from ``categories`` (deleted, or never
    assigned) are dropped, like an inner join.

    Args:
        expenses: Expenses already filtered to the window.
        categories: Category ID to Category lookup.

    Returns:
        One aggregate per surviving category, in first-seen order.
    """
    totals: dict[str | None, Decimal] = {}
    for expense in expenses:
        totals[expense.category_id] = totals.get(expense.category_id, Decimal("0")) + expense.amount

    aggregates = []
    for category_id, total in totals.items():
        category = categories.get(category_id) if category_id is not None else None
        if category is None:
            continue
        aggregates.append(CategoryAggregate(category_name=category.name, total=total))
    return aggregates


def group_by_month(expenses: list[Transaction]) -> list[TimeSeriesPoint]:
    """Sum expenses per UTC (year, month), ordered ascending."""
    totals: defaultdict[tuple[int, int], Decimal] = defaultdict(lambda: Decimal("0"))
    for expense in expenses:
        day = expense.business_date
        totals[(day.year, day.month)] += expense.amount

    return [
        TimeSeriesPoint(year=year, month=month, total=totals[(year, month)])
        for year, month in sorted(totals)
    ]


def normalize_time_series(points: list[TimeSeriesPoint]) -> list[TimeSeriesPoint]:
    """Merge duplicate (year, month) points and sort ascending.

    Stores are expected to return a clean series already; this keeps the
    ordering guarantee independent of the store implementation.
    """
    merged: dict[tuple[int, int], Decimal] = {}
    for point in points:
        merged[point.key] = merged.get(point.key, Decimal("0")) + point.total
    return [
        TimeSeriesPoint(year=year, month=month, total=merged[(year, month)])
        for year, month in sorted(merged)
    ]
