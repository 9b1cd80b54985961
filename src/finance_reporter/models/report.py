"""Report data models produced by the aggregator and read by the renderer."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from finance_reporter.models.category import Category
from finance_reporter.models.transaction import Transaction
from finance_reporter.utils.date_utils import is_in_window, to_iso
from finance_reporter.utils.decimal_utils import decimal_to_number, sum_amounts


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive start/end instant pair. Both None means "all time"."""

    start: datetime | None = None
    end: datetime | None = None

    @property
    def is_all_time(self) -> bool:
        """True when neither bound is set."""
        return self.start is None and self.end is None

    @property
    def has_explicit_bounds(self) -> bool:
        """True when both bounds are set."""
        return self.start is not None and self.end is not None

    def contains(self, moment: datetime) -> bool:
        """Check whether an instant lies inside the window (inclusive)."""
        return is_in_window(moment, self.start, self.end)


@dataclass(frozen=True)
class CategoryAggregate:
    """Total spent in one category."""

    category_name: str
    total: Decimal

    def to_dict(self) -> dict[str, object]:
        return {"category": self.category_name, "total": decimal_to_number(self.total)}


@dataclass(frozen=True)
class TimeSeriesPoint:
    """Total spent in one calendar month."""

    year: int
    month: int
    total: Decimal

    @property
    def key(self) -> tuple[int, int]:
        """Sort key (year, month)."""
        return (self.year, self.month)

    def to_dict(self) -> dict[str, object]:
        return {
            "_id": {"year": self.year, "month": self.month},
            "total": decimal_to_number(self.total),
        }


@dataclass(frozen=True)
class AppliedFilters:
    """Echo of the raw query inputs that produced a report."""

    filter: str | None = None
    date: str | None = None
    from_date: str | None = None
    to_date: str | None = None
    week_start: str = "mon"

    def to_dict(self) -> dict[str, object]:
        return {
            "filter": self.filter,
            "date": self.date,
            "from": self.from_date,
            "to": self.to_date,
            "weekStart": self.week_start,
        }


@dataclass
class ReportSummary:
    """Aggregated view of one owner's transactions within a window.

    Attributes:
        total_expenses: Sum of all expense amounts in the window.
        total_deposits: Sum of all deposit amounts in the window.
        category_aggregates: Expense totals per surviving category.
        time_series: Expense totals per (year, month), ascending.
        deposits: Deposits inside the window.
        expenses: Expenses inside the window.
        categories: All categories owned by the user.
        window: Resolved time window (filled in by the caller).
        applied_filters: Raw inputs echo (filled in by the caller).
    """

    total_expenses: Decimal = Decimal("0")
    total_deposits: Decimal = Decimal("0")
    category_aggregates: list[CategoryAggregate] = field(default_factory=list)
    time_series: list[TimeSeriesPoint] = field(default_factory=list)
    deposits: list[Transaction] = field(default_factory=list)
    expenses: list[Transaction] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    window: TimeWindow = field(default_factory=TimeWindow)
    applied_filters: AppliedFilters = field(default_factory=AppliedFilters)

    @classmethod
    def from_transactions(
        cls,
        expenses: list[Transaction],
        deposits: list[Transaction],
        **kwargs: object,
    ) -> "ReportSummary":
        """Build a summary whose totals are derived from the transaction lists."""
        return cls(
            total_expenses=sum_amounts([e.amount for e in expenses]),
            total_deposits=sum_amounts([d.amount for d in deposits]),
            expenses=list(expenses),
            deposits=list(deposits),
            **kwargs,  # type: ignore[arg-type]
        )

    @property
    def balance(self) -> Decimal:
        """Total deposits minus total expenses."""
        return self.total_deposits - self.total_expenses

    def to_dict(self) -> dict[str, object]:
        """JSON-shaped dashboard payload."""
        return {
            "totalExpenses": decimal_to_number(self.total_expenses),
            "totalDeposits": decimal_to_number(self.total_deposits),
            "balance": decimal_to_number(self.balance),
            "expensesByCategory": [c.to_dict() for c in self.category_aggregates],
            "expensesOverTime": [p.to_dict() for p in self.time_series],
            "deposits": [d.to_dict() for d in self.deposits],
            "expenses": [e.to_dict() for e in self.expenses],
            "categories": [c.to_dict() for c in self.categories],
            "meta": {
                "startDate": to_iso(self.window.start),
                "endDate": to_iso(self.window.end),
                "applied": self.applied_filters.to_dict(),
            },
        }
