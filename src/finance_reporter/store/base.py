"""Abstract read interface for transaction persistence."""

from abc import ABC, abstractmethod

from finance_reporter.models.category import Category
from finance_reporter.models.report import CategoryAggregate, TimeSeriesPoint, TimeWindow
from finance_reporter.models.transaction import Transaction, TransactionKind


class StoreError(Exception):
    """Exception raised when a store read fails."""

    def __init__(self, message: str, operation: str | None = None):
        """Initialize StoreError.

        Args:
            message: Error message.
            operation: Optional name of the read that failed.
        """
        self.operation = operation
        super().__init__(message)


class UnknownCategory(LookupError):
    """Raised when a category reference cannot be resolved."""

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Unknown category: {category_id}")


class TransactionStore(ABC):
    """Read-only view of stored transactions and categories.

    All reads are coroutines so the aggregator can issue them concurrently.
    Implementations must raise StoreError on failure and never mutate data.

    Subclasses must implement:
    - find_transactions(): records of one kind for an owner within a window
    - aggregate_expenses_by_category(): expense totals joined to category names
    - aggregate_expenses_by_month(): expense totals per (year, month), ascending
    - list_categories(): the owner's categories
    """

    @property
    def name(self) -> str:
        """Return store name for logging."""
        return self.__class__.__name__

    @abstractmethod
    async def find_transactions(
        self,
        kind: TransactionKind,
        owner_id: str,
        window: TimeWindow,
    ) -> list[Transaction]:
        """Return the owner's transactions of one kind inside the window.

        Raises:
            StoreError: If the read fails.
        """

    @abstractmethod
    async def aggregate_expenses_by_category(
        self,
        owner_id: str,
        window: TimeWindow,
    ) -> list[CategoryAggregate]:
        """Return per-category expense totals, dropping unresolvable categories.

        Raises:
            StoreError: If the read fails.
        """

    @abstractmethod
    async def aggregate_expenses_by_month(
        self,
        owner_id: str,
        window: TimeWindow,
    ) -> list[TimeSeriesPoint]:
        """Return per-(year, month) expense totals sorted ascending.

        Raises:
            StoreError: If the read fails.
        """

    @abstractmethod
    async def list_categories(self, owner_id: str) -> list[Category]:
        """Return all categories owned by the user.

        Raises:
            StoreError: If the read fails.
        """
