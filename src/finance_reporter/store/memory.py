"""In-memory transaction store over fully materialized lists."""

from finance_reporter.models.category import Category
from finance_reporter.models.report import CategoryAggregate, TimeSeriesPoint, TimeWindow
from finance_reporter.models.transaction import Transaction, TransactionKind
from finance_reporter.processing.grouping import group_by_category, group_by_month
from finance_reporter.store.base import TransactionStore, UnknownCategory
from finance_reporter.utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_OWNER = "default"


class InMemoryTransactionStore(TransactionStore):
    """Store backed by plain lists; expenses and deposits are kept apart."""

    def __init__(
        self,
        expenses: list[Transaction] | None = None,
        deposits: list[Transaction] | None = None,
        categories: list[Category] | None = None,
        default_owner: str = DEFAULT_OWNER,
    ):
        """Initialize the store.

        Args:
            expenses: Expense records.
            deposits: Deposit records.
            categories: Category definitions.
            default_owner: Owner reported on when the caller names none.

        Raises:
            ValueError: If a record is filed under the wrong kind.
        """
        self._collections: dict[TransactionKind, list[Transaction]] = {
            TransactionKind.EXPENSE: list(expenses or []),
            TransactionKind.DEPOSIT: list(deposits or []),
        }
        for kind, records in self._collections.items():
            for record in records:
                if record.kind is not kind:
                    raise ValueError(f"{record!r} filed as {kind.value}")
        self._categories: dict[str, Category] = {c.id: c for c in categories or []}
        self.default_owner = default_owner

    def _matching(self, kind: TransactionKind, owner_id: str, window: TimeWindow) -> list[Transaction]:
        matches = [
            t for t in self._collections[kind]
            if t.owner_id == owner_id and window.contains(t.occurred_at)
        ]
        matches.sort(key=lambda t: t.occurred_at)
        return matches

    def get_category(self, category_id: str) -> Category:
        """Look up a category by ID.

        Raises:
            UnknownCategory: If no category has that ID.
        """
        try:
            return self._categories[category_id]
        except KeyError:
            raise UnknownCategory(category_id) from None

    def remove_category(self, category_id: str) -> None:
        """Forget a category; expenses keep their now-dangling reference."""
        self._categories.pop(category_id, None)

    async def find_transactions(
        self,
        kind: TransactionKind,
        owner_id: str,
        window: TimeWindow,
    ) -> list[Transaction]:
        return self._matching(kind, owner_id, window)

    async def aggregate_expenses_by_category(
        self,
        owner_id: str,
        window: TimeWindow,
    ) -> list[CategoryAggregate]:
        expenses = self._matching(TransactionKind.EXPENSE, owner_id, window)
        return group_by_category(expenses, self._categories)

    async def aggregate_expenses_by_month(
        self,
        owner_id: str,
        window: TimeWindow,
    ) -> list[TimeSeriesPoint]:
        expenses = self._matching(TransactionKind.EXPENSE, owner_id, window)
        return group_by_month(expenses)

    async def list_categories(self, owner_id: str) -> list[Category]:
        return [c for c in self._categories.values() if c.owner_id == owner_id]

    def __len__(self) -> int:
        return sum(len(records) for records in self._collections.values())
