"""Transaction data models for expenses and deposits."""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from finance_reporter.utils.date_utils import ensure_utc, to_iso
from finance_reporter.utils.decimal_utils import decimal_to_number


class TransactionKind(Enum):
    """Kind of transaction. Each kind lives in its own collection."""

    EXPENSE = "expense"  # Money out
    DEPOSIT = "deposit"  # Money in


@dataclass
class Transaction:
    """A recorded expense or deposit.

    Attributes:
        owner_id: Identity of the user who owns this record.
        description: Free-text description (may contain non-Latin text).
        amount: Non-negative amount as Decimal.
        occurred_at: Business date of the transaction (UTC instant).
        kind: Whether this is an expense or a deposit.
        id: Unique identifier (UUID) for this transaction.
        category_id: Optional reference to a Category.
        recorded_at: When the record was created (UTC instant).
    """

    owner_id: str
    description: str
    amount: Decimal
    occurred_at: datetime
    kind: TransactionKind = TransactionKind.EXPENSE

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    category_id: str | None = None
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"Transaction amount must be non-negative, got {self.amount}")
        # Naive datetimes are taken as UTC
        self.occurred_at = ensure_utc(self.occurred_at)
        self.recorded_at = ensure_utc(self.recorded_at)

    @property
    def business_date(self) -> date:
        """Calendar day (UTC) the transaction happened on."""
        return self.occurred_at.astimezone(timezone.utc).date()

    def to_dict(self) -> dict[str, object]:
        """JSON-shaped representation matching the dashboard payload."""
        data: dict[str, object] = {
            "_id": self.id,
            "user": self.owner_id,
            "description": self.description,
            "amount": decimal_to_number(self.amount),
            "date": to_iso(self.occurred_at),
            "createdAt": to_iso(self.recorded_at),
        }
        if self.kind is TransactionKind.EXPENSE:
            data["category"] = self.category_id
        return data

    def __repr__(self) -> str:
        return (
            f"Transaction(kind={self.kind.value}, "
            f"date={self.business_date}, "
            f"description={self.description[:30]!r}, "
            f"amount={self.amount})"
        )
