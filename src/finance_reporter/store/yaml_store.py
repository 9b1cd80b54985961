"""Load a YAML ledger file into an in-memory store.

Ledger layout::

    owner: alice                 # default owner for entries without one
    categories:
      - {id: food, name: Food}
    expenses:
      - {description: Lunch, amount: "12.50", category: food, date: 2025-01-01}
    deposits:
      - {description: Salary, amount: 1000, date: 2025-01-02}
"""

from datetime import datetime, timezone
from pathlib import Path

import yaml

from finance_reporter.models.category import Category
from finance_reporter.models.transaction import Transaction, TransactionKind
from finance_reporter.store.base import StoreError
from finance_reporter.store.memory import DEFAULT_OWNER, InMemoryTransactionStore
from finance_reporter.utils.date_utils import parse_instant
from finance_reporter.utils.decimal_utils import parse_amount
from finance_reporter.utils.logging_config import get_logger

logger = get_logger(__name__)


def _as_list(data: dict[str, object], key: str) -> list[dict[str, object]]:
    entries = data.get(key)
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise StoreError(f"'{key}' must be a list, got {type(entries).__name__}")
    for entry in entries:
        if not isinstance(entry, dict):
            raise StoreError(f"Entries in '{key}' must be mappings, got {entry!r}")
    return entries


def parse_transaction(
    entry: dict[str, object],
    kind: TransactionKind,
    default_owner: str,
    position: int,
) -> Transaction:
    """Build a Transaction from one ledger entry.

    Args:
        entry: Mapping with description, amount, date and optional category,
            id, owner and created_at keys.
        kind: Collection the entry was listed under.
        default_owner: Owner for entries that do not name one.
        position: Index in the collection (used for messages and default IDs).

    Raises:
        StoreError: If a field is missing or invalid.
    """
    label = f"{kind.value} #{position + 1}"
    try:
        amount, is_negative = parse_amount(entry["amount"])
        if is_negative:
            raise StoreError(f"{label}: amount must be non-negative, got {entry['amount']!r}")
        occurred_at = parse_instant(entry["date"])
        created = entry.get("created_at")
        recorded_at = parse_instant(created) if created is not None else datetime.now(timezone.utc)
    except KeyError as e:
        raise StoreError(f"{label}: missing field {e.args[0]!r}") from e
    except ValueError as e:
        raise StoreError(f"{label}: {e}") from e

    category = entry.get("category")
    return Transaction(
        id=str(entry.get("id", f"{kind.value}-{position + 1}")),
        owner_id=str(entry.get("owner", default_owner)),
        description=str(entry.get("description", "")),
        amount=amount,
        occurred_at=occurred_at,
        recorded_at=recorded_at,
        kind=kind,
        category_id=str(category) if category is not None else None,
    )


def load_ledger(path: Path) -> InMemoryTransactionStore:
    """Read a YAML ledger and build a store from it.

    Args:
        path: Path to the ledger file.

    Returns:
        InMemoryTransactionStore holding every entry.

    Raises:
        StoreError: If the file is missing, not valid YAML, or has bad entries.
    """
    if not path.exists():
        raise StoreError(f"Ledger file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise StoreError(f"Invalid YAML in ledger {path}: {e}") from e

    data = content if content else {}
    if not isinstance(data, dict):
        raise StoreError(f"Ledger {path} must be a mapping at the top level")

    default_owner = str(data.get("owner", DEFAULT_OWNER))

    try:
        categories = [
            Category.from_dict(entry, owner_id=default_owner)
            for entry in _as_list(data, "categories")
        ]
    except KeyError as e:
        raise StoreError(f"category entry missing field {e.args[0]!r}") from e
    expenses = [
        parse_transaction(entry, TransactionKind.EXPENSE, default_owner, i)
        for i, entry in enumerate(_as_list(data, "expenses"))
    ]
    deposits = [
        parse_transaction(entry, TransactionKind.DEPOSIT, default_owner, i)
        for i, entry in enumerate(_as_list(data, "deposits"))
    ]

    logger.info(
        f"Loaded {len(expenses)} expenses, {len(deposits)} deposits and "
        f"{len(categories)} categories from {path}"
    )
    return InMemoryTransactionStore(
        expenses=expenses,
        deposits=deposits,
        categories=categories,
        default_owner=default_owner,
    )
