"""Read-only transaction stores consumed by the aggregator."""

from finance_reporter.store.base import StoreError, TransactionStore, UnknownCategory
from finance_reporter.store.memory import InMemoryTransactionStore
from finance_reporter.store.yaml_store import load_ledger

__all__ = [
    "TransactionStore",
    "StoreError",
    "UnknownCategory",
    "InMemoryTransactionStore",
    "load_ledger",
]
