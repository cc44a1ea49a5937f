"""
In-Memory Storage Implementation

The default backend for local use and the storage double for tests.
Data lives for the lifetime of the process only.
"""

from typing import Iterable
from uuid import UUID

from fintracker.models.audit import AuditEvent
from fintracker.models.transaction import (
    Transaction,
    TransactionCreate,
    TransactionUpdate,
)
from fintracker.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    TransactionStoreInterface,
)


class InMemoryTransactionStore(TransactionStoreInterface):
    """Transactions kept in a dict keyed by id."""

    def __init__(self, transactions: Iterable[Transaction] = ()):
        self._transactions: dict[UUID, Transaction] = {}
        for transaction in transactions:
            self._insert(transaction)

    def _insert(self, transaction: Transaction) -> Transaction:
        if transaction.id in self._transactions:
            raise DuplicateError(f"Transaction already exists: {transaction.id}")
        self._transactions[transaction.id] = transaction
        return transaction

    def seed(self, user_id: str, transactions: Iterable[Transaction]) -> None:
        """Insert ready-made transactions for a user (demo data, tests)."""
        for transaction in transactions:
            self._insert(transaction.model_copy(update={"user_id": user_id}))

    async def list_transactions(self, user_id: str) -> list[Transaction]:
        transactions = [
            t for t in self._transactions.values()
            if t.user_id == user_id
        ]
        # Newest first, like the API the dashboard reads from
        transactions.sort(key=lambda t: (t.date, t.created_at), reverse=True)
        return transactions

    async def create_transaction(
        self,
        user_id: str,
        data: TransactionCreate,
    ) -> Transaction:
        transaction = Transaction(user_id=user_id, **data.model_dump())
        return self._insert(transaction)

    async def update_transaction(
        self,
        transaction_id: UUID,
        data: TransactionUpdate,
    ) -> Transaction:
        existing = self._transactions.get(transaction_id)
        if existing is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

        # Re-validate the merged record so amount/type invariants still hold
        merged = existing.model_dump()
        merged.update(data.model_dump(exclude_unset=True))
        updated = Transaction(**merged)
        self._transactions[transaction_id] = updated
        return updated

    async def delete_transaction(self, transaction_id: UUID) -> None:
        if self._transactions.pop(transaction_id, None) is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._events if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return sorted(self._events, key=lambda e: e.timestamp, reverse=True)[:limit]
