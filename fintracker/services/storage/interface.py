"""
Abstract Storage Interface

DESIGN DECISION: The transaction store is an external collaborator.
The analysis core reads snapshots from it and the voice executor
requests mutations through it. This allows us to:
1. Swap the backend (in-memory, Google Sheets, an HTTP API)
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

Retry policy, if any, belongs to the implementation. Callers in the core
surface StorageError messages unchanged and never retry.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from fintracker.models.audit import AuditEvent
from fintracker.models.transaction import (
    Transaction,
    TransactionCreate,
    TransactionUpdate,
)


class TransactionStoreInterface(ABC):
    """
    Abstract interface for transaction storage operations.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def list_transactions(self, user_id: str) -> list[Transaction]:
        """
        List all transactions for a user.

        Returns:
            Transactions ordered newest first (by date, then by
            creation time)

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def create_transaction(
        self,
        user_id: str,
        data: TransactionCreate,
    ) -> Transaction:
        """
        Create a transaction.

        Returns:
            The stored transaction, with its assigned id

        Raises:
            StorageError: If the write is rejected
        """
        pass

    @abstractmethod
    async def update_transaction(
        self,
        transaction_id: UUID,
        data: TransactionUpdate,
    ) -> Transaction:
        """
        Apply a partial update.

        Raises:
            NotFoundError: If the transaction doesn't exist
            StorageError: If the write is rejected
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: UUID) -> None:
        """
        Delete a transaction by ID.

        Raises:
            NotFoundError: If the transaction doesn't exist
            StorageError: If the delete is rejected
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events of one utterance, in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get the most recent audit events (newest first)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


def describe_storage_error(error: StorageError, default: Optional[str] = None) -> str:
    """The message shown to the user for a failed store call."""
    return str(error) or default or error.__class__.__name__
