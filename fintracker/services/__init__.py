"""Services package."""

from fintracker.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryTransactionStore,
    NotFoundError,
    StorageError,
    TransactionStoreInterface,
)

__all__ = [
    "AuditStorageInterface",
    "ConnectionError",
    "DuplicateError",
    "InMemoryAuditStorage",
    "InMemoryTransactionStore",
    "NotFoundError",
    "StorageError",
    "TransactionStoreInterface",
]
