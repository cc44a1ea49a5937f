"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
The in-memory backend is the default; Google Sheets is optional and is
imported lazily so that gspread is only touched when it is selected.
"""

from fintracker.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    NotFoundError,
    StorageError,
    TransactionStoreInterface,
    describe_storage_error,
)
from fintracker.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryTransactionStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "TransactionStoreInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    "describe_storage_error",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryTransactionStore",
]
