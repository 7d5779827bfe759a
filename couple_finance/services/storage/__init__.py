"""
Storage Services Package

Provides the abstract record store interface and an in-memory
implementation. The hosted backend plugs in behind the same interface.
"""

from couple_finance.services.storage.interface import (
    AuditStorageInterface,
    NotFoundError,
    RecordStoreInterface,
    Row,
    StorageError,
    StoreConnectionError,
)
from couple_finance.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryRecordStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "RecordStoreInterface",
    "Row",
    # Exceptions
    "NotFoundError",
    "StorageError",
    "StoreConnectionError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryRecordStore",
]
