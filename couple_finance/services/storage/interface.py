"""
Abstract Storage Interface

DESIGN DECISION: The household's records live in a hosted backend.
We define an abstract interface for the handful of operations the
application needs so that:
1. The backend can be swapped without touching business logic
2. Tests run against in-memory storage
3. Nothing outside the repository talks to the backend directly

The interface is intentionally simple - rows in, rows out. Mapping rows
to typed records is the repository's job.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

from couple_finance.models.audit import AuditEvent


Row = dict[str, Any]


class RecordStoreInterface(ABC):
    """
    Abstract interface for the household record store.

    Every entity type lives in its own table (see RecordKind).
    All operations may fail with StorageError.
    """

    @abstractmethod
    async def fetch_all(
        self,
        table: str,
        match: Optional[dict[str, Any]] = None,
    ) -> list[Row]:
        """
        Fetch rows from a table.

        Args:
            table: Table name
            match: Column values every returned row must equal
                   (e.g. {"couple_id": ...} or {"goal_id": ...})

        Returns:
            Matching rows, oldest first
        """
        pass

    @abstractmethod
    async def create(self, table: str, row: Row) -> Row:
        """
        Insert a row.

        The store assigns id, created_at and updated_at.

        Returns:
            The stored row, including assigned fields
        """
        pass

    @abstractmethod
    async def update(self, table: str, record_id: UUID, fields: Row) -> None:
        """
        Update some columns of an existing row.

        Raises:
            NotFoundError: If the row doesn't exist
        """
        pass

    @abstractmethod
    async def delete(self, table: str, record_id: UUID) -> None:
        """
        Delete a row.

        Raises:
            NotFoundError: If the row doesn't exist
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
        """Get all events for a correlation ID, in chronological order."""
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events for one record, in chronological order."""
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


class StoreConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass
