"""
In-Memory Storage Implementation

Keeps every table in a dict, keyed by row id. Used by the test suite and
for running the application without a backend.

Rows are copied on the way in and on the way out, so callers can never
mutate what the store holds.
"""

import asyncio
import copy
from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

from couple_finance.models.audit import AuditEvent
from couple_finance.services.storage.interface import (
    AuditStorageInterface,
    NotFoundError,
    RecordStoreInterface,
    Row,
    StorageError,
)


class InMemoryRecordStore(RecordStoreInterface):
    """Dict-backed record store."""

    def __init__(self, tables: Optional[dict[str, list[Row]]] = None):
        self._tables: dict[str, dict[str, Row]] = {}
        self._lock = asyncio.Lock()
        self._failure: Optional[StorageError] = None

        for table, rows in (tables or {}).items():
            for row in rows:
                self._insert(table, row)

    def fail_with(self, error: Optional[StorageError]) -> None:
        """Make every following operation raise `error` (None to heal)."""
        self._failure = error

    def _check_failure(self) -> None:
        if self._failure is not None:
            raise self._failure

    def _insert(self, table: str, row: Row) -> Row:
        stored = copy.deepcopy(row)
        now = datetime.utcnow().isoformat()
        stored["id"] = str(stored.get("id") or uuid4())
        stored.setdefault("created_at", now)
        stored.setdefault("updated_at", now)
        self._tables.setdefault(table, {})[stored["id"]] = stored
        return copy.deepcopy(stored)

    def _get_row(self, table: str, record_id: UUID) -> Row:
        try:
            return self._tables[table][str(record_id)]
        except KeyError:
            raise NotFoundError(f"No row {record_id} in {table}")

    @staticmethod
    def _matches(row: Row, match: dict[str, Any]) -> bool:
        return all(
            str(row.get(column)) == str(value)
            for column, value in match.items()
        )

    async def fetch_all(
        self,
        table: str,
        match: Optional[dict[str, Any]] = None,
    ) -> list[Row]:
        self._check_failure()
        rows = self._tables.get(table, {}).values()
        return [
            copy.deepcopy(row)
            for row in rows
            if self._matches(row, match or {})
        ]

    async def create(self, table: str, row: Row) -> Row:
        self._check_failure()
        async with self._lock:
            payload = {k: v for k, v in row.items() if k not in ("id", "created_at", "updated_at")}
            return self._insert(table, payload)

    async def update(self, table: str, record_id: UUID, fields: Row) -> None:
        self._check_failure()
        async with self._lock:
            stored = self._get_row(table, record_id)
            stored.update(copy.deepcopy(fields))
            stored["id"] = str(record_id)
            stored["updated_at"] = datetime.utcnow().isoformat()

    async def delete(self, table: str, record_id: UUID) -> None:
        self._check_failure()
        async with self._lock:
            self._get_row(table, record_id)
            del self._tables[table][str(record_id)]

    def row_count(self, table: str) -> int:
        return len(self._tables.get(table, {}))


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)
