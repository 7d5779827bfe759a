"""
Audit Logger

DESIGN DECISION: Every write to the household records is logged.
This provides:
1. Traceability of who changed what, and when
2. Debugging capability when a fetched snapshot looks wrong
3. A visible record of store failures that were reported to the user

The audit logger:
- Is async so it can share the repository's event loop
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from couple_finance.models.audit import AuditEvent, AuditEventBuilder
from couple_finance.services.storage import AuditStorageInterface


def configure_logging(level: str = "INFO", json: bool = True) -> None:
    """
    Configure stdlib logging and structlog together.

    Safe to call more than once; the last call wins.
    """
    logging.basicConfig(format="%(message)s", stream=sys.stdout)
    logging.getLogger().setLevel(level.upper())

    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


# Configure structlog for local logging
configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("couple_finance.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        severity = event.severity.value
        if severity in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif severity == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif severity == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_login(self, user_id: UUID) -> None:
        await self.log(AuditEventBuilder.login_succeeded(user_id))

    async def log_login_failed(self) -> None:
        await self.log(AuditEventBuilder.login_failed())

    async def log_logout(self, user_id: Optional[UUID]) -> None:
        await self.log(AuditEventBuilder.logout(user_id))

    async def log_snapshot_refreshed(self, counts: dict[str, int]) -> None:
        await self.log(AuditEventBuilder.snapshot_refreshed(counts))

    async def log_record_created(
        self,
        table: str,
        record_id: Optional[UUID],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.record_created(table, record_id, correlation_id)
        )

    async def log_record_updated(
        self,
        table: str,
        record_id: UUID,
        fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.record_updated(table, record_id, fields, correlation_id)
        )

    async def log_record_deleted(self, table: str, record_id: UUID) -> None:
        await self.log(AuditEventBuilder.record_deleted(table, record_id))

    async def log_write_rejected(
        self,
        table: str,
        issues: list[dict],
        record_id: Optional[UUID] = None,
    ) -> None:
        """Log a write that failed validation."""
        await self.log(AuditEventBuilder.write_rejected(table, issues, record_id))

    async def log_store_error(
        self,
        operation: str,
        table: Optional[str],
        error_message: str,
    ) -> None:
        await self.log(AuditEventBuilder.store_error(operation, table, error_message))

    async def log_data_integrity_error(
        self,
        table: str,
        record_id: Optional[UUID],
        error_message: str,
    ) -> None:
        await self.log(
            AuditEventBuilder.data_integrity_error(table, record_id, error_message)
        )

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        await self.log(
            AuditEventBuilder.system_error(error_type, error_message, details)
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a multi-step write (e.g., a goal deposit that
    also moves the goal balance) and pass it to every step.
    """
    return uuid4()
