"""
Audit Models for Couple Finance

Every write to the household records, every login and logout, and every
store failure is logged for audit purposes.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"

    # Snapshot
    SNAPSHOT_REFRESHED = "snapshot_refreshed"

    # Writes
    RECORD_CREATED = "record_created"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    WRITE_REJECTED = "write_rejected"

    # Failures
    STORE_ERROR = "store_error"
    DATA_INTEGRITY_ERROR = "data_integrity_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what record is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Table of the record (e.g., 'transactions')"
    )
    entity_id: Optional[UUID] = None

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one goal deposit and its balance update)"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_created("transactions", record_id)
        event = AuditEventBuilder.login_failed()
    """

    @staticmethod
    def login_succeeded(user_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="user",
            entity_id=user_id,
            description="Household unlocked with the shared password",
            is_user_action=True,
        )

    @staticmethod
    def login_failed() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            description="Wrong shared password",
            is_user_action=True,
        )

    @staticmethod
    def logout(user_id: Optional[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGOUT,
            entity_type="user",
            entity_id=user_id,
            description="Household locked",
            is_user_action=True,
        )

    @staticmethod
    def snapshot_refreshed(counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_REFRESHED,
            severity=AuditSeverity.DEBUG,
            description=f"Snapshot refreshed ({sum(counts.values())} records)",
            details={"counts": counts},
        )

    @staticmethod
    def record_created(
        table: str,
        record_id: Optional[UUID],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            entity_type=table,
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record created in {table}",
            is_user_action=True,
        )

    @staticmethod
    def record_updated(
        table: str,
        record_id: UUID,
        fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            entity_type=table,
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record updated in {table}",
            details={"fields": sorted(fields)},
            is_user_action=True,
        )

    @staticmethod
    def record_deleted(table: str, record_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            entity_type=table,
            entity_id=record_id,
            description=f"Record deleted from {table}",
            is_user_action=True,
        )

    @staticmethod
    def write_rejected(
        table: str,
        issues: list[dict],
        record_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WRITE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type=table,
            entity_id=record_id,
            description=f"Write to {table} rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def store_error(
        operation: str,
        table: Optional[str],
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type=table,
            description=f"Store operation failed: {operation}",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def data_integrity_error(
        table: str,
        record_id: Optional[UUID],
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_INTEGRITY_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type=table,
            entity_id=record_id,
            description=f"Malformed record in {table}",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
