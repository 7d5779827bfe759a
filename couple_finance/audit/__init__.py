"""Audit logging and tracing package."""

from couple_finance.audit.logger import (
    AuditLogger,
    configure_logging,
    create_correlation_id,
)
from couple_finance.audit.tracing import trace_span

__all__ = [
    "AuditLogger",
    "configure_logging",
    "create_correlation_id",
    "trace_span",
]
