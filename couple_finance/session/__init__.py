"""Shared-password session gate."""

from couple_finance.session.gate import (
    AuthenticationError,
    NotAuthenticatedError,
    SessionGate,
    identity_from_settings,
)

__all__ = [
    "AuthenticationError",
    "NotAuthenticatedError",
    "SessionGate",
    "identity_from_settings",
]
