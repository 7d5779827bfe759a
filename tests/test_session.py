"""
Tests for the shared-password session gate.
"""

import asyncio

import pytest

from couple_finance.audit import AuditLogger
from couple_finance.models.audit import AuditEventType
from couple_finance.services.storage import InMemoryAuditStorage
from couple_finance.session import (
    AuthenticationError,
    NotAuthenticatedError,
    SessionGate,
    identity_from_settings,
)

from conftest import COUPLE_ID, PASSWORD, PERSON_A_ID, PERSON_B_ID


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def gate(session_settings, household_settings, audit_storage) -> SessionGate:
    return SessionGate(
        session_settings=session_settings,
        household_settings=household_settings,
        audit_logger=AuditLogger(audit_storage),
    )


class TestIdentity:
    """Tests for the configured household identity."""

    def test_identity_from_settings(self, household_settings):
        identity = identity_from_settings(household_settings)
        assert identity.couple.id == COUPLE_ID
        assert identity.couple.person_a_id == PERSON_A_ID
        assert identity.couple.person_b_id == PERSON_B_ID
        assert identity.couple.person_b_name == "Bruno"
        assert identity.user.id == PERSON_A_ID
        assert identity.user.name == "Ana & Bruno"


class TestSessionGate:
    """Tests for login and logout."""

    def test_starts_locked(self, gate):
        assert not gate.is_authenticated
        assert gate.identity is None
        with pytest.raises(NotAuthenticatedError):
            gate.require_identity()

    def test_login_with_shared_password(self, gate, audit_storage):
        identity = asyncio.run(gate.login(PASSWORD))

        assert gate.is_authenticated
        assert gate.require_identity() == identity
        assert identity.couple.id == COUPLE_ID
        assert [e.event_type for e in audit_storage.events] == [
            AuditEventType.LOGIN_SUCCEEDED
        ]

    def test_wrong_password(self, gate, audit_storage):
        with pytest.raises(AuthenticationError):
            asyncio.run(gate.login("guess"))

        assert not gate.is_authenticated
        assert audit_storage.events[-1].event_type == AuditEventType.LOGIN_FAILED

    def test_wrong_password_locks_an_open_gate(self, gate):
        asyncio.run(gate.login(PASSWORD))
        with pytest.raises(AuthenticationError):
            asyncio.run(gate.login("guess"))
        assert not gate.is_authenticated

    def test_logout(self, gate, audit_storage):
        asyncio.run(gate.login(PASSWORD))
        asyncio.run(gate.logout())
        asyncio.run(gate.logout())

        assert not gate.is_authenticated
        logouts = [e for e in audit_storage.events if e.event_type == AuditEventType.LOGOUT]
        assert logouts[0].entity_id == PERSON_A_ID
        assert logouts[1].entity_id is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
