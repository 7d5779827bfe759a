"""
Session Gate

DESIGN DECISION: The household is unlocked by one shared password, not
per-user credentials. A successful login exposes the configured household
identity (one couple, one shared user). There is no expiry and no
multi-household support.

The repository refuses to touch the store while the gate is locked.
"""

import hmac
from typing import Optional

import structlog

from couple_finance.audit import AuditLogger
from couple_finance.config import HouseholdSettings, SessionSettings, get_settings
from couple_finance.models.records import Couple, HouseholdIdentity, User


class AuthenticationError(Exception):
    """The shared password was wrong."""
    pass


class NotAuthenticatedError(Exception):
    """An operation needs the household to be unlocked first."""
    pass


def identity_from_settings(household: HouseholdSettings) -> HouseholdIdentity:
    """Build the fixed household identity from configuration."""
    couple = Couple(
        id=household.couple_id,
        person_a_id=household.person_a_id,
        person_b_id=household.person_b_id,
        person_a_name=household.person_a_name,
        person_b_name=household.person_b_name,
        currency=household.currency,
        closing_day=household.closing_day,
    )
    user = User(
        id=household.person_a_id,
        email=household.user_email,
        name=household.user_name
        or f"{household.person_a_name} & {household.person_b_name}",
    )
    return HouseholdIdentity(user=user, couple=couple)


class SessionGate:
    """Binary authenticated / unauthenticated state."""

    def __init__(
        self,
        session_settings: Optional[SessionSettings] = None,
        household_settings: Optional[HouseholdSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        settings = None
        if session_settings is None or household_settings is None:
            settings = get_settings()
        self._session_settings = session_settings or settings.session
        self._household_settings = household_settings or settings.household
        self._audit_logger = audit_logger
        self._identity: Optional[HouseholdIdentity] = None
        self._logger = structlog.get_logger("couple_finance.session")

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    @property
    def identity(self) -> Optional[HouseholdIdentity]:
        return self._identity

    def require_identity(self) -> HouseholdIdentity:
        """The current identity, or NotAuthenticatedError when locked."""
        if self._identity is None:
            raise NotAuthenticatedError("Household is locked; log in first")
        return self._identity

    def _password_matches(self, password: str) -> bool:
        expected = self._session_settings.shared_password.get_secret_value()
        return hmac.compare_digest(password.encode("utf-8"), expected.encode("utf-8"))

    async def login(self, password: str) -> HouseholdIdentity:
        """
        Unlock the household.

        Raises:
            AuthenticationError: If the password is wrong. The gate stays
                (or becomes) locked.
        """
        if not self._password_matches(password):
            self._identity = None
            self._logger.warning("login_failed")
            if self._audit_logger:
                await self._audit_logger.log_login_failed()
            raise AuthenticationError("Wrong password")

        self._identity = identity_from_settings(self._household_settings)
        self._logger.info("login_succeeded", couple_id=str(self._identity.couple.id))
        if self._audit_logger:
            await self._audit_logger.log_login(self._identity.user.id)
        return self._identity

    async def logout(self) -> None:
        """Lock the household again. Logging out twice is harmless."""
        user_id = self._identity.user.id if self._identity else None
        self._identity = None
        self._logger.info("logout")
        if self._audit_logger:
            await self._audit_logger.log_logout(user_id)
