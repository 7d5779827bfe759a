"""
Shared fixtures: a configured household and builders for common records.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from couple_finance.config import AppSettings, HouseholdSettings, SessionSettings
from couple_finance.models.records import (
    Category,
    FixedExpense,
    FixedIncome,
    Owner,
    Transaction,
    TransactionType,
)


COUPLE_ID = UUID("11111111-1111-4111-8111-111111111111")
PERSON_A_ID = UUID("22222222-2222-4222-8222-222222222222")
PERSON_B_ID = UUID("33333333-3333-4333-8333-333333333333")
PASSWORD = "open-sesame"


def make_transaction(
    type=TransactionType.EXPENSE,
    amount="100",
    on=date(2025, 3, 10),
    owner=Owner.BOTH,
    **extra,
) -> Transaction:
    return Transaction(
        id=extra.pop("id", uuid4()),
        type=type,
        amount=Decimal(amount),
        date=on,
        owner=owner,
        **extra,
    )


def make_fixed_expense(amount="100", due_day=5, **extra) -> FixedExpense:
    return FixedExpense(
        id=extra.pop("id", uuid4()),
        name=extra.pop("name", "Rent"),
        amount=Decimal(amount),
        due_day=due_day,
        **extra,
    )


def make_fixed_income(
    amount="1000",
    receipt_day=5,
    start_date=date(2025, 1, 1),
    **extra,
) -> FixedIncome:
    return FixedIncome(
        id=extra.pop("id", uuid4()),
        name=extra.pop("name", "Salary"),
        amount=Decimal(amount),
        receipt_day=receipt_day,
        start_date=start_date,
        **extra,
    )


def make_category(name="Groceries", icon="🛒", **extra) -> Category:
    return Category(
        id=extra.pop("id", uuid4()),
        name=name,
        icon=icon,
        type=extra.pop("type", TransactionType.EXPENSE),
        **extra,
    )


@pytest.fixture
def household_settings() -> HouseholdSettings:
    return HouseholdSettings(
        couple_id=COUPLE_ID,
        person_a_id=PERSON_A_ID,
        person_b_id=PERSON_B_ID,
        person_a_name="Ana",
        person_b_name="Bruno",
    )


@pytest.fixture
def session_settings() -> SessionSettings:
    return SessionSettings(shared_password=PASSWORD)


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings()
