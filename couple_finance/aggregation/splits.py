"""
Owner splits.

How much of a transaction each person carries. Shares are Decimal
fractions of the amount: 1 for the owner, 1/2 each for BOTH, the record's
own percentages for PROPORTIONAL.
"""

from decimal import Decimal
from typing import Iterable, Optional

from couple_finance.models.records import Owner, Transaction, TransactionType
from couple_finance.models.reports import ZERO


HALF = Decimal("0.5")
HUNDRED = Decimal("100")
DEFAULT_PROPORTION = Decimal("50")


def _proportion(value: Optional[Decimal], default: Decimal) -> Decimal:
    return default if value is None else Decimal(value)


def expense_share(
    transaction: Transaction,
    person: str,
    default_proportion: Decimal = DEFAULT_PROPORTION,
) -> Decimal:
    """
    Amount of an expense carried by `person` ("a" or "b").

    A proportional expense with a missing percentage falls back to
    `default_proportion` for that side.
    """
    owner = transaction.owner
    if owner == Owner.BOTH:
        return transaction.amount * HALF
    if owner == Owner.PROPORTIONAL:
        if person == "a":
            share = _proportion(transaction.proportion_a, default_proportion)
        else:
            share = _proportion(transaction.proportion_b, default_proportion)
        return transaction.amount * share / HUNDRED
    if owner == _person_owner(person):
        return transaction.amount
    return ZERO


def income_share(transaction: Transaction, person: str) -> Decimal:
    """
    Amount of an income credited to `person` ("a" or "b").

    Proportional incomes are credited to neither person.
    """
    owner = transaction.owner
    if owner == Owner.BOTH:
        return transaction.amount * HALF
    if owner == _person_owner(person):
        return transaction.amount
    return ZERO


def _person_owner(person: str) -> Owner:
    if person == "a":
        return Owner.PERSON_A
    if person == "b":
        return Owner.PERSON_B
    raise ValueError(f"person must be 'a' or 'b', got {person!r}")


def split_totals(
    transactions: Iterable[Transaction],
    default_proportion: Decimal = DEFAULT_PROPORTION,
) -> dict[str, Decimal]:
    """Per-person income and expense over the given transactions."""
    totals = {
        "person_a_income": ZERO,
        "person_b_income": ZERO,
        "person_a_expense": ZERO,
        "person_b_expense": ZERO,
    }
    for transaction in transactions:
        if transaction.type == TransactionType.INCOME:
            totals["person_a_income"] += income_share(transaction, "a")
            totals["person_b_income"] += income_share(transaction, "b")
        else:
            totals["person_a_expense"] += expense_share(transaction, "a", default_proportion)
            totals["person_b_expense"] += expense_share(transaction, "b", default_proportion)
    return totals
