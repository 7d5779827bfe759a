"""
Fixed expense and fixed income status helpers.
"""

from typing import Iterable

from couple_finance.aggregation.months import date_month_key
from couple_finance.models.records import (
    FixedExpense,
    FixedExpensePayment,
    FixedIncome,
    FixedIncomeReceipt,
)


def split_installments(
    expenses: Iterable[FixedExpense],
) -> tuple[list[FixedExpense], list[FixedExpense]]:
    """Active fixed expenses as (installments, regular)."""
    installments: list[FixedExpense] = []
    regular: list[FixedExpense] = []
    for expense in expenses:
        if not expense.is_active:
            continue
        (installments if expense.is_installment else regular).append(expense)
    return installments, regular


def installment_label(expense: FixedExpense) -> str:
    """Label like "3/12x"; empty for regular expenses."""
    if not expense.is_installment or expense.total_installments is None:
        return ""
    return f"{expense.installment_number or 1}/{expense.total_installments}x"


def is_paid_for_month(
    expense: FixedExpense,
    payments: Iterable[FixedExpensePayment],
    year: int,
    month: int,
) -> bool:
    return any(
        p.fixed_expense_id == expense.id
        and date_month_key(p.reference_month) == (year, month)
        for p in payments
    )


def is_received_for_month(
    income: FixedIncome,
    receipts: Iterable[FixedIncomeReceipt],
    year: int,
    month: int,
) -> bool:
    return any(
        r.fixed_income_id == income.id
        and date_month_key(r.reference_month) == (year, month)
        for r in receipts
    )
