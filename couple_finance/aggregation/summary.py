"""
Monthly summary.

compute_month_summary is a pure function of its arguments: it reads the
records it is given, mutates nothing and keeps no state between calls.
"""

from decimal import Decimal
from typing import Iterable

from couple_finance.aggregation.months import (
    active_fixed_expenses,
    active_fixed_incomes,
    check_month,
    previous_month,
    transactions_in_month,
)
from couple_finance.aggregation.splits import DEFAULT_PROPORTION, HUNDRED, split_totals
from couple_finance.audit.tracing import trace_span
from couple_finance.models.records import (
    FixedExpense,
    FixedIncome,
    Transaction,
    TransactionType,
)
from couple_finance.models.reports import ZERO, MonthComparison, MonthSummary


def savings_rate(balance: Decimal, income: Decimal) -> Decimal:
    """balance / income as a percentage; 0 when there is no income."""
    if income > ZERO:
        return balance / income * HUNDRED
    return ZERO


def percentage_change(current: Decimal, previous: Decimal) -> Decimal:
    """Relative change from previous to current, 0 when previous is 0."""
    if previous == ZERO:
        return ZERO
    return (current - previous) / abs(previous) * HUNDRED


def compute_month_summary(
    year: int,
    month: int,
    transactions: Iterable[Transaction],
    fixed_expenses: Iterable[FixedExpense],
    fixed_incomes: Iterable[FixedIncome],
    default_proportion: Decimal = DEFAULT_PROPORTION,
) -> MonthSummary:
    """
    Totals for one calendar month; `month` is 0-based (January is 0).

    Income and expense combine the month's transactions with the fixed
    items active in that month. The per-person split covers transactions
    only; fixed items are not attributed to either person.

    Raises:
        DataIntegrityError: If a record lacks a required field
        ValueError: If month is outside 0..11
    """
    check_month(year, month)
    with trace_span("month_summary", year=year, month=month) as log:
        month_transactions = transactions_in_month(transactions, year, month)
        fixed_in = active_fixed_incomes(fixed_incomes, year, month, log=log)
        fixed_out = active_fixed_expenses(fixed_expenses, year, month, log=log)

        income = sum(
            (t.amount for t in month_transactions if t.type == TransactionType.INCOME),
            ZERO,
        )
        income += sum((fi.amount for fi in fixed_in), ZERO)

        expense = sum(
            (t.amount for t in month_transactions if t.type == TransactionType.EXPENSE),
            ZERO,
        )
        expense += sum((fe.amount for fe in fixed_out), ZERO)

        balance = income - expense
        split = split_totals(month_transactions, default_proportion)

        log.debug(
            "month_summary.totals",
            transactions=len(month_transactions),
            fixed_incomes=len(fixed_in),
            fixed_expenses=len(fixed_out),
            income=str(income),
            expense=str(expense),
        )

        return MonthSummary(
            income=income,
            expense=expense,
            balance=balance,
            savings_rate=savings_rate(balance, income),
            **split,
        )


def compare_months(
    year: int,
    month: int,
    transactions: Iterable[Transaction],
    fixed_expenses: Iterable[FixedExpense],
    fixed_incomes: Iterable[FixedIncome],
    default_proportion: Decimal = DEFAULT_PROPORTION,
) -> MonthComparison:
    """The month's summary next to the previous calendar month's."""
    # Materialize once; both summaries read the same collections
    transactions = list(transactions)
    fixed_expenses = list(fixed_expenses)
    fixed_incomes = list(fixed_incomes)

    prev_year, prev_month = previous_month(year, month)
    current = compute_month_summary(
        year, month, transactions, fixed_expenses, fixed_incomes, default_proportion
    )
    previous = compute_month_summary(
        prev_year, prev_month, transactions, fixed_expenses, fixed_incomes, default_proportion
    )

    return MonthComparison(
        current=current,
        previous=previous,
        income_change=percentage_change(current.income, previous.income),
        expense_change=percentage_change(current.expense, previous.expense),
        savings_change=current.savings_rate - previous.savings_rate,
    )
