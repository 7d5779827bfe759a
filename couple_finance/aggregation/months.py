"""
Month membership rules.

Months are (year, month) pairs where month is a 0-based index: January is
0 and December is 11. Every public query takes that index; this module is
the only place it is turned into a calendar month. Comparisons only look
at the year and month of a date, never the day.
"""

import calendar
from datetime import date
from typing import Any, Iterable, Optional

from couple_finance.models.records import (
    FixedExpense,
    FixedIncome,
    Transaction,
    require_fields,
)


def check_month(year: int, month: int) -> None:
    """Reject month indexes outside 0..11."""
    if not 0 <= month <= 11:
        raise ValueError(f"month must be in 0..11 (January is 0), got {month}")
    if year < 1:
        raise ValueError(f"year must be positive, got {year}")


def month_key(year: int, month: int) -> tuple[int, int]:
    return (year, month)


def date_month_key(d: date) -> tuple[int, int]:
    """(year, month index) of a date."""
    return (d.year, d.month - 1)


def previous_month(year: int, month: int) -> tuple[int, int]:
    """The month before (year, month); January (0) wraps to December (11)."""
    check_month(year, month)
    if month == 0:
        return year - 1, 11
    return year, month - 1


def month_start(year: int, month: int) -> date:
    """First day of the month."""
    return date(year, month + 1, 1)


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month + 1)[1]


def day_in_month(year: int, month: int, day: int) -> date:
    """Date for `day` in the month, clamped to the month's last day."""
    return date(year, month + 1, min(day, last_day_of_month(year, month)))


def in_month(d: date, year: int, month: int) -> bool:
    return date_month_key(d) == month_key(year, month)


def _before_month(d: date, year: int, month: int) -> bool:
    return date_month_key(d) < month_key(year, month)


def _after_month(d: date, year: int, month: int) -> bool:
    return date_month_key(d) > month_key(year, month)


def transactions_in_month(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
) -> list[Transaction]:
    """Transactions dated in the calendar month, in input order."""
    check_month(year, month)
    selected = []
    for transaction in transactions:
        require_fields(transaction, "amount", "date", "type")
        if in_month(transaction.date, year, month):
            selected.append(transaction)
    return selected


def fixed_expense_exclusion(
    expense: FixedExpense,
    year: int,
    month: int,
) -> Optional[str]:
    """
    Why a fixed expense does not count towards the month, or None if it does.

    Only installments are bounded by their end date; a regular fixed
    expense counts every month while it is active.
    """
    if not expense.is_active:
        return "inactive"
    if (
        expense.is_installment
        and expense.end_date is not None
        and _before_month(expense.end_date, year, month)
    ):
        return "installments_finished"
    return None


def fixed_income_exclusion(
    income: FixedIncome,
    year: int,
    month: int,
) -> Optional[str]:
    """Why a fixed income does not count towards the month, or None if it does."""
    if not income.is_active:
        return "inactive"
    if _after_month(income.start_date, year, month):
        return "not_started"
    if income.end_date is not None and _before_month(income.end_date, year, month):
        return "ended"
    return None


def fixed_expense_active_in_month(expense: FixedExpense, year: int, month: int) -> bool:
    return fixed_expense_exclusion(expense, year, month) is None


def fixed_income_active_in_month(income: FixedIncome, year: int, month: int) -> bool:
    return fixed_income_exclusion(income, year, month) is None


def active_fixed_expenses(
    expenses: Iterable[FixedExpense],
    year: int,
    month: int,
    log: Any = None,
) -> list[FixedExpense]:
    """
    Fixed expenses that count towards the month.

    When a span logger is given, every exclusion is logged at debug level.
    """
    check_month(year, month)
    selected = []
    for expense in expenses:
        require_fields(expense, "amount")
        reason = fixed_expense_exclusion(expense, year, month)
        if reason is None:
            selected.append(expense)
        elif log is not None:
            log.debug(
                "fixed_expense_excluded",
                fixed_expense_id=str(expense.id),
                reason=reason,
            )
    return selected


def active_fixed_incomes(
    incomes: Iterable[FixedIncome],
    year: int,
    month: int,
    log: Any = None,
) -> list[FixedIncome]:
    """Fixed incomes that count towards the month (see active_fixed_expenses)."""
    check_month(year, month)
    selected = []
    for income in incomes:
        require_fields(income, "amount", "start_date")
        reason = fixed_income_exclusion(income, year, month)
        if reason is None:
            selected.append(income)
        elif log is not None:
            log.debug(
                "fixed_income_excluded",
                fixed_income_id=str(income.id),
                reason=reason,
            )
    return selected
