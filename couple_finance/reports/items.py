"""
Monthly report lines.

The report (and its CSV export) lists every money movement of a month:
the month's transactions plus the fixed items active in that month,
newest first.
"""

from typing import Iterable, Optional
from uuid import UUID

from couple_finance.aggregation.months import (
    active_fixed_expenses,
    active_fixed_incomes,
    day_in_month,
    transactions_in_month,
)
from couple_finance.models.records import (
    Category,
    FixedExpense,
    FixedIncome,
    Owner,
    Transaction,
    TransactionType,
    index_by_id,
)
from couple_finance.models.reports import ReportItem, ReportOrigin


def _category_name(lookup: dict, category_id: Optional[UUID]) -> Optional[str]:
    category = lookup.get(category_id) if category_id else None
    return category.name if category else None


def build_report_items(
    year: int,
    month: int,
    transactions: Iterable[Transaction],
    fixed_expenses: Iterable[FixedExpense],
    fixed_incomes: Iterable[FixedIncome],
    categories: Iterable[Category],
) -> list[ReportItem]:
    """
    The merged, filtered and sorted list of the month's items; `month` is
    0-based like every other month query.

    Fixed items are dated on their due/receipt day, clamped to the last
    day of short months. Items are sorted by date, newest first; items on
    the same date keep the order transactions, fixed expenses, fixed
    incomes, each in input order.
    """
    lookup = index_by_id(categories)
    items: list[ReportItem] = []

    for transaction in transactions_in_month(transactions, year, month):
        items.append(ReportItem(
            date=transaction.date,
            description=transaction.description,
            category_name=_category_name(lookup, transaction.category_id),
            type=transaction.type,
            amount=transaction.amount,
            owner=transaction.owner,
            proportion_a=transaction.proportion_a,
            proportion_b=transaction.proportion_b,
            origin=ReportOrigin.TRANSACTION,
            source_id=transaction.id,
        ))

    for expense in active_fixed_expenses(fixed_expenses, year, month):
        items.append(ReportItem(
            date=day_in_month(year, month, expense.due_day),
            description=expense.name or expense.description or "",
            category_name=_category_name(lookup, expense.category_id),
            type=TransactionType.EXPENSE,
            amount=expense.amount,
            owner=expense.owner,
            proportion_a=expense.proportion_a,
            proportion_b=expense.proportion_b,
            origin=ReportOrigin.FIXED_EXPENSE,
            source_id=expense.id,
        ))

    for income in active_fixed_incomes(fixed_incomes, year, month):
        items.append(ReportItem(
            date=day_in_month(year, month, income.receipt_day),
            description=income.name or income.description or "",
            category_name=_category_name(lookup, income.category_id),
            type=TransactionType.INCOME,
            amount=income.amount,
            owner=Owner(income.owner.value),
            origin=ReportOrigin.FIXED_INCOME,
            source_id=income.id,
        ))

    items.sort(key=lambda item: item.date, reverse=True)
    return items
