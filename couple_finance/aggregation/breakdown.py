"""
Category breakdown of a month's expenses.
"""

from decimal import Decimal
from typing import Iterable, Optional
from uuid import UUID

from couple_finance.aggregation.months import check_month, transactions_in_month
from couple_finance.aggregation.splits import HUNDRED
from couple_finance.audit.tracing import trace_span
from couple_finance.models.records import (
    Category,
    Transaction,
    TransactionType,
    index_by_id,
)
from couple_finance.models.reports import ZERO, CategoryExpense


DEFAULT_BREAKDOWN_LIMIT = 7


def category_share(value: Decimal, total: Decimal) -> Decimal:
    """value as a percentage of total; 0 when total is 0."""
    if total == ZERO:
        return ZERO
    return value / total * HUNDRED


def compute_category_breakdown(
    year: int,
    month: int,
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    limit: int = DEFAULT_BREAKDOWN_LIMIT,
) -> list[CategoryExpense]:
    """
    The month's expense transactions summed per category, largest first.

    Transactions whose category no longer exists are left out. Categories
    with equal totals keep the order in which they were first seen.
    At most `limit` entries are returned.
    """
    check_month(year, month)
    if limit < 0:
        raise ValueError(f"limit must not be negative, got {limit}")

    lookup: dict[UUID, Category] = index_by_id(categories)

    with trace_span("category_breakdown", year=year, month=month) as log:
        totals: dict[UUID, Decimal] = {}
        for transaction in transactions_in_month(transactions, year, month):
            if transaction.type != TransactionType.EXPENSE:
                continue
            category_id: Optional[UUID] = transaction.category_id
            if category_id is None or category_id not in lookup:
                log.debug(
                    "transaction_without_category",
                    transaction_id=str(transaction.id),
                    category_id=str(category_id) if category_id else None,
                )
                continue
            totals[category_id] = totals.get(category_id, ZERO) + transaction.amount

        # sorted() is stable, so ties stay in first-seen order
        ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)

        return [
            CategoryExpense(
                category_id=category_id,
                name=lookup[category_id].name,
                icon=lookup[category_id].icon,
                value=value,
                budget=lookup[category_id].monthly_budget,
            )
            for category_id, value in ranked[:limit]
        ]


def with_percentages(
    breakdown: Iterable[CategoryExpense],
    total_expense: Decimal,
) -> list[CategoryExpense]:
    """Copies of the breakdown entries with their share of total_expense set."""
    return [
        entry.model_copy(update={"percentage": category_share(entry.value, total_expense)})
        for entry in breakdown
    ]
