"""
Monthly aggregation.

Pure functions over already-fetched records: which items belong to a
month, how amounts split between the two people, the month summary and
the category breakdown.
"""

from couple_finance.aggregation.breakdown import (
    DEFAULT_BREAKDOWN_LIMIT,
    category_share,
    compute_category_breakdown,
    with_percentages,
)
from couple_finance.aggregation.months import (
    active_fixed_expenses,
    active_fixed_incomes,
    fixed_expense_active_in_month,
    fixed_income_active_in_month,
    in_month,
    previous_month,
    transactions_in_month,
)
from couple_finance.aggregation.splits import expense_share, income_share, split_totals
from couple_finance.aggregation.summary import (
    compare_months,
    compute_month_summary,
    percentage_change,
    savings_rate,
)

__all__ = [
    "DEFAULT_BREAKDOWN_LIMIT",
    "active_fixed_expenses",
    "active_fixed_incomes",
    "category_share",
    "compare_months",
    "compute_category_breakdown",
    "compute_month_summary",
    "expense_share",
    "fixed_expense_active_in_month",
    "fixed_income_active_in_month",
    "in_month",
    "income_share",
    "percentage_change",
    "previous_month",
    "savings_rate",
    "split_totals",
    "transactions_in_month",
    "with_percentages",
]
