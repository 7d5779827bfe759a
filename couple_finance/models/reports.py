"""
Derived Report Models

Everything in this module is computed from a snapshot of records and
thrown away afterwards. Nothing here is ever persisted.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from couple_finance.models.records import Owner, Transaction, TransactionType


ZERO = Decimal("0")


class MonthSummary(BaseModel):
    """
    Totals for one calendar month.

    income/expense include active fixed items; the per-person figures
    cover one-off transactions only.
    """
    model_config = ConfigDict(frozen=True)

    income: Decimal = ZERO
    expense: Decimal = ZERO
    balance: Decimal = ZERO
    savings_rate: Decimal = Field(
        default=ZERO,
        description="balance / income * 100, 0 when there is no income"
    )
    person_a_income: Decimal = ZERO
    person_b_income: Decimal = ZERO
    person_a_expense: Decimal = ZERO
    person_b_expense: Decimal = ZERO


class CategoryExpense(BaseModel):
    """One slice of the monthly expense breakdown."""
    model_config = ConfigDict(frozen=True)

    category_id: UUID
    name: str
    icon: str
    value: Decimal
    percentage: Optional[Decimal] = Field(
        default=None,
        description="Share of the month's total expense, filled in by the dashboard"
    )
    budget: Optional[Decimal] = Field(
        default=None,
        description="The category's monthly budget, if it has one"
    )

    @property
    def budget_used(self) -> Optional[Decimal]:
        """Percentage of the budget already spent."""
        if self.budget is None or self.budget <= ZERO:
            return None
        return self.value / self.budget * 100


class MonthComparison(BaseModel):
    """A month next to the one before it."""
    model_config = ConfigDict(frozen=True)

    current: MonthSummary
    previous: MonthSummary
    income_change: Decimal = Field(description="% change of income")
    expense_change: Decimal = Field(description="% change of expense")
    savings_change: Decimal = Field(description="Savings rate difference, in points")


class ReportOrigin(str, Enum):
    """Where a report line came from."""
    TRANSACTION = "transaction"
    FIXED_EXPENSE = "fixed_expense"
    FIXED_INCOME = "fixed_income"


class ReportItem(BaseModel):
    """One line of the monthly report and of its CSV export."""
    model_config = ConfigDict(frozen=True)

    date: dt.date
    description: str
    category_name: Optional[str] = None
    type: TransactionType
    amount: Decimal
    owner: Owner
    proportion_a: Optional[Decimal] = None
    proportion_b: Optional[Decimal] = None
    origin: ReportOrigin
    source_id: Optional[UUID] = None


class SettlementTotals(BaseModel):
    """How much settling debts early has saved."""
    model_config = ConfigDict(frozen=True)

    original_amount: Decimal = ZERO
    settled_amount: Decimal = ZERO
    saved: Decimal = ZERO


class DashboardView(BaseModel):
    """Everything the dashboard shows for one month."""
    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(ge=0, le=11, description="Month index, January is 0")
    summary: MonthSummary
    categories: list[CategoryExpense] = Field(default_factory=list)
    comparison: MonthComparison
    recent_transactions: list[Transaction] = Field(default_factory=list)
