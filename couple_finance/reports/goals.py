"""
Goal and reserve progress.
"""

from decimal import Decimal
from typing import Iterable, Union

from couple_finance.models.records import (
    FinancialGoal,
    FinancialGoalTransaction,
    GoalTimeFrame,
    LedgerEntryType,
    Reserve,
    ReserveTransaction,
)
from couple_finance.models.reports import ZERO


HUNDRED = Decimal("100")

LedgerEntry = Union[ReserveTransaction, FinancialGoalTransaction]


def goal_progress(current: Decimal, target: Decimal) -> Decimal:
    """Percentage of the target reached, capped at 100; 0 for a zero target."""
    if target <= ZERO:
        return ZERO
    return min(current / target * HUNDRED, HUNDRED)


def reserve_progress(reserve: Reserve) -> Decimal:
    return goal_progress(reserve.current_amount, reserve.target_amount)


def financial_goal_progress(goal: FinancialGoal) -> Decimal:
    return goal_progress(goal.current_amount, goal.target_amount)


def active_goals_by_time_frame(
    goals: Iterable[FinancialGoal],
) -> dict[GoalTimeFrame, list[FinancialGoal]]:
    """Active, not yet completed goals grouped by time frame."""
    grouped: dict[GoalTimeFrame, list[FinancialGoal]] = {
        frame: [] for frame in GoalTimeFrame
    }
    for goal in goals:
        if goal.is_active and not goal.is_completed:
            grouped[goal.time_frame].append(goal)
    return grouped


def apply_ledger_entry(balance: Decimal, entry: LedgerEntry) -> Decimal:
    """The balance after a deposit or withdrawal."""
    if entry.type == LedgerEntryType.DEPOSIT:
        return balance + entry.amount
    return balance - entry.amount
