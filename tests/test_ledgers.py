"""
Tests for debt settlements, goal/reserve progress and fixed-item status.
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from couple_finance.models.records import (
    DebtSettlement,
    FinancialGoal,
    FixedExpensePayment,
    FixedIncomeReceipt,
    GoalTimeFrame,
    IncomeOwner,
    LedgerEntryType,
    Reserve,
    ReserveTransaction,
)
from couple_finance.reports import (
    active_goals_by_time_frame,
    apply_ledger_entry,
    available_settlement_years,
    financial_goal_progress,
    goal_progress,
    group_settlements_by_month,
    installment_label,
    is_paid_for_month,
    is_received_for_month,
    reserve_progress,
    settlement_totals,
    settlements_for_year,
    split_installments,
)

from conftest import make_fixed_expense, make_fixed_income


def settlement(on, original="1000", settled="800", owner=IncomeOwner.BOTH):
    return DebtSettlement(
        id=uuid4(),
        name="Car loan",
        original_amount=Decimal(original),
        settled_amount=Decimal(settled),
        owner=owner,
        settlement_date=on,
    )


def goal(**extra):
    return FinancialGoal(
        id=uuid4(),
        name=extra.pop("name", "Trip"),
        target_amount=Decimal(extra.pop("target", "1000")),
        current_amount=Decimal(extra.pop("current", "0")),
        start_date=date(2025, 1, 1),
        **extra,
    )


class TestSettlements:
    """Tests for the debt settlement history."""

    def test_for_year_and_owner(self):
        a_2025 = settlement(date(2025, 5, 1), owner=IncomeOwner.PERSON_A)
        b_2025 = settlement(date(2025, 6, 1), owner=IncomeOwner.PERSON_B)
        a_2024 = settlement(date(2024, 6, 1), owner=IncomeOwner.PERSON_A)
        all_settlements = [a_2025, b_2025, a_2024]

        assert settlements_for_year(all_settlements, 2025) == [a_2025, b_2025]
        assert settlements_for_year(all_settlements, 2025, IncomeOwner.PERSON_A) == [a_2025]

    def test_grouped_newest_month_first(self):
        march = settlement(date(2025, 3, 9))
        january = settlement(date(2025, 1, 2))
        march_again = settlement(date(2025, 3, 20))

        groups = group_settlements_by_month([march, january, march_again])

        assert list(groups) == ["2025-03", "2025-01"]
        assert groups["2025-03"] == [march, march_again]

    def test_totals_and_savings(self):
        totals = settlement_totals([
            settlement(date(2025, 1, 1), "1000", "800"),
            settlement(date(2025, 2, 1), "500.50", "500.50"),
        ])
        assert totals.original_amount == Decimal("1500.50")
        assert totals.settled_amount == Decimal("1300.50")
        assert totals.saved == Decimal("200")

    def test_available_years_descending(self):
        years = available_settlement_years([
            settlement(date(2023, 1, 1)),
            settlement(date(2025, 1, 1)),
            settlement(date(2023, 7, 1)),
        ])
        assert years == [2025, 2023]


class TestGoals:
    """Tests for goal and reserve progress."""

    @pytest.mark.parametrize(
        "current,target,expected",
        [
            ("250", "1000", "25"),
            ("1500", "1000", "100"),
            ("100", "0", "0"),
            ("0", "1000", "0"),
        ],
    )
    def test_goal_progress(self, current, target, expected):
        assert goal_progress(Decimal(current), Decimal(target)) == Decimal(expected)

    def test_record_progress(self):
        reserve = Reserve(
            name="Emergency", target_amount=Decimal("400"), current_amount=Decimal("100")
        )
        assert reserve_progress(reserve) == Decimal("25")
        assert financial_goal_progress(goal(current="500")) == Decimal("50")

    def test_active_goals_by_time_frame(self):
        short = goal(time_frame=GoalTimeFrame.SHORT)
        done = goal(time_frame=GoalTimeFrame.SHORT, is_completed=True)
        paused = goal(time_frame=GoalTimeFrame.LONG, is_active=False)

        grouped = active_goals_by_time_frame([short, done, paused])

        assert grouped[GoalTimeFrame.SHORT] == [short]
        assert grouped[GoalTimeFrame.MEDIUM] == []
        assert grouped[GoalTimeFrame.LONG] == []

    def test_apply_ledger_entry(self):
        reserve_id = uuid4()
        deposit = ReserveTransaction(
            reserve_id=reserve_id,
            amount=Decimal("50"),
            type=LedgerEntryType.DEPOSIT,
            date=date(2025, 3, 1),
        )
        withdrawal = deposit.model_copy(update={"type": LedgerEntryType.WITHDRAWAL})

        assert apply_ledger_entry(Decimal("100"), deposit) == Decimal("150")
        assert apply_ledger_entry(Decimal("100"), withdrawal) == Decimal("50")


class TestFixedItemStatus:
    """Tests for installments and paid/received status."""

    def test_split_installments(self):
        installment = make_fixed_expense(is_installment=True, total_installments=12)
        regular = make_fixed_expense()
        inactive = make_fixed_expense(is_active=False)

        installments, regulars = split_installments([installment, regular, inactive])

        assert installments == [installment]
        assert regulars == [regular]

    def test_installment_label(self):
        expense = make_fixed_expense(
            is_installment=True, installment_number=3, total_installments=12
        )
        assert installment_label(expense) == "3/12x"
        assert installment_label(make_fixed_expense()) == ""
        unnumbered = make_fixed_expense(is_installment=True, total_installments=6)
        assert installment_label(unnumbered) == "1/6x"

    def test_paid_for_month(self):
        expense = make_fixed_expense()
        payment = FixedExpensePayment(
            fixed_expense_id=expense.id, reference_month=date(2025, 3, 1)
        )
        assert is_paid_for_month(expense, [payment], 2025, 2)
        assert not is_paid_for_month(expense, [payment], 2025, 3)
        assert not is_paid_for_month(make_fixed_expense(), [payment], 2025, 2)

    def test_received_for_month(self):
        income = make_fixed_income()
        receipt = FixedIncomeReceipt(
            fixed_income_id=income.id, reference_month=date(2025, 3, 1)
        )
        assert is_received_for_month(income, [receipt], 2025, 2)
        assert not is_received_for_month(income, [receipt], 2024, 2)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
