"""Report builders: monthly item list, CSV export, settlements, goals."""

from couple_finance.reports.export import CSV_HEADER, export_report_csv, owner_label
from couple_finance.reports.fixed_items import (
    installment_label,
    is_paid_for_month,
    is_received_for_month,
    split_installments,
)
from couple_finance.reports.goals import (
    active_goals_by_time_frame,
    apply_ledger_entry,
    financial_goal_progress,
    goal_progress,
    reserve_progress,
)
from couple_finance.reports.items import build_report_items
from couple_finance.reports.settlements import (
    available_settlement_years,
    group_settlements_by_month,
    settlement_totals,
    settlements_for_year,
)

__all__ = [
    "CSV_HEADER",
    "active_goals_by_time_frame",
    "apply_ledger_entry",
    "available_settlement_years",
    "build_report_items",
    "export_report_csv",
    "financial_goal_progress",
    "goal_progress",
    "group_settlements_by_month",
    "installment_label",
    "is_paid_for_month",
    "is_received_for_month",
    "owner_label",
    "reserve_progress",
    "settlement_totals",
    "settlements_for_year",
    "split_installments",
]
