"""
Debt settlement history.

A settlement records a debt paid off for less than (or exactly) its
original amount; the difference is what the couple saved.
"""

from typing import Iterable, Optional

from couple_finance.models.records import DebtSettlement, IncomeOwner
from couple_finance.models.reports import ZERO, SettlementTotals


def settlements_for_year(
    settlements: Iterable[DebtSettlement],
    year: int,
    owner: Optional[IncomeOwner] = None,
) -> list[DebtSettlement]:
    """Settlements dated in `year`, optionally only those of one owner."""
    return [
        s for s in settlements
        if s.settlement_date.year == year and (owner is None or s.owner == owner)
    ]


def group_settlements_by_month(
    settlements: Iterable[DebtSettlement],
) -> dict[str, list[DebtSettlement]]:
    """Settlements keyed by "YYYY-MM", newest month first."""
    groups: dict[str, list[DebtSettlement]] = {}
    for settlement in settlements:
        key = settlement.settlement_date.strftime("%Y-%m")
        groups.setdefault(key, []).append(settlement)
    return dict(sorted(groups.items(), reverse=True))


def settlement_totals(settlements: Iterable[DebtSettlement]) -> SettlementTotals:
    original = ZERO
    settled = ZERO
    for settlement in settlements:
        original += settlement.original_amount
        settled += settlement.settled_amount
    return SettlementTotals(
        original_amount=original,
        settled_amount=settled,
        saved=original - settled,
    )


def available_settlement_years(settlements: Iterable[DebtSettlement]) -> list[int]:
    """Distinct settlement years, most recent first."""
    return sorted({s.settlement_date.year for s in settlements}, reverse=True)
