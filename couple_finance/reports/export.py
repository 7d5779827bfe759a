"""
CSV export of the monthly report.
"""

import csv
import io
from decimal import Decimal
from typing import Iterable, Optional

from couple_finance.models.records import Couple, Owner, TransactionType
from couple_finance.models.reports import ReportItem, ReportOrigin


CSV_HEADER = ["date", "description", "category", "type", "amount", "owner", "origin"]

ORIGIN_LABELS = {
    ReportOrigin.TRANSACTION: "Transaction",
    ReportOrigin.FIXED_EXPENSE: "Fixed expense",
    ReportOrigin.FIXED_INCOME: "Fixed income",
}

TYPE_LABELS = {
    TransactionType.INCOME: "Income",
    TransactionType.EXPENSE: "Expense",
}

CENTS = Decimal("0.01")


def _format_proportion(value: Optional[Decimal]) -> str:
    share = Decimal("50") if value is None else Decimal(value)
    return format(share.normalize(), "f")


def owner_label(
    owner: Owner,
    couple: Couple,
    proportion_a: Optional[Decimal] = None,
    proportion_b: Optional[Decimal] = None,
) -> str:
    """Human label for an owner, using the couple's names."""
    if owner == Owner.PERSON_A:
        return couple.person_a_name
    if owner == Owner.PERSON_B:
        return couple.person_b_name
    if owner == Owner.BOTH:
        return "Both"
    return (
        f"Proportional ({_format_proportion(proportion_a)}/"
        f"{_format_proportion(proportion_b)})"
    )


def export_report_csv(items: Iterable[ReportItem], couple: Couple) -> str:
    """Render report items as CSV text with a header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for item in items:
        writer.writerow([
            item.date.isoformat(),
            item.description,
            item.category_name or "",
            TYPE_LABELS[item.type],
            str(item.amount.quantize(CENTS)),
            owner_label(item.owner, couple, item.proportion_a, item.proportion_b),
            ORIGIN_LABELS[item.origin],
        ])
    return buffer.getvalue()
