"""
Main Orchestrator for Couple Finance

This module ties together all the components and defines the
end-to-end flows for:
1. Dashboard (snapshot → summary → breakdown → comparison → recent items)
2. Monthly report (snapshot → merged item list → CSV export)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is read before the household is unlocked
- Every number comes from the pure aggregation functions
- Store failures are reported, never hidden behind stale numbers

The flows never talk to the store directly; they go through the
repository's snapshot.
"""

from decimal import Decimal
from typing import Optional

import structlog

from couple_finance.aggregation import (
    compare_months,
    compute_category_breakdown,
    compute_month_summary,
    with_percentages,
)
from couple_finance.audit import AuditLogger, configure_logging
from couple_finance.config import (
    AppSettings,
    ConfigurationError,
    Settings,
    get_settings,
    validate_all_settings,
)
from couple_finance.models.records import Transaction
from couple_finance.models.reports import DashboardView, MonthSummary, ReportItem
from couple_finance.reports import build_report_items, export_report_csv
from couple_finance.services.repository import HouseholdRepository
from couple_finance.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryRecordStore,
    RecordStoreInterface,
)
from couple_finance.session import SessionGate
from couple_finance.validation import RecordValidator


def recent_transactions(
    transactions: list[Transaction],
    limit: int,
) -> list[Transaction]:
    """The newest transactions first; equal dates keep their input order."""
    ranked = sorted(transactions, key=lambda t: t.date, reverse=True)
    return ranked[:limit]


class DashboardFlow:
    """
    Builds the month's dashboard from the repository's snapshot.

    Flow:
    1. Refresh → optional, fetches a fresh snapshot
    2. Summarize → totals and the per-person split
    3. Break down → expense categories with their share of total expense
    4. Compare → previous calendar month
    5. Recent → newest transactions of the household
    """

    def __init__(
        self,
        repository: HouseholdRepository,
        settings: Optional[AppSettings] = None,
    ):
        self._repository = repository
        self._app_settings = settings or get_settings().app

    async def build(
        self,
        year: int,
        month: int,
        refresh: bool = False,
    ) -> DashboardView:
        """
        Assemble the dashboard for one month.

        Args:
            year: Calendar year
            month: Month index, 0 (January) to 11 (December)
            refresh: Fetch a new snapshot first

        Raises:
            NotAuthenticatedError: If the household is locked
            StorageError: If the refresh fails
            DataIntegrityError: If a record lacks a required field
        """
        if refresh:
            await self._repository.refresh()

        snapshot = self._repository.snapshot
        proportion = Decimal(self._app_settings.default_proportion)

        summary = self._repository.month_summary(year, month)
        categories = with_percentages(
            compute_category_breakdown(
                year,
                month,
                snapshot.transactions,
                snapshot.categories,
                self._app_settings.category_breakdown_limit,
            ),
            summary.expense,
        )
        comparison = compare_months(
            year,
            month,
            snapshot.transactions,
            snapshot.fixed_expenses,
            snapshot.fixed_incomes,
            proportion,
        )

        return DashboardView(
            year=year,
            month=month,
            summary=summary,
            categories=categories,
            comparison=comparison,
            recent_transactions=recent_transactions(
                list(snapshot.transactions),
                self._app_settings.recent_transactions_limit,
            ),
        )


class ReportFlow:
    """
    Builds the monthly report and its CSV export.
    """

    def __init__(
        self,
        repository: HouseholdRepository,
        gate: SessionGate,
    ):
        self._repository = repository
        self._gate = gate

    def month_items(self, year: int, month: int) -> list[ReportItem]:
        self._gate.require_identity()
        snapshot = self._repository.snapshot
        return build_report_items(
            year,
            month,
            snapshot.transactions,
            snapshot.fixed_expenses,
            snapshot.fixed_incomes,
            snapshot.categories,
        )

    def export_csv(self, year: int, month: int) -> str:
        """The month's report as CSV text, labelled with the couple's names."""
        identity = self._gate.require_identity()
        return export_report_csv(self.month_items(year, month), identity.couple)

    def month_totals(self, year: int, month: int) -> MonthSummary:
        """The same totals the dashboard shows, for the report header."""
        self._gate.require_identity()
        snapshot = self._repository.snapshot
        return compute_month_summary(
            year,
            month,
            snapshot.transactions,
            snapshot.fixed_expenses,
            snapshot.fixed_incomes,
            self._repository.default_proportion,
        )


def create_app_components(
    store: Optional[RecordStoreInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
    settings: Optional[Settings] = None,
) -> tuple[SessionGate, HouseholdRepository, DashboardFlow, ReportFlow]:
    """
    Factory function to create all application components.

    Args:
        store: Record store backend. Defaults to an empty in-memory store.
        audit_storage: Where audit events are persisted. Defaults to an
                    in-memory list.
        settings: Settings root. Defaults to get_settings().

    Returns:
        (session_gate, repository, dashboard_flow, report_flow)

    Raises:
        ConfigurationError: If any settings section fails to load
    """
    settings = settings or get_settings()
    results = validate_all_settings(settings)
    errors = {k: v for k, v in results.items() if k.endswith("_error")}
    if errors:
        structlog.get_logger("couple_finance.startup").error("invalid_settings", **errors)
        raise ConfigurationError(results)

    app_settings = settings.app
    configure_logging(app_settings.effective_log_level, json=app_settings.log_json)

    audit_logger = AuditLogger(audit_storage or InMemoryAuditStorage())

    gate = SessionGate(
        session_settings=settings.session,
        household_settings=settings.household,
        audit_logger=audit_logger,
    )
    repository = HouseholdRepository(
        store=store or InMemoryRecordStore(),
        gate=gate,
        validator=RecordValidator(app_settings),
        audit_logger=audit_logger,
        settings=app_settings,
    )

    dashboard_flow = DashboardFlow(repository, app_settings)
    report_flow = ReportFlow(repository, gate)

    return gate, repository, dashboard_flow, report_flow
