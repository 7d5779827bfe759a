"""
Tests for the dashboard and report flows.
"""

import asyncio

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from structlog.testing import capture_logs

from couple_finance.config import AppSettings, ConfigurationError, Settings
from couple_finance.orchestrator import (
    DashboardFlow,
    ReportFlow,
    create_app_components,
    recent_transactions,
)
from couple_finance.services.repository import HouseholdRepository
from couple_finance.services.storage import InMemoryRecordStore
from couple_finance.session import NotAuthenticatedError, SessionGate

from conftest import COUPLE_ID, PASSWORD, PERSON_A_ID, PERSON_B_ID, make_transaction


def seed_tables() -> dict:
    couple = str(COUPLE_ID)
    groceries = str(uuid4())
    fuel = str(uuid4())

    def transaction(type, amount, on, category=None):
        return {"couple_id": couple, "type": type, "amount": amount, "date": on,
                "owner": "both", "category_id": category}

    return {
        "categories": [
            {"id": groceries, "couple_id": couple, "name": "Groceries", "icon": "🛒",
             "type": "expense"},
            {"id": fuel, "couple_id": couple, "name": "Fuel", "icon": "⛽",
             "type": "expense"},
        ],
        "transactions": [
            transaction("income", "1000.00", "2025-02-01"),
            transaction("expense", "300.00", "2025-02-10", groceries),
            transaction("income", "500.00", "2025-03-02"),
            transaction("expense", "150.00", "2025-03-05", groceries),
            transaction("expense", "50.00", "2025-03-20", fuel),
        ],
        "fixed_expenses": [
            {"couple_id": couple, "name": "Internet", "amount": "100.00", "due_day": 15},
        ],
    }


@pytest.fixture
def gate(session_settings, household_settings) -> SessionGate:
    return SessionGate(
        session_settings=session_settings,
        household_settings=household_settings,
    )


@pytest.fixture
def repository(gate, app_settings) -> HouseholdRepository:
    return HouseholdRepository(
        store=InMemoryRecordStore(seed_tables()),
        gate=gate,
        settings=app_settings,
    )


@pytest.fixture
def logged_in(gate):
    asyncio.run(gate.login(PASSWORD))
    return gate


class TestDashboardFlow:
    """Tests for assembling the dashboard."""

    def test_build_with_refresh(self, repository, logged_in):
        flow = DashboardFlow(repository, AppSettings())

        view = asyncio.run(flow.build(2025, 2, refresh=True))

        assert (view.year, view.month) == (2025, 2)
        assert view.summary.income == Decimal("500")
        assert view.summary.expense == Decimal("300")
        assert view.summary.savings_rate == Decimal("40")

        assert [(c.name, c.value) for c in view.categories] == [
            ("Groceries", Decimal("150")),
            ("Fuel", Decimal("50")),
        ]
        assert view.categories[0].percentage == Decimal("50")
        assert view.categories[1].percentage.quantize(Decimal("0.01")) == Decimal("16.67")

    def test_comparison_with_february(self, repository, logged_in):
        view = asyncio.run(DashboardFlow(repository, AppSettings()).build(2025, 2, refresh=True))

        comparison = view.comparison
        assert comparison.previous.income == Decimal("1000")
        assert comparison.previous.expense == Decimal("400")
        assert comparison.income_change == Decimal("-50")
        assert comparison.expense_change == Decimal("-25")
        assert comparison.savings_change == Decimal("-20")

    def test_recent_transactions_limited(self, repository, logged_in):
        flow = DashboardFlow(repository, AppSettings(recent_transactions_limit=3))

        view = asyncio.run(flow.build(2025, 2, refresh=True))

        assert [t.date for t in view.recent_transactions] == [
            date(2025, 3, 20),
            date(2025, 3, 5),
            date(2025, 3, 2),
        ]

    def test_locked_household(self, repository):
        with pytest.raises(NotAuthenticatedError):
            asyncio.run(DashboardFlow(repository, AppSettings()).build(2025, 2))


class TestRecentTransactions:
    """Tests for the recent transaction list."""

    def test_equal_dates_keep_order(self):
        first = make_transaction(on=date(2025, 3, 1), description="first")
        second = make_transaction(on=date(2025, 3, 1), description="second")
        newest = make_transaction(on=date(2025, 3, 9))

        result = recent_transactions([first, second, newest], 5)

        assert [t.description for t in result] == ["", "first", "second"]

    def test_zero_limit(self):
        assert recent_transactions([make_transaction()], 0) == []


class TestReportFlow:
    """Tests for the monthly report and export."""

    def test_items_and_csv(self, repository, gate, logged_in):
        asyncio.run(repository.refresh())
        flow = ReportFlow(repository, gate)

        items = flow.month_items(2025, 2)
        text = flow.export_csv(2025, 2)

        assert len(items) == 4
        assert items[0].date == date(2025, 3, 20)
        lines = text.splitlines()
        assert lines[0] == "date,description,category,type,amount,owner,origin"
        assert len(lines) == 5
        assert "2025-03-15,Internet,,Expense,100.00,Both,Fixed expense" in lines

    def test_month_totals_match_dashboard(self, repository, gate, logged_in):
        asyncio.run(repository.refresh())
        flow = ReportFlow(repository, gate)
        assert flow.month_totals(2025, 2) == repository.month_summary(2025, 2)

    def test_export_needs_login(self, repository, gate):
        with pytest.raises(NotAuthenticatedError):
            ReportFlow(repository, gate).export_csv(2025, 2)


class TestCreateAppComponents:
    """Tests for the component factory."""

    def test_wires_components_from_settings(self, monkeypatch):
        monkeypatch.setenv("HOUSEHOLD_COUPLE_ID", str(COUPLE_ID))
        monkeypatch.setenv("HOUSEHOLD_PERSON_A_ID", str(PERSON_A_ID))
        monkeypatch.setenv("HOUSEHOLD_PERSON_B_ID", str(PERSON_B_ID))
        monkeypatch.setenv("SESSION_SHARED_PASSWORD", PASSWORD)

        gate, repository, dashboard, report = create_app_components(
            store=InMemoryRecordStore(seed_tables()),
            settings=Settings(),
        )

        async def scenario():
            await gate.login(PASSWORD)
            return await dashboard.build(2025, 2, refresh=True)

        view = asyncio.run(scenario())

        assert view.summary.balance == Decimal("200")
        assert len(repository.snapshot.transactions) == 5
        assert report.month_items(2025, 1)[0].date == date(2025, 2, 15)

    def test_refuses_to_start_with_invalid_settings(self, monkeypatch):
        monkeypatch.setenv("HOUSEHOLD_COUPLE_ID", str(COUPLE_ID))
        monkeypatch.setenv("HOUSEHOLD_PERSON_A_ID", str(PERSON_A_ID))
        monkeypatch.setenv("HOUSEHOLD_PERSON_B_ID", str(PERSON_B_ID))
        monkeypatch.delenv("SESSION_SHARED_PASSWORD", raising=False)

        with capture_logs() as logs:
            with pytest.raises(ConfigurationError, match="session") as excinfo:
                create_app_components(settings=Settings())

        assert excinfo.value.results["household"] is True
        assert excinfo.value.results["session"] is False
        assert logs[-1]["event"] == "invalid_settings"
        assert logs[-1]["log_level"] == "error"
        assert "session_error" in logs[-1]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
