"""
Tests for Couple Finance

Test strategy:
1. Unit tests for individual components (models, aggregation, validator)
2. Integration tests for flows (with the in-memory store)
3. No real backend calls in tests
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from couple_finance.models.records import (
    Category,
    DataIntegrityError,
    FixedExpense,
    FixedIncome,
    IncomeOwner,
    Owner,
    RecordKind,
    Transaction,
    TransactionType,
    index_by_id,
    require_fields,
)
from couple_finance.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from couple_finance.models.reports import CategoryExpense
from couple_finance.models.validation import ValidationIssue, ValidationResult


class TestRecordModels:
    """Tests for household record models."""

    def test_transaction_creation(self):
        """Test Transaction model creation with defaults."""
        transaction = Transaction(
            type=TransactionType.EXPENSE,
            amount=Decimal("42.50"),
            date=date(2025, 3, 10),
        )
        assert transaction.owner == Owner.BOTH
        assert transaction.proportion_a is None
        assert transaction.id is None

    def test_transaction_strips_whitespace(self):
        """Test that whitespace is stripped from descriptions."""
        transaction = Transaction(
            type=TransactionType.EXPENSE,
            amount=Decimal("10"),
            date=date(2025, 3, 10),
            description="  Market  ",
        )
        assert transaction.description == "Market"

    def test_negative_amount_rejected(self):
        """Test that amounts cannot be negative."""
        with pytest.raises(ValueError):
            Transaction(
                type=TransactionType.EXPENSE,
                amount=Decimal("-5"),
                date=date(2025, 3, 10),
            )

    def test_amount_with_three_decimals_rejected(self):
        with pytest.raises(ValueError):
            Transaction(
                type=TransactionType.EXPENSE,
                amount=Decimal("1.005"),
                date=date(2025, 3, 10),
            )

    def test_records_are_frozen(self):
        """Test that records cannot be mutated after creation."""
        category = Category(name="Food", type=TransactionType.EXPENSE)
        with pytest.raises(ValueError):
            category.name = "Other"

    def test_due_day_out_of_range(self):
        """Test that due_day is limited to 1..31."""
        with pytest.raises(ValueError):
            FixedExpense(amount=Decimal("100"), due_day=32)

    def test_fixed_income_rejects_proportional_owner(self):
        with pytest.raises(ValueError):
            FixedIncome(
                amount=Decimal("100"),
                receipt_day=5,
                start_date=date(2025, 1, 1),
                owner="proportional",
            )

    def test_row_columns_validate_into_model(self):
        """Test that a stored row with string values maps onto the model."""
        row = {
            "id": str(uuid4()),
            "couple_id": str(uuid4()),
            "type": "income",
            "amount": "1500.00",
            "date": "2025-03-05",
            "owner": "person_b",
            "unknown_column": "ignored",
        }
        transaction = Transaction.model_validate(row)
        assert transaction.amount == Decimal("1500.00")
        assert transaction.owner == Owner.PERSON_B


class TestRecordHelpers:
    """Tests for require_fields, index_by_id and RecordKind."""

    def test_require_fields_passes(self):
        category = Category(name="Food", type=TransactionType.EXPENSE)
        require_fields(category, "name", "type")

    def test_require_fields_names_missing(self):
        """Test that the error names the record and the missing field."""
        record_id = uuid4()
        category = Category(id=record_id, name="Food", type=TransactionType.EXPENSE)
        with pytest.raises(DataIntegrityError, match="monthly_budget") as exc_info:
            require_fields(category, "monthly_budget")
        assert exc_info.value.record_id == record_id

    def test_index_by_id_first_wins(self):
        shared_id = uuid4()
        first = Category(id=shared_id, name="First", type=TransactionType.EXPENSE)
        second = Category(id=shared_id, name="Second", type=TransactionType.EXPENSE)
        unsaved = Category(name="Unsaved", type=TransactionType.EXPENSE)

        index = index_by_id([first, second, unsaved])

        assert list(index) == [shared_id]
        assert index[shared_id].name == "First"

    def test_record_kind_models_and_parents(self):
        """Test RecordKind table names, models and sub-ledger parents."""
        assert RecordKind.TRANSACTION.value == "transactions"
        assert RecordKind.TRANSACTION.model is Transaction
        assert RecordKind.TRANSACTION.parent is None
        assert RecordKind.RESERVE_TRANSACTION.parent == ("reserve_id", RecordKind.RESERVE)

    def test_income_owner_values_are_owner_values(self):
        for owner in IncomeOwner:
            assert Owner(owner.value).value == owner.value


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            description="Record created in transactions",
        )
        assert event.event_type == AuditEventType.RECORD_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.STORE_ERROR,
            description="Store operation failed: fetch_all",
            details={"operation": "fetch_all"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "store_error"
        assert log_dict["details"]["operation"] == "fetch_all"

    def test_audit_event_builder_record_updated(self):
        """Test AuditEventBuilder.record_updated."""
        record_id = uuid4()
        correlation_id = uuid4()

        event = AuditEventBuilder.record_updated(
            "reserves", record_id, ["current_amount", "name"], correlation_id
        )

        assert event.event_type == AuditEventType.RECORD_UPDATED
        assert event.entity_id == record_id
        assert event.correlation_id == correlation_id
        assert event.details["fields"] == ["current_amount", "name"]
        assert event.is_user_action is True

    def test_audit_event_builder_login_failed(self):
        event = AuditEventBuilder.login_failed()
        assert event.event_type == AuditEventType.LOGIN_FAILED
        assert event.severity == AuditSeverity.WARNING


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            kind=RecordKind.TRANSACTION,
            schema_valid=False,
            semantic_valid=False,
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Field required",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1
        assert len(result.issues_for("amount")) == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            kind=RecordKind.TRANSACTION,
            schema_valid=True,
            semantic_valid=True,
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message="Date in future",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0


class TestCategoryExpense:
    """Tests for the breakdown entry model."""

    def test_budget_used(self):
        entry = CategoryExpense(
            category_id=uuid4(),
            name="Food",
            icon="🍔",
            value=Decimal("150"),
            budget=Decimal("600"),
        )
        assert entry.budget_used == Decimal("25")

    def test_budget_used_without_budget(self):
        entry = CategoryExpense(
            category_id=uuid4(), name="Food", icon="🍔", value=Decimal("150")
        )
        assert entry.budget_used is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
