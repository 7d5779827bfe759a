"""
Two-Stage Write Validation

DESIGN DECISION: Every payload is validated before it reaches the store.

STAGE 1 - SCHEMA VALIDATION:
- Required fields present
- Amounts numeric and non-negative
- Dates well formed, days of month in range

STAGE 2 - SEMANTIC VALIDATION:
- Proportional splits adding up to 100%
- Date ranges running forwards
- Installment counters consistent
- Suspicious amounts and far-future dates (warnings only)

Stage 2 only runs when stage 1 produced a record.

IMPORTANT: Validation NEVER silently fixes a payload.
It reports issues; the caller decides what to do.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional

from pydantic import ValidationError

from couple_finance.config import AppSettings, get_settings
from couple_finance.models.records import (
    DebtSettlement,
    FinancialGoal,
    FixedExpense,
    FixedIncome,
    Owner,
    Record,
    RecordKind,
    Transaction,
    TransactionType,
)
from couple_finance.models.validation import ValidationIssue, ValidationResult


HUNDRED = Decimal("100")

AMOUNT_FIELDS = ("amount", "target_amount", "original_amount")


class RecordValidationError(ValueError):
    """A write payload failed validation. Carries the full result."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            f"{issue.field}: {issue.message}"
            for issue in result.issues
            if issue.severity == "error"
        )
        super().__init__(f"Invalid {result.kind.value} payload: {messages}")


class RecordValidator:
    """
    Validates write payloads through a two-stage pipeline.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _validate_schema(
        self,
        kind: RecordKind,
        payload: dict[str, Any],
    ) -> tuple[Optional[Record], list[ValidationIssue]]:
        """
        Stage 1: build the record, turning every pydantic error into an issue.

        Returns: (record_or_None, list_of_issues)
        """
        try:
            return kind.model.model_validate(payload), []
        except ValidationError as exc:
            issues = []
            for error in exc.errors():
                field = ".".join(str(part) for part in error["loc"]) or "record"
                issue_type = "missing" if error["type"] == "missing" else "invalid_format"
                issues.append(ValidationIssue(
                    field=field,
                    issue_type=issue_type,
                    message=error["msg"],
                    severity="error",
                ))
            return None, issues

    def _check_proportions(self, record: Record) -> list[ValidationIssue]:
        issues = []
        if getattr(record, "owner", None) != Owner.PROPORTIONAL:
            return issues

        proportion_a = record.proportion_a
        proportion_b = record.proportion_b
        if proportion_a is not None and proportion_b is not None:
            if proportion_a + proportion_b != HUNDRED:
                issues.append(ValidationIssue(
                    field="proportion_a",
                    issue_type="inconsistent",
                    message=(
                        f"Proportions must add up to 100% "
                        f"(got {proportion_a} + {proportion_b})"
                    ),
                    severity="error",
                    suggested_fix="Set the second share to 100 minus the first",
                ))
        else:
            issues.append(ValidationIssue(
                field="proportion_a" if proportion_a is None else "proportion_b",
                issue_type="missing",
                message=(
                    f"Proportional split without both shares; "
                    f"{self._settings.default_proportion}% will be assumed"
                ),
                severity="warning",
            ))

        if isinstance(record, Transaction) and record.type == TransactionType.INCOME:
            issues.append(ValidationIssue(
                field="owner",
                issue_type="suspicious_value",
                message="A proportional income is not credited to either person",
                severity="warning",
                suggested_fix="Use 'both' or a single owner for incomes",
            ))
        return issues

    @staticmethod
    def _check_range(
        start: Optional[date],
        end: Optional[date],
        field: str,
        label: str,
    ) -> list[ValidationIssue]:
        if start is not None and end is not None and end < start:
            return [ValidationIssue(
                field=field,
                issue_type="inconsistent",
                message=f"{label} is before the start date",
                severity="error",
                suggested_fix="Please verify both dates",
            )]
        return []

    def _validate_semantic(
        self,
        record: Record,
        today: date,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: business rules.

        Returns: (is_valid, list_of_issues)
        """
        issues = self._check_proportions(record)

        if isinstance(record, (FixedExpense, FixedIncome)):
            issues += self._check_range(record.start_date, record.end_date, "end_date", "End date")

        if isinstance(record, FinancialGoal):
            issues += self._check_range(
                record.start_date, record.target_date, "target_date", "Target date"
            )

        if isinstance(record, FixedExpense) and record.is_installment:
            if record.total_installments is None:
                issues.append(ValidationIssue(
                    field="total_installments",
                    issue_type="missing",
                    message="Installment expense without a number of installments",
                    severity="warning",
                ))
            elif (
                record.installment_number is not None
                and record.installment_number > record.total_installments
            ):
                issues.append(ValidationIssue(
                    field="installment_number",
                    issue_type="inconsistent",
                    message=(
                        f"Installment {record.installment_number} is past the "
                        f"last one ({record.total_installments})"
                    ),
                    severity="error",
                ))

        if isinstance(record, DebtSettlement) and record.settled_amount > record.original_amount:
            issues.append(ValidationIssue(
                field="settled_amount",
                issue_type="suspicious_value",
                message="Settled amount is higher than the original debt",
                severity="warning",
                suggested_fix="Please verify both amounts",
            ))

        if isinstance(record, Transaction):
            max_future = today + timedelta(days=self._settings.future_date_tolerance_days)
            if record.date > max_future:
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message=f"Transaction date ({record.date}) is in the future",
                    severity="warning",
                    suggested_fix="Please verify the date is correct",
                ))

        max_amount = Decimal(str(self._settings.max_amount))
        for field in AMOUNT_FIELDS:
            value = getattr(record, field, None)
            if value is not None and value > max_amount:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="suspicious_value",
                    message=f"Amount ({value:,.2f}) seems unusually high",
                    severity="warning",
                    suggested_fix="Please verify this amount is correct",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(
        self,
        kind: RecordKind,
        payload: dict[str, Any],
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Run the full two-stage validation pipeline.

        Args:
            kind: Which record the payload describes
            payload: Field values as entered
            today: Reference date for future-date checks (defaults to today)
        """
        record, all_issues = self._validate_schema(kind, payload)
        schema_valid = record is not None

        semantic_valid = False
        if record is not None:
            semantic_valid, semantic_issues = self._validate_semantic(
                record, today or date.today()
            )
            all_issues.extend(semantic_issues)

        warnings = [
            issue.message for issue in all_issues if issue.severity == "warning"
        ]

        return ValidationResult(
            kind=kind,
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def build(
        self,
        kind: RecordKind,
        payload: dict[str, Any],
        today: Optional[date] = None,
    ) -> Record:
        """
        Validate and return the record.

        Raises:
            RecordValidationError: If any error-level issue was found
        """
        result = self.validate(kind, payload, today)
        if not result.is_valid:
            raise RecordValidationError(result)
        return kind.model.model_validate(payload)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Summarize a validation result for the person filling in the form.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following before saving:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.field}: {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
