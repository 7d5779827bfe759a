"""
Data Models Package

This package contains all Pydantic models used in Couple Finance.
All data flowing through the system must conform to these schemas.
"""

from couple_finance.models.records import (
    Category,
    Couple,
    DataIntegrityError,
    DebtSettlement,
    FinancialGoal,
    FinancialGoalTransaction,
    FixedExpense,
    FixedExpensePayment,
    FixedIncome,
    FixedIncomeReceipt,
    GoalPriority,
    GoalTimeFrame,
    HouseholdIdentity,
    IncomeOwner,
    LedgerEntryType,
    Owner,
    PaymentMethod,
    RecordKind,
    RecurrenceType,
    Reserve,
    ReserveTransaction,
    SettlementReferenceType,
    Transaction,
    TransactionType,
    User,
)
from couple_finance.models.reports import (
    CategoryExpense,
    DashboardView,
    MonthComparison,
    MonthSummary,
    ReportItem,
    ReportOrigin,
    SettlementTotals,
)
from couple_finance.models.validation import (
    ValidationIssue,
    ValidationResult,
)
from couple_finance.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Records
    "Category",
    "Couple",
    "DataIntegrityError",
    "DebtSettlement",
    "FinancialGoal",
    "FinancialGoalTransaction",
    "FixedExpense",
    "FixedExpensePayment",
    "FixedIncome",
    "FixedIncomeReceipt",
    "GoalPriority",
    "GoalTimeFrame",
    "HouseholdIdentity",
    "IncomeOwner",
    "LedgerEntryType",
    "Owner",
    "PaymentMethod",
    "RecordKind",
    "RecurrenceType",
    "Reserve",
    "ReserveTransaction",
    "SettlementReferenceType",
    "Transaction",
    "TransactionType",
    "User",
    # Reports
    "CategoryExpense",
    "DashboardView",
    "MonthComparison",
    "MonthSummary",
    "ReportItem",
    "ReportOrigin",
    "SettlementTotals",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Audit
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
