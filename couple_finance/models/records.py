"""
Household Records

These models describe every entity the household keeps in the backend.
Field names follow the persisted column names, so a fetched row can be
validated straight into its model.

DESIGN DECISION: Records are frozen. A fetched snapshot is read by the
aggregation code many times and must never change underneath it; edits
produce new record instances.

Money is always Decimal. Identifiers are UUIDs assigned by the store.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money."""
    INCOME = "income"
    EXPENSE = "expense"


class Owner(str, Enum):
    """
    Who a transaction or fixed expense belongs to.

    BOTH means a 50/50 split; PROPORTIONAL uses the record's own
    proportion_a / proportion_b percentages.
    """
    PERSON_A = "person_a"
    PERSON_B = "person_b"
    BOTH = "both"
    PROPORTIONAL = "proportional"


class IncomeOwner(str, Enum):
    """Owners allowed on fixed incomes and settlements (no proportional split)."""
    PERSON_A = "person_a"
    PERSON_B = "person_b"
    BOTH = "both"


class PaymentMethod(str, Enum):
    CASH = "cash"
    DEBIT = "debit"
    CREDIT = "credit"
    PIX = "pix"
    BANK_SLIP = "bank_slip"


class RecurrenceType(str, Enum):
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class LedgerEntryType(str, Enum):
    """Movement on a reserve or goal balance."""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class GoalTimeFrame(str, Enum):
    SHORT = "short"    # up to 6 months
    MEDIUM = "medium"  # 6-24 months
    LONG = "long"      # more than 24 months


class GoalPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SettlementReferenceType(str, Enum):
    FIXED_EXPENSE = "fixed_expense"
    INSTALLMENT = "installment"
    TRANSACTION = "transaction"
    OTHER = "other"


# =============================================================================
# ERRORS
# =============================================================================

class DataIntegrityError(ValueError):
    """
    A record is missing a field the computation cannot do without.

    This signals a broken row upstream. It is reported, never recovered.
    """

    def __init__(self, message: str, record_id: Optional[UUID] = None):
        super().__init__(message)
        self.record_id = record_id


def require_fields(record: BaseModel, *names: str) -> None:
    """Raise DataIntegrityError if any of the named fields is absent."""
    missing = [name for name in names if getattr(record, name, None) is None]
    if missing:
        record_id = getattr(record, "id", None)
        raise DataIntegrityError(
            f"{type(record).__name__} {record_id or '<unsaved>'} "
            f"is missing required field(s): {', '.join(missing)}",
            record_id=record_id,
        )


# =============================================================================
# BASE
# =============================================================================

class Record(BaseModel):
    """Common shape of every stored record."""
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    id: Optional[UUID] = Field(
        default=None,
        description="Assigned by the store on create"
    )
    created_at: Optional[dt.datetime] = Field(
        default=None,
        description="Assigned by the store on create"
    )


class HouseholdRecord(Record):
    """A record that belongs directly to the couple."""

    couple_id: Optional[UUID] = Field(
        default=None,
        description="Household the record belongs to"
    )
    updated_at: Optional[dt.datetime] = None
    created_by: Optional[UUID] = None


# =============================================================================
# CORE RECORDS
# =============================================================================

class Category(HouseholdRecord):
    """Grouping label for transactions. Never used for arithmetic."""

    name: str = Field(..., min_length=1, max_length=100)
    icon: str = Field(default="💰", max_length=16)
    type: TransactionType
    is_default: bool = False
    monthly_budget: Optional[Decimal] = Field(default=None, ge=0)
    color: Optional[str] = Field(default=None, max_length=20)


class Transaction(HouseholdRecord):
    """
    A one-off income or expense.

    proportion_a / proportion_b only matter when owner is PROPORTIONAL.
    Absent proportions are filled in by whoever consumes them.
    """

    type: TransactionType
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    description: str = Field(default="", max_length=500)
    date: dt.date
    category_id: Optional[UUID] = None
    owner: Owner = Owner.BOTH
    proportion_a: Optional[Decimal] = Field(default=None, ge=0, le=100)
    proportion_b: Optional[Decimal] = Field(default=None, ge=0, le=100)
    payment_method: Optional[PaymentMethod] = None
    recurrence: RecurrenceType = RecurrenceType.ONCE
    notes: Optional[str] = Field(default=None, max_length=1000)
    attachment_url: Optional[str] = None


class FixedExpense(HouseholdRecord):
    """A recurring monthly expense, optionally a finite run of installments."""

    name: str = Field(default="", max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    category_id: Optional[UUID] = None
    owner: Owner = Owner.BOTH
    proportion_a: Optional[Decimal] = Field(default=None, ge=0, le=100)
    proportion_b: Optional[Decimal] = Field(default=None, ge=0, le=100)
    due_day: int = Field(..., ge=1, le=31)
    payment_method: Optional[PaymentMethod] = None
    is_installment: bool = False
    installment_number: Optional[int] = Field(default=None, ge=1)
    total_installments: Optional[int] = Field(default=None, ge=1)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    is_active: bool = True
    notes: Optional[str] = Field(default=None, max_length=1000)


class FixedExpensePayment(Record):
    """Marks a fixed expense as paid for one reference month."""

    fixed_expense_id: UUID
    reference_month: dt.date
    paid_date: Optional[dt.date] = None
    paid_amount: Optional[Decimal] = Field(default=None, ge=0)
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None
    paid_by: Optional[UUID] = None


class FixedIncome(HouseholdRecord):
    """A recurring monthly income such as a salary."""

    name: str = Field(default="", max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    category_id: Optional[UUID] = None
    owner: IncomeOwner = IncomeOwner.BOTH
    receipt_day: int = Field(..., ge=1, le=31)
    is_indefinite: bool = True
    start_date: dt.date
    end_date: Optional[dt.date] = None
    is_active: bool = True
    notes: Optional[str] = Field(default=None, max_length=1000)


class FixedIncomeReceipt(Record):
    """Marks a fixed income as received for one reference month."""

    fixed_income_id: UUID
    reference_month: dt.date
    received_date: Optional[dt.date] = None
    received_amount: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None
    received_by: Optional[UUID] = None


# =============================================================================
# SAVINGS AND SETTLEMENTS
# =============================================================================

class Reserve(HouseholdRecord):
    """A savings pot, e.g. the emergency fund."""

    name: str = Field(..., min_length=1, max_length=200)
    target_amount: Decimal = Field(default=Decimal("0"), ge=0)
    current_amount: Decimal = Decimal("0")
    target_date: Optional[dt.date] = None
    image_url: Optional[str] = None
    is_emergency: bool = False


class ReserveTransaction(Record):
    """Deposit into or withdrawal from a reserve."""

    reserve_id: UUID
    amount: Decimal = Field(..., ge=0)
    type: LedgerEntryType
    description: str = ""
    date: dt.date
    created_by: Optional[UUID] = None


class FinancialGoal(HouseholdRecord):
    """Something the couple is saving towards."""

    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    target_amount: Decimal = Field(..., ge=0)
    current_amount: Decimal = Decimal("0")
    time_frame: GoalTimeFrame = GoalTimeFrame.MEDIUM
    start_date: dt.date
    target_date: Optional[dt.date] = None
    priority: GoalPriority = GoalPriority.MEDIUM
    category: Optional[str] = None
    icon: str = "🎯"
    image_url: Optional[str] = None
    is_completed: bool = False
    completed_date: Optional[dt.date] = None
    is_active: bool = True


class FinancialGoalTransaction(Record):
    """Deposit into or withdrawal from a goal."""

    goal_id: UUID
    amount: Decimal = Field(..., ge=0)
    type: LedgerEntryType
    description: str = ""
    date: dt.date
    created_by: Optional[UUID] = None


class DebtSettlement(HouseholdRecord):
    """A debt paid off early, usually for less than the original amount."""

    reference_type: SettlementReferenceType = SettlementReferenceType.OTHER
    reference_id: Optional[UUID] = None
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    original_amount: Decimal = Field(..., ge=0)
    settled_amount: Decimal = Field(..., ge=0)
    owner: IncomeOwner = IncomeOwner.BOTH
    settlement_date: dt.date
    original_due_date: Optional[dt.date] = None
    notes: Optional[str] = None


# =============================================================================
# HOUSEHOLD IDENTITY
# =============================================================================

class User(BaseModel):
    """The shared login."""
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: str
    name: str


class Couple(BaseModel):
    """The two people sharing every record."""
    model_config = ConfigDict(frozen=True)

    id: UUID
    person_a_id: UUID
    person_b_id: UUID
    person_a_name: str
    person_b_name: str
    currency: str = "BRL"
    closing_day: int = Field(default=1, ge=1, le=31)


class HouseholdIdentity(BaseModel):
    """What a successful login unlocks."""
    model_config = ConfigDict(frozen=True)

    user: User
    couple: Couple


# =============================================================================
# RECORD KINDS - table names and where each kind hangs
# =============================================================================

class RecordKind(str, Enum):
    """Every stored entity, valued by its table name."""
    TRANSACTION = "transactions"
    CATEGORY = "categories"
    FIXED_EXPENSE = "fixed_expenses"
    FIXED_EXPENSE_PAYMENT = "fixed_expense_payments"
    FIXED_INCOME = "fixed_incomes"
    FIXED_INCOME_RECEIPT = "fixed_income_receipts"
    RESERVE = "reserves"
    RESERVE_TRANSACTION = "reserve_transactions"
    FINANCIAL_GOAL = "financial_goals"
    FINANCIAL_GOAL_TRANSACTION = "financial_goal_transactions"
    DEBT_SETTLEMENT = "debt_settlements"

    @property
    def model(self) -> type[Record]:
        return RECORD_MODELS[self]

    @property
    def parent(self) -> Optional[tuple[str, "RecordKind"]]:
        """(foreign key column, parent kind) for sub-ledgers, None otherwise."""
        return SUB_LEDGER_PARENTS.get(self)


RECORD_MODELS: dict[RecordKind, type[Record]] = {
    RecordKind.TRANSACTION: Transaction,
    RecordKind.CATEGORY: Category,
    RecordKind.FIXED_EXPENSE: FixedExpense,
    RecordKind.FIXED_EXPENSE_PAYMENT: FixedExpensePayment,
    RecordKind.FIXED_INCOME: FixedIncome,
    RecordKind.FIXED_INCOME_RECEIPT: FixedIncomeReceipt,
    RecordKind.RESERVE: Reserve,
    RecordKind.RESERVE_TRANSACTION: ReserveTransaction,
    RecordKind.FINANCIAL_GOAL: FinancialGoal,
    RecordKind.FINANCIAL_GOAL_TRANSACTION: FinancialGoalTransaction,
    RecordKind.DEBT_SETTLEMENT: DebtSettlement,
}

SUB_LEDGER_PARENTS: dict[RecordKind, tuple[str, RecordKind]] = {
    RecordKind.FIXED_EXPENSE_PAYMENT: ("fixed_expense_id", RecordKind.FIXED_EXPENSE),
    RecordKind.FIXED_INCOME_RECEIPT: ("fixed_income_id", RecordKind.FIXED_INCOME),
    RecordKind.RESERVE_TRANSACTION: ("reserve_id", RecordKind.RESERVE),
    RecordKind.FINANCIAL_GOAL_TRANSACTION: ("goal_id", RecordKind.FINANCIAL_GOAL),
}

HOUSEHOLD_KINDS: tuple[RecordKind, ...] = tuple(
    kind for kind in RecordKind if kind not in SUB_LEDGER_PARENTS
)


def index_by_id(records: Iterable[Record]) -> dict[UUID, Record]:
    """Map id -> record, first occurrence wins."""
    index: dict[UUID, Record] = {}
    for record in records:
        if record.id is not None and record.id not in index:
            index[record.id] = record
    return index
