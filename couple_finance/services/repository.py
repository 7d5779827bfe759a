"""
Household Repository

DESIGN DECISION: One injected object owns the household's records instead
of a global mutable store.

- refresh() fetches every table and swaps in a new immutable snapshot.
  The last completed fetch wins; a failed fetch leaves the previous
  snapshot untouched.
- Queries read the snapshot and delegate to the pure aggregation code.
- Writes are validated before the store is touched, then applied to the
  snapshot by replacing it, never by mutating it.

Every operation needs an unlocked session gate.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Optional
from uuid import UUID

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from couple_finance.aggregation import (
    active_fixed_expenses,
    active_fixed_incomes,
    compute_category_breakdown,
    compute_month_summary,
    transactions_in_month,
)
from couple_finance.aggregation.months import date_month_key, month_start
from couple_finance.audit import AuditLogger, create_correlation_id, trace_span
from couple_finance.config import AppSettings, get_settings
from couple_finance.models.records import (
    HOUSEHOLD_KINDS,
    SUB_LEDGER_PARENTS,
    Category,
    DataIntegrityError,
    DebtSettlement,
    FinancialGoal,
    FinancialGoalTransaction,
    FixedExpense,
    FixedExpensePayment,
    FixedIncome,
    FixedIncomeReceipt,
    Record,
    RecordKind,
    Reserve,
    ReserveTransaction,
    Transaction,
    TransactionType,
)
from couple_finance.models.reports import CategoryExpense, MonthSummary
from couple_finance.reports.fixed_items import is_paid_for_month, is_received_for_month
from couple_finance.reports.goals import apply_ledger_entry
from couple_finance.services.storage import NotFoundError, RecordStoreInterface, Row, StorageError
from couple_finance.session import SessionGate
from couple_finance.validation import RecordValidationError, RecordValidator


STORE_MANAGED_COLUMNS = {"id", "created_at", "updated_at"}


class HouseholdSnapshot(BaseModel):
    """Everything fetched for the household at one point in time."""
    model_config = ConfigDict(frozen=True)

    transactions: tuple[Transaction, ...] = ()
    categories: tuple[Category, ...] = ()
    fixed_expenses: tuple[FixedExpense, ...] = ()
    fixed_expense_payments: tuple[FixedExpensePayment, ...] = ()
    fixed_incomes: tuple[FixedIncome, ...] = ()
    fixed_income_receipts: tuple[FixedIncomeReceipt, ...] = ()
    reserves: tuple[Reserve, ...] = ()
    reserve_transactions: tuple[ReserveTransaction, ...] = ()
    financial_goals: tuple[FinancialGoal, ...] = ()
    financial_goal_transactions: tuple[FinancialGoalTransaction, ...] = ()
    debt_settlements: tuple[DebtSettlement, ...] = ()

    fetched_at: Optional[datetime] = Field(
        default=None,
        description="When the fetch completed; None before the first refresh"
    )

    def records(self, kind: RecordKind) -> tuple[Record, ...]:
        return getattr(self, kind.value)


def _row_id(row: Row) -> Optional[UUID]:
    try:
        return UUID(str(row["id"]))
    except (KeyError, ValueError):
        return None


def row_to_record(kind: RecordKind, row: Row) -> Record:
    """
    Build the record for a stored row.

    Raises:
        DataIntegrityError: If the row is missing a required column or
            holds a value the record cannot accept
    """
    try:
        return kind.model.model_validate(row)
    except ValidationError as exc:
        record_id = _row_id(row)
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        raise DataIntegrityError(
            f"Malformed row {record_id or '<no id>'} in {kind.value}: "
            f"invalid or missing {', '.join(fields)}",
            record_id=record_id,
        ) from exc


def record_to_row(record: Record) -> Row:
    """The columns a write sends to the store (store-managed ones left out)."""
    return record.model_dump(mode="json", exclude=STORE_MANAGED_COLUMNS)


class HouseholdRepository:
    """
    Typed access to the household's records.
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        gate: SessionGate,
        validator: Optional[RecordValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._store = store
        self._gate = gate
        self._settings = settings or get_settings().app
        self._validator = validator or RecordValidator(self._settings)
        self._audit_logger = audit_logger or AuditLogger()
        self._snapshot = HouseholdSnapshot()
        self._logger = structlog.get_logger("couple_finance.repository")

    @property
    def snapshot(self) -> HouseholdSnapshot:
        return self._snapshot

    @property
    def default_proportion(self) -> Decimal:
        return Decimal(self._settings.default_proportion)

    # =========================================================================
    # FETCHING
    # =========================================================================

    async def _fetch(self, kind: RecordKind, match: dict[str, Any]) -> list[Record]:
        try:
            rows = await self._store.fetch_all(kind.value, match)
        except StorageError as exc:
            self._logger.error("fetch_failed", table=kind.value, error=str(exc))
            await self._audit_logger.log_store_error("fetch_all", kind.value, str(exc))
            raise

        try:
            return [row_to_record(kind, row) for row in rows]
        except DataIntegrityError as exc:
            self._logger.error(
                "malformed_row",
                table=kind.value,
                record_id=str(exc.record_id) if exc.record_id else None,
                error=str(exc),
            )
            await self._audit_logger.log_data_integrity_error(
                kind.value, exc.record_id, str(exc)
            )
            raise

    async def refresh(self) -> HouseholdSnapshot:
        """
        Fetch every table and replace the snapshot.

        Household tables are matched on the couple; sub-ledgers are
        fetched per parent record.

        Raises:
            NotAuthenticatedError: If the gate is locked
            StorageError: If any fetch fails (previous snapshot is kept)
            DataIntegrityError: If a fetched row is malformed
        """
        identity = self._gate.require_identity()
        couple_id = identity.couple.id

        with trace_span("snapshot_refresh", couple_id=str(couple_id)):
            collected: dict[str, tuple[Record, ...]] = {}
            for kind in HOUSEHOLD_KINDS:
                collected[kind.value] = tuple(
                    await self._fetch(kind, {"couple_id": couple_id})
                )

            for kind, (column, parent_kind) in SUB_LEDGER_PARENTS.items():
                entries: list[Record] = []
                for parent in collected[parent_kind.value]:
                    entries.extend(await self._fetch(kind, {column: parent.id}))
                collected[kind.value] = tuple(entries)

        self._snapshot = HouseholdSnapshot(fetched_at=datetime.utcnow(), **collected)

        counts = {table: len(records) for table, records in collected.items()}
        self._logger.info("snapshot_refreshed", **counts)
        await self._audit_logger.log_snapshot_refreshed(counts)
        return self._snapshot

    # =========================================================================
    # QUERIES
    # =========================================================================

    def transactions_in_month(self, year: int, month: int) -> list[Transaction]:
        self._gate.require_identity()
        return transactions_in_month(self._snapshot.transactions, year, month)

    def active_fixed_expenses(self, year: int, month: int) -> list[FixedExpense]:
        self._gate.require_identity()
        return active_fixed_expenses(self._snapshot.fixed_expenses, year, month)

    def active_fixed_incomes(self, year: int, month: int) -> list[FixedIncome]:
        self._gate.require_identity()
        return active_fixed_incomes(self._snapshot.fixed_incomes, year, month)

    def categories_of_type(self, type: TransactionType) -> list[Category]:
        self._gate.require_identity()
        return [c for c in self._snapshot.categories if c.type == type]

    def month_summary(self, year: int, month: int) -> MonthSummary:
        self._gate.require_identity()
        return compute_month_summary(
            year,
            month,
            self._snapshot.transactions,
            self._snapshot.fixed_expenses,
            self._snapshot.fixed_incomes,
            self.default_proportion,
        )

    def category_breakdown(
        self,
        year: int,
        month: int,
        limit: Optional[int] = None,
    ) -> list[CategoryExpense]:
        self._gate.require_identity()
        return compute_category_breakdown(
            year,
            month,
            self._snapshot.transactions,
            self._snapshot.categories,
            self._settings.category_breakdown_limit if limit is None else limit,
        )

    def get(self, kind: RecordKind, record_id: UUID) -> Record:
        """
        A record from the current snapshot.

        Raises:
            NotFoundError: If the snapshot holds no such record
        """
        self._gate.require_identity()
        for record in self._snapshot.records(kind):
            if record.id == record_id:
                return record
        raise NotFoundError(f"No {kind.value} record {record_id} in the snapshot")

    # =========================================================================
    # WRITES
    # =========================================================================

    def _apply(
        self,
        kind: RecordKind,
        change: Callable[[tuple[Record, ...]], tuple[Record, ...]],
    ) -> None:
        records = change(self._snapshot.records(kind))
        self._snapshot = self._snapshot.model_copy(update={kind.value: records})

    async def _validated(
        self,
        kind: RecordKind,
        payload: dict[str, Any],
        record_id: Optional[UUID] = None,
    ) -> Record:
        result = self._validator.validate(kind, payload)
        if not result.is_valid:
            self._logger.warning(
                "write_rejected",
                table=kind.value,
                errors=result.error_count,
            )
            await self._audit_logger.log_write_rejected(
                kind.value,
                [
                    {"field": i.field, "type": i.issue_type, "message": i.message}
                    for i in result.issues
                    if i.severity == "error"
                ],
                record_id,
            )
            raise RecordValidationError(result)

        for warning in result.warnings:
            self._logger.warning("write_warning", table=kind.value, warning=warning)
        return kind.model.model_validate(payload)

    async def _store_call(self, operation: str, kind: RecordKind, call):
        try:
            return await call
        except StorageError as exc:
            self._logger.error(
                "store_write_failed",
                operation=operation,
                table=kind.value,
                error=str(exc),
            )
            await self._audit_logger.log_store_error(operation, kind.value, str(exc))
            raise

    async def create(
        self,
        kind: RecordKind,
        payload: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> Record:
        """
        Validate, store and return a new record.

        couple_id and created_by are filled in from the session identity
        when the record has them and the payload does not.

        Raises:
            RecordValidationError: Before the store is touched
            StorageError: If the store rejects the write
        """
        identity = self._gate.require_identity()
        payload = dict(payload)
        fields = kind.model.model_fields
        if "couple_id" in fields:
            payload.setdefault("couple_id", identity.couple.id)
        if "created_by" in fields:
            payload.setdefault("created_by", identity.user.id)

        record = await self._validated(kind, payload)
        stored = await self._store_call(
            "create", kind, self._store.create(kind.value, record_to_row(record))
        )
        created = row_to_record(kind, stored)

        self._apply(kind, lambda records: records + (created,))
        await self._audit_logger.log_record_created(kind.value, created.id, correlation_id)
        return created

    async def update(
        self,
        kind: RecordKind,
        record_id: UUID,
        fields: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> Record:
        """
        Change some fields of a record in the snapshot.

        The merged record is validated as a whole.

        Raises:
            NotFoundError: If the snapshot holds no such record
            RecordValidationError: Before the store is touched
            StorageError: If the store rejects the write
        """
        existing = self.get(kind, record_id)
        merged = {**existing.model_dump(), **fields, "id": record_id}

        record = await self._validated(kind, merged, record_id)
        changed = {
            column: value
            for column, value in record_to_row(record).items()
            if column in fields
        }
        await self._store_call(
            "update", kind, self._store.update(kind.value, record_id, changed)
        )

        self._apply(
            kind,
            lambda records: tuple(record if r.id == record_id else r for r in records),
        )
        await self._audit_logger.log_record_updated(
            kind.value, record_id, sorted(changed), correlation_id
        )
        return record

    async def delete(self, kind: RecordKind, record_id: UUID) -> None:
        """
        Remove a record from the store and the snapshot.

        Raises:
            StorageError: NotFoundError if the store holds no such row
        """
        self._gate.require_identity()
        await self._store_call(
            "delete", kind, self._store.delete(kind.value, record_id)
        )
        self._apply(kind, lambda records: tuple(r for r in records if r.id != record_id))
        await self._audit_logger.log_record_deleted(kind.value, record_id)

    # =========================================================================
    # LEDGERS
    # =========================================================================

    async def _add_ledger_entry(
        self,
        kind: RecordKind,
        parent_id: UUID,
        payload: dict[str, Any],
    ) -> tuple[Record, Record]:
        column, parent_kind = kind.parent
        parent = self.get(parent_kind, parent_id)
        correlation_id = create_correlation_id()

        entry = await self.create(
            kind, {**payload, column: parent_id}, correlation_id=correlation_id
        )
        balance = apply_ledger_entry(parent.current_amount, entry)
        try:
            updated = await self.update(
                parent_kind,
                parent_id,
                {"current_amount": balance},
                correlation_id=correlation_id,
            )
        except (StorageError, RecordValidationError) as exc:
            await self._undo_ledger_entry(kind, entry, exc)
            raise
        return entry, updated

    async def _undo_ledger_entry(
        self,
        kind: RecordKind,
        entry: Record,
        cause: Exception,
    ) -> None:
        """Delete an entry whose parent balance could not be moved."""
        try:
            await self.delete(kind, entry.id)
        except StorageError as exc:
            self._logger.error(
                "ledger_rollback_failed",
                table=kind.value,
                record_id=str(entry.id),
                error=str(exc),
            )
            await self._audit_logger.log_error(
                "ledger_rollback_failed",
                str(exc),
                {"table": kind.value, "record_id": str(entry.id), "cause": str(cause)},
            )
        else:
            self._logger.warning(
                "ledger_entry_rolled_back",
                table=kind.value,
                record_id=str(entry.id),
                error=str(cause),
            )

    async def add_reserve_entry(
        self,
        reserve_id: UUID,
        payload: dict[str, Any],
    ) -> tuple[ReserveTransaction, Reserve]:
        """Record a deposit or withdrawal and move the reserve's balance."""
        return await self._add_ledger_entry(
            RecordKind.RESERVE_TRANSACTION, reserve_id, payload
        )

    async def add_goal_entry(
        self,
        goal_id: UUID,
        payload: dict[str, Any],
    ) -> tuple[FinancialGoalTransaction, FinancialGoal]:
        """Record a deposit or withdrawal and move the goal's balance."""
        return await self._add_ledger_entry(
            RecordKind.FINANCIAL_GOAL_TRANSACTION, goal_id, payload
        )

    async def mark_expense_paid(
        self,
        expense_id: UUID,
        year: int,
        month: int,
        paid_amount: Optional[Decimal] = None,
        paid_date: Optional[date] = None,
    ) -> FixedExpensePayment:
        """
        Record the payment of a fixed expense for one month.

        Marking an already paid month returns the existing payment.
        """
        identity = self._gate.require_identity()
        expense = self.get(RecordKind.FIXED_EXPENSE, expense_id)
        payments = self._snapshot.fixed_expense_payments
        if is_paid_for_month(expense, payments, year, month):
            self._logger.info(
                "already_marked", table=RecordKind.FIXED_EXPENSE_PAYMENT.value,
                parent_id=str(expense_id), year=year, month=month,
            )
            return next(
                p for p in payments
                if p.fixed_expense_id == expense_id
                and date_month_key(p.reference_month) == (year, month)
            )

        return await self.create(
            RecordKind.FIXED_EXPENSE_PAYMENT,
            {
                "fixed_expense_id": expense_id,
                "reference_month": month_start(year, month),
                "paid_date": paid_date or date.today(),
                "paid_amount": expense.amount if paid_amount is None else paid_amount,
                "payment_method": expense.payment_method,
                "paid_by": identity.user.id,
            },
        )

    async def mark_income_received(
        self,
        income_id: UUID,
        year: int,
        month: int,
        received_amount: Optional[Decimal] = None,
        received_date: Optional[date] = None,
    ) -> FixedIncomeReceipt:
        """Record the receipt of a fixed income for one month (idempotent)."""
        identity = self._gate.require_identity()
        income = self.get(RecordKind.FIXED_INCOME, income_id)
        receipts = self._snapshot.fixed_income_receipts
        if is_received_for_month(income, receipts, year, month):
            self._logger.info(
                "already_marked", table=RecordKind.FIXED_INCOME_RECEIPT.value,
                parent_id=str(income_id), year=year, month=month,
            )
            return next(
                r for r in receipts
                if r.fixed_income_id == income_id
                and date_month_key(r.reference_month) == (year, month)
            )

        return await self.create(
            RecordKind.FIXED_INCOME_RECEIPT,
            {
                "fixed_income_id": income_id,
                "reference_month": month_start(year, month),
                "received_date": received_date or date.today(),
                "received_amount": income.amount if received_amount is None else received_amount,
                "received_by": identity.user.id,
            },
        )
