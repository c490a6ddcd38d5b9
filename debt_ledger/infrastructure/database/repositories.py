"""Data access layer - SQL implementation of the ledger store"""

from contextlib import contextmanager
from datetime import datetime, time
from typing import Any, Dict, Iterator, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from debt_ledger.infrastructure.database.models import DebtRecord, TransactionRecord
from debt_ledger.domain.models import Debt, Transaction, TransactionFilter
from debt_ledger.domain.store import LedgerStore
from debt_ledger.domain.validation import merge_patch, validate_debt, validate_transaction
from debt_ledger.domain.exceptions import NotFoundError, StoreWriteFailure

DEBT_FIELDS = (
    "name",
    "total_amount",
    "monthly_installment",
    "tenor",
    "start_date",
    "due_day",
    "paid_installments",
)
TRANSACTION_FIELDS = (
    "type",
    "name",
    "category",
    "amount",
    "date",
    "notes",
    "debt_id",
    "installment_number",
    "payment_attempt_id",
)


def to_debt(record: DebtRecord) -> Debt:
    return Debt(id=record.id, **{f: getattr(record, f) for f in DEBT_FIELDS})


def to_transaction(record: TransactionRecord) -> Transaction:
    return Transaction(id=record.id, **{f: getattr(record, f) for f in TRANSACTION_FIELDS})


class SqlLedgerStore(LedgerStore):
    """
    Ledger store backed by a SQLAlchemy session.

    Writes are flushed, not committed: the caller owns the unit of work and
    commits or rolls back the session. atomic() wraps a savepoint so a
    failed group of writes leaves no trace.
    """

    transactional = True

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self.db.begin_nested():
            yield

    # Debts

    def list_debts(self, account_id: str) -> List[Debt]:
        records = (
            self.db.query(DebtRecord)
            .filter(DebtRecord.account_id == account_id)
            .order_by(DebtRecord.name, DebtRecord.id)
            .all()
        )
        return [to_debt(r) for r in records]

    def get_debt(self, account_id: str, debt_id: str) -> Optional[Debt]:
        record = self._debt_record(account_id, debt_id)
        return to_debt(record) if record else None

    def get_debt_for_update(self, account_id: str, debt_id: str) -> Optional[Debt]:
        record = self._debt_record(account_id, debt_id, lock=True)
        return to_debt(record) if record else None

    def create_debt(self, account_id: str, debt: Debt) -> str:
        validate_debt(debt)
        record = DebtRecord(account_id=account_id, **{f: getattr(debt, f) for f in DEBT_FIELDS})
        self._write(lambda: self.db.add(record))
        return record.id

    def update_debt(self, account_id: str, debt_id: str, patch: Dict[str, Any]) -> Debt:
        record = self._debt_record(account_id, debt_id)
        if record is None:
            raise NotFoundError(f"Debt {debt_id} not found")

        updated = merge_patch(to_debt(record), patch)
        validate_debt(updated)

        def apply() -> None:
            for f in DEBT_FIELDS:
                setattr(record, f, getattr(updated, f))

        self._write(apply)
        return to_debt(record)

    def delete_debt(self, account_id: str, debt_id: str) -> None:
        record = self._debt_record(account_id, debt_id)
        if record is None:
            raise NotFoundError(f"Debt {debt_id} not found")
        self._write(lambda: self.db.delete(record))

    # Transactions

    def list_transactions(
        self,
        account_id: str,
        transaction_filter: Optional[TransactionFilter] = None,
    ) -> List[Transaction]:
        query = self.db.query(TransactionRecord).filter(TransactionRecord.account_id == account_id)

        f = transaction_filter
        if f is not None:
            if f.type is not None:
                query = query.filter(TransactionRecord.type == f.type)
            if f.on_date is not None:
                query = query.filter(
                    TransactionRecord.date >= datetime.combine(f.on_date, time.min),
                    TransactionRecord.date <= datetime.combine(f.on_date, time.max),
                )
            if f.start is not None:
                query = query.filter(TransactionRecord.date >= f.start)
            if f.end is not None:
                query = query.filter(TransactionRecord.date <= f.end)

        query = query.order_by(TransactionRecord.date.desc(), TransactionRecord.id)
        if f is not None and f.limit is not None:
            query = query.limit(f.limit)

        return [to_transaction(r) for r in query.all()]

    def get_transaction(self, account_id: str, transaction_id: str) -> Optional[Transaction]:
        record = self._transaction_record(account_id, transaction_id)
        return to_transaction(record) if record else None

    def create_transaction(self, account_id: str, transaction: Transaction) -> str:
        validate_transaction(transaction)
        record = TransactionRecord(
            account_id=account_id,
            **{f: getattr(transaction, f) for f in TRANSACTION_FIELDS},
        )
        self._write(lambda: self.db.add(record))
        return record.id

    def update_transaction(self, account_id: str, transaction_id: str, patch: Dict[str, Any]) -> Transaction:
        record = self._transaction_record(account_id, transaction_id)
        if record is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")

        updated = merge_patch(to_transaction(record), patch)
        validate_transaction(updated)

        def apply() -> None:
            for f in TRANSACTION_FIELDS:
                setattr(record, f, getattr(updated, f))

        self._write(apply)
        return to_transaction(record)

    def delete_transaction(self, account_id: str, transaction_id: str) -> None:
        record = self._transaction_record(account_id, transaction_id)
        if record is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        self._write(lambda: self.db.delete(record))

    def find_transaction_by_attempt(self, account_id: str, payment_attempt_id: str) -> Optional[Transaction]:
        record = (
            self.db.query(TransactionRecord)
            .filter(
                TransactionRecord.account_id == account_id,
                TransactionRecord.payment_attempt_id == payment_attempt_id,
            )
            .first()
        )
        return to_transaction(record) if record else None

    # Helpers

    def _debt_record(self, account_id: str, debt_id: str, lock: bool = False) -> Optional[DebtRecord]:
        query = self.db.query(DebtRecord).filter(DebtRecord.account_id == account_id, DebtRecord.id == debt_id)
        if lock:
            # Row may already sit in the identity map with stale values
            query = query.with_for_update().populate_existing()
        return query.first()

    def _transaction_record(self, account_id: str, transaction_id: str) -> Optional[TransactionRecord]:
        return (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.account_id == account_id, TransactionRecord.id == transaction_id)
            .first()
        )

    def _write(self, change) -> None:
        """Apply a change and flush so ids are assigned and errors surface now"""
        try:
            change()
            self.db.flush()
        except SQLAlchemyError as e:
            raise StoreWriteFailure(f"Database write failed: {e}") from e
