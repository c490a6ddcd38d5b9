"""Installment payment - ledger entry plus debt counter increment"""

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Optional
from debt_ledger.config import settings
from debt_ledger.domain.models import Debt, Transaction, PaymentResult, EXPENSE
from debt_ledger.domain.store import LedgerStore
from debt_ledger.domain.validation import validate_debt
from debt_ledger.utils.date_utils import utc_now
from debt_ledger.domain.exceptions import (
    DomainException,
    InsufficientFunds,
    NotFoundError,
    PartialPaymentFailure,
    ValidationError,
)


def build_payment_transaction(
    debt: Debt,
    installment_number: int,
    payment_attempt_id: str,
    now: Optional[datetime] = None,
) -> Transaction:
    """Expense transaction recorded for one installment of a debt"""
    return Transaction(
        type=EXPENSE,
        name=f"{settings.debt_payment_category}: {debt.name}",
        category=settings.debt_payment_category,
        amount=debt.monthly_installment,
        date=now or utc_now(),
        notes=f"Installment #{installment_number}",
        debt_id=debt.id,
        installment_number=installment_number,
        payment_attempt_id=payment_attempt_id,
    )


def apply_installment_payment(
    store: LedgerStore,
    account_id: str,
    debt: Debt,
    balance: int,
    payment_attempt_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> PaymentResult:
    """
    Pay the next installment of a debt.

    Flow:
    1. Replay: an existing transaction for payment_attempt_id is never
       written twice; only a missing counter increment is completed
    2. Re-read the stored debt (row-locked on SQL) so the installment
       number never comes from a stale snapshot
    3. Reject paid-off debts, insufficient balance and an invalid bumped
       counter before any write
    4. Write the expense transaction, then increment paid_installments

    The transaction goes first so an interruption leaves a ledger entry
    without a counter bump, which reconciliation can detect and repair.

    Raises:
        ValidationError: Debt is paid off, has no id, or the attempt id
            belongs to another debt
        NotFoundError: Debt no longer exists
        InsufficientFunds: balance < monthly_installment (no writes)
        StoreWriteFailure: Nothing was applied
        PartialPaymentFailure: Transaction written, counter not updated
    """
    if debt.id is None:
        raise ValidationError("Debt must be persisted before it can be paid")

    if payment_attempt_id:
        existing = store.find_transaction_by_attempt(account_id, payment_attempt_id)
        if existing is not None:
            if existing.debt_id != debt.id:
                raise ValidationError(
                    f"Payment attempt {payment_attempt_id} was already used for another debt"
                )
            return _resume_payment(store, account_id, existing)

    attempt_id = payment_attempt_id or uuid.uuid4().hex

    with store.atomic():
        current = store.get_debt_for_update(account_id, debt.id)
        if current is None:
            raise NotFoundError(f"Debt {debt.id} not found")

        if current.is_paid_off:
            raise ValidationError(f"Debt {debt.id} is already paid off")

        if balance < current.monthly_installment:
            raise InsufficientFunds(balance=balance, required=current.monthly_installment)

        installment_number = current.paid_installments + 1
        validate_debt(replace(current, paid_installments=installment_number))
        payment = build_payment_transaction(current, installment_number, attempt_id, now)

        transaction_id = store.create_transaction(account_id, payment)
        try:
            updated = store.update_debt(account_id, debt.id, {"paid_installments": installment_number})
        except DomainException as e:
            if store.transactional:
                raise  # atomic() rolls back the transaction write
            raise PartialPaymentFailure(
                debt_id=debt.id,
                transaction_id=transaction_id,
                installment_number=installment_number,
                payment_attempt_id=attempt_id,
            ) from e

    return PaymentResult(
        debt=updated,
        transaction_id=transaction_id,
        installment_number=installment_number,
        payment_attempt_id=attempt_id,
    )


def _resume_payment(store: LedgerStore, account_id: str, payment: Transaction) -> PaymentResult:
    """Return the earlier outcome of an attempt, completing the counter if it lags"""
    debt = store.get_debt(account_id, payment.debt_id)
    if debt is None:
        raise NotFoundError(f"Debt {payment.debt_id} not found")

    if debt.paid_installments < payment.installment_number:
        try:
            debt = store.update_debt(
                account_id, debt.id, {"paid_installments": payment.installment_number}
            )
        except DomainException as e:
            raise PartialPaymentFailure(
                debt_id=debt.id,
                transaction_id=payment.id,
                installment_number=payment.installment_number,
                payment_attempt_id=payment.payment_attempt_id,
            ) from e

    return PaymentResult(
        debt=debt,
        transaction_id=payment.id,
        installment_number=payment.installment_number,
        payment_attempt_id=payment.payment_attempt_id,
        replayed=True,
    )
