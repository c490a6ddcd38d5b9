"""POST /v1/accounts/{account_id}/debts/{debt_id}/payments - pay the next installment"""

import time
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from debt_ledger.api.v1.schemas import DebtResponse, PaymentRequest, PaymentResponse
from debt_ledger.api.dependencies import get_request_id, get_store, to_http_exception
from debt_ledger.infrastructure.database.session import get_db
from debt_ledger.domain.store import LedgerStore
from debt_ledger.domain.accounting import compute_balance
from debt_ledger.domain.payments import apply_installment_payment
from debt_ledger.domain.exceptions import (
    InsufficientFunds,
    NotFoundError,
    PartialPaymentFailure,
    StoreWriteFailure,
    ValidationError,
)
from debt_ledger.infrastructure.observability.metrics import record_payment
from debt_ledger.infrastructure.observability.logging import log_payment

router = APIRouter()


@router.post("/accounts/{account_id}/debts/{debt_id}/payments", response_model=PaymentResponse)
def pay_installment(
    account_id: str,
    debt_id: str,
    request: Request,
    request_body: Optional[PaymentRequest] = None,
    db: Session = Depends(get_db),
    store: LedgerStore = Depends(get_store),
):
    """
    Pay the next installment of a debt from the account balance.

    Flow:
    1. Load the debt and compute the balance from all transactions
    2. Write the expense transaction and increment paid_installments atomically
    3. Commit, record metrics and log the outcome

    Sending the same payment_attempt_id again returns the earlier result
    instead of paying twice.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    attempt_id = request_body.payment_attempt_id if request_body else None

    debt = store.get_debt(account_id, debt_id)
    if debt is None:
        raise HTTPException(status_code=404, detail="Debt not found")

    try:
        balance = compute_balance(store.list_transactions(account_id))
        result = apply_installment_payment(store, account_id, debt, balance, attempt_id)
        db.commit()

    except InsufficientFunds as e:
        db.rollback()
        record_payment("insufficient_funds")
        logging.warning(f"Insufficient funds: {e}", extra={"request_id": request_id, "debt_id": debt_id})
        raise to_http_exception(e)

    except ValidationError as e:
        db.rollback()
        record_payment("rejected")
        logging.warning(f"Payment rejected: {e}", extra={"request_id": request_id, "debt_id": debt_id})
        raise to_http_exception(e)

    except PartialPaymentFailure as e:
        db.rollback()
        record_payment("partial_failure")
        logging.error(
            f"Partial payment: {e}",
            extra={
                "request_id": request_id,
                "debt_id": e.debt_id,
                "transaction_id": e.transaction_id,
                "payment_attempt_id": e.payment_attempt_id,
            },
        )
        raise to_http_exception(e)

    except StoreWriteFailure as e:
        db.rollback()
        record_payment("store_failure")
        logging.error(f"Ledger store error: {e}", extra={"request_id": request_id, "debt_id": debt_id})
        raise to_http_exception(e)

    except NotFoundError as e:
        db.rollback()
        raise to_http_exception(e)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    outcome = "replayed" if result.replayed else "succeeded"
    duration_ms = (time.time() - start_time) * 1000
    record_payment(outcome, result.debt.monthly_installment)
    log_payment(
        request_id,
        account_id,
        debt_id,
        outcome,
        result.debt.monthly_installment,
        duration_ms,
        installment_number=result.installment_number,
        transaction_id=result.transaction_id,
    )

    return PaymentResponse(
        debt=DebtResponse.from_domain(result.debt),
        transaction_id=result.transaction_id,
        installment_number=result.installment_number,
        payment_attempt_id=result.payment_attempt_id,
        replayed=result.replayed,
    )
