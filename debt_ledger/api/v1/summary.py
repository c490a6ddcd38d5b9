"""Account-level endpoints - cashflow summary and ledger reconciliation"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from debt_ledger.api.v1.schemas import (
    AccountSummaryResponse,
    AggregateTotalsSchema,
    ReconciliationIssueSchema,
    ReconciliationResponse,
    TransactionResponse,
)
from debt_ledger.api.dependencies import get_request_id, get_store, to_http_exception
from debt_ledger.config import settings
from debt_ledger.infrastructure.database.session import get_db
from debt_ledger.domain.store import LedgerStore
from debt_ledger.domain.accounting import compute_cashflow, filter_transactions
from debt_ledger.domain.models import TransactionFilter
from debt_ledger.domain.reconciliation import reconcile
from debt_ledger.domain.exceptions import DomainException
from debt_ledger.infrastructure.observability.metrics import record_reconciliation
from debt_ledger.infrastructure.observability.logging import log_reconciliation

router = APIRouter()


@router.get("/accounts/{account_id}/summary", response_model=AccountSummaryResponse)
def get_account_summary(
    account_id: str,
    reference_date: Optional[date] = Query(None, description="Defaults to today"),
    store: LedgerStore = Depends(get_store),
):
    """
    Balance, income and expense for the month, and the latest transactions.

    Balance covers the whole history; income/expense only the reference month.
    """
    transactions = store.list_transactions(account_id)
    cashflow = compute_cashflow(transactions, reference_date)
    recent = filter_transactions(transactions, TransactionFilter(limit=settings.recent_transactions_limit))

    return AccountSummaryResponse(
        balance=cashflow.balance,
        monthly_income=cashflow.monthly_income,
        monthly_expense=cashflow.monthly_expense,
        recent_transactions=[TransactionResponse.from_domain(t) for t in recent],
    )


@router.post("/accounts/{account_id}/reconcile", response_model=ReconciliationResponse)
def reconcile_account(
    account_id: str,
    request: Request,
    repair: bool = Query(False, description="Correct lagging or overflowing debt counters"),
    db: Session = Depends(get_db),
    store: LedgerStore = Depends(get_store),
):
    """
    Check debt counters against recorded installment payments.

    Returns:
        Recomputed totals, detected issues and the debts whose counters were repaired
    """
    try:
        report = reconcile(store, account_id, repair=repair)
        db.commit()
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e)

    record_reconciliation([i.kind for i in report.issues], len(report.repaired_debt_ids))
    log_reconciliation(get_request_id(request), account_id, len(report.issues), len(report.repaired_debt_ids))

    return ReconciliationResponse(
        account_id=report.account_id,
        consistent=report.consistent,
        totals=AggregateTotalsSchema(**vars(report.totals)),
        issues=[ReconciliationIssueSchema(**vars(i)) for i in report.issues],
        repaired_debt_ids=report.repaired_debt_ids,
    )
