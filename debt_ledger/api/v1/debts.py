"""Debt endpoints - CRUD, monthly summary and installment schedule"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from debt_ledger.api.v1.schemas import (
    AggregateTotalsSchema,
    DebtCreate,
    DebtResponse,
    DebtSummaryResponse,
    DebtUpdate,
    MonthlyDueSchema,
    ScheduleEntrySchema,
    ScheduleResponse,
)
from debt_ledger.api.dependencies import get_store, to_http_exception
from debt_ledger.infrastructure.database.session import get_db
from debt_ledger.domain.store import LedgerStore
from debt_ledger.domain.accounting import compute_aggregate_totals, compute_monthly_due
from debt_ledger.domain.installments import build_installment_schedule
from debt_ledger.domain.exceptions import DomainException

router = APIRouter()


@router.get("/accounts/{account_id}/debts", response_model=List[DebtResponse])
def list_debts(account_id: str, store: LedgerStore = Depends(get_store)):
    """List the account's debts sorted by name"""
    return [DebtResponse.from_domain(d) for d in store.list_debts(account_id)]


@router.get("/accounts/{account_id}/debts/summary", response_model=DebtSummaryResponse)
def get_debt_summary(
    account_id: str,
    reference_date: Optional[date] = Query(None, description="Defaults to today"),
    store: LedgerStore = Depends(get_store),
):
    """
    Installments due this month and totals across all debts.

    Returns:
        Monthly due/paid/remaining, aggregate totals and per-debt progress
    """
    reference_date = reference_date or date.today()
    debts = store.list_debts(account_id)
    monthly = compute_monthly_due(debts, reference_date)
    totals = compute_aggregate_totals(debts)

    return DebtSummaryResponse(
        reference_date=reference_date,
        monthly=MonthlyDueSchema(
            total_due_this_month=monthly.total_due_this_month,
            total_paid_this_month=monthly.total_paid_this_month,
            remaining=monthly.remaining,
            progress_pct=monthly.progress_pct,
        ),
        totals=AggregateTotalsSchema(**vars(totals)),
        debts=[DebtResponse.from_domain(d) for d in debts],
    )


@router.post("/accounts/{account_id}/debts", response_model=DebtResponse, status_code=201)
def create_debt(
    account_id: str,
    request_body: DebtCreate,
    db: Session = Depends(get_db),
    store: LedgerStore = Depends(get_store),
):
    """Record a new debt"""
    try:
        debt_id = store.create_debt(account_id, request_body.to_domain())
        debt = store.get_debt(account_id, debt_id)
        db.commit()
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e)

    return DebtResponse.from_domain(debt)


@router.get("/accounts/{account_id}/debts/{debt_id}", response_model=DebtResponse)
def get_debt(account_id: str, debt_id: str, store: LedgerStore = Depends(get_store)):
    debt = store.get_debt(account_id, debt_id)
    if debt is None:
        raise HTTPException(status_code=404, detail="Debt not found")
    return DebtResponse.from_domain(debt)


@router.patch("/accounts/{account_id}/debts/{debt_id}", response_model=DebtResponse)
def update_debt(
    account_id: str,
    debt_id: str,
    request_body: DebtUpdate,
    db: Session = Depends(get_db),
    store: LedgerStore = Depends(get_store),
):
    """Edit a debt; only fields present in the body change"""
    try:
        debt = store.update_debt(account_id, debt_id, request_body.model_dump(exclude_unset=True, exclude_none=True))
        db.commit()
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e)

    return DebtResponse.from_domain(debt)


@router.delete("/accounts/{account_id}/debts/{debt_id}", status_code=204)
def delete_debt(
    account_id: str,
    debt_id: str,
    db: Session = Depends(get_db),
    store: LedgerStore = Depends(get_store),
):
    """Delete a debt; its payment transactions stay in the ledger"""
    try:
        store.delete_debt(account_id, debt_id)
        db.commit()
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e)

    return Response(status_code=204)


@router.get("/accounts/{account_id}/debts/{debt_id}/schedule", response_model=ScheduleResponse)
def get_schedule(account_id: str, debt_id: str, store: LedgerStore = Depends(get_store)):
    """
    Retrieve the debt's monthly installment schedule.

    Returns:
        `tenor` installments, the first `paid_installments` marked paid
    """
    debt = store.get_debt(account_id, debt_id)
    if debt is None:
        raise HTTPException(status_code=404, detail="Debt not found")

    return ScheduleResponse(
        debt_id=debt.id,
        installments=[ScheduleEntrySchema(**vars(entry)) for entry in build_installment_schedule(debt)],
    )
