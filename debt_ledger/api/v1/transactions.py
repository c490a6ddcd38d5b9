"""Transaction endpoints - history with filters and CRUD"""

from datetime import date, datetime
from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from debt_ledger.api.v1.schemas import TransactionCreate, TransactionResponse, TransactionUpdate
from debt_ledger.api.dependencies import get_store, to_http_exception
from debt_ledger.config import settings
from debt_ledger.infrastructure.database.session import get_db
from debt_ledger.domain.store import LedgerStore
from debt_ledger.domain.models import TransactionFilter
from debt_ledger.domain.exceptions import DomainException

router = APIRouter()


@router.get("/accounts/{account_id}/transactions", response_model=List[TransactionResponse])
def list_transactions(
    account_id: str,
    type: Optional[Literal["income", "expense"]] = Query(None, description="Omit for both types"),
    on_date: Optional[date] = Query(None, description="Only transactions on this day"),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    limit: int = Query(settings.transaction_history_limit, gt=0, le=1000),
    store: LedgerStore = Depends(get_store),
):
    """Transaction history, newest first"""
    transaction_filter = TransactionFilter(type=type, on_date=on_date, start=start, end=end, limit=limit)
    return [TransactionResponse.from_domain(t) for t in store.list_transactions(account_id, transaction_filter)]


@router.post("/accounts/{account_id}/transactions", response_model=TransactionResponse, status_code=201)
def create_transaction(
    account_id: str,
    request_body: TransactionCreate,
    db: Session = Depends(get_db),
    store: LedgerStore = Depends(get_store),
):
    """Record an income or expense"""
    try:
        transaction_id = store.create_transaction(account_id, request_body.to_domain())
        txn = store.get_transaction(account_id, transaction_id)
        db.commit()
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e)

    return TransactionResponse.from_domain(txn)


@router.get("/accounts/{account_id}/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(account_id: str, transaction_id: str, store: LedgerStore = Depends(get_store)):
    txn = store.get_transaction(account_id, transaction_id)
    if txn is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return TransactionResponse.from_domain(txn)


@router.patch("/accounts/{account_id}/transactions/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    account_id: str,
    transaction_id: str,
    request_body: TransactionUpdate,
    db: Session = Depends(get_db),
    store: LedgerStore = Depends(get_store),
):
    """Edit a transaction; only fields present in the body change"""
    patch = request_body.model_dump(exclude_unset=True, exclude_none=True)
    try:
        txn = store.update_transaction(account_id, transaction_id, patch)
        db.commit()
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e)

    return TransactionResponse.from_domain(txn)


@router.delete("/accounts/{account_id}/transactions/{transaction_id}", status_code=204)
def delete_transaction(
    account_id: str,
    transaction_id: str,
    db: Session = Depends(get_db),
    store: LedgerStore = Depends(get_store),
):
    try:
        store.delete_transaction(account_id, transaction_id)
        db.commit()
    except DomainException as e:
        db.rollback()
        raise to_http_exception(e)

    return Response(status_code=204)
