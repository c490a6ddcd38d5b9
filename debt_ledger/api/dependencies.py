"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session
from debt_ledger.domain.exceptions import (
    DomainException,
    InsufficientFunds,
    NotFoundError,
    PartialPaymentFailure,
    StoreWriteFailure,
    ValidationError,
)
from debt_ledger.domain.store import LedgerStore
from debt_ledger.infrastructure.database.repositories import SqlLedgerStore
from debt_ledger.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_store(db: Session = Depends(get_db)) -> LedgerStore:
    """Provide a ledger store bound to the request's session"""
    return SqlLedgerStore(db)


def to_http_exception(error: DomainException) -> HTTPException:
    """Map domain failures to HTTP status codes"""
    if isinstance(error, ValidationError):
        return HTTPException(status_code=422, detail=str(error))
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, InsufficientFunds):
        return HTTPException(
            status_code=409,
            detail={"message": str(error), "balance": error.balance, "required": error.required},
        )
    if isinstance(error, PartialPaymentFailure):
        return HTTPException(
            status_code=502,
            detail={
                "message": str(error),
                "debt_id": error.debt_id,
                "transaction_id": error.transaction_id,
                "installment_number": error.installment_number,
                "payment_attempt_id": error.payment_attempt_id,
            },
        )
    if isinstance(error, StoreWriteFailure):
        return HTTPException(status_code=503, detail="Ledger store unavailable")
    return HTTPException(status_code=500, detail="Internal server error")
