"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime, timezone
from typing import List, Literal, Optional

from debt_ledger.domain.models import Debt, Transaction
from debt_ledger.domain.accounting import debt_status
from debt_ledger.utils.date_utils import utc_now


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Store timestamps as naive UTC so they compare with month boundaries"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class DebtCreate(BaseModel):
    """Request body for POST /debts"""

    name: str = Field(..., min_length=1, description="Display label")
    total_amount: int = Field(..., ge=0, description="Total principal in smallest currency units")
    monthly_installment: int = Field(..., gt=0)
    tenor: int = Field(..., gt=0, description="Number of monthly installments")
    start_date: date = Field(..., description="Date of the first installment")
    due_day: int = Field(..., ge=1, le=31, description="Day of month the installment is due")
    paid_installments: int = Field(0, ge=0)

    def to_domain(self) -> Debt:
        return Debt(**self.model_dump())


class DebtUpdate(BaseModel):
    """Request body for PATCH /debts/{debt_id}; omitted fields are unchanged"""

    name: Optional[str] = Field(None, min_length=1)
    total_amount: Optional[int] = Field(None, ge=0)
    monthly_installment: Optional[int] = Field(None, gt=0)
    tenor: Optional[int] = Field(None, gt=0)
    start_date: Optional[date] = None
    due_day: Optional[int] = Field(None, ge=1, le=31)
    paid_installments: Optional[int] = Field(None, ge=0)


class DebtResponse(BaseModel):
    """Debt with its derived progress"""

    id: str
    name: str
    total_amount: int
    monthly_installment: int
    tenor: int
    start_date: date
    due_day: int
    paid_installments: int
    remaining_amount: int
    progress_pct: float
    paid_off: bool

    @classmethod
    def from_domain(cls, debt: Debt) -> "DebtResponse":
        status = debt_status(debt)
        return cls(
            id=debt.id,
            name=debt.name,
            total_amount=debt.total_amount,
            monthly_installment=debt.monthly_installment,
            tenor=debt.tenor,
            start_date=debt.start_date,
            due_day=debt.due_day,
            paid_installments=debt.paid_installments,
            remaining_amount=status.remaining_amount,
            progress_pct=status.progress_pct,
            paid_off=status.paid_off,
        )


class MonthlyDueSchema(BaseModel):
    total_due_this_month: int
    total_paid_this_month: int
    remaining: int
    progress_pct: float


class AggregateTotalsSchema(BaseModel):
    total_debt_amount: int
    total_paid_amount: int
    total_remaining: int
    progress_pct: float


class DebtSummaryResponse(BaseModel):
    """Response for GET /debts/summary"""

    reference_date: date
    monthly: MonthlyDueSchema
    totals: AggregateTotalsSchema
    debts: List[DebtResponse]


class ScheduleEntrySchema(BaseModel):
    installment_number: int
    scheduled_date: date
    amount: int
    paid: bool


class ScheduleResponse(BaseModel):
    """Response for GET /debts/{debt_id}/schedule"""

    debt_id: str
    installments: List[ScheduleEntrySchema]


class PaymentRequest(BaseModel):
    """Request body for POST /debts/{debt_id}/payments"""

    payment_attempt_id: Optional[str] = Field(
        None,
        min_length=1,
        max_length=64,
        description="Client-generated key; retrying with the same key never pays twice",
    )


class PaymentResponse(BaseModel):
    """Response for POST /debts/{debt_id}/payments"""

    debt: DebtResponse
    transaction_id: str
    installment_number: int
    payment_attempt_id: str
    replayed: bool


class TransactionCreate(BaseModel):
    """Request body for POST /transactions"""

    type: Literal["income", "expense"]
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    amount: int = Field(..., gt=0, description="Amount in smallest currency units")
    date: datetime = Field(default_factory=utc_now)
    notes: str = ""

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _naive_utc(value)

    def to_domain(self) -> Transaction:
        return Transaction(**self.model_dump())


class TransactionUpdate(BaseModel):
    """Request body for PATCH /transactions/{transaction_id}"""

    type: Optional[Literal["income", "expense"]] = None
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    amount: Optional[int] = Field(None, gt=0)
    date: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _naive_utc(value)


class TransactionResponse(BaseModel):
    id: str
    type: str
    name: str
    category: str
    amount: int
    date: datetime
    notes: str
    debt_id: Optional[str] = None
    installment_number: Optional[int] = None

    @classmethod
    def from_domain(cls, txn: Transaction) -> "TransactionResponse":
        return cls(
            id=txn.id,
            type=txn.type,
            name=txn.name,
            category=txn.category,
            amount=txn.amount,
            date=txn.date,
            notes=txn.notes,
            debt_id=txn.debt_id,
            installment_number=txn.installment_number,
        )


class AccountSummaryResponse(BaseModel):
    """Response for GET /summary"""

    balance: int
    monthly_income: int
    monthly_expense: int
    recent_transactions: List[TransactionResponse]


class ReconciliationIssueSchema(BaseModel):
    kind: str
    debt_id: Optional[str] = None
    detail: str
    expected_paid_installments: Optional[int] = None
    transaction_ids: List[str] = []


class ReconciliationResponse(BaseModel):
    """Response for POST /reconcile"""

    account_id: str
    consistent: bool
    totals: AggregateTotalsSchema
    issues: List[ReconciliationIssueSchema]
    repaired_debt_ids: List[str]
