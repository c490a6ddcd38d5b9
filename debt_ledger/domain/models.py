"""Domain models - pure Python dataclasses representing ledger entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)


@dataclass
class Debt:
    """Loan or installment obligation owned by one account"""

    name: str
    total_amount: int
    monthly_installment: int
    tenor: int
    start_date: date
    due_day: int  # Day of month the installment is due (1-31)
    paid_installments: int = 0
    id: Optional[str] = None

    @property
    def is_paid_off(self) -> bool:
        return self.paid_installments >= self.tenor

    @property
    def remaining_amount(self) -> int:
        # Not an amortization schedule: diverges when total != tenor * installment
        return self.total_amount - self.paid_installments * self.monthly_installment


@dataclass
class Transaction:
    """Single income or expense event"""

    type: str  # "income" or "expense"
    name: str
    category: str
    amount: int
    date: datetime
    notes: str = ""
    id: Optional[str] = None

    # Set only on system-generated debt payments
    debt_id: Optional[str] = None
    installment_number: Optional[int] = None
    payment_attempt_id: Optional[str] = None

    @property
    def is_debt_payment(self) -> bool:
        return self.debt_id is not None and self.installment_number is not None


@dataclass
class TransactionFilter:
    """Query options for listing transactions"""

    type: Optional[str] = None  # None means both types
    on_date: Optional[date] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    limit: Optional[int] = None


@dataclass
class MonthlyDue:
    """Installments falling due in the reference month"""

    total_due_this_month: int
    total_paid_this_month: int

    @property
    def remaining(self) -> int:
        # Over-payment against the schedule is reported as nothing due
        return max(self.total_due_this_month - self.total_paid_this_month, 0)

    @property
    def progress_pct(self) -> float:
        if self.total_due_this_month == 0:
            return 0.0
        return self.total_paid_this_month / self.total_due_this_month * 100


@dataclass
class AggregateTotals:
    """Totals across every debt of an account"""

    total_debt_amount: int
    total_paid_amount: int
    total_remaining: int
    progress_pct: float


@dataclass
class DebtStatus:
    """Per-debt progress projection"""

    debt_id: Optional[str]
    remaining_amount: int
    progress_pct: float
    paid_off: bool


@dataclass
class ScheduleEntry:
    """Single scheduled installment of a debt"""

    installment_number: int
    scheduled_date: date
    amount: int
    paid: bool


@dataclass
class CashflowSummary:
    """Balance and income/expense for one calendar month"""

    balance: int
    monthly_income: int
    monthly_expense: int


@dataclass
class PaymentResult:
    """Outcome of a successful installment payment"""

    debt: Debt
    transaction_id: str
    installment_number: int
    payment_attempt_id: str
    replayed: bool = False


@dataclass
class ReconciliationIssue:
    """Mismatch between debt counters and the transaction history"""

    kind: str  # counter_behind | duplicate_payment | orphan_payment | counter_overflow
    debt_id: Optional[str]
    detail: str
    expected_paid_installments: Optional[int] = None
    transaction_ids: List[str] = field(default_factory=list)


@dataclass
class ReconciliationReport:
    """Result of a reconciliation pass over one account"""

    account_id: str
    totals: AggregateTotals
    issues: List[ReconciliationIssue]
    repaired_debt_ids: List[str] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.issues
