"""Debt ledger accounting - monthly due, aggregate totals and cashflow"""

from datetime import date
from typing import Iterable, List, Optional
from debt_ledger.domain.models import (
    AggregateTotals,
    CashflowSummary,
    Debt,
    DebtStatus,
    MonthlyDue,
    Transaction,
    TransactionFilter,
    INCOME,
    EXPENSE,
)
from debt_ledger.utils.date_utils import add_months, same_month, month_bounds


def compute_monthly_due(debts: Iterable[Debt], reference_date: Optional[date] = None) -> MonthlyDue:
    """
    Sum installments scheduled in the reference month.

    Requirements:
    - Paid-off debts never contribute
    - Installment i is scheduled at start_date + i months (day clamped)
    - Only the first installment matching the reference month counts per debt
    - Counted as paid when paid_installments >= i + 1
    """
    if reference_date is None:
        reference_date = date.today()

    total_due = 0
    total_paid = 0

    for debt in debts:
        if debt.is_paid_off:
            continue

        for i in range(debt.tenor):
            scheduled = add_months(debt.start_date, i)
            if not same_month(scheduled, reference_date):
                continue

            total_due += debt.monthly_installment
            installment_number = i + 1
            if debt.paid_installments >= installment_number:
                total_paid += debt.monthly_installment
            break

    return MonthlyDue(total_due_this_month=total_due, total_paid_this_month=total_paid)


def compute_aggregate_totals(debts: Iterable[Debt]) -> AggregateTotals:
    """Totals across all debts (progress is 0 when there is nothing owed)"""
    debts = list(debts)
    total_debt = sum(d.total_amount for d in debts)
    total_paid = sum(d.paid_installments * d.monthly_installment for d in debts)

    # Avoid division by zero
    progress = total_paid / total_debt * 100 if total_debt > 0 else 0.0

    return AggregateTotals(
        total_debt_amount=total_debt,
        total_paid_amount=total_paid,
        total_remaining=total_debt - total_paid,
        progress_pct=progress,
    )


def debt_status(debt: Debt) -> DebtStatus:
    """Remaining balance and installment progress of a single debt"""
    return DebtStatus(
        debt_id=debt.id,
        remaining_amount=debt.remaining_amount,
        progress_pct=debt.paid_installments / debt.tenor * 100 if debt.tenor > 0 else 0.0,
        paid_off=debt.is_paid_off,
    )


def compute_balance(transactions: Iterable[Transaction]) -> int:
    """Sum of income minus sum of expense"""
    balance = 0
    for txn in transactions:
        if txn.type == INCOME:
            balance += txn.amount
        elif txn.type == EXPENSE:
            balance -= txn.amount
    return balance


def compute_cashflow(
    transactions: Iterable[Transaction],
    reference_date: Optional[date] = None,
) -> CashflowSummary:
    """Overall balance plus income and expense within the reference month"""
    if reference_date is None:
        reference_date = date.today()

    transactions = list(transactions)
    start, end = month_bounds(reference_date)
    in_month = [t for t in transactions if start <= t.date <= end]

    return CashflowSummary(
        balance=compute_balance(transactions),
        monthly_income=sum(t.amount for t in in_month if t.type == INCOME),
        monthly_expense=sum(t.amount for t in in_month if t.type == EXPENSE),
    )


def filter_transactions(
    transactions: Iterable[Transaction],
    transaction_filter: Optional[TransactionFilter] = None,
) -> List[Transaction]:
    """Apply type/date filters, order newest first and apply the limit"""
    result = sorted(transactions, key=lambda t: t.date, reverse=True)
    if transaction_filter is None:
        return result

    f = transaction_filter
    if f.type is not None:
        result = [t for t in result if t.type == f.type]
    if f.on_date is not None:
        result = [t for t in result if t.date.date() == f.on_date]
    if f.start is not None:
        result = [t for t in result if t.date >= f.start]
    if f.end is not None:
        result = [t for t in result if t.date <= f.end]
    if f.limit is not None:
        result = result[: f.limit]

    return result
