"""Unit tests for monthly due, aggregate totals and cashflow"""

import pytest
from dataclasses import replace
from datetime import date, datetime
from debt_ledger.domain.models import Debt, Transaction, TransactionFilter, MonthlyDue, INCOME, EXPENSE
from debt_ledger.domain.accounting import (
    compute_aggregate_totals,
    compute_balance,
    compute_cashflow,
    compute_monthly_due,
    debt_status,
    filter_transactions,
)


def test_monthly_due_installment_not_yet_paid(sample_debt):
    """Installment #4 is due in April and only 3 are paid"""
    due = compute_monthly_due([sample_debt], date(2024, 4, 10))

    assert due.total_due_this_month == 100_000
    assert due.total_paid_this_month == 0
    assert due.remaining == 100_000


def test_monthly_due_installment_already_paid(sample_debt):
    """Installment #4 counts as paid once 4 installments are paid"""
    due = compute_monthly_due([replace(sample_debt, paid_installments=4)], date(2024, 4, 10))

    assert due.total_due_this_month == 100_000
    assert due.total_paid_this_month == 100_000
    assert due.remaining == 0
    assert due.progress_pct == 100.0


def test_monthly_due_excludes_paid_off_debts(sample_debt):
    paid_off = replace(sample_debt, paid_installments=12)
    due = compute_monthly_due([paid_off], date(2024, 12, 1))

    assert due == MonthlyDue(total_due_this_month=0, total_paid_this_month=0)


def test_monthly_due_outside_schedule(sample_debt):
    """No installment before the start date or after the last one"""
    assert compute_monthly_due([sample_debt], date(2023, 12, 20)).total_due_this_month == 0
    assert compute_monthly_due([sample_debt], date(2025, 1, 20)).total_due_this_month == 0


def test_monthly_due_clamps_month_end_start(sample_debt):
    """Installment #2 of a Jan 31 debt falls on Feb 29, not in March"""
    debt = replace(sample_debt, start_date=date(2024, 1, 31), due_day=31, paid_installments=1)

    due = compute_monthly_due([debt], date(2024, 2, 10))

    assert due.total_due_this_month == 100_000
    assert due.total_paid_this_month == 0
    assert compute_monthly_due([debt], date(2024, 3, 10)).total_due_this_month == 100_000


def test_monthly_due_sums_debts(sample_debt):
    phone = Debt(
        name="Phone",
        total_amount=600_000,
        monthly_installment=50_000,
        tenor=12,
        start_date=date(2024, 3, 31),
        due_day=31,
        paid_installments=2,
    )
    due = compute_monthly_due([sample_debt, phone], date(2024, 4, 30))

    # Phone installment #2 clamps to Apr 30 and is paid; motorbike #4 is not
    assert due.total_due_this_month == 150_000
    assert due.total_paid_this_month == 50_000


def test_monthly_due_remaining_never_negative():
    """Paid ahead of the schedule reports zero remaining, not negative"""
    due = MonthlyDue(total_due_this_month=100_000, total_paid_this_month=150_000)
    assert due.remaining == 0


def test_monthly_due_is_pure(sample_debt):
    debts = [sample_debt]
    first = compute_monthly_due(debts, date(2024, 4, 10))
    second = compute_monthly_due(debts, date(2024, 4, 10))

    assert first == second
    assert sample_debt.paid_installments == 3


def test_aggregate_totals_empty():
    totals = compute_aggregate_totals([])

    assert totals.total_debt_amount == 0
    assert totals.total_paid_amount == 0
    assert totals.total_remaining == 0
    assert totals.progress_pct == 0


def test_aggregate_totals(sample_debt):
    totals = compute_aggregate_totals([sample_debt])

    assert totals.total_debt_amount == 1_200_000
    assert totals.total_paid_amount == 300_000
    assert totals.total_remaining == 900_000
    assert totals.progress_pct == pytest.approx(25.0)


def test_remaining_uses_installment_count_not_amortization(sample_debt):
    """Interest-bearing debt: total differs from tenor * installment"""
    debt = replace(sample_debt, total_amount=1_000_000)
    status = debt_status(debt)

    assert status.remaining_amount == 1_000_000 - 3 * 100_000
    assert status.progress_pct == pytest.approx(25.0)
    assert status.paid_off is False


def _txn(type_, amount, when):
    return Transaction(type=type_, name="t", category="c", amount=amount, date=when)


def test_balance_and_cashflow():
    transactions = [
        _txn(INCOME, 5_000_000, datetime(2024, 3, 25, 9, 0)),
        _txn(EXPENSE, 200_000, datetime(2024, 3, 28, 12, 0)),
        _txn(INCOME, 1_000_000, datetime(2024, 4, 1, 0, 0)),
        _txn(EXPENSE, 300_000, datetime(2024, 4, 30, 23, 59)),
    ]

    assert compute_balance(transactions) == 5_500_000

    cashflow = compute_cashflow(transactions, date(2024, 4, 15))
    assert cashflow.balance == 5_500_000
    assert cashflow.monthly_income == 1_000_000
    assert cashflow.monthly_expense == 300_000


def test_filter_transactions():
    transactions = [
        _txn(INCOME, 100, datetime(2024, 4, 1, 8, 0)),
        _txn(EXPENSE, 200, datetime(2024, 4, 1, 20, 0)),
        _txn(EXPENSE, 300, datetime(2024, 4, 3, 10, 0)),
    ]

    newest_first = filter_transactions(transactions)
    assert [t.amount for t in newest_first] == [300, 200, 100]

    expenses = filter_transactions(transactions, TransactionFilter(type=EXPENSE))
    assert [t.amount for t in expenses] == [300, 200]

    on_day = filter_transactions(transactions, TransactionFilter(on_date=date(2024, 4, 1)))
    assert [t.amount for t in on_day] == [200, 100]

    limited = filter_transactions(transactions, TransactionFilter(limit=1))
    assert [t.amount for t in limited] == [300]
