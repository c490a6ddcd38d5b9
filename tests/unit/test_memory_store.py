"""Unit tests for the in-memory ledger store"""

import pytest
from dataclasses import replace
from datetime import date, datetime
from debt_ledger.domain.models import Transaction, TransactionFilter, EXPENSE
from debt_ledger.domain.exceptions import NotFoundError, ValidationError

ACCOUNT = "user_1"


def test_debts_listed_by_name(memory_store, sample_debt):
    memory_store.create_debt(ACCOUNT, replace(sample_debt, name="Phone"))
    memory_store.create_debt(ACCOUNT, replace(sample_debt, name="Car"))

    assert [d.name for d in memory_store.list_debts(ACCOUNT)] == ["Car", "Phone"]
    assert memory_store.list_debts("someone_else") == []


def test_create_rejects_invalid_debt(memory_store, sample_debt):
    with pytest.raises(ValidationError):
        memory_store.create_debt(ACCOUNT, replace(sample_debt, tenor=0))
    with pytest.raises(ValidationError):
        memory_store.create_debt(ACCOUNT, replace(sample_debt, monthly_installment=-5))
    with pytest.raises(ValidationError):
        memory_store.create_debt(ACCOUNT, replace(sample_debt, paid_installments=13))

    assert memory_store.list_debts(ACCOUNT) == []


def test_update_and_delete_debt(memory_store, sample_debt):
    debt_id = memory_store.create_debt(ACCOUNT, sample_debt)

    updated = memory_store.update_debt(ACCOUNT, debt_id, {"name": "Scooter", "due_day": 20})
    assert updated.name == "Scooter"
    assert updated.due_day == 20
    assert updated.paid_installments == 3

    with pytest.raises(ValidationError):
        memory_store.update_debt(ACCOUNT, debt_id, {"id": "other"})

    memory_store.delete_debt(ACCOUNT, debt_id)
    assert memory_store.get_debt(ACCOUNT, debt_id) is None
    with pytest.raises(NotFoundError):
        memory_store.delete_debt(ACCOUNT, debt_id)


def test_returned_debts_are_copies(memory_store, sample_debt):
    debt_id = memory_store.create_debt(ACCOUNT, sample_debt)
    debt = memory_store.get_debt(ACCOUNT, debt_id)
    debt.paid_installments = 10

    assert memory_store.get_debt(ACCOUNT, debt_id).paid_installments == 3


def test_transactions_filtered_newest_first(memory_store, salary):
    memory_store.create_transaction(ACCOUNT, salary)
    memory_store.create_transaction(
        ACCOUNT,
        Transaction(type=EXPENSE, name="Rent", category="Housing", amount=1_500_000, date=datetime(2024, 4, 2, 9, 0)),
    )

    assert [t.name for t in memory_store.list_transactions(ACCOUNT)] == ["Rent", "Salary"]
    assert [t.name for t in memory_store.list_transactions(ACCOUNT, TransactionFilter(type=EXPENSE))] == ["Rent"]
    assert memory_store.list_transactions(ACCOUNT, TransactionFilter(on_date=date(2024, 4, 3))) == []


def test_create_rejects_invalid_transaction(memory_store, salary):
    with pytest.raises(ValidationError):
        memory_store.create_transaction(ACCOUNT, replace(salary, amount=0))
    with pytest.raises(ValidationError):
        memory_store.create_transaction(ACCOUNT, replace(salary, type="transfer"))


def test_find_transaction_by_attempt(memory_store, salary):
    memory_store.create_transaction(ACCOUNT, replace(salary, payment_attempt_id="a-1"))

    assert memory_store.find_transaction_by_attempt(ACCOUNT, "a-1").name == "Salary"
    assert memory_store.find_transaction_by_attempt(ACCOUNT, "a-2") is None


def test_debt_subscription_pushes_updates(memory_store, sample_debt):
    snapshots = []
    unsubscribe = memory_store.subscribe_debts(ACCOUNT, snapshots.append)

    debt_id = memory_store.create_debt(ACCOUNT, sample_debt)
    memory_store.update_debt(ACCOUNT, debt_id, {"paid_installments": 4})
    unsubscribe()
    memory_store.delete_debt(ACCOUNT, debt_id)

    assert [len(s) for s in snapshots] == [0, 1, 1]
    assert snapshots[-1][0].paid_installments == 4


def test_transaction_subscription_is_per_account(memory_store, salary):
    snapshots = []
    memory_store.subscribe_transactions(ACCOUNT, snapshots.append)

    memory_store.create_transaction("someone_else", salary)
    memory_store.create_transaction(ACCOUNT, salary)

    assert [len(s) for s in snapshots] == [0, 1]
