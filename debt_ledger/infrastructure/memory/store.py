"""In-memory ledger store with live subscriptions"""

import copy
import uuid
from collections import defaultdict
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional
from debt_ledger.domain.models import Debt, Transaction, TransactionFilter
from debt_ledger.domain.store import LedgerStore
from debt_ledger.domain.accounting import filter_transactions
from debt_ledger.domain.validation import merge_patch, validate_debt, validate_transaction
from debt_ledger.domain.exceptions import NotFoundError

DebtListener = Callable[[List[Debt]], None]
TransactionListener = Callable[[List[Transaction]], None]


class InMemoryLedgerStore(LedgerStore):
    """
    Document-store stand-in keyed by account.

    Behaves like a hosted document store without multi-document
    transactions: every write lands immediately, so a failure between two
    writes leaves the first one applied. Subscribers receive the full,
    freshly sorted collection after every write to it, and once on
    subscribe.
    """

    transactional = False

    def __init__(self):
        self._debts: Dict[str, Dict[str, Debt]] = defaultdict(dict)
        self._transactions: Dict[str, Dict[str, Transaction]] = defaultdict(dict)
        self._debt_listeners: Dict[str, List[DebtListener]] = defaultdict(list)
        self._transaction_listeners: Dict[str, List[TransactionListener]] = defaultdict(list)

    # Subscriptions

    def subscribe_debts(self, account_id: str, listener: DebtListener) -> Callable[[], None]:
        """Push the account's debts to listener on every change; returns unsubscribe"""
        self._debt_listeners[account_id].append(listener)
        listener(self.list_debts(account_id))
        return lambda: self._debt_listeners[account_id].remove(listener)

    def subscribe_transactions(self, account_id: str, listener: TransactionListener) -> Callable[[], None]:
        """Push the account's transactions to listener on every change; returns unsubscribe"""
        self._transaction_listeners[account_id].append(listener)
        listener(self.list_transactions(account_id))
        return lambda: self._transaction_listeners[account_id].remove(listener)

    def _debts_changed(self, account_id: str) -> None:
        for listener in list(self._debt_listeners[account_id]):
            listener(self.list_debts(account_id))

    def _transactions_changed(self, account_id: str) -> None:
        for listener in list(self._transaction_listeners[account_id]):
            listener(self.list_transactions(account_id))

    # Debts

    def list_debts(self, account_id: str) -> List[Debt]:
        debts = sorted(self._debts[account_id].values(), key=lambda d: (d.name, d.id))
        return [copy.copy(d) for d in debts]

    def get_debt(self, account_id: str, debt_id: str) -> Optional[Debt]:
        debt = self._debts[account_id].get(debt_id)
        return copy.copy(debt) if debt else None

    def create_debt(self, account_id: str, debt: Debt) -> str:
        validate_debt(debt)
        debt_id = uuid.uuid4().hex
        self._debts[account_id][debt_id] = replace(debt, id=debt_id)
        self._debts_changed(account_id)
        return debt_id

    def update_debt(self, account_id: str, debt_id: str, patch: Dict[str, Any]) -> Debt:
        current = self._debts[account_id].get(debt_id)
        if current is None:
            raise NotFoundError(f"Debt {debt_id} not found")

        updated = merge_patch(current, patch)
        validate_debt(updated)
        self._debts[account_id][debt_id] = updated
        self._debts_changed(account_id)
        return copy.copy(updated)

    def delete_debt(self, account_id: str, debt_id: str) -> None:
        if self._debts[account_id].pop(debt_id, None) is None:
            raise NotFoundError(f"Debt {debt_id} not found")
        self._debts_changed(account_id)

    # Transactions

    def list_transactions(
        self,
        account_id: str,
        transaction_filter: Optional[TransactionFilter] = None,
    ) -> List[Transaction]:
        result = filter_transactions(self._transactions[account_id].values(), transaction_filter)
        return [copy.copy(t) for t in result]

    def get_transaction(self, account_id: str, transaction_id: str) -> Optional[Transaction]:
        txn = self._transactions[account_id].get(transaction_id)
        return copy.copy(txn) if txn else None

    def create_transaction(self, account_id: str, transaction: Transaction) -> str:
        validate_transaction(transaction)
        transaction_id = uuid.uuid4().hex
        self._transactions[account_id][transaction_id] = replace(transaction, id=transaction_id)
        self._transactions_changed(account_id)
        return transaction_id

    def update_transaction(self, account_id: str, transaction_id: str, patch: Dict[str, Any]) -> Transaction:
        current = self._transactions[account_id].get(transaction_id)
        if current is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")

        updated = merge_patch(current, patch)
        validate_transaction(updated)
        self._transactions[account_id][transaction_id] = updated
        self._transactions_changed(account_id)
        return copy.copy(updated)

    def delete_transaction(self, account_id: str, transaction_id: str) -> None:
        if self._transactions[account_id].pop(transaction_id, None) is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        self._transactions_changed(account_id)

    def find_transaction_by_attempt(self, account_id: str, payment_attempt_id: str) -> Optional[Transaction]:
        for txn in self._transactions[account_id].values():
            if txn.payment_attempt_id == payment_attempt_id:
                return copy.copy(txn)
        return None
