"""
Ledger store interface.

Accounting and payment code receive a LedgerStore instead of reaching for a
shared client, so the SQL store and the in-memory fake are interchangeable.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional
from debt_ledger.domain.models import Debt, Transaction, TransactionFilter


class LedgerStore(ABC):
    """
    Per-account document store for debts and transactions.

    Writes raise StoreWriteFailure when persistence fails and NotFoundError
    when the target document does not exist.
    """

    # True when atomic() rolls back every write in the block on error
    transactional: bool = False

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Group writes; only transactional stores make the group all-or-nothing"""
        yield

    @abstractmethod
    def list_debts(self, account_id: str) -> List[Debt]:
        """Debts of the account sorted by name"""
        pass

    @abstractmethod
    def get_debt(self, account_id: str, debt_id: str) -> Optional[Debt]:
        pass

    def get_debt_for_update(self, account_id: str, debt_id: str) -> Optional[Debt]:
        """Fresh read of a debt about to be written; SQL stores lock the row"""
        return self.get_debt(account_id, debt_id)

    @abstractmethod
    def create_debt(self, account_id: str, debt: Debt) -> str:
        """Persist a new debt and return its assigned id"""
        pass

    @abstractmethod
    def update_debt(self, account_id: str, debt_id: str, patch: Dict[str, Any]) -> Debt:
        """Apply a partial update and return the updated debt"""
        pass

    @abstractmethod
    def delete_debt(self, account_id: str, debt_id: str) -> None:
        pass

    @abstractmethod
    def list_transactions(
        self,
        account_id: str,
        transaction_filter: Optional[TransactionFilter] = None,
    ) -> List[Transaction]:
        """Transactions newest first, optionally filtered and limited"""
        pass

    @abstractmethod
    def get_transaction(self, account_id: str, transaction_id: str) -> Optional[Transaction]:
        pass

    @abstractmethod
    def create_transaction(self, account_id: str, transaction: Transaction) -> str:
        """Persist a new transaction and return its assigned id"""
        pass

    @abstractmethod
    def update_transaction(self, account_id: str, transaction_id: str, patch: Dict[str, Any]) -> Transaction:
        pass

    @abstractmethod
    def delete_transaction(self, account_id: str, transaction_id: str) -> None:
        pass

    @abstractmethod
    def find_transaction_by_attempt(self, account_id: str, payment_attempt_id: str) -> Optional[Transaction]:
        """Payment transaction written under the given attempt id, if any"""
        pass
