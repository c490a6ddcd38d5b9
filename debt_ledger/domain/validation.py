"""Input validation for debts and transactions, run before any write"""

from dataclasses import fields, replace
from typing import Any, Dict, TypeVar
from debt_ledger.domain.models import Debt, Transaction, TRANSACTION_TYPES
from debt_ledger.domain.exceptions import ValidationError

T = TypeVar("T", Debt, Transaction)


def merge_patch(entity: T, patch: Dict[str, Any]) -> T:
    """
    Return a copy of entity with the patch applied.

    Raises:
        ValidationError: Patch names the id or a field the entity lacks
    """
    allowed = {f.name for f in fields(entity)} - {"id"}
    unknown = set(patch) - allowed
    if unknown:
        raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
    return replace(entity, **patch)


def validate_debt(debt: Debt) -> None:
    """
    Reject malformed debts.

    Raises:
        ValidationError: On the first violated rule
    """
    if not debt.name or not debt.name.strip():
        raise ValidationError("Debt name is required")
    if debt.total_amount < 0:
        raise ValidationError("Total amount must not be negative")
    if debt.monthly_installment <= 0:
        raise ValidationError("Monthly installment must be positive")
    if debt.tenor <= 0:
        raise ValidationError("Tenor must be positive")
    if not 1 <= debt.due_day <= 31:
        raise ValidationError("Due day must be between 1 and 31")
    if not 0 <= debt.paid_installments <= debt.tenor:
        raise ValidationError(
            f"Paid installments must be between 0 and tenor ({debt.tenor})"
        )


def validate_transaction(transaction: Transaction) -> None:
    """
    Reject malformed transactions.

    Raises:
        ValidationError: On the first violated rule
    """
    if transaction.type not in TRANSACTION_TYPES:
        raise ValidationError(f"Transaction type must be one of {', '.join(TRANSACTION_TYPES)}")
    if not transaction.name or not transaction.name.strip():
        raise ValidationError("Transaction name is required")
    if not transaction.category or not transaction.category.strip():
        raise ValidationError("Transaction category is required")
    if transaction.amount <= 0:
        raise ValidationError("Transaction amount must be positive")
