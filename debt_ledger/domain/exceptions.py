"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input is malformed and was rejected before any write"""

    pass


class NotFoundError(DomainException):
    """Debt or transaction does not exist for the account"""

    pass


class InsufficientFunds(DomainException):
    """Account balance cannot cover the installment; nothing was written"""

    def __init__(self, balance: int, required: int):
        super().__init__(f"Balance {balance} is below the installment amount {required}")
        self.balance = balance
        self.required = required


class StoreWriteFailure(DomainException):
    """Underlying persistence failed"""

    pass


class PartialPaymentFailure(StoreWriteFailure):
    """
    Installment payment was only half applied.

    The payment transaction was written but the debt counter was not
    incremented. Reconciliation detects this as a lagging counter; retrying
    with the same payment_attempt_id completes it.
    """

    def __init__(
        self,
        debt_id: str,
        transaction_id: str,
        installment_number: int,
        payment_attempt_id: str,
    ):
        super().__init__(
            f"Transaction {transaction_id} recorded installment #{installment_number} "
            f"but debt {debt_id} counter was not updated"
        )
        self.debt_id = debt_id
        self.transaction_id = transaction_id
        self.installment_number = installment_number
        self.payment_attempt_id = payment_attempt_id
