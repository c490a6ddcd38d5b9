"""SQLAlchemy ORM models for debts and ledger transactions"""

import uuid
from sqlalchemy import Column, String, BigInteger, DateTime, Date, Integer, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def new_id() -> str:
    return uuid.uuid4().hex


class DebtRecord(Base):
    """Installment debt owned by an account"""

    __tablename__ = "debt"

    id = Column(String(32), primary_key=True, default=new_id)
    account_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    total_amount = Column(BigInteger, nullable=False)
    monthly_installment = Column(BigInteger, nullable=False)
    tenor = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    due_day = Column(Integer, nullable=False)
    paid_installments = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class TransactionRecord(Base):
    """Income or expense entry; payment columns set only for debt installments"""

    __tablename__ = "ledger_transaction"
    __table_args__ = (
        UniqueConstraint("account_id", "payment_attempt_id", name="uq_ledger_transaction_attempt"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    account_id = Column(Text, nullable=False, index=True)
    type = Column(String(16), nullable=False)
    name = Column(Text, nullable=False)
    category = Column(Text, nullable=False)
    amount = Column(BigInteger, nullable=False)
    date = Column(DateTime, nullable=False, index=True)
    notes = Column(Text, nullable=False, default="")
    debt_id = Column(String(32), nullable=True, index=True)  # No FK: payments outlive deleted debts
    installment_number = Column(Integer, nullable=True)
    payment_attempt_id = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
