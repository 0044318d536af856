"""Ledger tables.

Rows are converted to and from the immutable domain models at the repository
boundary; nothing outside ``openbandi.storage`` and the repository sees them.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, Float, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from openbandi.banking.domain.models import BankTransaction, Expense

from .base import Base


class BankTransactionRecord(Base):
    """A bank movement as stored in the ledger."""

    __tablename__ = "bank_transactions"

    transaction_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="EUR", nullable=False)
    counterpart_name: Mapped[str | None] = mapped_column(String(200))
    category: Mapped[str | None] = mapped_column(String(50))
    reference_number: Mapped[str | None] = mapped_column(String(100))

    # Reconciliation state
    expense_id: Mapped[str | None] = mapped_column(String(64), index=True)
    is_reconciled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reconciliation_confidence: Mapped[float | None] = mapped_column(Float)
    reconciliation_notes: Mapped[str | None] = mapped_column(Text)

    @classmethod
    def from_domain(cls, transaction: BankTransaction) -> "BankTransactionRecord":
        data = transaction.model_dump()
        data["transaction_id"] = data.pop("id")
        return cls(**data)

    def to_domain(self) -> BankTransaction:
        return BankTransaction(
            id=self.transaction_id,
            transaction_date=self.transaction_date,
            description=self.description,
            amount=self.amount,
            currency=self.currency,
            counterpart_name=self.counterpart_name,
            category=self.category,
            reference_number=self.reference_number,
            expense_id=self.expense_id,
            is_reconciled=self.is_reconciled,
            reconciliation_confidence=self.reconciliation_confidence,
            reconciliation_notes=self.reconciliation_notes,
        )

    def __repr__(self) -> str:
        return f"<BankTransactionRecord(transaction_id={self.transaction_id!r})>"


class ExpenseRecord(Base):
    """A project expense as stored in the ledger."""

    __tablename__ = "expenses"

    expense_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)
    supplier_name: Mapped[str | None] = mapped_column(String(200))
    receipt_number: Mapped[str | None] = mapped_column(String(100))
    category: Mapped[str | None] = mapped_column(String(50))
    project_id: Mapped[str | None] = mapped_column(String(64), index=True)

    @classmethod
    def from_domain(cls, expense: Expense) -> "ExpenseRecord":
        data = expense.model_dump()
        data["expense_id"] = data.pop("id")
        return cls(**data)

    def to_domain(self) -> Expense:
        return Expense(
            id=self.expense_id,
            description=self.description,
            amount=self.amount,
            expense_date=self.expense_date,
            supplier_name=self.supplier_name,
            receipt_number=self.receipt_number,
            category=self.category,
            project_id=self.project_id,
        )

    def __repr__(self) -> str:
        return f"<ExpenseRecord(expense_id={self.expense_id!r})>"
