"""Domain models for bank reconciliation.

Both records are owned by the external ledger store: the reconciliation core
only reads them. They are immutable pydantic models; the store produces an
updated copy when a match is accepted.
"""

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class BankTransaction(BaseModel):
    """A single movement imported from a bank statement.

    Attributes:
        id: Unique transaction ID
        transaction_date: Booking date
        description: Free text from the bank (may be empty)
        amount: Signed amount (negative = outgoing payment, positive = incoming)
        counterpart_name: Payer/payee name as reported by the bank
        category: Short label assigned at import time
        reference_number: Bank reference/memo field
        expense_id: Expense this transaction is reconciled with (None until matched)
        is_reconciled: True only after a match has been accepted and persisted
        reconciliation_confidence: Confidence of the accepted match (0.0-1.0)
        reconciliation_notes: Why the match was accepted
    """

    model_config = ConfigDict(frozen=True)

    id: str
    transaction_date: date
    description: str = ""
    amount: Decimal
    currency: str = "EUR"
    counterpart_name: str | None = None
    category: str | None = None
    reference_number: str | None = None
    expense_id: str | None = None
    is_reconciled: bool = False
    reconciliation_confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    reconciliation_notes: str | None = None

    @property
    def transaction_type(self) -> Literal["debit", "credit"]:
        """Direction of the movement, derived from the sign of the amount."""
        return "debit" if self.amount < 0 else "credit"

    def __repr__(self) -> str:
        return (
            f"<BankTransaction(id={self.id!r}, "
            f"date={self.transaction_date}, "
            f"amount={self.amount}, "
            f"reconciled={self.is_reconciled})>"
        )


class Expense(BaseModel):
    """An expense recorded against a funded project.

    ``amount`` is the expected cost and must be strictly positive: the
    reconciliation scorer expresses amount differences as a percentage of it.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    description: str = ""
    amount: Decimal = Field(gt=0)
    expense_date: date
    supplier_name: str | None = None
    receipt_number: str | None = None
    category: str | None = None
    project_id: str | None = None

    def __repr__(self) -> str:
        return f"<Expense(id={self.id!r}, amount={self.amount}, supplier={self.supplier_name!r})>"
