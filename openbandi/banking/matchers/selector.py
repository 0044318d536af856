"""Best-match selection and reconciliation state queries."""

from collections.abc import Iterable

from ..domain.models import BankTransaction, Expense
from ..domain.value_objects import ReconciliationMatch
from .scoring import ExpenseProfile, score_match

DEFAULT_MIN_CONFIDENCE = 70


def find_best_match(
    expense: Expense,
    transactions: Iterable[BankTransaction],
    min_confidence: int = DEFAULT_MIN_CONFIDENCE,
) -> ReconciliationMatch | None:
    """Find the bank transaction that best matches an expense.

    Every transaction is scored. Among those scoring at least
    ``min_confidence`` the highest wins; on equal scores the earliest in
    input order is kept.

    Args:
        expense: The expense to match
        transactions: Candidate bank transactions
        min_confidence: Minimum confidence (0-100) for a match to be returned

    Returns:
        The best ReconciliationMatch, or None if no transaction qualifies
    """
    profile = ExpenseProfile.from_expense(expense)
    best_match: ReconciliationMatch | None = None

    for transaction in transactions:
        match = score_match(transaction, expense, profile=profile)
        if match.confidence >= min_confidence and (
            best_match is None or match.confidence > best_match.confidence
        ):
            best_match = match

    return best_match


def is_expense_reconciled(expense_id: str, transactions: Iterable[BankTransaction]) -> bool:
    """Whether some transaction is linked to ``expense_id`` and flagged reconciled."""
    return any(t.expense_id == expense_id and t.is_reconciled for t in transactions)
