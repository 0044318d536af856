"""Reconciliation domain: ledger records and value objects."""

from .models import BankTransaction, Expense
from .value_objects import MatchSuggestion, ReconciliationMatch, ReconciliationResult

__all__ = [
    "BankTransaction",
    "Expense",
    "MatchSuggestion",
    "ReconciliationMatch",
    "ReconciliationResult",
]
