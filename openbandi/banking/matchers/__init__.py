"""Bank-transaction-to-expense matching.

Leaf scorers:
- extract_references: invoice/reference numbers found in free text
- semantic_similarity: word overlap between two descriptions
- fuzzy_supplier_match: containment / word overlap between company names

Composite:
- score_match: weighted 0-100 confidence for one (transaction, expense) pair
- find_best_match: best transaction above a threshold for one expense
- is_expense_reconciled: whether an expense already has a reconciled transaction

Usage:
    >>> from openbandi.banking.matchers import find_best_match
    >>> match = find_best_match(expense, transactions, min_confidence=70)
    >>> if match:
    ...     print(match.transaction.id, match.confidence, match.summary)
"""

__all__ = [
    "extract_references",
    "semantic_similarity",
    "fuzzy_supplier_match",
    "score_match",
    "find_best_match",
    "is_expense_reconciled",
    "ExpenseProfile",
    "ScoreFactor",
    "ScoreTier",
    "SCORE_FACTORS",
    "DEFAULT_MIN_CONFIDENCE",
]

from .references import extract_references
from .scoring import SCORE_FACTORS, ExpenseProfile, ScoreFactor, ScoreTier, score_match
from .selector import DEFAULT_MIN_CONFIDENCE, find_best_match, is_expense_reconciled
from .text import fuzzy_supplier_match, semantic_similarity
