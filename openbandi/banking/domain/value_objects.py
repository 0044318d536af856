"""Value objects produced by the reconciliation matchers and services.

Immutable, compared by value, never persisted as such.
"""

from dataclasses import dataclass, field

from .models import BankTransaction, Expense


@dataclass(frozen=True)
class ReconciliationMatch:
    """Outcome of scoring one bank transaction against one expense.

    Attributes:
        confidence: Sum of the factor scores, clamped to 0-100
        reasons: Human-readable explanations, in factor evaluation order
        transaction: The scored transaction
        breakdown: Points awarded per factor, in evaluation order
    """

    confidence: int
    reasons: tuple[str, ...] = ()
    transaction: BankTransaction | None = None
    breakdown: dict[str, int] = field(default_factory=dict, compare=False)

    @property
    def summary(self) -> str:
        return ", ".join(self.reasons)

    def __str__(self) -> str:
        tx_id = self.transaction.id if self.transaction else "-"
        return f"ReconciliationMatch(transaction={tx_id}, confidence={self.confidence})"


@dataclass(frozen=True)
class MatchSuggestion:
    """A candidate pairing listed for review."""

    transaction: BankTransaction
    expense: Expense
    confidence: int
    reasons: tuple[str, ...]
    auto_match: bool


@dataclass
class ReconciliationResult:
    """Summary of a batch reconciliation run.

    ``matches`` maps expense IDs to the match that was applied (or would be
    applied, in dry-run mode).
    """

    matched_count: int = 0
    review_count: int = 0
    unmatched_count: int = 0
    matches: dict[str, ReconciliationMatch] = field(default_factory=dict)
    dry_run: bool = False

    @property
    def total_count(self) -> int:
        return self.matched_count + self.review_count + self.unmatched_count

    def __str__(self) -> str:
        return (
            f"ReconciliationResult(matched={self.matched_count}, "
            f"review={self.review_count}, unmatched={self.unmatched_count})"
        )
