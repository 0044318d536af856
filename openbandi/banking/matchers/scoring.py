"""Multi-factor confidence scoring of a bank transaction against an expense.

Six factors are evaluated in a fixed order, each against its own ordered table
of tiers. The first tier whose predicate holds awards its points and its
reason; a factor with no matching tier contributes nothing.

    Factor       Max   Signal
    amount        50   |abs(transaction) - expense| in absolute and % terms
    supplier      30   counterpart / description vs expense supplier
    reference     20   shared invoice/reference number (all-or-nothing)
    description   15   word overlap of the two descriptions
    date          10   days between transaction and expense
    category       5   identical category labels (case-sensitive)

Final confidence = min(sum of factor points, 100).

Example:
    >>> match = score_match(transaction, expense)
    >>> match.confidence, match.reasons
    (100, ('exact amount match', 'supplier exact match', ...))
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Generic, TypeVar

from ..domain.models import BankTransaction, Expense
from ..domain.value_objects import ReconciliationMatch
from .references import extract_references, references_overlap
from .text import fuzzy_supplier_match, semantic_similarity

M = TypeVar("M")

MAX_CONFIDENCE = 100
AMOUNT_EXACT_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class ScoreTier(Generic[M]):
    """One row of a factor table: award ``points`` when ``predicate(measure)`` holds."""

    predicate: Callable[[M], bool]
    points: int
    reason: str


@dataclass(frozen=True)
class ScoreFactor(Generic[M]):
    """A scoring factor: a measurement plus its tier table.

    ``measure`` returns None when the factor does not apply to the pair
    (e.g. the expense has no supplier), in which case no tier is evaluated.
    """

    name: str
    measure: Callable[[BankTransaction, "ExpenseProfile"], M | None]
    tiers: tuple[ScoreTier[M], ...]

    @property
    def max_points(self) -> int:
        return max(tier.points for tier in self.tiers)

    def evaluate(self, transaction: BankTransaction, profile: "ExpenseProfile") -> ScoreTier[M] | None:
        value = self.measure(transaction, profile)
        if value is None:
            return None
        for tier in self.tiers:
            if tier.predicate(value):
                return tier
        return None


@dataclass(frozen=True)
class ExpenseProfile:
    """Expense-side inputs of the scorer, computed once per expense.

    ``find_best_match`` builds one profile and reuses it for every transaction.
    """

    expense: Expense
    references: frozenset[str]
    supplier: str
    description: str

    @classmethod
    def from_expense(cls, expense: Expense) -> "ExpenseProfile":
        references = extract_references(expense.description)
        if expense.receipt_number:
            references |= extract_references(expense.receipt_number)
        return cls(
            expense=expense,
            references=frozenset(references),
            supplier=_clean(expense.supplier_name),
            description=_clean(expense.description),
        )


def _clean(value: str | None) -> str:
    return (value or "").strip().lower()


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (TypeError, ValueError, InvalidOperation):
        return Decimal("0")


# =============================================================================
# Amount (max 50)
# =============================================================================


@dataclass(frozen=True)
class AmountDelta:
    difference: Decimal
    percent: Decimal | None  # None when the expense amount is not positive


def measure_amount(transaction: BankTransaction, profile: ExpenseProfile) -> AmountDelta:
    expected = _as_decimal(profile.expense.amount)
    difference = abs(abs(_as_decimal(transaction.amount)) - expected)
    percent = difference / expected * 100 if expected > 0 else None
    return AmountDelta(difference=difference, percent=percent)


def _percent_below(limit: int) -> Callable[[AmountDelta], bool]:
    return lambda delta: delta.percent is not None and delta.percent < limit


AMOUNT_TIERS: tuple[ScoreTier[AmountDelta], ...] = (
    ScoreTier(lambda delta: delta.difference < AMOUNT_EXACT_TOLERANCE, 50, "exact amount match"),
    ScoreTier(_percent_below(2), 45, "near-exact amount match"),
    ScoreTier(_percent_below(5), 35, "very similar amount"),
    ScoreTier(_percent_below(10), 20, "similar amount"),
    ScoreTier(_percent_below(20), 10, "approximate amount"),
)


# =============================================================================
# Supplier (max 30)
# =============================================================================


@dataclass(frozen=True)
class SupplierEvidence:
    counterpart_match: bool
    in_description: bool
    fuzzy_score: float


def _contains_either(a: str, b: str) -> bool:
    return bool(a) and bool(b) and (a in b or b in a)


def measure_supplier(
    transaction: BankTransaction, profile: ExpenseProfile
) -> SupplierEvidence | None:
    supplier = profile.supplier
    if not supplier:
        return None

    counterpart = _clean(transaction.counterpart_name)
    description = _clean(transaction.description)
    return SupplierEvidence(
        counterpart_match=_contains_either(counterpart, supplier),
        in_description=_contains_either(description, supplier),
        fuzzy_score=fuzzy_supplier_match(counterpart, supplier) if counterpart else 0.0,
    )


SUPPLIER_TIERS: tuple[ScoreTier[SupplierEvidence], ...] = (
    ScoreTier(lambda s: s.counterpart_match, 30, "supplier exact match"),
    ScoreTier(lambda s: s.in_description, 25, "supplier found in description"),
    ScoreTier(lambda s: s.fuzzy_score > 60, 20, "similar supplier"),
    ScoreTier(lambda s: s.fuzzy_score > 30, 10, "possible supplier"),
)


# =============================================================================
# Reference number (max 20)
# =============================================================================


def measure_reference(transaction: BankTransaction, profile: ExpenseProfile) -> bool:
    return references_overlap(extract_references(transaction.description), set(profile.references))


REFERENCE_TIERS: tuple[ScoreTier[bool], ...] = (
    ScoreTier(lambda shared: shared, 20, "invoice/reference number match"),
)


# =============================================================================
# Description similarity (max 15)
# =============================================================================


def measure_description(transaction: BankTransaction, profile: ExpenseProfile) -> float:
    return semantic_similarity(transaction.description, profile.description)


DESCRIPTION_TIERS: tuple[ScoreTier[float], ...] = (
    ScoreTier(lambda similarity: similarity > 50, 15, "very similar descriptions"),
    ScoreTier(lambda similarity: similarity > 25, 10, "similar descriptions"),
    ScoreTier(lambda similarity: similarity > 10, 5, "some words in common"),
)


# =============================================================================
# Date proximity (max 10)
# =============================================================================


def measure_date(transaction: BankTransaction, profile: ExpenseProfile) -> int | None:
    tx_date: date | None = transaction.transaction_date
    expense_date: date | None = profile.expense.expense_date
    if tx_date is None or expense_date is None:
        return None
    return abs((tx_date - expense_date).days)


DATE_TIERS: tuple[ScoreTier[int], ...] = (
    ScoreTier(lambda days: days == 0, 10, "same date"),
    ScoreTier(lambda days: days <= 3, 8, "within 3 days"),
    ScoreTier(lambda days: days <= 7, 5, "within a week"),
    ScoreTier(lambda days: days <= 30, 3, "within a month"),
)


# =============================================================================
# Category (max 5)
# =============================================================================


def measure_category(transaction: BankTransaction, profile: ExpenseProfile) -> bool:
    expense_category = profile.expense.category
    return bool(transaction.category and expense_category and transaction.category == expense_category)


CATEGORY_TIERS: tuple[ScoreTier[bool], ...] = (
    ScoreTier(lambda same: same, 5, "category match"),
)


SCORE_FACTORS: tuple[ScoreFactor[Any], ...] = (
    ScoreFactor("amount", measure_amount, AMOUNT_TIERS),
    ScoreFactor("supplier", measure_supplier, SUPPLIER_TIERS),
    ScoreFactor("reference", measure_reference, REFERENCE_TIERS),
    ScoreFactor("description", measure_description, DESCRIPTION_TIERS),
    ScoreFactor("date", measure_date, DATE_TIERS),
    ScoreFactor("category", measure_category, CATEGORY_TIERS),
)


def score_match(
    transaction: BankTransaction,
    expense: Expense,
    *,
    profile: ExpenseProfile | None = None,
) -> ReconciliationMatch:
    """Score how likely ``transaction`` is the payment of ``expense``.

    Pure and deterministic: neither input is modified and nothing but the two
    records is read.

    Args:
        transaction: Bank transaction to evaluate
        expense: Expense to match against
        profile: Precomputed ``ExpenseProfile`` for ``expense`` (optional)

    Returns:
        ReconciliationMatch with confidence (0-100), ordered reasons and a
        per-factor breakdown.
    """
    if profile is None:
        profile = ExpenseProfile.from_expense(expense)

    total = 0
    reasons: list[str] = []
    breakdown: dict[str, int] = {}

    for factor in SCORE_FACTORS:
        tier = factor.evaluate(transaction, profile)
        points = tier.points if tier else 0
        breakdown[factor.name] = points
        if tier:
            total += points
            reasons.append(tier.reason)

    return ReconciliationMatch(
        confidence=max(0, min(total, MAX_CONFIDENCE)),
        reasons=tuple(reasons),
        transaction=transaction,
        breakdown=breakdown,
    )
