"""Reconciliation service.

Orchestrates the pure matchers with the ledger store: builds the review queue,
applies manual reconciliations and runs batch auto-reconciliation. All writes
go through ``LedgerRepository.update_transaction``; reconciliation state lives
only on the transaction record.
"""

from ....exceptions import OpenBandiError, ReconciliationError, ValidationError
from ....utils.config import Settings, get_settings
from ....utils.logging import (
    LogPerformance,
    bind_run_id,
    clear_run_id,
    get_logger,
    log_transaction_reconciled,
)
from ...domain.models import BankTransaction, Expense
from ...domain.value_objects import MatchSuggestion, ReconciliationMatch, ReconciliationResult
from ...infrastructure.repository import LedgerRepository
from ...matchers import ExpenseProfile, find_best_match, is_expense_reconciled, score_match
from ...metrics import record_batch_duration, record_reconciliation, start_metrics_server

logger = get_logger(__name__)


class ReconciliationService:
    """Match bank transactions to project expenses and persist accepted matches.

    Args:
        repository: Ledger store holding transactions and expenses
        settings: Thresholds and metrics configuration (defaults to global settings)

    Example:
        >>> service = ReconciliationService(SqlLedgerStore("sqlite:///openbandi.db"))
        >>> result = service.reconcile_batch(dry_run=True)
        >>> print(result)
        ReconciliationResult(matched=3, review=1, unmatched=2)
    """

    def __init__(self, repository: LedgerRepository, settings: Settings | None = None) -> None:
        self.repository = repository
        self.settings = settings or get_settings()

        if self.settings.metrics_enabled:
            start_metrics_server(self.settings.metrics_port)

    def preview(self, transaction_id: str, expense_id: str) -> ReconciliationMatch:
        """Score one pairing without persisting anything."""
        transaction = self.repository.get_transaction(transaction_id)
        expense = self.repository.get_expense(expense_id)
        return score_match(transaction, expense)

    def suggest_matches(
        self,
        review_threshold: int | None = None,
        auto_threshold: int | None = None,
        search: str | None = None,
        project_id: str | None = None,
    ) -> list[MatchSuggestion]:
        """Build the review queue.

        Every unreconciled transaction is scored against every expense that has
        no reconciled transaction yet. Pairs scoring at least
        ``review_threshold`` are returned, best first; ``auto_match`` flags
        those at or above ``auto_threshold``.

        Args:
            review_threshold: Lowest confidence listed (default: settings.review_confidence)
            auto_threshold: Confidence for auto-matching (default: settings.min_confidence)
            search: Case-insensitive filter on descriptions and supplier name
            project_id: Only consider expenses of this project
        """
        review = self.settings.review_confidence if review_threshold is None else review_threshold
        auto = self.settings.min_confidence if auto_threshold is None else auto_threshold

        transactions = self.repository.list_transactions()
        unreconciled = [t for t in transactions if not t.is_reconciled]
        profiles = [
            ExpenseProfile.from_expense(expense)
            for expense in self.repository.list_expenses(project_id)
            if not is_expense_reconciled(expense.id, transactions)
        ]

        suggestions: list[MatchSuggestion] = []
        for transaction in unreconciled:
            for profile in profiles:
                match = score_match(transaction, profile.expense, profile=profile)
                if match.confidence < review:
                    continue
                suggestions.append(
                    MatchSuggestion(
                        transaction=transaction,
                        expense=profile.expense,
                        confidence=match.confidence,
                        reasons=match.reasons,
                        auto_match=match.confidence >= auto,
                    )
                )

        suggestions.sort(key=lambda s: s.confidence, reverse=True)

        if search:
            suggestions = filter_suggestions(suggestions, search)

        logger.debug(
            "match_suggestions_built",
            transactions=len(unreconciled),
            expenses=len(profiles),
            suggestions=len(suggestions),
        )
        return suggestions

    def reconcile(
        self,
        transaction_id: str,
        expense_id: str,
        confidence: int | None = None,
        notes: str | None = None,
    ) -> BankTransaction:
        """Manually link a transaction to an expense.

        Args:
            transaction_id: Transaction to reconcile
            expense_id: Expense it pays
            confidence: Confidence to record (0-100); scored when omitted
            notes: Reconciliation notes; defaults to the scorer's reasons

        Returns:
            The updated transaction

        Raises:
            ReconciliationError: If the transaction is already reconciled
            ValidationError: If confidence is outside 0-100
            RecordNotFoundError: If either record does not exist
        """
        if confidence is not None and not 0 <= confidence <= 100:
            raise ValidationError(
                "Confidence must be between 0 and 100", field="confidence", value=confidence
            )

        transaction = self.repository.get_transaction(transaction_id)
        expense = self.repository.get_expense(expense_id)

        if transaction.is_reconciled:
            record_reconciliation("manual", "failure")
            raise ReconciliationError(
                "Transaction is already reconciled",
                transaction_id=transaction_id,
                expense_id=transaction.expense_id,
            )

        if confidence is None or notes is None:
            match = score_match(transaction, expense)
            if confidence is None:
                confidence = match.confidence
            if notes is None:
                notes = f"Manual reconciliation: {match.summary}"

        return self._apply(transaction, expense, confidence, notes, mode="manual")

    def reconcile_batch(
        self,
        min_confidence: int | None = None,
        dry_run: bool = False,
        project_id: str | None = None,
    ) -> ReconciliationResult:
        """Auto-reconcile every expense that has no reconciled transaction yet.

        Expenses are processed in ledger order. Each takes its best match among
        the unreconciled transactions not already claimed earlier in the run.

        - best match >= ``min_confidence`` → reconciled ("matched")
        - best match >= review threshold → left for manual review ("review")
        - otherwise → "unmatched"

        Args:
            min_confidence: Auto-reconciliation threshold (default: settings.min_confidence)
            dry_run: Compute the result without writing to the ledger
            project_id: Only reconcile expenses of this project
        """
        threshold = self.settings.min_confidence if min_confidence is None else min_confidence
        review = min(self.settings.review_confidence, threshold)
        result = ReconciliationResult(dry_run=dry_run)

        bind_run_id()
        try:
            with LogPerformance(
                "reconciliation_batch", logger, threshold=threshold, dry_run=dry_run
            ) as perf:
                self._match_expenses(result, threshold, review, project_id)
            record_batch_duration(perf.duration)
            logger.info(
                "reconciliation_batch_summary",
                matched=result.matched_count,
                review=result.review_count,
                unmatched=result.unmatched_count,
            )
        finally:
            clear_run_id()
        return result

    def _match_expenses(
        self,
        result: ReconciliationResult,
        threshold: int,
        review: int,
        project_id: str | None,
    ) -> None:
        transactions = self.repository.list_transactions()
        available = [t for t in transactions if not t.is_reconciled]
        claimed: set[str] = set()

        for expense in self.repository.list_expenses(project_id):
            if is_expense_reconciled(expense.id, transactions):
                continue

            candidates = [t for t in available if t.id not in claimed]
            best = find_best_match(expense, candidates, min_confidence=review)

            if best is None or best.transaction is None:
                result.unmatched_count += 1
                continue
            if best.confidence < threshold:
                result.review_count += 1
                continue

            # A claimed transaction is not offered to later expenses in this run
            claimed.add(best.transaction.id)
            result.matches[expense.id] = best
            result.matched_count += 1
            if not result.dry_run:
                self._apply(
                    best.transaction,
                    expense,
                    best.confidence,
                    f"Auto-reconciled: {best.summary}",
                    mode="auto",
                )

    def reconciliation_status(self, project_id: str | None = None) -> list[tuple[Expense, bool]]:
        """Pair each expense with whether it is reconciled."""
        transactions = self.repository.list_transactions()
        return [
            (expense, is_expense_reconciled(expense.id, transactions))
            for expense in self.repository.list_expenses(project_id)
        ]

    def _apply(
        self,
        transaction: BankTransaction,
        expense: Expense,
        confidence: int,
        notes: str,
        mode: str,
    ) -> BankTransaction:
        try:
            updated = self.repository.update_transaction(
                transaction.id,
                {
                    "expense_id": expense.id,
                    "is_reconciled": True,
                    "reconciliation_confidence": confidence / 100,
                    "reconciliation_notes": notes,
                },
            )
        except OpenBandiError:
            record_reconciliation(mode, "failure")
            raise

        record_reconciliation(mode, "success", confidence)
        log_transaction_reconciled(logger, transaction.id, expense.id, confidence, mode)
        return updated


def filter_suggestions(suggestions: list[MatchSuggestion], term: str) -> list[MatchSuggestion]:
    """Keep suggestions whose descriptions or supplier contain ``term`` (case-insensitive)."""
    needle = term.lower()
    return [
        s
        for s in suggestions
        if needle in s.transaction.description.lower()
        or needle in s.expense.description.lower()
        or needle in (s.expense.supplier_name or "").lower()
    ]
