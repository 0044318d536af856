"""Tests for bank reconciliation domain models and value objects."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from openbandi.banking.domain.models import BankTransaction, Expense
from openbandi.banking.domain.value_objects import ReconciliationMatch, ReconciliationResult

pytestmark = pytest.mark.unit


class TestBankTransaction:
    """Tests for BankTransaction model."""

    def test_defaults(self, transaction_factory):
        tx = transaction_factory()

        assert tx.currency == "EUR"
        assert tx.is_reconciled is False
        assert tx.expense_id is None
        assert tx.reconciliation_confidence is None

    @pytest.mark.parametrize(
        "amount,expected", [("-10.00", "debit"), ("10.00", "credit"), ("0", "credit")]
    )
    def test_transaction_type_from_sign(self, transaction_factory, amount, expected):
        assert transaction_factory(amount=Decimal(amount)).transaction_type == expected

    def test_is_immutable(self, transaction_factory):
        tx = transaction_factory()
        with pytest.raises(ValidationError):
            tx.is_reconciled = True

    @pytest.mark.parametrize("confidence", [-0.1, 1.5])
    def test_confidence_ratio_bounds(self, transaction_factory, confidence):
        with pytest.raises(ValidationError):
            transaction_factory(reconciliation_confidence=confidence)

    def test_parses_iso_strings(self):
        tx = BankTransaction.model_validate(
            {"id": "tx-9", "transaction_date": "2024-03-10", "amount": "-12.50"}
        )
        assert tx.transaction_date == date(2024, 3, 10)
        assert tx.amount == Decimal("-12.50")

    def test_repr(self, transaction_factory):
        assert "tx-1" in repr(transaction_factory())


class TestExpense:
    """Tests for Expense model."""

    @pytest.mark.parametrize("amount", ["0", "-5.00"])
    def test_amount_must_be_positive(self, expense_factory, amount):
        with pytest.raises(ValidationError):
            expense_factory(amount=Decimal(amount))

    def test_optional_fields(self, expense_factory):
        expense = expense_factory()
        assert expense.supplier_name is None
        assert expense.receipt_number is None
        assert expense.project_id is None


class TestReconciliationMatch:
    """Tests for ReconciliationMatch value object."""

    def test_summary(self):
        match = ReconciliationMatch(confidence=85, reasons=("exact amount match", "same date"))

        assert match.summary == "exact amount match, same date"

    def test_breakdown_not_part_of_equality(self):
        left = ReconciliationMatch(confidence=60, breakdown={"amount": 50, "date": 10})
        right = ReconciliationMatch(confidence=60, breakdown={})
        assert left == right

    def test_str(self, transaction_factory):
        match = ReconciliationMatch(confidence=90, transaction=transaction_factory())
        assert str(match) == "ReconciliationMatch(transaction=tx-1, confidence=90)"


class TestReconciliationResult:
    """Tests for ReconciliationResult value object."""

    def test_total_count(self):
        result = ReconciliationResult(matched_count=3, review_count=1, unmatched_count=2)
        assert result.total_count == 6
        assert str(result) == "ReconciliationResult(matched=3, review=1, unmatched=2)"

