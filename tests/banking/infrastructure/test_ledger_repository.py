"""Tests for the SQL ledger store."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from openbandi.banking.infrastructure.repository import SqlLedgerStore
from openbandi.exceptions import RecordNotFoundError, StorageError, ValidationError
from openbandi.storage.database.models import ExpenseRecord
from openbandi.storage.session import session_scope

pytestmark = pytest.mark.unit


@pytest.fixture
def populated_store(ledger_store, transaction_factory, expense_factory):
    ledger_store.add_transactions(
        [
            transaction_factory(id="tx-1"),
            transaction_factory(id="tx-2", expense_id="exp-1", is_reconciled=True),
        ]
    )
    ledger_store.add_expenses(
        [
            expense_factory(id="exp-1", project_id="PRJ-1"),
            expense_factory(id="exp-2", project_id="PRJ-2"),
        ]
    )
    return ledger_store


class TestSqlLedgerStore:
    """Tests for SqlLedgerStore."""

    def test_new_database_is_empty(self, ledger_store, ledger_path):
        assert ledger_store.list_transactions() == []
        assert ledger_store.list_expenses() == []
        assert ledger_path.exists()

    def test_records_persist_across_instances(self, populated_store, ledger_url):
        reopened = SqlLedgerStore(ledger_url)

        assert [t.id for t in reopened.list_transactions()] == ["tx-1", "tx-2"]
        assert reopened.get_expense("exp-2").project_id == "PRJ-2"
        assert reopened.get_transaction("tx-1").amount == Decimal("-100.00")
        assert reopened.get_transaction("tx-1").transaction_date == date(2024, 3, 10)

    def test_insertion_order_kept(self, ledger_store, transaction_factory):
        ledger_store.add_transactions(
            [transaction_factory(id="tx-b"), transaction_factory(id="tx-a")]
        )

        assert [t.id for t in ledger_store.list_transactions()] == ["tx-b", "tx-a"]

    def test_list_filters(self, populated_store):
        assert [t.id for t in populated_store.list_transactions(reconciled=True)] == ["tx-2"]
        assert [t.id for t in populated_store.list_transactions(reconciled=False)] == ["tx-1"]
        assert [e.id for e in populated_store.list_expenses("PRJ-1")] == ["exp-1"]

    def test_get_missing_records(self, populated_store):
        with pytest.raises(RecordNotFoundError) as exc_info:
            populated_store.get_transaction("tx-404")
        assert exc_info.value.context["entity_id"] == "tx-404"

        with pytest.raises(RecordNotFoundError):
            populated_store.get_expense("exp-404")

    def test_duplicate_ids_rejected(self, populated_store, transaction_factory):
        with pytest.raises(ValidationError):
            populated_store.add_transactions([transaction_factory(id="tx-1")])

        with pytest.raises(ValidationError):
            populated_store.add_transactions(
                [transaction_factory(id="tx-9"), transaction_factory(id="tx-9")]
            )

        assert [t.id for t in populated_store.list_transactions()] == ["tx-1", "tx-2"]

    def test_add_returns_count(self, ledger_store, transaction_factory):
        assert ledger_store.add_transactions([]) == 0
        assert ledger_store.add_transactions([transaction_factory()]) == 1

    def test_update_transaction(self, populated_store, ledger_url):
        updated = populated_store.update_transaction(
            "tx-1",
            {
                "expense_id": "exp-2",
                "is_reconciled": True,
                "reconciliation_confidence": 0.85,
                "reconciliation_notes": "Manual reconciliation: exact amount match",
            },
        )

        assert updated.is_reconciled is True
        assert updated.reconciliation_confidence == pytest.approx(0.85)
        stored = SqlLedgerStore(ledger_url).get_transaction("tx-1")
        assert stored.expense_id == "exp-2"
        assert stored.reconciliation_notes.startswith("Manual reconciliation")

    @pytest.mark.parametrize("field", ["amount", "category"])
    def test_update_rejects_non_reconciliation_fields(self, populated_store, field):
        with pytest.raises(ValidationError) as exc_info:
            populated_store.update_transaction("tx-1", {field: "x"})
        assert exc_info.value.context["field"] == field

    def test_update_rejects_invalid_values(self, populated_store):
        with pytest.raises(ValidationError):
            populated_store.update_transaction("tx-1", {"reconciliation_confidence": 2.0})

        assert populated_store.get_transaction("tx-1").reconciliation_confidence is None

    def test_update_missing_transaction(self, populated_store):
        with pytest.raises(RecordNotFoundError):
            populated_store.update_transaction("tx-404", {"is_reconciled": True})

    def test_failed_write_leaves_ledger_unchanged(self, populated_store, ledger_url, mocker):
        mocker.patch.object(
            Session,
            "commit",
            side_effect=OperationalError("UPDATE", {}, Exception("disk I/O error")),
        )

        with pytest.raises(StorageError) as exc_info:
            populated_store.update_transaction("tx-1", {"is_reconciled": True})
        assert isinstance(exc_info.value.original_error, OperationalError)

        mocker.stopall()
        assert populated_store.get_transaction("tx-1").is_reconciled is False
        assert SqlLedgerStore(ledger_url).get_transaction("tx-1").is_reconciled is False

    def test_not_a_database(self, ledger_path, ledger_url):
        ledger_path.write_text("{not a database", encoding="utf-8")

        with pytest.raises(StorageError) as exc_info:
            SqlLedgerStore(ledger_url)
        assert exc_info.value.original_error is not None

    def test_invalid_stored_record(self, ledger_store):
        with session_scope(ledger_store.session_factory) as db:
            db.add(
                ExpenseRecord(
                    expense_id="exp-bad", amount=Decimal("-5"), expense_date=date(2024, 3, 10)
                )
            )
            db.commit()

        with pytest.raises(StorageError) as exc_info:
            ledger_store.list_expenses()
        assert exc_info.value.context["table"] == "expenses"
