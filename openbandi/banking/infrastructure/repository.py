"""Ledger store: the data-store collaborator of the reconciliation service.

``LedgerRepository`` is the contract the service depends on.
``SqlLedgerStore`` implements it on SQLAlchemy tables, SQLite by default.
"""

from collections.abc import Iterable
from typing import Any, Protocol

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from ...exceptions import RecordNotFoundError, StorageError, ValidationError, wrap_exception
from ...storage.database.base import init_db
from ...storage.database.models import BankTransactionRecord, ExpenseRecord
from ...storage.session import session_scope
from ...utils.logging import get_logger
from ..domain.models import BankTransaction, Expense

logger = get_logger(__name__)

# Fields the reconciliation workflow is allowed to change on a transaction
UPDATABLE_TRANSACTION_FIELDS = frozenset(
    {
        "expense_id",
        "is_reconciled",
        "reconciliation_confidence",
        "reconciliation_notes",
    }
)


class LedgerRepository(Protocol):
    """Query/update operations the reconciliation service needs."""

    def list_transactions(self, reconciled: bool | None = None) -> list[BankTransaction]: ...

    def list_expenses(self, project_id: str | None = None) -> list[Expense]: ...

    def get_transaction(self, transaction_id: str) -> BankTransaction: ...

    def get_expense(self, expense_id: str) -> Expense: ...

    def update_transaction(self, transaction_id: str, fields: dict[str, Any]) -> BankTransaction: ...

    def add_transactions(self, transactions: Iterable[BankTransaction]) -> int: ...


class SqlLedgerStore:
    """``LedgerRepository`` backed by a SQL database.

    Every call runs in its own session; a failed write is rolled back, so the
    store never reports state that is not in the database. Records come back
    in insertion order.

    Example:
        >>> store = SqlLedgerStore("sqlite:///ledger.db")
        >>> store.add_transactions(result.transactions)
    """

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url
        self.session_factory = init_db(database_url)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_transactions(self, reconciled: bool | None = None) -> list[BankTransaction]:
        stmt = select(BankTransactionRecord).order_by(BankTransactionRecord.id)
        if reconciled is not None:
            stmt = stmt.where(BankTransactionRecord.is_reconciled == reconciled)
        with session_scope(self.session_factory) as db:
            return [_to_domain(record) for record in db.execute(stmt).scalars()]

    def list_expenses(self, project_id: str | None = None) -> list[Expense]:
        stmt = select(ExpenseRecord).order_by(ExpenseRecord.id)
        if project_id is not None:
            stmt = stmt.where(ExpenseRecord.project_id == project_id)
        with session_scope(self.session_factory) as db:
            return [_to_domain(record) for record in db.execute(stmt).scalars()]

    def get_transaction(self, transaction_id: str) -> BankTransaction:
        with session_scope(self.session_factory) as db:
            return _to_domain(self._transaction_record(db, transaction_id))

    def get_expense(self, expense_id: str) -> Expense:
        stmt = select(ExpenseRecord).where(ExpenseRecord.expense_id == expense_id)
        with session_scope(self.session_factory) as db:
            record = db.execute(stmt).scalar_one_or_none()
            if record is None:
                raise RecordNotFoundError(
                    f"Expense {expense_id} not found",
                    entity_type="Expense",
                    entity_id=expense_id,
                )
            return _to_domain(record)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def update_transaction(self, transaction_id: str, fields: dict[str, Any]) -> BankTransaction:
        """Apply reconciliation fields to a stored transaction.

        Raises:
            ValidationError: If a field is not updatable or a value is invalid
            RecordNotFoundError: If the transaction does not exist
            StorageError: If the database write fails
        """
        unknown = set(fields) - UPDATABLE_TRANSACTION_FIELDS
        if unknown:
            raise ValidationError(
                "Transaction fields cannot be updated",
                field=", ".join(sorted(unknown)),
            )

        with session_scope(self.session_factory) as db:
            record = self._transaction_record(db, transaction_id)
            try:
                updated = BankTransaction.model_validate(
                    {**_to_domain(record).model_dump(), **fields}
                )
            except PydanticValidationError as e:
                raise wrap_exception(
                    e,
                    "Invalid transaction update",
                    exception_class=ValidationError,
                    transaction_id=transaction_id,
                ) from e

            for name in fields:
                setattr(record, name, getattr(updated, name))
            db.commit()

        logger.debug(
            "ledger_transaction_updated", transaction_id=transaction_id, fields=sorted(fields)
        )
        return updated

    def add_transactions(self, transactions: Iterable[BankTransaction]) -> int:
        """Store new transactions; IDs must not already exist.

        Returns:
            Number of transactions added
        """
        records = [BankTransactionRecord.from_domain(t) for t in transactions]
        return self._add(records, BankTransactionRecord.transaction_id)

    def add_expenses(self, expenses: Iterable[Expense]) -> int:
        """Store new expenses; IDs must not already exist."""
        records = [ExpenseRecord.from_domain(e) for e in expenses]
        return self._add(records, ExpenseRecord.expense_id)

    def _add(self, records: list[Any], id_column: Any) -> int:
        ids = [getattr(record, id_column.key) for record in records]
        repeated = sorted({i for i in ids if ids.count(i) > 1})
        if repeated:
            raise ValidationError("Duplicate id in batch", field="id", value=repeated[0])
        if not records:
            return 0

        table = id_column.class_.__tablename__
        with session_scope(self.session_factory) as db:
            taken = db.execute(select(id_column).where(id_column.in_(ids))).scalars().first()
            if taken is not None:
                raise ValidationError(f"Duplicate id in {table}", field="id", value=taken)
            db.add_all(records)
            db.commit()

        logger.debug("ledger_records_added", table=table, count=len(records))
        return len(records)

    @staticmethod
    def _transaction_record(db: Session, transaction_id: str) -> BankTransactionRecord:
        stmt = select(BankTransactionRecord).where(
            BankTransactionRecord.transaction_id == transaction_id
        )
        record = db.execute(stmt).scalar_one_or_none()
        if record is None:
            raise RecordNotFoundError(
                f"Bank transaction {transaction_id} not found",
                entity_type="BankTransaction",
                entity_id=transaction_id,
            )
        return record

    def __repr__(self) -> str:
        return f"<SqlLedgerStore(url='{self.database_url}')>"


def _to_domain(record: BankTransactionRecord | ExpenseRecord) -> Any:
    try:
        return record.to_domain()
    except PydanticValidationError as e:
        raise wrap_exception(
            e,
            "Stored record is not valid",
            exception_class=StorageError,
            table=record.__tablename__,
            record_id=record.id,
        ) from e
