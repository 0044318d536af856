"""
Pytest configuration and global fixtures.

This module provides shared fixtures used across all tests.
"""

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from openbandi.banking.domain.models import BankTransaction, Expense
from openbandi.banking.infrastructure.repository import SqlLedgerStore
from openbandi.storage.database.base import sqlite_url
from openbandi.utils.config import Settings


def make_transaction(**overrides) -> BankTransaction:
    """Build a bank transaction; defaults pay 100.00 on 2024-03-10."""
    data = {
        "id": "tx-1",
        "transaction_date": date(2024, 3, 10),
        "description": "",
        "amount": Decimal("-100.00"),
    }
    data.update(overrides)
    return BankTransaction(**data)


def make_expense(**overrides) -> Expense:
    """Build an expense; defaults cost 100.00 on 2024-03-10."""
    data = {
        "id": "exp-1",
        "description": "",
        "amount": Decimal("100.00"),
        "expense_date": date(2024, 3, 10),
    }
    data.update(overrides)
    return Expense(**data)


@pytest.fixture
def acme_transaction() -> BankTransaction:
    """Payment of invoice 4521 to ACME, booked on the expense date."""
    return make_transaction(
        id="tx-acme",
        amount=Decimal("-120.00"),
        description="FATTURA 4521 ACME SRL",
        counterpart_name="ACME SRL",
        transaction_date=date(2024, 3, 10),
    )


@pytest.fixture
def acme_expense() -> Expense:
    return make_expense(
        id="exp-acme",
        amount=Decimal("120.00"),
        supplier_name="ACME SRL",
        description="Acquisto materiali",
        receipt_number="4521",
        expense_date=date(2024, 3, 10),
        project_id="PRJ-1",
    )


@pytest.fixture
def ledger_path(tmp_path: Path) -> Path:
    return tmp_path / "ledger.db"


@pytest.fixture
def ledger_url(ledger_path: Path) -> str:
    return sqlite_url(ledger_path)


@pytest.fixture
def ledger_store(ledger_url: str) -> SqlLedgerStore:
    """Empty SQLite ledger in a temporary directory."""
    return SqlLedgerStore(ledger_url)


@pytest.fixture
def test_settings(ledger_url: str) -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        database_url=ledger_url,
        min_confidence=70,
        review_confidence=30,
        metrics_enabled=False,
    )


@pytest.fixture
def transaction_factory():
    """Factory for bank transactions with keyword overrides."""
    return make_transaction


@pytest.fixture
def expense_factory():
    """Factory for expenses with keyword overrides."""
    return make_expense
