"""Statement importer contract.

Concrete importers only turn a file into ``BankTransaction`` rows. The shared
``import_transactions`` run checks the file, keeps per-row problems apart from
fatal ones and drops movements the ledger already holds.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path

from ....exceptions import BankImportError
from ....utils.logging import get_logger
from ...domain.models import BankTransaction

logger = get_logger(__name__)

# Italian banks export in UTF-8 or one of the Windows/Latin-1 code pages
STATEMENT_ENCODINGS = ("utf-8", "cp1252", "iso-8859-1")

DuplicateKey = tuple[date, Decimal, str]


@dataclass
class ImportResult:
    """Counters and new transactions of one statement import."""

    source: str = ""
    success_count: int = 0
    error_count: int = 0
    duplicate_count: int = 0
    transactions: list[BankTransaction] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def accept(self, transaction: BankTransaction) -> None:
        self.transactions.append(transaction)
        self.success_count += 1

    def skip_duplicate(self) -> None:
        self.duplicate_count += 1

    def fail(self, *messages: str) -> None:
        self.errors.extend(messages)
        self.error_count += len(messages)

    @property
    def total_count(self) -> int:
        return self.success_count + self.error_count + self.duplicate_count

    def __str__(self) -> str:
        return (
            f"ImportResult({self.source or '-'}: {self.success_count} imported, "
            f"{self.duplicate_count} duplicates, {self.error_count} errors)"
        )


def duplicate_key(transaction: BankTransaction) -> DuplicateKey:
    """Date, signed amount and normalised description of a movement."""
    return (
        transaction.transaction_date,
        transaction.amount,
        transaction.description.strip().lower(),
    )


class BaseImporter(ABC):
    """A statement file reader.

    ``parse`` returns every row it could read and appends a message to
    ``row_errors`` for each row it could not. A file that is unusable as a
    whole raises ``BankImportError`` instead.
    """

    def __init__(self, file_path: Path) -> None:
        self.file_path = Path(file_path)
        self.row_errors: list[str] = []

    @abstractmethod
    def parse(self) -> list[BankTransaction]:
        """Read the statement rows."""

    def import_transactions(
        self,
        existing: Iterable[BankTransaction] = (),
        skip_duplicates: bool = True,
    ) -> ImportResult:
        """Parse the statement and keep only movements not seen before.

        A movement is a duplicate when its ``duplicate_key`` matches one in
        ``existing`` or an earlier row of the same file.
        """
        result = ImportResult(source=self.file_path.name)

        try:
            self.ensure_readable()
            parsed = self.parse()
        except (BankImportError, OSError, UnicodeDecodeError) as e:
            result.fail(f"File parsing error: {e}")
            logger.warning("statement_import_failed", file=result.source, error=str(e))
            return result

        result.fail(*self.row_errors)

        known: set[DuplicateKey] = {duplicate_key(t) for t in existing}
        for transaction in parsed:
            key = duplicate_key(transaction)
            if skip_duplicates and key in known:
                result.skip_duplicate()
                continue
            known.add(key)
            result.accept(transaction)

        logger.info("statement_imported", file=result.source, **_counts(result))
        return result

    def ensure_readable(self) -> None:
        """Raise ``BankImportError`` for a missing or zero-byte file."""
        if not self.file_path.is_file():
            raise BankImportError(f"File not found: {self.file_path}")
        if not self.file_path.stat().st_size:
            raise BankImportError(f"File is empty: {self.file_path}")

    def detect_encoding(self) -> str:
        raw = self.file_path.read_bytes()
        for encoding in STATEMENT_ENCODINGS:
            try:
                raw.decode(encoding)
            except UnicodeDecodeError:
                continue
            return encoding
        return STATEMENT_ENCODINGS[0]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.file_path)!r})"


def _counts(result: ImportResult) -> dict[str, int]:
    return {
        "imported": result.success_count,
        "errors": result.error_count,
        "duplicates": result.duplicate_count,
    }
