"""Bank statement importers."""

from datetime import date
from pathlib import Path

from ....exceptions import BankImportError
from .base import BaseImporter, ImportResult
from .camt_importer import CamtXmlImporter
from .csv_importer import CSVLayout, CSVStatementImporter
from .mt940_importer import MT940Importer
from .parsing import categorize_description

__all__ = [
    "BaseImporter",
    "ImportResult",
    "CSVLayout",
    "CSVStatementImporter",
    "CamtXmlImporter",
    "MT940Importer",
    "categorize_description",
    "create_importer",
]

MT940_SUFFIXES = (".sta", ".mt940", ".940")


def create_importer(file_path: Path, statement_date: date | None = None) -> BaseImporter:
    """Pick the importer for a statement file from its extension.

    ``statement_date`` only applies to CSV invoice listings.

    Raises:
        BankImportError: If the format is not supported
    """
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix in (".csv", ".txt"):
        return CSVStatementImporter(path, statement_date=statement_date)
    if suffix in MT940_SUFFIXES:
        return MT940Importer(path)
    if suffix == ".xml":
        return CamtXmlImporter(path)
    raise BankImportError(f"Unsupported statement format: {suffix or 'none'}", file_format=suffix)
