"""CSV bank statement importer.

Three layouts are recognised from the header row:

- invoice listing (header mentions "Fornitore" or "Numero Fattura"):
  ``File;Numero Fattura;Fornitore;Descrizione;Importo (€);IVA (%);CUP``
- Italian bank export (first header starts with "Data"):
  ``Data;Beneficiario;Descrizione;Importo;Causale``
- generic export:
  ``Date,Description,Amount,Reference,Counterpart``

The separator is ``;`` when the header row contains one, ``,`` otherwise.
"""

import csv
from collections.abc import Callable
from datetime import date
from enum import Enum
from pathlib import Path

from ....exceptions import BankImportError
from ...domain.models import BankTransaction
from .base import BaseImporter
from .parsing import UNKNOWN_DESCRIPTION, build_transaction, parse_amount, parse_date


class CSVLayout(str, Enum):
    INVOICE_LISTING = "invoice_listing"
    ITALIAN_BANK = "italian_bank"
    GENERIC = "generic"

    def __str__(self) -> str:
        return self.value


def detect_layout(headers: list[str]) -> CSVLayout:
    lowered = [h.lower() for h in headers]
    if any(
        "fornitore" in h or "numero fattura" in h or "numero_fattura" in h for h in lowered
    ):
        return CSVLayout.INVOICE_LISTING
    if lowered and "data" in lowered[0]:
        return CSVLayout.ITALIAN_BANK
    return CSVLayout.GENERIC


class CSVStatementImporter(BaseImporter):
    """Import bank movements from a CSV statement.

    Args:
        file_path: CSV file
        statement_date: Date assigned to invoice-listing rows, which carry no
            booking date of their own

    Example:
        >>> importer = CSVStatementImporter(Path("estratto_conto.csv"))
        >>> result = importer.import_transactions(existing=store.list_transactions())
        >>> store.add_transactions(result.transactions)
    """

    def __init__(self, file_path: Path, statement_date: date | None = None) -> None:
        super().__init__(file_path)
        self.statement_date = statement_date
        self.layout: CSVLayout | None = None

    def parse(self) -> list[BankTransaction]:
        text = self.file_path.read_text(encoding=self.detect_encoding())
        lines = [line for line in text.splitlines() if line.strip()]
        if not lines:
            raise BankImportError("Statement has no rows", file_format="csv")

        separator = ";" if ";" in lines[0] else ","
        rows = list(csv.reader(lines, delimiter=separator))
        headers = [h.strip() for h in rows[0]]
        self.layout = detect_layout(headers)

        parse_row = self._row_parser(headers)
        transactions: list[BankTransaction] = []
        for line_number, row in enumerate(rows[1:], start=2):
            values = [value.strip() for value in row]
            if len(values) < 3:
                continue
            try:
                transactions.append(parse_row(values))
            except (ValueError, IndexError) as e:
                error = BankImportError(str(e), file_format="csv", line_number=line_number)
                self.row_errors.append(str(error))

        return transactions

    def _row_parser(self, headers: list[str]) -> Callable[[list[str]], BankTransaction]:
        if self.layout is CSVLayout.INVOICE_LISTING:
            return self._invoice_row_parser(headers)
        if self.layout is CSVLayout.ITALIAN_BANK:
            return self._italian_row
        return self._generic_row

    def _invoice_row_parser(self, headers: list[str]) -> Callable[[list[str]], BankTransaction]:
        def column(*needles: str) -> int | None:
            for index, header in enumerate(headers):
                lowered = header.lower()
                if all(needle in lowered for needle in needles):
                    return index
            return None

        supplier_idx = column("fornitore")
        amount_idx = column("importo")
        if supplier_idx is None or amount_idx is None:
            raise BankImportError(
                "Invoice listing needs 'Fornitore' and 'Importo' columns", file_format="csv"
            )
        number_idx = column("numero", "fattura")
        description_idx = column("descrizione")
        date_idx = column("data")

        def parse_row(values: list[str]) -> BankTransaction:
            invoice_number = values[number_idx] if number_idx is not None else ""
            description = values[description_idx] if description_idx is not None else ""
            description = description or "Invoice"
            if invoice_number:
                description = f"{description} (Fattura {invoice_number})"

            if date_idx is not None:
                booked = parse_date(values[date_idx])
            elif self.statement_date is not None:
                booked = self.statement_date
            else:
                raise ValueError("Row has no date and no statement date was given")

            return build_transaction(
                transaction_date=booked,
                description=description,
                amount=-abs(parse_amount(values[amount_idx])),
                counterpart_name=values[supplier_idx] or None,
                reference_number=invoice_number or None,
            )

        return parse_row

    def _italian_row(self, values: list[str]) -> BankTransaction:
        if len(values) < 4:
            raise ValueError("Expected Data;Beneficiario;Descrizione;Importo")
        return build_transaction(
            transaction_date=parse_date(values[0]),
            description=values[2] or UNKNOWN_DESCRIPTION,
            amount=parse_amount(values[3]),
            counterpart_name=values[1] or None,
            reference_number=values[4] if len(values) > 4 and values[4] else None,
        )

    def _generic_row(self, values: list[str]) -> BankTransaction:
        return build_transaction(
            transaction_date=parse_date(values[0]),
            description=values[1] or UNKNOWN_DESCRIPTION,
            amount=parse_amount(values[2]),
            reference_number=values[3] if len(values) > 3 and values[3] else None,
            counterpart_name=values[4] if len(values) > 4 and values[4] else None,
        )

