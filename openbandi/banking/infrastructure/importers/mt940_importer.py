"""SWIFT MT940 statement importer.

Only the two tags that describe movements are read:

- ``:61:`` statement line ``YYMMDD[MMDD](C|D)amount<rest>``: value date,
  direction, amount with a decimal comma; the rest is kept as reference
- ``:86:`` information to account owner: the description of the preceding
  ``:61:``, possibly continued on the following untagged lines

All other tags (balances, account, statement number) are skipped.
"""

import re
from datetime import date

from ....exceptions import BankImportError
from ...domain.models import BankTransaction
from .base import BaseImporter
from .parsing import UNKNOWN_DESCRIPTION, build_transaction, parse_amount

STATEMENT_LINE = re.compile(r"^:61:(\d{2})(\d{2})(\d{2})(\d{4})?(R?[CD])[A-Z]?(\d+,\d*)(.*)$")
TAG = re.compile(r"^:\d{2}[A-Z]?:")


class MT940Importer(BaseImporter):
    """Import bank movements from an MT940 statement.

    Reversal marks (``RC``/``RD``) take the opposite sign of the plain mark.
    """

    def parse(self) -> list[BankTransaction]:
        text = self.file_path.read_text(encoding=self.detect_encoding())
        if ":61:" not in text:
            raise BankImportError("Statement has no :61: lines", file_format="mt940")

        transactions: list[BankTransaction] = []
        pending: dict | None = None
        in_details = False

        for line_number, raw in enumerate(text.splitlines(), start=1):
            line = raw.rstrip()
            if line.startswith(":61:"):
                if pending is not None:
                    transactions.append(_finish(pending))
                pending = self._statement_line(line, line_number)
                in_details = False
            elif line.startswith(":86:"):
                if pending is not None:
                    pending["details"].append(line[4:].strip())
                    in_details = True
            elif TAG.match(line) or line.startswith("-"):
                in_details = False
            elif in_details and pending is not None and line.strip():
                pending["details"].append(line.strip())

        if pending is not None:
            transactions.append(_finish(pending))
        return transactions

    def _statement_line(self, line: str, line_number: int) -> dict | None:
        match = STATEMENT_LINE.match(line)
        if match is None:
            self._row_error("Unrecognised :61: statement line", line_number)
            return None

        yy, mm, dd, _entry_date, mark, raw_amount, rest = match.groups()
        try:
            value_date = date(2000 + int(yy), int(mm), int(dd))
            amount = parse_amount(raw_amount)
        except ValueError as e:
            self._row_error(str(e), line_number)
            return None

        debit = mark in ("D", "RC")
        return {
            "transaction_date": value_date,
            "amount": -amount if debit else amount,
            "reference_number": rest.strip() or None,
            "details": [],
        }

    def _row_error(self, message: str, line_number: int) -> None:
        error = BankImportError(message, file_format="mt940", line_number=line_number)
        self.row_errors.append(str(error))


def _finish(pending: dict) -> BankTransaction:
    description = " ".join(pending["details"]).strip()
    return build_transaction(
        transaction_date=pending["transaction_date"],
        description=description or UNKNOWN_DESCRIPTION,
        amount=pending["amount"],
        reference_number=pending["reference_number"],
    )
