"""ISO 20022 CAMT.053 (XML) statement importer.

Each ``<Ntry>`` becomes one transaction:

- ``Amt`` with ``CdtDbtInd`` DBIT/CRDT for the signed amount
- ``BookgDt/Dt`` (or ``BookgDt/DtTm``) for the date
- ``Ustrd`` remittance lines, or ``AddtlNtryInf``, for the description
- the creditor (debits) or debtor (credits) name as counterpart
- ``AcctSvcrRef``, ``EndToEndId`` or ``NtryRef`` as reference

Elements are matched by local name, so every camt.053 schema version works.
"""

import xml.etree.ElementTree as ET
from collections.abc import Iterator

from ....exceptions import BankImportError
from ...domain.models import BankTransaction
from .base import BaseImporter
from .parsing import UNKNOWN_DESCRIPTION, build_transaction, parse_amount, parse_date

REFERENCE_TAGS = ("AcctSvcrRef", "EndToEndId", "NtryRef")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _descendants(element: ET.Element, name: str) -> Iterator[ET.Element]:
    return (node for node in element.iter() if _local_name(node.tag) == name)


def _child(element: ET.Element | None, name: str) -> ET.Element | None:
    if element is None:
        return None
    return next((node for node in element if _local_name(node.tag) == name), None)


def _text(element: ET.Element | None) -> str:
    if element is None or element.text is None:
        return ""
    return element.text.strip()


class CamtXmlImporter(BaseImporter):
    """Import bank movements from a CAMT.053 XML statement."""

    def parse(self) -> list[BankTransaction]:
        try:
            root = ET.fromstring(self.file_path.read_bytes())
        except ET.ParseError as e:
            raise BankImportError(f"Invalid XML: {e}", file_format="camt053") from e

        entries = list(_descendants(root, "Ntry"))
        if not entries:
            raise BankImportError("Statement has no <Ntry> entries", file_format="camt053")

        transactions: list[BankTransaction] = []
        for position, entry in enumerate(entries, start=1):
            try:
                transactions.append(self._entry(entry))
            except ValueError as e:
                # Entry position stands in for a line number
                error = BankImportError(str(e), file_format="camt053", line_number=position)
                self.row_errors.append(str(error))
        return transactions

    def _entry(self, entry: ET.Element) -> BankTransaction:
        amount_text = _text(_child(entry, "Amt"))
        if not amount_text:
            raise ValueError("Entry has no amount")
        amount = abs(parse_amount(amount_text))

        booking = _child(entry, "BookgDt")
        booked_text = _text(_child(booking, "Dt")) or _text(_child(booking, "DtTm"))[:10]
        if not booked_text:
            raise ValueError("Entry has no booking date")

        debit = _text(_child(entry, "CdtDbtInd")).upper() == "DBIT"
        description = " ".join(
            text for text in (_text(node) for node in _descendants(entry, "Ustrd")) if text
        ) or _text(_child(entry, "AddtlNtryInf"))

        return build_transaction(
            transaction_date=parse_date(booked_text),
            description=description or UNKNOWN_DESCRIPTION,
            amount=-amount if debit else amount,
            counterpart_name=self._counterpart(entry, debit),
            reference_number=self._reference(entry),
        )

    @staticmethod
    def _counterpart(entry: ET.Element, debit: bool) -> str | None:
        party = "Cdtr" if debit else "Dbtr"
        for related in _descendants(entry, "RltdPties"):
            for node in _descendants(related, party):
                name = next((_text(n) for n in _descendants(node, "Nm") if _text(n)), "")
                if name:
                    return name
        return None

    @staticmethod
    def _reference(entry: ET.Element) -> str | None:
        for tag in REFERENCE_TAGS:
            for node in _descendants(entry, tag):
                value = _text(node)
                if value and value.upper() != "NOTPROVIDED":
                    return value
        return None
