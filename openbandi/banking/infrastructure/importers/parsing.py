"""Field parsing shared by the statement importers."""

import re
import uuid
from collections.abc import Callable
from datetime import date
from decimal import Decimal, InvalidOperation

from ...domain.models import BankTransaction

# Description stored for rows whose bank text is empty
UNKNOWN_DESCRIPTION = "Unknown transaction"

# First matching keyword wins
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("salary", ("salary", "stipendio", "payroll")),
    ("rent", ("rent", "affitto", "lease")),
    ("travel", ("fuel", "gas", "carburante")),
    ("office", ("office", "ufficio", "supplies")),
    ("meals", ("food", "restaurant", "meal")),
    ("software", ("software", "subscription", "saas")),
    ("professional_services", ("consulting", "professional", "services")),
)

_DATE_FORMATS: tuple[tuple[re.Pattern[str], Callable[[re.Match[str]], date]], ...] = (
    (re.compile(r"(\d{4})-(\d{2})-(\d{2})"), lambda m: date(int(m[1]), int(m[2]), int(m[3]))),
    (re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})"), lambda m: date(int(m[3]), int(m[2]), int(m[1]))),
    (re.compile(r"(\d{1,2})-(\d{1,2})-(\d{4})"), lambda m: date(int(m[3]), int(m[2]), int(m[1]))),
    (re.compile(r"(\d{1,2})\.(\d{1,2})\.(\d{4})"), lambda m: date(int(m[3]), int(m[2]), int(m[1]))),
)


def categorize_description(description: str) -> str:
    """Assign a coarse category from keywords in the description."""
    text = description.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return "other"


def parse_date(raw: str) -> date:
    """Parse ISO or Italian day-first dates ("2024-03-10", "10/03/2024", "10.03.2024").

    Raises:
        ValueError: If no supported format matches or the date does not exist
    """
    for pattern, build in _DATE_FORMATS:
        match = pattern.search(raw)
        if match:
            return build(match)
    raise ValueError(f"Unrecognised date: {raw!r}")


def parse_amount(raw: str) -> Decimal:
    """Parse ``1.234,56`` / ``-1234.56`` / ``€ 99,00`` into a Decimal.

    Raises:
        ValueError: If the value is not a number
    """
    text = raw.replace("€", "").replace("\u00a0", "").replace(" ", "")
    if "," in text:
        text = text.replace(".", "").replace(",", ".")
    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Unrecognised amount: {raw!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Unrecognised amount: {raw!r}")
    return amount


def build_transaction(
    *,
    transaction_date: date,
    description: str,
    amount: Decimal,
    counterpart_name: str | None = None,
    reference_number: str | None = None,
) -> BankTransaction:
    """New transaction with a fresh ID, categorised from its description."""
    return BankTransaction(
        id=str(uuid.uuid4()),
        transaction_date=transaction_date,
        description=description,
        amount=amount,
        counterpart_name=counterpart_name,
        reference_number=reference_number,
        category=categorize_description(description),
    )
