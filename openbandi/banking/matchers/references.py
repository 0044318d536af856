"""Invoice/document reference extraction from free text.

Bank descriptions and receipt numbers often embed the invoice number
("FATTURA 4521", "Ft. n. 12/2024", "bonifico rif 000981"). The extractor
collects every plausible reference and normalises it to its digits only, so
"123/45" and "12345" compare equal.
"""

import re

# Applied in order, all of them: a token can be picked up by more than one.
REFERENCE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Invoice keywords: "fattura 123", "FT: 45/2024", "invoice #77"
    re.compile(r"(?:fattura|ft|inv|invoice)[:\s#]*(\d+(?:/\d+)?)", re.IGNORECASE | re.ASCII),
    # Number abbreviations: "n. 123", "num 45", "nr: 12/3"
    re.compile(r"(?:n\.?|num|nr)[:\s]*(\d+(?:/\d+)?)", re.IGNORECASE | re.ASCII),
    # Any standalone run of 4+ digits
    re.compile(r"\b(\d{4,})\b", re.ASCII),
)

_NON_DIGITS = re.compile(r"\D", re.ASCII)


def extract_references(text: str | None) -> set[str]:
    """Extract normalised reference numbers from text.

    Args:
        text: Free text (bank description, expense description, receipt number)

    Returns:
        Set of digit-only reference strings. Empty when nothing matches.

    Example:
        >>> sorted(extract_references("Pagamento FATTURA 123/45 del 2024"))
        ['12345', '2024']
    """
    refs: set[str] = set()
    if not text:
        return refs

    for pattern in REFERENCE_PATTERNS:
        for match in pattern.finditer(text):
            digits = _NON_DIGITS.sub("", match.group(1))
            if digits:
                refs.add(digits)

    return refs


def references_overlap(left: set[str], right: set[str]) -> bool:
    """True when any reference in ``left`` contains, or is contained in, one in ``right``."""
    return any(a in b or b in a for a in left for b in right)
