"""Word-overlap similarity for descriptions and supplier names.

Both scorers return a percentage in [0, 100]. They are deliberately simple:
bank descriptions are short, upper-cased and truncated, so token overlap beats
edit distance on them.
"""

import re

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")

# Words this short ("srl", "spa", "di", "del") carry no signal in descriptions
MIN_DESCRIPTION_WORD_LENGTH = 4
MIN_SUPPLIER_WORD_LENGTH = 3


def _words(text: str | None) -> set[str]:
    return set((text or "").lower().split())


def semantic_similarity(text1: str | None, text2: str | None) -> float:
    """Word-overlap similarity between two descriptions.

    Words shorter than four characters are ignored. Similarity is the number of
    shared words over the size of the larger word set, so it is symmetric and
    order-insensitive.

    Returns:
        Similarity percentage (0-100). 0 when either text has no usable words.
    """
    words1 = {w for w in _words(text1) if len(w) >= MIN_DESCRIPTION_WORD_LENGTH}
    words2 = {w for w in _words(text2) if len(w) >= MIN_DESCRIPTION_WORD_LENGTH}

    if not words1 or not words2:
        return 0.0

    common = len(words1 & words2)
    return common / max(len(words1), len(words2)) * 100


def normalize_name(name: str | None) -> str:
    """Lower-case a company name and drop everything but ``[a-z0-9]``."""
    return _NON_ALPHANUMERIC.sub("", (name or "").lower())


def fuzzy_supplier_match(name1: str | None, name2: str | None) -> float:
    """Compare two organisation names.

    1. Normalised containment in either direction ("ACME S.r.l." vs "acme srl") → 100
    2. Otherwise shared whitespace-separated words longer than two characters,
       over the larger word set
    3. Otherwise 0

    Returns:
        Similarity percentage (0-100)
    """
    n1 = normalize_name(name1)
    n2 = normalize_name(name2)

    if n1 in n2 or n2 in n1:
        return 100.0

    words1 = _words(name1)
    words2 = _words(name2)
    common = len({w for w in words1 & words2 if len(w) >= MIN_SUPPLIER_WORD_LENGTH})

    if common:
        return common / max(len(words1), len(words2)) * 100

    return 0.0
