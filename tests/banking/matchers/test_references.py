"""Tests for invoice/reference number extraction."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from openbandi.banking.matchers.references import extract_references, references_overlap

pytestmark = pytest.mark.unit

# Bank-description-like text: keywords, invoice numbers and noise
BANK_TEXT = st.lists(
    st.one_of(
        st.sampled_from(["fattura", "FT:", "Ft.", "n.", "nr", "num", "invoice #", "rif", "del"]),
        st.from_regex(r"[0-9]{1,8}(/[0-9]{1,4})?", fullmatch=True),
        st.text(max_size=6),
    ),
    max_size=8,
).map(" ".join)


class TestExtractReferences:
    """Tests for extract_references."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Pagamento FATTURA 123/45 del 2024", {"12345", "2024"}),
            ("Ft. n. 12/2024", {"122024", "2024"}),
            ("invoice #77", {"77"}),
            ("nr: 12/3", {"123"}),
            ("num 45 acconto", {"45"}),
            ("bonifico rif 000981", {"000981"}),
            ("FT:4521", {"4521"}),
        ],
    )
    def test_extracts_normalised_references(self, text, expected):
        assert extract_references(text) == expected

    @pytest.mark.parametrize("text", [None, "", "Canone mensile", "ordine 123"])
    def test_no_references(self, text):
        """Short bare numbers are not references without a keyword."""
        assert extract_references(text) == set()

    def test_only_ascii_digits_count(self):
        """Non-ASCII digits never form a reference."""
        assert extract_references("fattura ٤٥٢١") == set()

    def test_same_token_found_by_several_patterns(self):
        """'fattura 45210' is matched by the keyword and the 4+ digit pattern."""
        assert extract_references("fattura 45210") == {"45210"}

    @given(BANK_TEXT, BANK_TEXT)
    def test_reextracting_references_adds_nothing(self, left, right):
        refs = extract_references(left) | extract_references(right)

        again = extract_references(" ".join(sorted(refs)))

        assert again <= refs
        assert again == {ref for ref in refs if len(ref) >= 4}
        assert all(ref.isascii() and ref.isdigit() for ref in refs)


class TestReferencesOverlap:
    """Tests for references_overlap."""

    def test_equal_references(self):
        assert references_overlap({"4521"}, {"4521"})

    def test_containment_either_direction(self):
        assert references_overlap({"4521"}, {"20244521"})
        assert references_overlap({"20244521"}, {"4521"})

    def test_disjoint(self):
        assert not references_overlap({"12"}, {"34"})

    def test_empty_sets(self):
        assert not references_overlap(set(), {"4521"})
        assert not references_overlap({"4521"}, set())
