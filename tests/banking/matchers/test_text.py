"""Tests for description and supplier name similarity."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from openbandi.banking.matchers.text import (
    fuzzy_supplier_match,
    normalize_name,
    semantic_similarity,
)

pytestmark = pytest.mark.unit

COMPANY_NAMES = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789", min_size=1, max_size=20)
SEPARATORS = st.sampled_from(["", " ", ".", "-", ",", "&", "'"])


@st.composite
def _respelled(draw, name: str) -> str:
    """``name`` with random upper-casing and punctuation between characters."""
    parts = []
    for char in name:
        parts.append(char.upper() if draw(st.booleans()) else char)
        parts.append(draw(SEPARATORS))
    return "".join(parts)


class TestSemanticSimilarity:
    """Tests for semantic_similarity."""

    def test_identical_descriptions(self):
        assert semantic_similarity("Noleggio attrezzature", "noleggio ATTREZZATURE") == 100.0

    def test_partial_overlap_uses_larger_word_set(self):
        score = semantic_similarity(
            "Acquisto materiali laboratorio", "materiali laboratorio chimica"
        )
        assert score == pytest.approx(200 / 3)

    def test_word_order_irrelevant(self):
        assert semantic_similarity("alpha beta gamma", "gamma alpha beta") == 100.0

    def test_short_words_ignored(self):
        assert semantic_similarity("srl spa di", "srl spa di") == 0.0

    @pytest.mark.parametrize("empty", [None, "", "   "])
    def test_empty_input(self, empty):
        assert semantic_similarity(empty, "materiali laboratorio") == 0.0
        assert semantic_similarity("materiali laboratorio", empty) == 0.0

    def test_no_common_words(self):
        assert semantic_similarity("canone affitto", "licenza software") == 0.0

    @given(st.text(), st.text())
    def test_symmetric_and_bounded(self, left, right):
        score = semantic_similarity(left, right)
        assert score == semantic_similarity(right, left)
        assert 0.0 <= score <= 100.0


class TestFuzzySupplierMatch:
    """Tests for fuzzy_supplier_match."""

    def test_normalised_names_equal(self):
        assert fuzzy_supplier_match("ACME S.r.l.", "acme srl") == 100.0

    def test_containment(self):
        assert fuzzy_supplier_match("ACME", "ACME Servizi Digitali") == 100.0
        assert fuzzy_supplier_match("ACME Servizi Digitali", "acme") == 100.0

    def test_word_overlap(self):
        score = fuzzy_supplier_match("Rossi Mario Consulting", "Studio Rossi Mario")
        assert score == pytest.approx(200 / 3)

    def test_short_common_words_do_not_count(self):
        assert fuzzy_supplier_match("Alfa di xy", "Beta di xy") == 0.0

    def test_unrelated_names(self):
        assert fuzzy_supplier_match("Alpha", "Omega") == 0.0

    def test_empty_name_is_contained_in_any_name(self):
        assert fuzzy_supplier_match("", "Acme") == 100.0
        assert fuzzy_supplier_match(None, None) == 100.0

    @given(st.text(), st.text())
    def test_symmetric_and_bounded(self, left, right):
        score = fuzzy_supplier_match(left, right)
        assert score == fuzzy_supplier_match(right, left)
        assert 0.0 <= score <= 100.0

    @given(st.text(alphabet="abcdefghij ", min_size=1))
    def test_name_matches_itself(self, name):
        assert fuzzy_supplier_match(name, name) == 100.0

    @given(COMPANY_NAMES, st.data())
    def test_punctuation_and_case_ignored(self, name, data):
        """Upper-casing and punctuation never change the supplier ("ACME S.r.l." is "acme srl")."""
        spelled = data.draw(_respelled(name))

        assert normalize_name(spelled) == name
        assert fuzzy_supplier_match(spelled, name) == 100.0
        assert fuzzy_supplier_match(name, spelled) == 100.0

    @given(COMPANY_NAMES, COMPANY_NAMES, st.data())
    def test_name_contained_in_longer_name(self, name, extra, data):
        spelled = data.draw(_respelled(name))

        assert fuzzy_supplier_match(spelled, f"{name} {extra}") == 100.0
        assert fuzzy_supplier_match(f"{extra} {name}", spelled) == 100.0


def test_normalize_name():
    assert normalize_name("Bianchi & Figli S.p.A.") == "bianchifiglispa"
