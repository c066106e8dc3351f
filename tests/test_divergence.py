"""Tests for the cross-engine divergence scorer."""

import pytest

from grade_api.scoring import divergence_score
from grade_api.scoring.divergence import jaccard, normalize_for_compare, word_set


def test_identical_texts_hit_top_band():
    assert divergence_score("the quick brown fox", "the quick brown fox") == 95


@pytest.mark.parametrize(
    "a,b",
    [
        ("", "anything"),
        ("anything", ""),
        ("   ", "anything"),
        (None, "anything"),
        ("!!! ???", "anything"),
    ],
)
def test_nothing_to_compare_is_neutral(a, b):
    assert divergence_score(a, b) == 50


def test_case_and_punctuation_are_ignored():
    assert divergence_score("Hello, World!", "hello   world") == 95


def test_duplicate_words_do_not_count_twice():
    assert divergence_score("the the the cat", "the cat") == 95


@pytest.mark.parametrize(
    "b,expected",
    [
        # 3 shared of 6 -> 0.5
        ("alpha beta gamma delta epsilon zeta", 70),
        # 2 shared of 5 -> 0.4
        ("alpha beta delta epsilon", 45),
        # 1 shared of 6 -> 0.167
        ("alpha delta epsilon zeta", 25),
        # nothing shared
        ("delta epsilon zeta", 10),
    ],
)
def test_similarity_bands(b, expected):
    assert divergence_score("alpha beta gamma", b) == expected


def test_reflexive_maximality():
    a = "invoice number 4471 total due 1250"
    for b in ["invoice number 4471", "total due", "completely different words here"]:
        assert divergence_score(a, a) >= divergence_score(a, b)


def test_helpers():
    assert normalize_for_compare("  Déjà-vu, 42!\n\nOK ") == "djvu 42 ok"
    assert word_set("") == set()
    assert jaccard(set(), set()) == 0.0
    assert jaccard({"a", "b"}, {"b", "c"}) == pytest.approx(1 / 3)
