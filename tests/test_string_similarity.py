"""Tests for the Levenshtein helpers."""

import pytest
from rapidfuzz.distance import Levenshtein

from localseo.utils.string_similarity import levenshtein_distance, levenshtein_similarity


class TestLevenshteinDistance:

    @pytest.mark.parametrize("a, b, expected", [
        ("kitten", "sitting", 3),
        ("", "abc", 3),
        ("abc", "", 3),
        ("", "", 0),
        ("flaw", "lawn", 2),
        ("same", "same", 0),
    ])
    def test_examples(self, a, b, expected):
        assert levenshtein_distance(a, b) == expected

    def test_symmetric(self):
        assert levenshtein_distance("gentsplace", "gentplace") == levenshtein_distance("gentplace", "gentsplace")


class TestLevenshteinSimilarity:

    def test_empty_strings_identical(self):
        assert levenshtein_similarity("", "") == 1.0

    def test_one_empty(self):
        assert levenshtein_similarity("abc", "") == 0.0

    def test_one_substitution(self):
        assert levenshtein_similarity("abcd", "abce") == 0.75

    def test_range(self):
        value = levenshtein_similarity("gentsplace", "michaels")
        assert 0.0 <= value < 0.5


class TestAgainstRapidfuzz:
    """Results agree with rapidfuzz's Levenshtein implementation."""

    PAIRS = [
        ("", ""),
        ("kitten", "sitting"),
        ("gentsplace", "thegentsplace"),
        ("10225researchblvdaustin", "10225researchboulevardaustin"),
        ("joespizza", "joesburgers"),
        ("abc", ""),
    ]

    @pytest.mark.parametrize("str1, str2", PAIRS)
    def test_distance_matches(self, str1, str2):
        assert levenshtein_distance(str1, str2) == Levenshtein.distance(str1, str2)

    @pytest.mark.parametrize("str1, str2", PAIRS)
    def test_similarity_matches(self, str1, str2):
        assert levenshtein_similarity(str1, str2) == pytest.approx(
            Levenshtein.normalized_similarity(str1, str2)
        )
