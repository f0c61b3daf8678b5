"""Tests for query clean-up and normalization helpers."""

from spotgen.domain.text import (
    comparable_title,
    is_catalog_id,
    normalize,
    replace_punctuation,
    simplify_query,
    strip_noise,
    strip_punctuation,
    strip_whitespace,
    structured_query,
    to_ascii,
)


class TestNormalize:
    def test_smart_quotes_replaced_and_trimmed(self):
        assert normalize("  “shouldn’t” ") == "\"shouldn't\""

    def test_typographic_dashes_and_ellipsis(self):
        assert replace_punctuation("a – b — c…") == "a - b - c..."


class TestStripNoise:
    def test_removes_track_number_and_duration(self):
        assert strip_noise("1. artist - title (5:30)") == "artist - title"

    def test_drops_everything_after_brackets(self):
        assert strip_noise("test1 - test2 (string) test3") == "test1 - test2"
        assert strip_noise("test1 - test2 [string] test3") == "test1 - test2"

    def test_collapses_repeated_dashes_and_dots(self):
        assert strip_noise("artist -- title...") == "artist - title."


class TestToAscii:
    def test_transliterates_accents(self):
        assert to_ascii("tête-à-tête – détente") == "tete-a-tete - detente"

    def test_drops_symbols(self):
        assert to_ascii("test1 ▲ test2") == "test1  test2"


class TestWhitespaceAndPunctuation:
    def test_strip_whitespace(self):
        assert strip_whitespace(" test1  - test2 ") == "test1 - test2"

    def test_strip_punctuation_keeps_requested(self):
        assert strip_punctuation("a-b, c's!", "-'") == "a-b c's"

    def test_strip_punctuation_removes_all_by_default(self):
        assert strip_punctuation("a-b, c's!") == "ab cs"


class TestQueryHelpers:
    def test_simplified_query(self):
        assert simplify_query("1. Beyoncé - Halo (Live)") == "Beyonce - Halo"

    def test_structured_query_skips_empty_fields(self):
        query = structured_query(("track", " Halo "), ("artist", "Beyoncé"), ("album", ""))
        assert query == 'track:"Halo" artist:"Beyoncé"'

    def test_comparable_title(self):
        assert comparable_title("Sigur Rós - Hoppípolla!") == comparable_title(
            "sigur ros  -  hoppipolla"
        )
        assert comparable_title(None) == ""

    def test_catalog_id(self):
        assert is_catalog_id("4iV5W9uYEdYUVa79Axb7Rh")
        assert not is_catalog_id("Bowery Electric")
        assert not is_catalog_id("abc123")
