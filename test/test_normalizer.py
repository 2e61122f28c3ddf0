from __future__ import annotations

from nani_assist.services.normalizer import (
    normalize, normalize_bulk, strip_filler_words, strip_leading_slash,
    strip_parentheticals, strip_quantity,
)


class TestNormalizePipeline:
    def test_quantity_unit_and_note_removed(self):
        assert normalize("2 cups Organic Basil (chopped)") == "organic basil"

    def test_leading_slash_removed_but_fillers_kept(self):
        assert normalize("/Fresh Tomato") == "fresh tomato"
        assert strip_filler_words("Fresh Tomato") == "tomato"

    def test_decimal_quantity_with_abbreviated_unit(self):
        assert normalize("1.5 lb. Ground Beef") == "ground beef"

    def test_bare_number_without_unit(self):
        assert normalize("3 Eggs") == "eggs"

    def test_unit_prefix_of_word_is_not_a_unit(self):
        # "g" must not be eaten out of "garlic"
        assert normalize("2 garlic cloves") == "garlic cloves"

    def test_quantity_only_stripped_at_start(self):
        assert normalize("basil 2 cups") == "basil 2 cups"

    def test_every_parenthetical_removed(self):
        out = normalize("tomato (ripe) paste (canned)")
        assert "(" not in out and ")" not in out
        assert out.startswith("tomato") and out.endswith("paste")

    def test_empty_and_none(self):
        assert normalize("") == ""
        assert normalize(None) == ""
        assert normalize("(optional)") == ""

    def test_idempotent(self):
        for raw in ["2 cups Organic Basil (chopped)", "/Fresh Tomato", "1 lb Chicken Breast"]:
            once = normalize(raw)
            assert normalize(once) == once


class TestSteps:
    def test_strip_leading_slash_only_one(self):
        assert strip_leading_slash("//x") == "/x"
        assert strip_leading_slash("x/") == "x/"

    def test_strip_quantity_plural_units(self):
        assert strip_quantity("2 tbsps sugar") == "sugar"
        assert strip_quantity("4 cloves garlic") == "garlic"

    def test_strip_parentheticals_non_greedy(self):
        assert strip_parentheticals("a (x) b (y) c") == "a  b  c"


class TestBulkAndFiller:
    def test_bulk_drops_trailing_quantities(self):
        assert normalize_bulk("Tomatoes 2 cups") == "tomatoes"
        assert normalize_bulk("1 egg") == "egg"

    def test_bulk_keeps_slash(self):
        assert normalize_bulk("/Spaghetti") == "/spaghetti"

    def test_filler_words_whole_words_only(self):
        assert strip_filler_words("Organic Chicken Breast") == "chicken"
        # "raw" inside "strawberry" is not a filler word
        assert strip_filler_words("Strawberry Jam") == "strawberry jam"
