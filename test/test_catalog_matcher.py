from __future__ import annotations

from conftest import cart_of, make_product, make_recipe

from nani_assist.services.catalog_matcher import (
    find_match, find_products_for_ingredients, fuzzy_match, fuzzy_tolerance,
    match_ingredients, names_equivalent, names_overlap, search_products,
)


class TestFindMatch:
    def test_quantity_and_note_do_not_block_match(self, catalog):
        p = find_match("2 cups Organic Basil (chopped)", catalog)
        assert p is not None and p.id == "p1"

    def test_either_direction_containment(self, catalog):
        assert find_match("basil", catalog).id == "p1"
        assert find_match("Tomato", catalog).id == "p2"
        assert find_match("Fresh Spaghetti Nests", catalog).id == "p5"
        assert find_match("spaghetti", catalog).id == "p5"

    def test_first_catalog_match_wins(self):
        catalog = [make_product("a", "Cherry Tomatoes"), make_product("b", "Roma Tomatoes")]
        assert find_match("tomatoes", catalog).id == "a"

    def test_empty_normalized_form_never_matches(self, catalog):
        assert find_match("", catalog) is None
        assert find_match("(to taste)", catalog) is None

    def test_unknown_ingredient(self, catalog):
        assert find_match("quinoa", catalog) is None

    def test_round_trip_over_catalog(self, catalog):
        for p in catalog:
            hit = find_match(p.name, catalog)
            assert hit is not None
            assert names_overlap(hit.name, p.name)


class TestNameRules:
    def test_overlap_is_symmetric(self):
        assert names_overlap("Basil", "Organic Basil")
        assert names_overlap("Organic Basil", "basil")
        assert not names_overlap("Basil", "Chocolate")
        assert not names_overlap("", "Basil")

    def test_plural_equivalence(self):
        assert names_equivalent("Tomato", "Tomatoes")
        assert names_equivalent("Eggs", "Egg")
        assert names_equivalent("BASIL", "basil")

    def test_plural_equivalence_is_narrower_than_overlap(self):
        assert names_overlap("Basil", "Organic Basil")
        assert not names_equivalent("Basil", "Organic Basil")
        assert not names_equivalent("", "")


class TestBulkMatching:
    def test_dedupes_and_skips_short(self, catalog):
        out = find_products_for_ingredients(
            ["2 cups Spaghetti", "Eggs", "1 egg", "salt", "2 oz", "(optional)"], catalog
        )
        assert [p.id for p in out] == ["p5", "p4"]

    def test_nothing_invented(self, catalog):
        out = find_products_for_ingredients(["Guanciale", "Black Pepper"], catalog)
        assert out == []


class TestFuzzy:
    def test_tolerance(self):
        assert fuzzy_tolerance("basil") == 2
        assert fuzzy_tolerance("egg") == 1
        assert fuzzy_tolerance("tomatoes") == 3

    def test_substring_pass_wins(self):
        names = ["Organic Basil", "Basil Pesto", "Roma Tomatoes"]
        assert fuzzy_match("basil", names, max_results=10) == ["Organic Basil", "Basil Pesto"]

    def test_typo_falls_through_to_edit_distance(self):
        names = ["Organic Basil", "Roma Tomatoes"]
        assert fuzzy_match("tomatos", names, max_results=10) == ["Roma Tomatoes"]

    def test_short_queries_skip_edit_distance(self):
        assert fuzzy_match("egs", ["Eggs"], max_results=10) == []

    def test_fuzzy_cap(self):
        names = ["Cheddar", "Chedar Block", "Cheddars"]
        assert fuzzy_match("chedda", names, max_results=10) == ["Cheddar", "Cheddars"]
        assert len(fuzzy_match("chedxar", names, max_results=10, max_fuzzy_results=1)) == 1

    def test_search_products_matches_category_text(self, catalog):
        out = search_products("dairy", catalog)
        assert {p.id for p in out} == {"p4", "p6"}

    def test_search_products_without_fuzzy(self, catalog):
        assert search_products("spagetti", catalog, max_fuzzy_results=0) == []
        assert [p.id for p in search_products("spagetti", catalog)] == ["p5"]


class TestMatchIngredients:
    def test_in_shop_without_anchor(self, catalog):
        recipe = make_recipe("r1", "Carbonara", ["Spaghetti", "Guanciale", "/Eggs"])
        res = match_ingredients(recipe, catalog)
        assert [m.ingredient_text for m in res] == ["Spaghetti", "Guanciale", "Eggs"]
        assert [m.is_available for m in res] == [True, False, True]
        assert res[1].matched_product is None

    def test_anchor_and_cart_availability(self, catalog):
        recipe = make_recipe("r1", "Carbonara", ["Spaghetti", "Eggs", "Pecorino"])
        anchor = catalog[4]  # Spaghetti
        res = match_ingredients(recipe, catalog, cart=cart_of("Free Range Eggs"), anchor=anchor)
        assert [m.is_available for m in res] == [True, True, False]
        assert [m.in_cart for m in res] == [False, True, False]
        # still found in the shop even though not "available" for this page
        assert res[2].matched_product is not None and res[2].matched_product.id == "p6"
