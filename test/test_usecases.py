from __future__ import annotations

import string
from decimal import Decimal

import anyio
import pytest

from conftest import FakeIndex, cart_of, make_product

from nani_assist.application.usecases import (
    BrowseCatalog, CatalogFilter, Checkout, GetProduct, GetRecipeDetail, RecipesForProduct,
    SuggestRecipesForCart,
)
from nani_assist.domain.entities import Category, DietaryTag, OrderStatus
from nani_assist.infrastructure.catalog_repository import InMemoryProductRepository
from nani_assist.infrastructure.recipe_repository import StaticRecipeRepository
from nani_assist.infrastructure.session_store import SessionState


def _hit(oid, title, ingredients):
    return {"objectID": oid, "title": title, "ingredients": ingredients}


class TestSuggestRecipesForCart:
    def setup_method(self):
        self.static = StaticRecipeRepository()

    def test_fan_out_dedupes_and_ranks(self):
        index = FakeIndex({"food": {
            "Spaghetti": [_hit("A", "Carbonara", ["Spaghetti", "Eggs", "Pecorino"]), _hit("B", "Pesto", ["Spaghetti", "Basil"])],
            "Eggs": [_hit("A", "Carbonara (dup)", ["x"]), _hit("C", "Omelette", ["Eggs", "Milk"])],
        }})
        uc = SuggestRecipesForCart(self.static, index)
        out = anyio.run(uc, cart_of("Spaghetti", "Eggs"))
        assert [s.recipe.object_id for s in out] == ["A", "B", "C"]
        assert out[0].recipe.title == "Carbonara"
        assert out[0].match_count == 2

    def test_only_first_three_distinct_items_queried(self):
        index = FakeIndex()
        uc = SuggestRecipesForCart(self.static, index, fanout=3)
        anyio.run(uc, cart_of("Eggs", "Eggs", "Milk", "Flour", "Sugar"))
        assert sorted(q for _, q, _ in index.calls) == ["Eggs", "Flour", "Milk"]
        assert all(limit == 15 for _, _, limit in index.calls)

    def test_one_failed_query_does_not_sink_the_rest(self):
        index = FakeIndex({"food": {"Eggs": [_hit("C", "Omelette", ["Eggs"])]}}, fail_on=("Spaghetti",))
        out = anyio.run(SuggestRecipesForCart(self.static, index), cart_of("Spaghetti", "Eggs"))
        assert [s.recipe.object_id for s in out] == ["C"]

    def test_falls_back_to_static_list(self):
        index = FakeIndex(fail_on=("*",))
        out = anyio.run(SuggestRecipesForCart(self.static, index), cart_of("Broccoli", "Garlic"))
        assert [s.recipe.object_id for s in out] == ["fallback-4"]
        assert out[0].match_count == 2

    def test_empty_cart(self):
        assert anyio.run(SuggestRecipesForCart(self.static, FakeIndex()), []) == []


class TestRecipesForProduct:
    def setup_method(self):
        self.basil = make_product("p1", "Organic Basil")
        self.repo = InMemoryProductRepository([self.basil, make_product("p2", "Roma Tomatoes")])

    def test_retries_with_last_word(self):
        product = make_product("p9", "Organic Roma Tomatoes")
        index = FakeIndex({"food": {"tomatoes": [_hit("T", "Tomato Soup", ["Roma Tomatoes", "Basil"])]}})
        uc = RecipesForProduct(self.repo, StaticRecipeRepository(), index)
        out = uc(product)
        assert [q for _, q, _ in index.calls] == ["roma tomatoes", "tomatoes"]
        recipe, matches = out[0]
        assert recipe.object_id == "T"
        assert [m.is_available for m in matches] == [True, False]

    def test_static_fallback_when_index_down(self):
        chicken = make_product("c", "Chicken Breast")
        uc = RecipesForProduct(self.repo, StaticRecipeRepository(), FakeIndex(fail_on=("*",)))
        out = uc(chicken)
        assert [r.object_id for r, _ in out] == ["fallback-2"]

    def test_title_hits_rank_first(self):
        hits = [_hit("x", "Caprese", ["Basil", "Tomato"]), _hit("y", "Basil Pesto", ["Pine Nuts"])]
        index = FakeIndex({"food": {"basil": hits}})
        out = RecipesForProduct(self.repo, StaticRecipeRepository(), index)(make_product("b", "Basil"))
        assert [r.object_id for r, _ in out] == ["y", "x"]


class TestBrowseCatalog:
    def setup_method(self):
        self.repo = InMemoryProductRepository([
            make_product("a", "Apple", "3.00", Category.FRUITS, popularity=10, date_added="2024-01-01"),
            make_product("b", "Banana", "1.00", Category.FRUITS, popularity=90, date_added="2024-03-01",
                         dietary_tags=frozenset({DietaryTag.ORGANIC, DietaryTag.VEGAN})),
            make_product("c", "Cheddar", "5.00", Category.DAIRY, popularity=50, date_added="2024-02-01"),
        ])
        self.uc = BrowseCatalog(self.repo)

    def test_featured_keeps_catalog_order(self):
        assert [p.id for p in self.uc(CatalogFilter())] == ["a", "b", "c"]

    def test_filters(self):
        assert [p.id for p in self.uc(CatalogFilter(category=Category.FRUITS, max_price=Decimal("2")))] == ["b"]
        assert [p.id for p in self.uc(CatalogFilter(dietary=(DietaryTag.VEGAN,)))] == ["b"]
        assert [p.id for p in self.uc(CatalogFilter(query="CHED"))] == ["c"]

    def test_sorts(self):
        assert [p.id for p in self.uc(CatalogFilter(sort="price-low"))] == ["b", "a", "c"]
        assert [p.id for p in self.uc(CatalogFilter(sort="price-high"))] == ["c", "a", "b"]
        assert [p.id for p in self.uc(CatalogFilter(sort="newest"))] == ["b", "c", "a"]
        assert [p.id for p in self.uc(CatalogFilter(sort="popularity"))] == ["b", "c", "a"]

    def test_unknown_sort(self):
        with pytest.raises(ValueError):
            self.uc(CatalogFilter(sort="random"))

    def test_get_product_related(self):
        p, related = GetProduct(self.repo)("a")
        assert p.name == "Apple" and [r.id for r in related] == ["b"]
        with pytest.raises(LookupError):
            GetProduct(self.repo)("zzz")


class TestRecipeDetail:
    def test_lookup_order(self):
        index = FakeIndex()
        index.objects["hosted-1"] = _hit("hosted-1", "Ramen", ["Noodles"])
        uc = GetRecipeDetail(StaticRecipeRepository(), index)
        assert uc("fallback-3").title == "Classic Pancakes"
        assert uc("hosted-1").title == "Ramen"
        with pytest.raises(LookupError):
            uc("nope")
        with pytest.raises(ValueError):
            uc("  ")


class TestCheckout:
    def test_places_order_and_clears_cart(self):
        st = SessionState(session_id="s")
        st.add_to_cart(make_product("p", "Milk", "2.50"), 2)
        order = Checkout()(st)
        assert order.total == Decimal("10.00")
        assert order.status == OrderStatus.PROCESSING
        assert len(order.id) == 6 and all(c in string.ascii_uppercase + string.digits for c in order.id)
        assert st.cart == [] and st.orders == [order]

    def test_empty_cart_rejected(self):
        with pytest.raises(ValueError):
            Checkout()(SessionState(session_id="s"))
