# =========================
# FILE: nani_assist/application/usecases.py
# =========================
from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional, Sequence, Tuple

import anyio

from nani_assist.core.errors import SearchUnavailable
from nani_assist.domain.entities import (
    CartItem, Category, DietaryTag, MatchResult, Order, Product, Recipe, ScoredRecipe,
)
from nani_assist.domain.repositories import ProductReadRepo, RecipeReadRepo
from nani_assist.infrastructure.session_store import SessionState
from nani_assist.services.catalog_matcher import match_ingredients, names_overlap
from nani_assist.services.recipe_ranker import (
    dedupe_recipes, product_recipe_queries, rank_for_cart, rank_for_product,
)
from nani_assist.services.search_engine import FallbackChain, SearchIndex

log = logging.getLogger("app.usecases")

SORT_OPTIONS = ("featured", "price-low", "price-high", "newest", "popularity")
RELATED_PRODUCTS = 4
SHIPPING_FEE = Decimal("5.00")


# ----------------------------
# Catalog browsing
# ----------------------------
@dataclass(frozen=True)
class CatalogFilter:
    query: str = ""
    category: Optional[Category] = None
    dietary: Tuple[DietaryTag, ...] = ()
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    sort: str = "featured"


@dataclass(frozen=True)
class BrowseCatalog:
    product_repo: ProductReadRepo

    def __call__(self, f: CatalogFilter) -> List[Product]:
        if f.sort not in SORT_OPTIONS:
            raise ValueError(f"unknown sort option: {f.sort}")
        q = f.query.strip().lower()
        out = [
            p for p in self.product_repo.all()
            if (not q or q in p.name.lower())
            and (f.category is None or p.category == f.category)
            and all(t in p.dietary_tags for t in f.dietary)
            and (f.min_price is None or p.price >= f.min_price)
            and (f.max_price is None or p.price <= f.max_price)
        ]
        if f.sort == "price-low":
            out.sort(key=lambda p: p.price)
        elif f.sort == "price-high":
            out.sort(key=lambda p: p.price, reverse=True)
        elif f.sort == "newest":
            out.sort(key=lambda p: p.date_added, reverse=True)
        elif f.sort == "popularity":
            out.sort(key=lambda p: p.popularity, reverse=True)
        return out


@dataclass(frozen=True)
class GetProduct:
    product_repo: ProductReadRepo

    def __call__(self, product_id: str) -> Tuple[Product, List[Product]]:
        """Product plus a few related products from the same category."""
        p = self.product_repo.by_id(product_id)
        if p is None:
            raise LookupError(f"Product not found: {product_id}")
        related = [x for x in self.product_repo.all() if x.category == p.category and x.id != p.id]
        return p, related[:RELATED_PRODUCTS]


@dataclass(frozen=True)
class SearchProducts:
    chain: FallbackChain[Product]

    def __call__(self, query: str) -> List[Product]:
        results, _ = self.chain.run(query)
        return results


@dataclass(frozen=True)
class SearchRecipes:
    chain: FallbackChain[Recipe]

    def __call__(self, query: str) -> List[Recipe]:
        results, _ = self.chain.run(query)
        return results


# ----------------------------
# Recipes
# ----------------------------
@dataclass(frozen=True)
class GetRecipeDetail:
    recipe_repo: RecipeReadRepo
    client: Optional[Any] = None
    index: str = "food"

    def __call__(self, recipe_id: str, st: Optional[SessionState] = None) -> Recipe:
        key = (recipe_id or "").strip()
        if not key:
            raise ValueError("recipe_id is required")

        if st is not None:
            for r in st.saved_recipes:
                if r.object_id == key:
                    return r

        local = self.recipe_repo.by_id(key)
        if local:
            return local

        if self.client is not None:
            try:
                hit = self.client.get_object(self.index, key)
            except SearchUnavailable as e:
                log.warning("recipe lookup failed id=%s: %s", key, e)
                hit = None
            if hit:
                return Recipe.from_hit(hit)

        raise LookupError(f"Recipe not found: {recipe_id}")


@dataclass(frozen=True)
class RecipeIngredients:
    product_repo: ProductReadRepo

    def __call__(self, recipe: Recipe, cart: Sequence[CartItem] = (), anchor: Optional[Product] = None) -> List[MatchResult]:
        return match_ingredients(recipe, self.product_repo.all(), cart, anchor)


@dataclass(frozen=True)
class RecipesForProduct:
    """Product page: search with the cleaned name, retry with its last word, rank."""
    product_repo: ProductReadRepo
    fallback_recipes: RecipeReadRepo
    client: Optional[SearchIndex] = None
    index: str = "food"
    hits_per_query: int = 50

    def __call__(self, product: Product, cart: Sequence[CartItem] = ()) -> List[Tuple[Recipe, List[MatchResult]]]:
        candidates = self._candidates(product)
        ranked = rank_for_product(product, candidates)
        catalog = self.product_repo.all()
        return [(r, match_ingredients(r, catalog, cart, anchor=product)) for r in ranked]

    def _candidates(self, product: Product) -> List[Recipe]:
        if self.client is not None:
            for q in product_recipe_queries(product):
                try:
                    hits = self.client.search(self.index, q, self.hits_per_query)
                except SearchUnavailable as e:
                    log.warning("product recipe search failed query=%r: %s", q, e)
                    break
                if hits:
                    return [Recipe.from_hit(h) for h in hits]

        return [
            r for r in self.fallback_recipes.all()
            if names_overlap(r.title, product.name) or any(names_overlap(i, product.name) for i in r.ingredients)
        ]


@dataclass(frozen=True)
class SuggestRecipesForCart:
    """
    Cart drawer: one recipe query per distinct cart item (first `fanout`), run
    concurrently. Failures are isolated per query; results are deduped by
    objectID, scored against the whole cart, and fall back to the static list.
    """
    fallback_recipes: RecipeReadRepo
    client: Optional[SearchIndex] = None
    index: str = "food"
    fanout: int = 3
    hits_per_query: int = 15
    limit: int = 10

    async def __call__(self, cart: Sequence[CartItem]) -> List[ScoredRecipe]:
        if not cart:
            return []

        if self.client is not None:
            queries = list(dict.fromkeys(i.name for i in cart))[: self.fanout]
            batches = await self._fan_out(queries)
            pool = dedupe_recipes(batches)
            ranked = rank_for_cart(cart, pool, limit=self.limit)
            if ranked:
                return ranked
            log.info("no hosted recipe matched the cart, using fallback list")

        return rank_for_cart(cart, self.fallback_recipes.all(), limit=self.limit)

    async def _fan_out(self, queries: List[str]) -> List[List[Recipe]]:
        results: List[List[Recipe]] = [[] for _ in queries]

        async def one(i: int, q: str) -> None:
            try:
                hits = await anyio.to_thread.run_sync(self.client.search, self.index, q, self.hits_per_query)
                results[i] = [Recipe.from_hit(h) for h in hits or []]
            except Exception:
                log.exception("cart recipe search failed query=%r", q)

        async with anyio.create_task_group() as tg:
            for i, q in enumerate(queries):
                tg.start_soon(one, i, q)
        # results kept in query order so dedupe is deterministic
        return results


# ----------------------------
# Checkout (simulated)
# ----------------------------
def _order_id() -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(6))


@dataclass(frozen=True)
class Checkout:
    shipping_fee: Decimal = SHIPPING_FEE

    def __call__(self, st: SessionState) -> Order:
        if not st.cart:
            raise ValueError("cart is empty")
        order = Order(
            id=_order_id(),
            date=datetime.now(timezone.utc).isoformat(),
            items=tuple(st.cart),
            total=st.cart_total + self.shipping_fee,
        )
        st.add_order(order)
        st.clear_cart()
        log.info("order placed id=%s items=%d total=%s", order.id, len(order.items), order.total)
        return order


@dataclass(frozen=True)
class UseCases:
    """Everything the routes call besides the assistant, wired once at startup."""
    browse: BrowseCatalog
    get_product: GetProduct
    recipe_detail: GetRecipeDetail
    recipe_ingredients: RecipeIngredients
    recipes_for_product: RecipesForProduct
    suggest_for_cart: SuggestRecipesForCart
    checkout: Checkout = field(default_factory=Checkout)
