# =========================
# FILE: nani_assist/services/search_engine.py
# (fallback chains: hosted index -> local substring -> local fuzzy -> static)
# =========================
from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Generic, List, Optional, Protocol, Sequence, Tuple, TypeVar
import logging
import time

from nani_assist.core.errors import SearchUnavailable
from nani_assist.domain.entities import Category, Product, Recipe
from nani_assist.infrastructure.catalog_repository import map_category
from nani_assist.services.catalog_matcher import search_products

log = logging.getLogger("services.search_engine")

T = TypeVar("T")

HOSTED_FALLBACK_PRICE = Decimal("4.99")


class SearchIndex(Protocol):
    def search(self, index: str, query: str, limit: int = 10) -> List[Dict[str, Any]]: ...


class TTLCache:
    def __init__(self, ttl_s: int = 60, max_items: int = 512) -> None:
        self.ttl_s = ttl_s
        self.max_items = max_items
        self._data: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str):
        now = time.time()
        v = self._data.get(key)
        if not v:
            return None
        ts, payload = v
        if now - ts > self.ttl_s:
            self._data.pop(key, None)
            return None
        return payload

    def set(self, key: str, payload: Any) -> None:
        if len(self._data) >= self.max_items:
            # drop oldest
            oldest = sorted(self._data.items(), key=lambda kv: kv[1][0])[: max(1, self.max_items // 10)]
            for k, _ in oldest:
                self._data.pop(k, None)
        self._data[key] = (time.time(), payload)


# ----------------------------
# Strategies
# ----------------------------
class SearchStrategy(ABC, Generic[T]):
    """attempt(query) -> results, or None/[] to let the next strategy try."""

    name: str = "strategy"

    @abstractmethod
    def attempt(self, query: str) -> Optional[List[T]]: ...


class FallbackChain(Generic[T]):
    def __init__(self, strategies: Sequence[SearchStrategy[T]]) -> None:
        self.strategies = list(strategies)

    def run(self, query: str) -> Tuple[List[T], Optional[str]]:
        """First non-empty result and the name of the strategy that produced it."""
        for s in self.strategies:
            res = s.attempt(query)
            if res:
                log.debug("query=%r answered by %s (%d results)", query, s.name, len(res))
                return list(res), s.name
        return [], None


class _HostedStrategy(SearchStrategy[T]):
    def __init__(self, client: SearchIndex, index: str, limit: int, cache: Optional[TTLCache] = None) -> None:
        self.client = client
        self.index = index
        self.limit = limit
        self.cache = cache

    def hits(self, query: str) -> Optional[List[Dict[str, Any]]]:
        key = f"{self.index}|{query}|{self.limit}"
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        try:
            hits = self.client.search(self.index, query, self.limit)
        except SearchUnavailable as e:
            log.warning("hosted search failed index=%s query=%r, falling back: %s", self.index, query, e)
            return None
        # only non-empty answers are cached
        if self.cache is not None and hits:
            self.cache.set(key, hits)
        return hits


def _hit_price(raw: Any) -> Decimal:
    if not raw:
        return HOSTED_FALLBACK_PRICE
    try:
        price = Decimal(str(raw))
    except InvalidOperation:
        price = None
    if price is None or not price.is_finite() or price < 0:
        log.debug("unusable hosted price %r", raw)
        return HOSTED_FALLBACK_PRICE
    return price


def product_from_hit(hit: Dict[str, Any]) -> Product:
    name = str(hit.get("name") or hit.get("title") or "").strip()
    raw_cat = hit.get("category") or "Pantry"
    try:
        category = Category(raw_cat)
    except ValueError:
        category = map_category(name, str(raw_cat))
    return Product(
        id=str(hit.get("objectID") or ""),
        name=name,
        price=_hit_price(hit.get("price")),
        category=category,
        image=hit.get("image"),
        description=hit.get("description") or f"Premium {name} sourced for you.",
    )


class HostedProductSearch(_HostedStrategy[Product]):
    name = "hosted_products"

    def attempt(self, query: str) -> Optional[List[Product]]:
        hits = self.hits(query)
        if not hits:
            return None
        return [p for p in (product_from_hit(h) for h in hits) if p.id and p.name]


class HostedRecipeSearch(_HostedStrategy[Recipe]):
    name = "hosted_recipes"

    def attempt(self, query: str) -> Optional[List[Recipe]]:
        hits = self.hits(query)
        if not hits:
            return None
        return [Recipe.from_hit(h) for h in hits]


class LocalProductSearch(SearchStrategy[Product]):
    """Substring on name/category over the in-memory catalog."""
    name = "local_products"

    def __init__(self, catalog: Sequence[Product], limit: int = 10) -> None:
        self.catalog = catalog
        self.limit = limit

    def attempt(self, query: str) -> Optional[List[Product]]:
        return search_products(query, self.catalog, max_results=self.limit, max_fuzzy_results=0)


class FuzzyProductSearch(SearchStrategy[Product]):
    """Edit-distance pass; only reached when the substring pass found nothing."""
    name = "fuzzy_products"

    def __init__(self, catalog: Sequence[Product], limit: int = 5) -> None:
        self.catalog = catalog
        self.limit = limit

    def attempt(self, query: str) -> Optional[List[Product]]:
        return search_products(query, self.catalog, max_results=self.limit, max_fuzzy_results=self.limit)


class StaticRecipeSearch(SearchStrategy[Recipe]):
    """Fallback recipes filtered by title or ingredient substring."""
    name = "static_recipes"

    def __init__(self, recipes: Sequence[Recipe], limit: int = 3) -> None:
        self.recipes = recipes
        self.limit = limit

    def attempt(self, query: str) -> Optional[List[Recipe]]:
        q = (query or "").lower()
        if not q:
            return None
        hits = [
            r for r in self.recipes
            if q in r.title.lower() or any(q in i.lower() for i in r.ingredients)
        ]
        return hits[: self.limit]


# ----------------------------
# Chains
# ----------------------------
def product_chain(
    catalog: Sequence[Product],
    client: Optional[SearchIndex] = None,
    index: str = "ingredients",
    limit: int = 10,
    cache: Optional[TTLCache] = None,
) -> FallbackChain[Product]:
    strategies: List[SearchStrategy[Product]] = []
    if client is not None:
        strategies.append(HostedProductSearch(client, index, limit, cache))
    strategies.append(LocalProductSearch(catalog, limit))
    strategies.append(FuzzyProductSearch(catalog, limit=5))
    return FallbackChain(strategies)


def recipe_chain(
    fallback_recipes: Sequence[Recipe],
    client: Optional[SearchIndex] = None,
    index: str = "food",
    limit: int = 5,
    cache: Optional[TTLCache] = None,
) -> FallbackChain[Recipe]:
    strategies: List[SearchStrategy[Recipe]] = []
    if client is not None:
        strategies.append(HostedRecipeSearch(client, index, limit, cache))
    strategies.append(StaticRecipeSearch(fallback_recipes, limit=3))
    return FallbackChain(strategies)
