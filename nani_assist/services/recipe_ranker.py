# =========================
# FILE: nani_assist/services/recipe_ranker.py
# =========================
from __future__ import annotations

from typing import Iterable, List, Sequence

from nani_assist.domain.entities import CartItem, Product, Recipe, ScoredRecipe
from nani_assist.services.catalog_matcher import normalized_name, overlaps
from nani_assist.services.normalizer import strip_filler_words

DEFAULT_CART_LIMIT = 10


def product_recipe_queries(product: Product) -> List[str]:
    """
    Queries to try, in order, when looking up recipes for a product page:
    the filler-stripped base name, then its last word as a broader retry.
    """
    base = strip_filler_words(product.name)
    query = base if len(base) > 2 else product.name
    queries = [query]
    words = query.split()
    if len(words) > 1 and len(words[-1]) > 2:
        queries.append(words[-1])
    return queries


def _ingredient_hits(ingredients: Iterable[str], ref_norm: str) -> int:
    return sum(1 for i in ingredients if overlaps(normalized_name(i), ref_norm))


def rank_for_product(product: Product, recipes: Sequence[Recipe]) -> List[Recipe]:
    """Title match first, then ingredient-match count desc. Stable for full ties."""
    prod = normalized_name(product.name)

    def key(r: Recipe):
        title_hit = bool(prod) and prod in normalized_name(r.title)
        return (not title_hit, -_ingredient_hits(r.ingredients, prod))

    return sorted(recipes, key=key)


def rank_for_cart(
    cart_items: Sequence[CartItem],
    recipes: Sequence[Recipe],
    limit: int = DEFAULT_CART_LIMIT,
) -> List[ScoredRecipe]:
    cart_norms = [n for n in (normalized_name(c.name) for c in cart_items) if n]
    scored: List[ScoredRecipe] = []
    for r in recipes:
        count = 0
        for ing in r.ingredients:
            ing_norm = normalized_name(ing)
            if any(overlaps(ing_norm, cn) for cn in cart_norms):
                count += 1
        if count > 0:
            scored.append(ScoredRecipe(recipe=r, match_count=count))

    scored.sort(key=lambda s: -s.match_count)
    return scored[: max(0, limit)]


def dedupe_recipes(batches: Iterable[Iterable[Recipe]]) -> List[Recipe]:
    """Merge result lists by object_id; first occurrence wins."""
    seen: set[str] = set()
    out: List[Recipe] = []
    for batch in batches:
        for r in batch:
            if r.object_id in seen:
                continue
            seen.add(r.object_id)
            out.append(r)
    return out
