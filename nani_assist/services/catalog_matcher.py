# =========================
# FILE: nani_assist/services/catalog_matcher.py
# =========================
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterable, List, Optional, Sequence

from rapidfuzz.distance import Levenshtein

from nani_assist.domain.entities import CartItem, MatchResult, Product, Recipe
from nani_assist.services.normalizer import normalize, normalize_bulk, strip_leading_slash

log = logging.getLogger("services.catalog_matcher")

MIN_BULK_INGREDIENT_LEN = 3
PLURAL_SUFFIXES = ("s", "es")


@lru_cache(maxsize=16384)
def normalized_name(text: str) -> str:
    return normalize(text)


# ----------------------------
# Matching rules
# ----------------------------
def overlaps(a_norm: str, b_norm: str) -> bool:
    """Bidirectional substring test on already-normalized, non-empty strings."""
    if not a_norm or not b_norm:
        return False
    return a_norm in b_norm or b_norm in a_norm


def names_overlap(a: str, b: str) -> bool:
    return overlaps(normalized_name(a), normalized_name(b))


def names_equivalent(a: str, b: str) -> bool:
    """
    Singular/plural rule used for assistant-proposed names:
    equal, or one is the other plus a trailing 's' / 'es' (Egg/Eggs, Tomato/Tomatoes).
    Narrower than `names_overlap`.
    """
    x = (a or "").strip().lower()
    y = (b or "").strip().lower()
    if not x or not y:
        return False
    if x == y:
        return True
    for longer, shorter in ((x, y), (y, x)):
        for suffix in PLURAL_SUFFIXES:
            if longer.endswith(suffix) and longer[: -len(suffix)] == shorter:
                return True
    return False


def fuzzy_tolerance(query: str) -> int:
    # roughly one edit per 4 chars, min 1
    return len(query) // 4 + 1


# ----------------------------
# Catalog lookups
# ----------------------------
def _first_overlap(needle_norm: str, catalog: Iterable[Product]) -> Optional[Product]:
    if not needle_norm:
        return None
    for p in catalog:
        if overlaps(normalized_name(p.name), needle_norm):
            return p
    return None


def find_match(ingredient_text: str, catalog: Sequence[Product]) -> Optional[Product]:
    """First product (catalog order) whose normalized name overlaps the ingredient."""
    return _first_overlap(normalized_name(ingredient_text or ""), catalog)


def find_products_for_ingredients(ingredients: Iterable[str], catalog: Sequence[Product]) -> List[Product]:
    """Auto-add path: one product per ingredient at most, deduped by id, order kept."""
    matched: List[Product] = []
    seen: set[str] = set()
    for ing in ingredients:
        clean = normalize_bulk(ing or "")
        if len(clean) < MIN_BULK_INGREDIENT_LEN:
            continue
        p = _first_overlap(clean, catalog)
        if p is not None and p.id not in seen:
            seen.add(p.id)
            matched.append(p)
    log.debug("auto-matched %d products", len(matched))
    return matched


def _fuzzy_indices(
    query: str,
    names: Sequence[str],
    categories: Optional[Sequence[str]],
    max_results: int,
    max_fuzzy_results: int,
) -> List[int]:
    q = (query or "").strip().lower()
    if not q or max_results <= 0:
        return []

    hits: List[int] = []
    for i, name in enumerate(names):
        cat = (categories[i] if categories is not None else "") or ""
        if q in name.lower() or (cat and q in cat.lower()):
            hits.append(i)
            if len(hits) >= max_results:
                return hits
    if hits or len(q) <= 3 or max_fuzzy_results <= 0:
        return hits

    tol = fuzzy_tolerance(q)
    for i, name in enumerate(names):
        name_lower = name.lower()
        if Levenshtein.distance(q, name_lower) <= tol or any(
            Levenshtein.distance(q, w) <= tol for w in name_lower.split()
        ):
            hits.append(i)
            if len(hits) >= max_fuzzy_results:
                break
    return hits


def fuzzy_match(
    query: str,
    names: Sequence[str],
    max_results: int,
    categories: Optional[Sequence[str]] = None,
    max_fuzzy_results: Optional[int] = None,
) -> List[str]:
    """
    Free-text name search:
      1) substring on name (or parallel `categories` entry)
      2) only if (1) is empty and len(query) > 3: Levenshtein against the whole
         name and each of its words, tolerance = len(query) // 4 + 1
    """
    cap = max_results if max_fuzzy_results is None else max_fuzzy_results
    return [names[i] for i in _fuzzy_indices(query, names, categories, max_results, cap)]


def search_products(
    query: str,
    catalog: Sequence[Product],
    max_results: int = 10,
    max_fuzzy_results: int = 5,
) -> List[Product]:
    """Same rules as `fuzzy_match`, returning products (category text included)."""
    names = [p.name for p in catalog]
    cats = [p.category.value for p in catalog]
    idxs = _fuzzy_indices(query, names, cats, max_results, max_fuzzy_results)
    return [catalog[i] for i in idxs]


# ----------------------------
# Recipe ingredient availability
# ----------------------------
def match_ingredients(
    recipe: Recipe,
    catalog: Sequence[Product],
    cart: Sequence[CartItem] = (),
    anchor: Optional[Product] = None,
) -> List[MatchResult]:
    """
    One MatchResult per recipe ingredient.

    - matched_product: first catalog overlap ("in shop")
    - in_cart: some cart item's normalized name contains the ingredient
    - is_available: with an anchor product, the ingredient overlaps the anchor
      or any cart item; without one, it is simply "in shop"
    """
    cart_norms = [normalized_name(c.name) for c in cart]
    anchor_norm = normalized_name(anchor.name) if anchor is not None else ""

    out: List[MatchResult] = []
    for raw in recipe.ingredients:
        display = strip_leading_slash((raw or "").strip()).strip()
        ing_norm = normalized_name(display)
        match = _first_overlap(ing_norm, catalog)
        in_cart = bool(ing_norm) and any(ing_norm in cn for cn in cart_norms if cn)

        if anchor is not None:
            available = overlaps(ing_norm, anchor_norm) or any(overlaps(ing_norm, cn) for cn in cart_norms)
        else:
            available = match is not None

        out.append(MatchResult(ingredient_text=display, is_available=available, matched_product=match, in_cart=in_cart))
    return out
