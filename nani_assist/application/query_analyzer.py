# =========================
# FILE: nani_assist/application/query_analyzer.py
# =========================
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List

INGREDIENT_KEYWORDS = [
    "ingredient", "have", "stock", "find", "looking for", "need",
    "buy", "purchase", "get", "available", "search", "add",
]
RECIPE_KEYWORDS = [
    "recipe", "cook", "make", "prepare", "dish", "meal", "dinner", "lunch", "breakfast",
    "pasta", "chicken", "beef", "salad", "japanese", "chinese", "italian", "mexican", "indian",
]
ADD_TO_CART_KEYWORDS = [
    "add to cart", "add all", "add ingredients", "buy ingredients", "get ingredients",
    "add items", "add everything", "buy", "purchase",
]

# cuisine -> popular dishes, used to widen the recipe query
CUISINE_MAP: Dict[str, str] = {
    "japanese": "sushi ramen tempura teriyaki udon miso",
    "chinese": "stir fry dim sum fried rice noodles dumplings",
    "italian": "pasta pizza risotto lasagna carbonara",
    "mexican": "tacos burrito enchilada guacamole salsa fajitas",
    "indian": "curry tikka masala biryani naan",
    "american": "burger steak sandwich bbq wings",
    "thai": "pad thai curry soup satay",
    "french": "croissant baguette ratatouille steak frites",
    "mediterranean": "hummus falafel kebab salad greek",
}

FOOD_KEYWORDS = [
    "pasta", "spaghetti", "carbonara", "chicken", "beef", "salad", "soup", "pizza", "burger",
    "steak", "fish", "salmon", "shrimp", "rice", "noodle", "curry", "taco", "sandwich", "cake",
    "cookie", "bread", "tomato", "vegetable", "fruit", "sushi", "ramen", "tempura", "teriyaki",
]
ACTION_WORDS = {
    "add", "all", "ingredients", "make", "cart", "buy", "get", "find", "search", "want", "need",
    "looking", "for", "the", "and", "with", "some", "dish", "food", "cuisine", "recipe",
}

_RE_NON_ALPHA = re.compile(r"[^a-z]")
_RE_CART_MENTION = re.compile(r"cart|bag", re.IGNORECASE)

MAX_FALLBACK_TERMS = 3


@dataclass(frozen=True)
class QueryAnalysis:
    needs_ingredient_search: bool
    needs_recipe_search: bool
    wants_to_add_to_cart: bool
    mentions_cart: bool
    search_terms: str

    @property
    def needs_retrieval(self) -> bool:
        return self.needs_ingredient_search or self.needs_recipe_search or self.wants_to_add_to_cart


class QueryAnalyzer:
    """Keyword routing for a chat message; no model involved."""

    def analyze(self, text: str) -> QueryAnalysis:
        t = (text or "").strip()
        lower = t.lower()

        needs_ing = any(k in lower for k in INGREDIENT_KEYWORDS)
        needs_recipe = any(k in lower for k in RECIPE_KEYWORDS)
        wants_add = any(k in lower for k in ADD_TO_CART_KEYWORDS)
        mentions_cart = bool(_RE_CART_MENTION.search(lower))

        terms = self._search_terms(t, lower)
        if terms.cuisine:
            needs_recipe = True

        return QueryAnalysis(
            needs_ingredient_search=needs_ing,
            needs_recipe_search=needs_recipe,
            wants_to_add_to_cart=wants_add,
            mentions_cart=mentions_cart,
            search_terms=terms.text,
        )

    def _search_terms(self, text: str, lower: str) -> "_Terms":
        # 1) cuisine -> expand to dishes
        for cuisine, dishes in CUISINE_MAP.items():
            if cuisine in lower:
                return _Terms(f"{cuisine} {dishes}", cuisine=True)

        # 2) known food words
        foods = [f for f in FOOD_KEYWORDS if f in lower]
        if foods:
            return _Terms(" ".join(foods))

        # 3) leftover content words
        words: List[str] = []
        for w in text.split():
            w = _RE_NON_ALPHA.sub("", w.lower())
            if len(w) > 3 and w not in ACTION_WORDS:
                words.append(w)
        return _Terms(" ".join(words[:MAX_FALLBACK_TERMS]))


@dataclass(frozen=True)
class _Terms:
    text: str
    cuisine: bool = False
