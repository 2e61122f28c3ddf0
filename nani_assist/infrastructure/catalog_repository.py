# nani_assist/infrastructure/catalog_repository.py
from __future__ import annotations
from decimal import Decimal
from typing import Any, Dict, Iterable, List
from urllib.parse import quote
import logging
import math

import ujson as json
from pymongo.collection import Collection

from nani_assist.domain.entities import Category, DietaryTag, Product
from nani_assist.domain.repositories import ProductReadRepo

log = logging.getLogger("infra.catalog_repo")

# Names containing one of these float to the top of the catalog
POPULAR_ITEMS = [
    "Tomato", "Potato", "Onion", "Garlic", "Carrot", "Spinach", "Broccoli", "Cucumber", "Pumpkin", "Cabbage",
    "Apple", "Banana", "Orange", "Strawberry", "Grape", "Lemon", "Lime", "Mango",
    "Milk", "Butter", "Cheese", "Yogurt", "Cream", "Egg",
    "Chicken", "Beef", "Pork", "Fish", "Meat",
    "Rice", "Pasta", "Bread", "Flour", "Oil", "Salt", "Sugar", "Honey", "Coffee", "Tea", "Water",
    "Chocolate", "Chip", "Cookie", "Nut", "Popcorn", "Cracker",
]
_POPULAR_LOWER = [k.lower() for k in POPULAR_ITEMS]

_FRUIT_HINTS = ("fruit", "berry", "apple", "banana")
_VEG_HINTS = ("produce", "veg")
_DAIRY_HINTS = ("dairy", "cheese", "milk")
_SNACK_HINTS = ("snack", "sweet", "candy", "chocolate")
_PANTRY_HINTS = ("pantry", "spice", "meat", "oil", "sauce", "canned", "grain", "bread", "pasta", "rice")


def map_category(name: str, raw_category: str) -> Category:
    combined = f"{name} {raw_category}".lower()
    if any(h in combined for h in _FRUIT_HINTS):
        return Category.FRUITS
    if any(h in combined for h in _VEG_HINTS):
        return Category.VEGETABLES
    if any(h in combined for h in _DAIRY_HINTS):
        return Category.DAIRY
    if any(h in combined for h in _SNACK_HINTS):
        return Category.SNACKS
    if any(h in combined for h in _PANTRY_HINTS):
        return Category.PANTRY
    return Category.OTHER


def _popularity_key(doc: Dict[str, Any]):
    name = str(doc.get("name") or "").lower()
    if any(k in name for k in _POPULAR_LOWER):
        # shorter names are closer to the "whole" item
        return (0, len(name))
    return (1, 0)


def hash_string(s: str) -> int:
    """32-bit string hash (h * 31 + c, wrapped to signed int32), absolute value."""
    h = 0
    for ch in s:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def seeded_random(seed: str, offset: int = 0) -> float:
    """Deterministic value in [0, 1) derived from a product id."""
    return (hash_string(f"{seed}{offset}") % 10000) / 10000


def product_from_raw(doc: Dict[str, Any]) -> Product:
    pid = str(doc.get("objectID") or doc.get("_id") or "")
    name = str(doc.get("name") or "").strip()
    raw_cat = str(doc.get("category") or "Pantry")
    return Product(
        id=pid,
        name=name,
        price=Decimal(math.floor(seeded_random(pid, 1) * 15)) + Decimal("1.99"),
        category=map_category(name, raw_cat),
        dietary_tags=frozenset({DietaryTag.ORGANIC}),
        image=f"https://tse2.mm.bing.net/th?q={quote(name + ' ' + (doc.get('category') or 'food'))}&w=800&h=800&c=7&rs=1&p=0",
        rating=round(4.0 + seeded_random(pid, 2), 2),
        reviews=math.floor(seeded_random(pid, 3) * 200),
        is_new=seeded_random(pid, 4) > 0.8,
        description=f"{name} - Fresh and high quality ingredient sourced for your kitchen.",
        popularity=math.floor(seeded_random(pid, 5) * 100),
    )


def build_catalog(raw_docs: Iterable[Dict[str, Any]], limit: int) -> List[Product]:
    """Popularity sort (stable), truncate, map. Entries without a name are skipped."""
    docs = [d for d in raw_docs if str(d.get("name") or "").strip()]
    docs.sort(key=_popularity_key)
    out: List[Product] = []
    for doc in docs[: max(0, limit)]:
        try:
            out.append(product_from_raw(doc))
        except Exception as e:
            log.exception("Invalid ingredient document: %s", doc)
            raise ValueError(f"Invalid ingredient document: {e}") from e
    return out


class InMemoryProductRepository(ProductReadRepo):
    """Read-only catalog held in memory. Loaded once; order is preserved."""

    def __init__(self, products: List[Product]) -> None:
        self._items: List[Product] = list(products)
        self._by_id: Dict[str, Product] = {}
        for p in self._items:
            self._by_id.setdefault(p.id, p)
        if not self._items:
            log.warning("Product catalog is empty")
        else:
            log.info("Catalog loaded with %d products", len(self._items))

    def all(self) -> List[Product]:
        return self._items

    def by_id(self, product_id: str) -> Product | None:
        return self._by_id.get(str(product_id))


class JsonProductRepository(InMemoryProductRepository):
    def __init__(self, path: str, limit: int = 2000) -> None:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, list):
            raise ValueError(f"Catalog file must hold a JSON list: {path}")
        super().__init__(build_catalog(raw, limit))


class MongoProductRepository(InMemoryProductRepository):
    """
    Same catalog rules, source documents from MongoDB.
    Reads the collection once at startup.
    """
    def __init__(self, col: Collection, limit: int = 2000) -> None:
        self._col = col
        super().__init__(build_catalog(col.find({}, {"objectID": 1, "name": 1, "category": 1}), limit))
