from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

import pytest

from nani_assist.core.errors import SearchUnavailable
from nani_assist.domain.entities import CartItem, Category, Product, Recipe


def make_product(pid: str, name: str, price: str = "2.99", category: Category = Category.OTHER, **kw: Any) -> Product:
    return Product(id=pid, name=name, price=Decimal(price), category=category, **kw)


def make_recipe(oid: str, title: str, ingredients: List[str]) -> Recipe:
    return Recipe(object_id=oid, title=title, ingredients=tuple(ingredients))


def cart_of(*names: str) -> List[CartItem]:
    return [CartItem(product=make_product(f"c{i}", n)) for i, n in enumerate(names)]


class FakeIndex:
    """Stands in for the hosted search client. `hits[index][query]` -> hit list."""

    def __init__(self, hits: Optional[Dict[str, Dict[str, List[Dict[str, Any]]]]] = None, fail_on: tuple = ()) -> None:
        self.hits = hits or {}
        self.fail_on = set(fail_on)
        self.calls: List[tuple] = []
        self.objects: Dict[str, Dict[str, Any]] = {}

    def search(self, index: str, query: str, limit: int = 10) -> List[Dict[str, Any]]:
        self.calls.append((index, query, limit))
        if query in self.fail_on or "*" in self.fail_on:
            raise SearchUnavailable(f"index down for {query!r}")
        return list(self.hits.get(index, {}).get(query, []))[:limit]

    def get_object(self, index: str, object_id: str) -> Optional[Dict[str, Any]]:
        if "*" in self.fail_on:
            raise SearchUnavailable("index down")
        return self.objects.get(object_id)


class FakeGenerator:
    def __init__(self, reply: str = "", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: List[tuple] = []

    def complete(self, message: str, history=None) -> str:
        self.calls.append((message, list(history or [])))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def catalog() -> List[Product]:
    return [
        make_product("p1", "Organic Basil", "3.99", Category.VEGETABLES),
        make_product("p2", "Roma Tomatoes", "2.49", Category.VEGETABLES),
        make_product("p3", "Chicken Breast", "8.99", Category.PANTRY),
        make_product("p4", "Eggs", "4.49", Category.DAIRY),
        make_product("p5", "Spaghetti", "1.99", Category.PANTRY),
        make_product("p6", "Pecorino Romano Cheese", "6.99", Category.DAIRY),
        make_product("p7", "Dark Chocolate", "3.49", Category.SNACKS),
    ]
