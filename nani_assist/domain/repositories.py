# nani_assist/domain/repositories.py
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List

from nani_assist.domain.entities import Product, Recipe


class ProductReadRepo(ABC):
    """Read-only catalog. Order is significant: first-match-wins lookups rely on it."""

    @abstractmethod
    def all(self) -> List[Product]: ...

    @abstractmethod
    def by_id(self, product_id: str) -> Product | None: ...


class RecipeReadRepo(ABC):
    @abstractmethod
    def all(self) -> List[Recipe]: ...

    @abstractmethod
    def by_id(self, recipe_id: str) -> Recipe | None: ...
