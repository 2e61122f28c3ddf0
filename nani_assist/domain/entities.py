# nani_assist/domain/entities.py
from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple


class Category(str, Enum):
    VEGETABLES = "Vegetables"
    FRUITS = "Fruits"
    PANTRY = "Pantry"
    DAIRY = "Dairy"
    SNACKS = "Snacks"
    OTHER = "Other"


class DietaryTag(str, Enum):
    ORGANIC = "Organic"
    VEGAN = "Vegan"
    GLUTEN_FREE = "Gluten-Free"
    KETO = "Keto"
    NON_GMO = "Non-GMO"


class OrderStatus(str, Enum):
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: Decimal
    category: Category = Category.OTHER
    dietary_tags: FrozenSet[DietaryTag] = frozenset()
    image: str | None = None
    rating: float = 0.0
    reviews: int = 0
    is_new: bool = False
    description: str = ""
    popularity: int = 0
    date_added: str = "2024-01-01T00:00:00.000Z"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": float(self.price),
            "category": self.category.value,
            "dietary": sorted(t.value for t in self.dietary_tags),
            "image": self.image,
            "rating": self.rating,
            "reviews": self.reviews,
            "is_new": self.is_new,
            "description": self.description,
            "popularity": self.popularity,
            "date_added": self.date_added,
        }


@dataclass(frozen=True)
class CartItem:
    product: Product
    quantity: int = 1

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"quantity must be positive, got {self.quantity}")

    @property
    def id(self) -> str:
        return self.product.id

    @property
    def name(self) -> str:
        return self.product.name

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {**self.product.to_dict(), "quantity": self.quantity}


@dataclass(frozen=True)
class Recipe:
    object_id: str
    title: str
    ingredients: Tuple[str, ...] = ()
    ingredients_text: str = ""
    instructions: str = ""
    image: str | None = None
    cook_time: str | None = None

    @classmethod
    def from_hit(cls, hit: Dict[str, Any]) -> "Recipe":
        """Build from a search hit; hits may carry `name` instead of `title`."""
        ingredients = tuple(str(i) for i in (hit.get("ingredients") or []))
        return cls(
            object_id=str(hit.get("objectID") or hit.get("object_id") or ""),
            title=str(hit.get("title") or hit.get("name") or "").strip(),
            ingredients=ingredients,
            ingredients_text=str(hit.get("ingredients_text") or ", ".join(ingredients)),
            instructions=str(hit.get("instructions") or ""),
            image=hit.get("image"),
            cook_time=hit.get("cookTime") or hit.get("cook_time"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "objectID": self.object_id,
            "title": self.title,
            "ingredients": list(self.ingredients),
            "ingredients_text": self.ingredients_text,
            "instructions": self.instructions,
            "image": self.image,
            "cook_time": self.cook_time,
        }


@dataclass(frozen=True)
class MatchResult:
    ingredient_text: str
    is_available: bool
    matched_product: Optional[Product] = None
    in_cart: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ingredient": self.ingredient_text,
            "is_available": self.is_available,
            "product": self.matched_product.to_dict() if self.matched_product else None,
            "in_cart": self.in_cart,
        }


@dataclass(frozen=True)
class ScoredRecipe:
    recipe: Recipe
    match_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {**self.recipe.to_dict(), "match_count": self.match_count}


@dataclass(frozen=True)
class Order:
    id: str
    date: str
    items: Tuple[CartItem, ...]
    total: Decimal
    status: OrderStatus = OrderStatus.PROCESSING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "items": [i.to_dict() for i in self.items],
            "total": float(self.total),
            "status": self.status.value,
        }
