# =========================
# FILE: nani_assist/infrastructure/session_store.py
# =========================
from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, List, Optional

from nani_assist.domain.entities import CartItem, Order, Product, Recipe


@dataclass
class SessionState:
    """
    Per-visitor storefront state. The matching core never touches this; it
    only proposes products, and the application layer applies them here.
    """
    session_id: str
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    cart: List[CartItem] = field(default_factory=list)
    wishlist: List[str] = field(default_factory=list)
    saved_recipes: List[Recipe] = field(default_factory=list)
    orders: List[Order] = field(default_factory=list)

    # assistant context (Gemini history shape)
    chat_history: List[Dict[str, Any]] = field(default_factory=list)
    last_products_found: List[Product] = field(default_factory=list)

    # ---- cart ----
    def add_to_cart(self, product: Product, quantity: int = 1) -> CartItem:
        """Duplicate adds merge into the existing line."""
        if quantity < 1:
            raise ValueError(f"quantity must be positive, got {quantity}")
        for i, item in enumerate(self.cart):
            if item.id == product.id:
                merged = replace(item, quantity=item.quantity + quantity)
                self.cart[i] = merged
                return merged
        item = CartItem(product=product, quantity=quantity)
        self.cart.append(item)
        return item

    def remove_from_cart(self, product_id: str) -> None:
        self.cart = [i for i in self.cart if i.id != product_id]

    def update_quantity(self, product_id: str, quantity: int) -> Optional[CartItem]:
        # below 1 is ignored, use remove_from_cart instead
        if quantity < 1:
            return None
        for i, item in enumerate(self.cart):
            if item.id == product_id:
                self.cart[i] = replace(item, quantity=quantity)
                return self.cart[i]
        return None

    def clear_cart(self) -> None:
        self.cart = []

    @property
    def cart_total(self) -> Decimal:
        return sum((i.line_total for i in self.cart), Decimal("0"))

    @property
    def cart_count(self) -> int:
        return sum(i.quantity for i in self.cart)

    # ---- wishlist / saved recipes ----
    def toggle_wishlist(self, product_id: str) -> bool:
        if product_id in self.wishlist:
            self.wishlist.remove(product_id)
            return False
        self.wishlist.append(product_id)
        return True

    def is_in_wishlist(self, product_id: str) -> bool:
        return product_id in self.wishlist

    def toggle_save_recipe(self, recipe: Recipe) -> bool:
        if self.is_recipe_saved(recipe.object_id):
            self.saved_recipes = [r for r in self.saved_recipes if r.object_id != recipe.object_id]
            return False
        self.saved_recipes.append(recipe)
        return True

    def is_recipe_saved(self, recipe_id: str) -> bool:
        return any(r.object_id == recipe_id for r in self.saved_recipes)

    # ---- orders ----
    def add_order(self, order: Order) -> None:
        # newest first
        self.orders.insert(0, order)


class InMemorySessionStore:
    def __init__(self, ttl_seconds: int = 1800) -> None:
        self.ttl_seconds = ttl_seconds
        self._data: Dict[str, SessionState] = {}

    def get_or_create(self, session_id: str) -> SessionState:
        self._gc()
        st = self._data.get(session_id)
        if st is None:
            st = SessionState(session_id=session_id)
            self._data[session_id] = st
        st.updated_at = time.time()
        return st

    def save(self, st: SessionState) -> None:
        st.updated_at = time.time()
        self._data[st.session_id] = st

    def _gc(self) -> None:
        now = time.time()
        expired = [k for k, v in self._data.items() if now - v.updated_at > self.ttl_seconds]
        for k in expired:
            self._data.pop(k, None)
