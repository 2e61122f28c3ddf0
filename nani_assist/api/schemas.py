# =========================
# FILE: nani_assist/api/schemas.py
# =========================
from __future__ import annotations

from typing import Dict, List, Any, Optional
from pydantic import BaseModel, Field


class RecipeIn(BaseModel):
    objectID: str
    title: str
    ingredients: List[str] = Field(default_factory=list)
    ingredients_text: Optional[str] = None
    instructions: Optional[str] = None
    image: Optional[str] = None
    cook_time: Optional[str] = None


class ChatRequest(BaseModel):
    session_id: str = Field(..., description="Client session id to keep cart and history")
    message: str = Field(..., examples=["Add all the ingredients for a pasta carbonara"])


class ChatResponse(BaseModel):
    session_id: str
    reply: str
    added_products: List[Dict[str, Any]] = Field(default_factory=list)
    products_found: List[Dict[str, Any]] = Field(default_factory=list)
    recipes_found: List[Dict[str, Any]] = Field(default_factory=list)
    cart: List[Dict[str, Any]] = Field(default_factory=list)


class ProductDetailResponse(BaseModel):
    product: Dict[str, Any]
    related: List[Dict[str, Any]]
    in_wishlist: bool = False


class RecipeMatchesResponse(BaseModel):
    recipe: Dict[str, Any]
    ingredients: List[Dict[str, Any]]


class RecipeIngredientsRequest(BaseModel):
    session_id: str
    recipe: RecipeIn


class CartAddRequest(BaseModel):
    session_id: str
    product_id: str
    quantity: int = Field(default=1, ge=1)


class CartUpdateRequest(BaseModel):
    session_id: str
    quantity: int


class CartResponse(BaseModel):
    items: List[Dict[str, Any]]
    count: int
    total: float


class ToggleResponse(BaseModel):
    active: bool


class SaveRecipeRequest(BaseModel):
    session_id: str
    recipe: RecipeIn


class CheckoutRequest(BaseModel):
    session_id: str
