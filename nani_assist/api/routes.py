# nani_assist/api/routes.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from nani_assist.api.schemas import (
    CartAddRequest, CartResponse, CartUpdateRequest, ChatRequest, ChatResponse, CheckoutRequest,
    ProductDetailResponse, RecipeIn, RecipeIngredientsRequest, RecipeMatchesResponse,
    SaveRecipeRequest, ToggleResponse,
)
from nani_assist.application.usecases import CatalogFilter
from nani_assist.core.errors import QuotaExceeded
from nani_assist.domain.entities import Category, DietaryTag, Recipe
from nani_assist.infrastructure.session_store import SessionState

log = logging.getLogger("api.routes")
router = APIRouter()


# -------------------------
# Dependencies via app.state
# -------------------------
def _from_state(request: Request, name: str):
    obj = getattr(request.app.state, name, None)
    if obj is None:
        raise RuntimeError(f"{name} not initialized. Check app startup wiring.")
    return obj


def get_assistant(request: Request):
    return _from_state(request, "assistant")


def get_sessions(request: Request):
    return _from_state(request, "sessions")


def get_product_repo(request: Request):
    return _from_state(request, "product_repo")


def get_usecases(request: Request):
    return _from_state(request, "usecases")


def _session(sessions, session_id: str) -> SessionState:
    if not (session_id or "").strip():
        raise HTTPException(status_code=400, detail="session_id is required")
    return sessions.get_or_create(session_id)


def _cart_view(st: SessionState) -> Dict[str, Any]:
    return {
        "items": [i.to_dict() for i in st.cart],
        "count": st.cart_count,
        "total": float(st.cart_total),
    }


def _to_recipe(r: RecipeIn) -> Recipe:
    return Recipe(
        object_id=r.objectID,
        title=r.title,
        ingredients=tuple(r.ingredients),
        ingredients_text=r.ingredients_text or ", ".join(r.ingredients),
        instructions=r.instructions or "",
        image=r.image,
        cook_time=r.cook_time,
    )


# -------------------------
# /chat
# -------------------------
@router.post("/chat", response_model=ChatResponse)
async def chat(req: ChatRequest, assistant=Depends(get_assistant)) -> Any:
    if not req.session_id.strip():
        raise HTTPException(status_code=400, detail="session_id is required")
    if not req.message.strip():
        raise HTTPException(status_code=400, detail="message is required")

    try:
        out = await assistant.handle(req.session_id, req.message)
    except QuotaExceeded as e:
        raise HTTPException(status_code=429, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.exception("Processing /chat error")
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "session_id": out["session_id"],
        "reply": out["reply"],
        "added_products": [p.to_dict() for p in out["added_products"]],
        "products_found": [p.to_dict() for p in out["products_found"]],
        "recipes_found": [r.to_dict() for r in out["recipes_found"]],
        "cart": [i.to_dict() for i in out["cart"]],
    }


# -------------------------
# /products
# -------------------------
@router.get("/products")
def list_products(
    q: str = "",
    category: Optional[str] = None,
    dietary: Optional[List[str]] = Query(default=None),
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    sort: str = "featured",
    limit: int = Query(default=50, ge=1, le=2000),
    uc=Depends(get_usecases),
) -> Any:
    try:
        f = CatalogFilter(
            query=q,
            category=Category(category) if category else None,
            dietary=tuple(DietaryTag(d) for d in dietary or []),
            min_price=Decimal(str(min_price)) if min_price is not None else None,
            max_price=Decimal(str(max_price)) if max_price is not None else None,
            sort=sort,
        )
        items = uc.browse(f)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"total": len(items), "items": [p.to_dict() for p in items[:limit]]}


@router.get("/products/{product_id}", response_model=ProductDetailResponse)
def get_product(product_id: str, session_id: str = "", uc=Depends(get_usecases), sessions=Depends(get_sessions)) -> Any:
    try:
        product, related = uc.get_product(product_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    in_wishlist = sessions.get_or_create(session_id).is_in_wishlist(product.id) if session_id.strip() else False
    return {"product": product.to_dict(), "related": [p.to_dict() for p in related], "in_wishlist": in_wishlist}


@router.get("/products/{product_id}/recipes", response_model=List[RecipeMatchesResponse])
def product_recipes(
    product_id: str,
    session_id: str = "",
    uc=Depends(get_usecases),
    sessions=Depends(get_sessions),
) -> Any:
    try:
        product, _ = uc.get_product(product_id)
        cart = sessions.get_or_create(session_id).cart if session_id.strip() else []
        ranked = uc.recipes_for_product(product, cart)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        log.exception("Processing /products/%s/recipes error", product_id)
        raise HTTPException(status_code=500, detail=str(e))
    return [{"recipe": r.to_dict(), "ingredients": [m.to_dict() for m in matches]} for r, matches in ranked]


# -------------------------
# /recipes
# -------------------------
@router.get("/recipes/suggested")
async def suggested_recipes(session_id: str, uc=Depends(get_usecases), sessions=Depends(get_sessions)) -> Any:
    st = _session(sessions, session_id)
    try:
        scored = await uc.suggest_for_cart(list(st.cart))
    except Exception as e:
        log.exception("Processing /recipes/suggested error")
        raise HTTPException(status_code=500, detail=str(e))
    return [s.to_dict() for s in scored]


@router.post("/recipes/ingredients", response_model=RecipeMatchesResponse)
def recipe_ingredients(req: RecipeIngredientsRequest, uc=Depends(get_usecases), sessions=Depends(get_sessions)) -> Any:
    st = _session(sessions, req.session_id)
    recipe = _to_recipe(req.recipe)
    matches = uc.recipe_ingredients(recipe, st.cart)
    return {"recipe": recipe.to_dict(), "ingredients": [m.to_dict() for m in matches]}


@router.get("/recipes/saved")
def saved_recipes(session_id: str, sessions=Depends(get_sessions)) -> Any:
    st = _session(sessions, session_id)
    return [r.to_dict() for r in st.saved_recipes]


@router.post("/recipes/saved", response_model=ToggleResponse)
def toggle_saved_recipe(req: SaveRecipeRequest, sessions=Depends(get_sessions)) -> Any:
    st = _session(sessions, req.session_id)
    active = st.toggle_save_recipe(_to_recipe(req.recipe))
    sessions.save(st)
    return {"active": active}


@router.get("/recipes/{recipe_id}", response_model=RecipeMatchesResponse)
def recipe_detail(recipe_id: str, session_id: str = "", uc=Depends(get_usecases), sessions=Depends(get_sessions)) -> Any:
    st = sessions.get_or_create(session_id) if session_id.strip() else None
    try:
        recipe = uc.recipe_detail(recipe_id, st)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    matches = uc.recipe_ingredients(recipe, st.cart if st else [])
    return {"recipe": recipe.to_dict(), "ingredients": [m.to_dict() for m in matches]}


# -------------------------
# /cart
# -------------------------
@router.get("/cart", response_model=CartResponse)
def view_cart(session_id: str, sessions=Depends(get_sessions)) -> Any:
    return _cart_view(_session(sessions, session_id))


@router.post("/cart", response_model=CartResponse)
def add_to_cart(req: CartAddRequest, sessions=Depends(get_sessions), products=Depends(get_product_repo)) -> Any:
    st = _session(sessions, req.session_id)
    product = products.by_id(req.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product not found: {req.product_id}")
    try:
        st.add_to_cart(product, req.quantity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    sessions.save(st)
    return _cart_view(st)


@router.patch("/cart/{product_id}", response_model=CartResponse)
def update_cart_item(product_id: str, req: CartUpdateRequest, sessions=Depends(get_sessions)) -> Any:
    st = _session(sessions, req.session_id)
    st.update_quantity(product_id, req.quantity)
    sessions.save(st)
    return _cart_view(st)


@router.delete("/cart/{product_id}", response_model=CartResponse)
def remove_cart_item(product_id: str, session_id: str, sessions=Depends(get_sessions)) -> Any:
    st = _session(sessions, session_id)
    st.remove_from_cart(product_id)
    sessions.save(st)
    return _cart_view(st)


@router.delete("/cart", response_model=CartResponse)
def clear_cart(session_id: str, sessions=Depends(get_sessions)) -> Any:
    st = _session(sessions, session_id)
    st.clear_cart()
    sessions.save(st)
    return _cart_view(st)


# -------------------------
# /wishlist, /orders, /checkout
# -------------------------
@router.post("/wishlist/{product_id}", response_model=ToggleResponse)
def toggle_wishlist(product_id: str, session_id: str, sessions=Depends(get_sessions), products=Depends(get_product_repo)) -> Any:
    st = _session(sessions, session_id)
    if products.by_id(product_id) is None:
        raise HTTPException(status_code=404, detail=f"Product not found: {product_id}")
    active = st.toggle_wishlist(product_id)
    sessions.save(st)
    return {"active": active}


@router.get("/wishlist")
def list_wishlist(session_id: str, sessions=Depends(get_sessions), products=Depends(get_product_repo)) -> Any:
    st = _session(sessions, session_id)
    # ids whose product left the catalog are skipped
    found = (products.by_id(pid) for pid in st.wishlist)
    return [p.to_dict() for p in found if p is not None]


@router.get("/orders")
def list_orders(session_id: str, sessions=Depends(get_sessions)) -> Any:
    st = _session(sessions, session_id)
    return [o.to_dict() for o in st.orders]


@router.post("/checkout")
def checkout(req: CheckoutRequest, uc=Depends(get_usecases), sessions=Depends(get_sessions)) -> Any:
    st = _session(sessions, req.session_id)
    try:
        order = uc.checkout(st)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    sessions.save(st)
    return order.to_dict()
