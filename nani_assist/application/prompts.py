# =========================
# FILE: nani_assist/application/prompts.py
# =========================
from __future__ import annotations

import random
from decimal import Decimal
from typing import List, Sequence

from nani_assist.domain.entities import CartItem, Product, Recipe

SYSTEM_PROMPT = """You are Nani Assist, the culinary assistant of the Nani grocery store.
You help shoppers find ingredients and recipes, and you can put products in their cart.

Each user turn may carry context blocks. Read them carefully:

- [PRODUCTS FOUND]: products that exist in the store right now. Recommend them by their
  exact names and prices. Never claim the store sells something that is not listed; offer
  to look for a substitute instead.
- [RECIPES FOUND]: real recipes from the recipe database. Pick the best fit and mention its
  title and key ingredients.
- [ITEMS ADDED TO CART]: the store already added these products. Confirm them to the user.
- [CURRENT USER CART STATUS]: what the shopper has in the cart.
- [NO RESULTS]: nothing matched; guide the user with general cooking knowledge.

CART PROTOCOL:
When the user asks you to add or buy products and no [ITEMS ADDED TO CART] block was given,
you MUST output a block like this, one product per line, using the exact names from
[PRODUCTS FOUND]:

[ITEMS ADDED TO CART]:
- Organic Basil
- Roma Tomatoes

Without that block the cart stays empty.

Style: concise and expert. Use **bold** for product names and *italics* for recipe titles.
Always propose a next step, e.g. "Shall I add these ingredients to your cart?"
"""

WELCOME = "Welcome to Nani. I'm here to help you find fresh ingredients and delicious recipes. How may I assist you?"
QUOTA_EXCEEDED = (
    "Assistant Quota Exceeded: the AI API key has reached its limit. "
    "Please check your quota or provide a fresh API key."
)
NO_PRODUCTS = "No ingredients found matching your query."
NO_RECIPES = "No recipes found matching your query."
PREVIEW_INGREDIENTS = 5


def _pick(options: list[str]) -> str:
    return random.choice(options)


def apology_reply() -> str:
    return _pick([
        "I apologize, but I'm temporarily unavailable. Please try again in a moment.",
        "Sorry, I couldn't reach the kitchen just now. Please try again shortly.",
    ])


def _money(v: Decimal) -> str:
    return f"${v:.2f}"


def products_block(products: Sequence[Product]) -> str:
    if not products:
        return NO_PRODUCTS
    return "\n".join(f"- {p.name} ({p.category.value}) - {_money(p.price)} [ID: {p.id}]" for p in products)


def recipes_block(recipes: Sequence[Recipe]) -> str:
    if not recipes:
        return NO_RECIPES
    lines: List[str] = []
    for r in recipes:
        head = ", ".join(r.ingredients[:PREVIEW_INGREDIENTS])
        more = "..." if len(r.ingredients) > PREVIEW_INGREDIENTS else ""
        lines.append(f'- "{r.title}" - Ingredients: {head}{more}')
    return "\n".join(lines)


def added_block(products: Sequence[Product], recipe_title: str) -> str:
    body = "\n".join(f"- {p.name} ({_money(p.price)})" for p in products)
    return f"[ITEMS ADDED TO CART]:\n{body}\nTotal: {len(products)} items added from recipe \"{recipe_title}\"\n"


def cart_status(cart: Sequence[CartItem]) -> str:
    if not cart:
        return "[CURRENT USER CART STATUS]: The user's cart is currently EMPTY."
    listing = ", ".join(f"{i.name} (Qty: {i.quantity})" for i in cart)
    return f"[CURRENT USER CART STATUS]: The user currently has {len(cart)} items in their cart: {listing}."


def search_context(sections: Sequence[str]) -> str:
    return (
        "\n\n[SEARCH RESULTS]:\n"
        + "".join(sections)
        + "\n[END SEARCH RESULTS]\n\n"
        + "[SYSTEM NOTE]: Tell the user these items come from the store catalog search "
        + '(e.g. "I searched our catalog and found...").\n\n'
        + "Please use the above real data to answer the user's question:"
    )
