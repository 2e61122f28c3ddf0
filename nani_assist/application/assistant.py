# =========================
# FILE: nani_assist/application/assistant.py
# (one chat turn: analyze -> retrieve -> primary add -> generate -> fallback add)
# =========================
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple

import anyio

from nani_assist.application import prompts
from nani_assist.application.query_analyzer import QueryAnalyzer
from nani_assist.application.usecases import SearchProducts, SearchRecipes
from nani_assist.core.errors import GenerationFailed, QuotaExceeded
from nani_assist.domain.entities import Product, Recipe
from nani_assist.domain.repositories import ProductReadRepo
from nani_assist.infrastructure.session_store import InMemorySessionStore, SessionState
from nani_assist.services.action_extractor import apply_fallback_actions
from nani_assist.services.catalog_matcher import find_products_for_ingredients

log = logging.getLogger("app.assistant")


class TextGenerator(Protocol):
    def complete(self, message: str, history: Optional[List[Dict[str, Any]]] = None) -> str: ...


class Assistant:
    def __init__(
        self,
        sessions: InMemorySessionStore,
        analyzer: QueryAnalyzer,
        product_repo: ProductReadRepo,
        search_products: SearchProducts,
        search_recipes: SearchRecipes,
        generator: Optional[TextGenerator] = None,
    ) -> None:
        self.sessions = sessions
        self.analyzer = analyzer
        self.product_repo = product_repo
        self.search_products = search_products
        self.search_recipes = search_recipes
        self.generator = generator

    async def handle(self, session_id: str, text: str) -> Dict[str, Any]:
        st = self.sessions.get_or_create(session_id)
        message = (text or "").strip()
        if not message:
            raise ValueError("message is required")

        qa = self.analyzer.analyze(message)
        log.info(
            "turn session=%s ingredients=%s recipes=%s add=%s terms=%r",
            session_id, qa.needs_ingredient_search, qa.needs_recipe_search,
            qa.wants_to_add_to_cart, qa.search_terms,
        )

        status = prompts.cart_status(st.cart) + "\n\n" if qa.mentions_cart else ""
        prompt = status + message

        products_found: List[Product] = []
        recipes_found: List[Recipe] = []
        added: List[Product] = []

        # 1) retrieval + primary add
        if qa.needs_retrieval:
            query = qa.search_terms or message
            sections: List[str] = []

            if qa.needs_ingredient_search:
                products_found = await anyio.to_thread.run_sync(self.search_products, query)
                sections.append(f"\n[PRODUCTS FOUND]:\n{prompts.products_block(products_found)}\n")

            if qa.needs_recipe_search or qa.wants_to_add_to_cart:
                recipes_found = await anyio.to_thread.run_sync(self.search_recipes, query)
                sections.append(f"\n[RECIPES FOUND]:\n{prompts.recipes_block(recipes_found)}\n")

                if qa.wants_to_add_to_cart and recipes_found:
                    added = self._add_recipe_ingredients(st, recipes_found[0])
                    if added:
                        sections.append("\n" + prompts.added_block(added, recipes_found[0].title))

            prompt = status + prompts.search_context(sections) + "\n\nUser Question: " + message

        st.last_products_found = products_found

        # 2) generation
        reply, ok = await self._generate(st, prompt)

        # 3) fallback add from the assistant's own cart block
        if ok:
            fallback = apply_fallback_actions(added, reply, products_found, self.product_repo.all())
            for p in fallback:
                st.add_to_cart(p, 1)
            if fallback:
                log.info("fallback cart block added %d products", len(fallback))
            added = added + fallback

        self.sessions.save(st)
        return {
            "session_id": session_id,
            "reply": reply,
            "added_products": added,
            "products_found": products_found,
            "recipes_found": recipes_found,
            "cart": list(st.cart),
        }

    # ----------------------------
    # Helpers
    # ----------------------------
    def _add_recipe_ingredients(self, st: SessionState, recipe: Recipe) -> List[Product]:
        if not recipe.ingredients:
            return []
        matched = find_products_for_ingredients(recipe.ingredients, self.product_repo.all())
        for p in matched:
            st.add_to_cart(p, 1)
        log.info("recipe %r added %d of %d ingredients", recipe.title, len(matched), len(recipe.ingredients))
        return matched

    async def _generate(self, st: SessionState, prompt: str) -> Tuple[str, bool]:
        """(reply text, ok). On failure the reply is the user-facing fallback text."""
        if self.generator is None:
            log.warning("no text generator configured")
            return prompts.apology_reply(), False
        try:
            reply = await anyio.to_thread.run_sync(self.generator.complete, prompt, list(st.chat_history))
        except QuotaExceeded as e:
            log.warning("generation quota exceeded: %s", e)
            return prompts.QUOTA_EXCEEDED, False
        except GenerationFailed as e:
            log.warning("generation failed: %s", e)
            return prompts.apology_reply(), False

        # history only grows on success so user/model turns stay paired
        st.chat_history.append({"role": "user", "parts": [{"text": prompt}]})
        st.chat_history.append({"role": "model", "parts": [{"text": reply}]})
        return reply, True
