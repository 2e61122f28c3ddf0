from __future__ import annotations

import logging
import os
import uvicorn
from fastapi import FastAPI
from pymongo import MongoClient
from dotenv import load_dotenv
load_dotenv()
from nani_assist.api.routes import router
from nani_assist.core.config import (
    Paths, MONGO_URI, MONGO_DB, MONGO_PRODUCTS_COL, CATALOG_LIMIT,
    ALGOLIA_APP_ID, ALGOLIA_SEARCH_KEY, ALGOLIA_RECIPE_INDEX, ALGOLIA_PRODUCT_INDEX,
    SEARCH_TIMEOUT_S, SEARCH_CACHE_TTL_S, GOOGLE_AI_API_KEY, GEMINI_MODEL, LLM_TIMEOUT_S,
    RECIPE_SUGGESTION_LIMIT, CART_SEARCH_FANOUT, CART_RECIPE_HITS, PRODUCT_RECIPE_HITS,
    CHAT_PRODUCT_HITS, CHAT_RECIPE_HITS, SESSION_TTL_S,
)

from nani_assist.infrastructure.catalog_repository import (
    InMemoryProductRepository, JsonProductRepository, MongoProductRepository,
)
from nani_assist.infrastructure.recipe_repository import StaticRecipeRepository
from nani_assist.infrastructure.session_store import InMemorySessionStore
from nani_assist.services.search_client import AlgoliaSearchClient
from nani_assist.services.llm_client import GeminiClient
from nani_assist.services.search_engine import TTLCache, product_chain, recipe_chain
from nani_assist.application.prompts import SYSTEM_PROMPT
from nani_assist.application.query_analyzer import QueryAnalyzer
from nani_assist.application.assistant import Assistant
from nani_assist.application.usecases import (
    BrowseCatalog, GetProduct, GetRecipeDetail, RecipeIngredients, RecipesForProduct,
    SearchProducts, SearchRecipes, SuggestRecipesForCart, UseCases,
)

log = logging.getLogger("app")
app = FastAPI(title="Nani Assist")
app.include_router(router)

_mongo_client: MongoClient | None = None
_search_client: AlgoliaSearchClient | None = None
_llm_client: GeminiClient | None = None


def _load_catalog() -> InMemoryProductRepository:
    global _mongo_client
    if MONGO_URI:
        _mongo_client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=3000)
        log.info("Catalog source: mongo %s.%s", MONGO_DB, MONGO_PRODUCTS_COL)
        return MongoProductRepository(_mongo_client[MONGO_DB][MONGO_PRODUCTS_COL], limit=CATALOG_LIMIT)
    if os.path.exists(Paths.CATALOG_JSON):
        log.info("Catalog source: %s", Paths.CATALOG_JSON)
        return JsonProductRepository(Paths.CATALOG_JSON, limit=CATALOG_LIMIT)
    log.warning("No catalog configured (MONGO_URI empty, %s missing)", Paths.CATALOG_JSON)
    return InMemoryProductRepository([])


@app.on_event("startup")
def on_startup() -> None:
    global _search_client, _llm_client

    product_repo = _load_catalog()
    recipe_repo = StaticRecipeRepository()

    if ALGOLIA_APP_ID and ALGOLIA_SEARCH_KEY:
        _search_client = AlgoliaSearchClient(ALGOLIA_APP_ID, ALGOLIA_SEARCH_KEY, timeout_s=SEARCH_TIMEOUT_S)
    else:
        log.warning("Algolia not configured, local search only")

    if GOOGLE_AI_API_KEY:
        _llm_client = GeminiClient(GOOGLE_AI_API_KEY, GEMINI_MODEL, SYSTEM_PROMPT, timeout_s=LLM_TIMEOUT_S)
    else:
        log.warning("GOOGLE_AI_API_KEY not set, chat replies will be unavailable")

    cache = TTLCache(ttl_s=SEARCH_CACHE_TTL_S)
    products = product_chain(product_repo.all(), _search_client, ALGOLIA_PRODUCT_INDEX, CHAT_PRODUCT_HITS, cache)
    recipes = recipe_chain(recipe_repo.all(), _search_client, ALGOLIA_RECIPE_INDEX, CHAT_RECIPE_HITS, cache)

    sessions = InMemorySessionStore(ttl_seconds=SESSION_TTL_S)
    assistant = Assistant(
        sessions=sessions,
        analyzer=QueryAnalyzer(),
        product_repo=product_repo,
        search_products=SearchProducts(products),
        search_recipes=SearchRecipes(recipes),
        generator=_llm_client,
    )

    # DI for routes.py
    app.state.assistant = assistant
    app.state.sessions = sessions
    app.state.product_repo = product_repo
    app.state.usecases = UseCases(
        browse=BrowseCatalog(product_repo),
        get_product=GetProduct(product_repo),
        recipe_detail=GetRecipeDetail(recipe_repo, _search_client, ALGOLIA_RECIPE_INDEX),
        recipe_ingredients=RecipeIngredients(product_repo),
        recipes_for_product=RecipesForProduct(
            product_repo, recipe_repo, _search_client, ALGOLIA_RECIPE_INDEX, PRODUCT_RECIPE_HITS,
        ),
        suggest_for_cart=SuggestRecipesForCart(
            recipe_repo, _search_client, ALGOLIA_RECIPE_INDEX,
            fanout=CART_SEARCH_FANOUT, hits_per_query=CART_RECIPE_HITS, limit=RECIPE_SUGGESTION_LIMIT,
        ),
    )
    log.info("Startup complete")


@app.on_event("shutdown")
def on_shutdown() -> None:
    if _mongo_client:
        _mongo_client.close()
    if _search_client:
        _search_client.close()
    if _llm_client:
        _llm_client.close()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8081, reload=False)
