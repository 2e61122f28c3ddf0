# nani_assist/core/config.py
from __future__ import annotations
from dataclasses import dataclass
import os
import logging

# Hosted search index (Algolia REST)
ALGOLIA_APP_ID: str = os.getenv("ALGOLIA_APP_ID", "")
ALGOLIA_SEARCH_KEY: str = os.getenv("ALGOLIA_SEARCH_KEY", "")
ALGOLIA_RECIPE_INDEX: str = os.getenv("ALGOLIA_RECIPE_INDEX", "food")
ALGOLIA_PRODUCT_INDEX: str = os.getenv("ALGOLIA_PRODUCT_INDEX", "ingredients")
SEARCH_TIMEOUT_S: float = float(os.getenv("SEARCH_TIMEOUT_S", "5"))
SEARCH_CACHE_TTL_S: int = int(os.getenv("SEARCH_CACHE_TTL_S", "60"))

# Hosted language model (Gemini REST, SSE streaming)
GOOGLE_AI_API_KEY: str = os.getenv("GOOGLE_AI_API_KEY", "")
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
LLM_TIMEOUT_S: float = float(os.getenv("LLM_TIMEOUT_S", "60"))

# Catalog
CATALOG_LIMIT: int = int(os.getenv("CATALOG_LIMIT", "2000"))

# Mongo settings (optional catalog source; empty URI -> JSON file)
MONGO_URI: str = os.getenv("MONGO_URI", "")
MONGO_DB: str = os.getenv("MONGO_DB", "nani")
MONGO_PRODUCTS_COL: str = os.getenv("MONGO_PRODUCTS_COL", "ingredients")

# Ranking / fan-out
RECIPE_SUGGESTION_LIMIT: int = int(os.getenv("RECIPE_SUGGESTION_LIMIT", "10"))
CART_SEARCH_FANOUT: int = int(os.getenv("CART_SEARCH_FANOUT", "3"))
CART_RECIPE_HITS: int = int(os.getenv("CART_RECIPE_HITS", "15"))
PRODUCT_RECIPE_HITS: int = int(os.getenv("PRODUCT_RECIPE_HITS", "50"))
CHAT_PRODUCT_HITS: int = int(os.getenv("CHAT_PRODUCT_HITS", "10"))
CHAT_RECIPE_HITS: int = int(os.getenv("CHAT_RECIPE_HITS", "5"))

SESSION_TTL_S: int = int(os.getenv("SESSION_TTL_S", "1800"))

@dataclass(frozen=True)
class Paths:
    ROOT: str = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
    DATA_DIR: str = os.path.join(ROOT, "data")
    CATALOG_JSON: str = os.getenv("CATALOG_JSON", os.path.join(DATA_DIR, "ingredients_final.json"))

# Global logging (module-level loggers inherit this)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
