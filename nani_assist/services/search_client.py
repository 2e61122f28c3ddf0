# =========================
# FILE: nani_assist/services/search_client.py
# =========================
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlencode

import httpx

from nani_assist.core.errors import SearchUnavailable

log = logging.getLogger("services.search_client")


class AlgoliaSearchClient:
    """
    Minimal Algolia REST client (search-only key).
    Only two calls are needed: index query and object lookup.
    """

    def __init__(
        self,
        app_id: str,
        api_key: str,
        timeout_s: float = 5.0,
        http: Optional[httpx.Client] = None,
    ) -> None:
        if not app_id or not api_key:
            raise ValueError("Algolia app_id and api_key are required")
        self.base_url = f"https://{app_id}-dsn.algolia.net/1/indexes"
        self._http = http or httpx.Client(
            timeout=timeout_s,
            headers={
                "X-Algolia-Application-Id": app_id,
                "X-Algolia-API-Key": api_key,
            },
        )

    def search(self, index: str, query: str, limit: int = 10) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/{quote(index, safe='')}/query"
        body = {"params": urlencode({"query": query or "", "hitsPerPage": int(limit)})}
        data = self._request("POST", url, json=body) or {}
        hits = data.get("hits")
        if not isinstance(hits, list):
            raise SearchUnavailable(f"malformed search payload from index={index}")
        return hits

    def get_object(self, index: str, object_id: str) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}/{quote(index, safe='')}/{quote(object_id, safe='')}"
        return self._request("GET", url, allow_missing=True)

    def _request(self, method: str, url: str, allow_missing: bool = False, **kwargs: Any) -> Optional[Dict[str, Any]]:
        """A 404 is None only for object lookups; a missing index is an outage."""
        try:
            r = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise SearchUnavailable(f"search transport error: {e}") from e
        if r.status_code == 404 and allow_missing:
            return None
        if r.status_code >= 400:
            raise SearchUnavailable(f"search HTTP {r.status_code}: {r.text[:200]}")
        try:
            return r.json()
        except ValueError as e:
            raise SearchUnavailable("search returned non-JSON body") from e

    def close(self) -> None:
        self._http.close()
