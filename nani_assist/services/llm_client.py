# =========================
# FILE: nani_assist/services/llm_client.py
# =========================
from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional

import httpx
import ujson as json

from nani_assist.core.errors import GenerationFailed, QuotaExceeded

log = logging.getLogger("services.llm_client")

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

# history entries use the Gemini shape: {"role": "user"|"model", "parts": [{"text": ...}]}
History = List[Dict[str, Any]]


def _chunk_text(payload: Dict[str, Any]) -> str:
    out: List[str] = []
    for cand in payload.get("candidates") or []:
        for part in (cand.get("content") or {}).get("parts") or []:
            t = part.get("text")
            if t:
                out.append(t)
    return "".join(out)


class GeminiClient:
    """Streaming text generator over the Gemini REST API (SSE)."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        system_prompt: str = "",
        timeout_s: float = 60.0,
        http: Optional[httpx.Client] = None,
    ) -> None:
        if not api_key:
            raise ValueError("API key not configured")
        self.api_key = api_key
        self.model = model
        self.system_prompt = system_prompt
        self._http = http or httpx.Client(timeout=timeout_s)

    def _body(self, message: str, history: History) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "contents": list(history or []) + [{"role": "user", "parts": [{"text": message}]}],
        }
        if self.system_prompt:
            body["systemInstruction"] = {"parts": [{"text": self.system_prompt}]}
        return body

    def stream(self, message: str, history: Optional[History] = None) -> Iterator[str]:
        url = f"{GEMINI_BASE_URL}/{self.model}:streamGenerateContent"
        params = {"alt": "sse", "key": self.api_key}
        try:
            with self._http.stream("POST", url, params=params, json=self._body(message, history or [])) as r:
                if r.status_code == 429:
                    raise QuotaExceeded("API quota exceeded. Please try again later.")
                if r.status_code >= 400:
                    r.read()
                    raise GenerationFailed(f"generation HTTP {r.status_code}: {r.text[:200]}")
                for line in r.iter_lines():
                    line = line.strip()
                    if not line.startswith("data: "):
                        continue
                    data = line[len("data: "):]
                    if data == "[DONE]":
                        continue
                    try:
                        text = _chunk_text(json.loads(data))
                    except ValueError:
                        # partial / non-JSON frame
                        log.warning("skipping unparsable stream frame")
                        continue
                    if text:
                        yield text
        except httpx.HTTPError as e:
            raise GenerationFailed(f"generation transport error: {e}") from e

    def complete(self, message: str, history: Optional[History] = None) -> str:
        """Accumulate the whole stream; the action extractor needs the full text."""
        return "".join(self.stream(message, history))

    def close(self) -> None:
        self._http.close()
