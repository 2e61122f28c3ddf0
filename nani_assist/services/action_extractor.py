# =========================
# FILE: nani_assist/services/action_extractor.py
# =========================
"""
Reads the `[ITEMS ADDED TO CART]` block out of assistant text and resolves the
listed names against the catalog.

    Here you go!
    **[ITEMS ADDED TO CART]**:
    - **Organic Basil** ($3.99)
    - Roma Tomatoes - $2.49
    [RECIPES FOUND]: ...

The scan is a line-level state machine (SCANNING -> IN_CART_BLOCK -> DONE);
the block ends at the next bracketed tag or at end of text.
"""
from __future__ import annotations

import enum
import logging
import re
from typing import List, Optional, Sequence

from nani_assist.domain.entities import Product
from nani_assist.services.catalog_matcher import names_equivalent

log = logging.getLogger("services.action_extractor")

CART_TAG = "[ITEMS ADDED TO CART]"

_RE_CART_TAG = re.compile(r"\[ITEMS ADDED TO CART\]:?", re.IGNORECASE)
_RE_ANY_TAG = re.compile(r"\[[^\]\n]*\]")
_RE_BULLET = re.compile(r"^(?:-|\*(?!\*))\s*")
_RE_TRAILING_PARENS = re.compile(r"\s*\(.*?\)\s*$")
_RE_INLINE_BULLET_SEP = re.compile(r"\s+-\s+(?!\$)")
_RE_TAG_TAIL = re.compile(r"^(?:\*\*)?:?")


class ScanState(enum.Enum):
    SCANNING = "scanning"
    IN_CART_BLOCK = "in_cart_block"
    DONE = "done"


def _is_bullet(segment: str) -> bool:
    s = segment.strip()
    return s.startswith("-") or s.startswith("*")


def _split_inline(segment: str) -> List[str]:
    """': - Basil - Roma Tomatoes' on the tag line -> ['- Basil', '- Roma Tomatoes']."""
    s = segment.strip()
    if not s.startswith("-"):
        return [s] if s else []
    parts = [p.strip() for p in _RE_INLINE_BULLET_SEP.split(s) if p.strip()]
    return [parts[0]] + [f"- {p}" for p in parts[1:]]


def scan_cart_block(text: str) -> List[str]:
    """Raw bullet lines of the first cart block, in order. No block -> []."""
    bullets: List[str] = []
    state = ScanState.SCANNING

    for line in (text or "").splitlines():
        if state is ScanState.DONE:
            break

        segments: List[str]
        if state is ScanState.SCANNING:
            m = _RE_CART_TAG.search(line)
            if not m:
                continue
            state = ScanState.IN_CART_BLOCK
            rest = line[m.end():]
            end = _RE_ANY_TAG.search(rest)
            if end:
                rest = rest[: end.start()]
                state = ScanState.DONE
            # tag line: allow several '- x - y' bullets on one line
            segments = _split_inline(_RE_TAG_TAIL.sub("", rest))
        else:
            end = _RE_ANY_TAG.search(line)
            if end:
                line = line[: end.start()]
                state = ScanState.DONE
            segments = [line]

        bullets.extend(seg.strip() for seg in segments if _is_bullet(seg))

    return bullets


def clean_item_line(line: str) -> str:
    """'- **Organic Basil** ($3.99)' -> 'Organic Basil'."""
    s = _RE_BULLET.sub("", (line or "").strip(), count=1)
    s = _RE_TRAILING_PARENS.sub("", s)
    s = s.split(" - $")[0]
    s = s.replace("**", "")
    return s.strip()


def _find_equivalent(name: str, products: Sequence[Product]) -> Optional[Product]:
    target = name.lower()
    for p in products:
        if p.name.lower() == target or names_equivalent(p.name, target):
            return p
    return None


def resolve_item(name: str, searched_products: Sequence[Product], catalog: Sequence[Product]) -> Optional[Product]:
    """Turn-local search results first, then the whole catalog. Never invents a product."""
    if not name:
        return None
    return _find_equivalent(name, searched_products or ()) or _find_equivalent(name, catalog)


def extract_cart_actions(
    response_text: str,
    searched_products: Sequence[Product],
    catalog: Sequence[Product],
) -> List[Product]:
    """One product per resolved bullet, in block order. Unresolved names are dropped."""
    out: List[Product] = []
    for raw in scan_cart_block(response_text):
        name = clean_item_line(raw)
        product = resolve_item(name, searched_products, catalog)
        if product is None:
            log.debug("cart block item not in catalog: %r", name)
            continue
        out.append(product)
    return out


def apply_fallback_actions(
    primary_added: Sequence[Product],
    response_text: str,
    searched_products: Sequence[Product],
    catalog: Sequence[Product],
) -> List[Product]:
    """Fallback only: if the structured path already added anything, do nothing."""
    if primary_added:
        return []
    return extract_cart_actions(response_text, searched_products, catalog)
