# =========================
# FILE: nani_assist/services/normalizer.py
# =========================
"""
Ingredient / product name normalization.

`normalize` is a fixed pipeline of small named steps so every rule can be
tested on its own:

    lowercase -> strip_leading_slash -> strip_quantity
              -> strip_parentheticals -> trim

Two names "match" when one normalized form contains the other
(see `catalog_matcher.names_overlap`). Filler-word cleanup
(`strip_filler_words`) is NOT part of `normalize`; it is only used to build
search queries from product names.
"""
from __future__ import annotations

import re
from typing import Callable, List, Sequence

UNITS: Sequence[str] = (
    "oz", "lb", "g", "kg", "cup", "tsp", "tbsp",
    "dash", "pinch", "slice", "piece", "clove",
)
_UNIT_ALT = "|".join(UNITS)

# quantity, optional decimal, optional unit (optionally plural / abbreviated with '.')
_UNIT_TOKEN = rf"(?:(?:{_UNIT_ALT})s?\b\.?)?"
_RE_LEADING_QTY = re.compile(rf"^\d+(?:\.\d+)?\s*{_UNIT_TOKEN}\s+")
_RE_ANY_QTY = re.compile(rf"\d+(?:\.\d+)?\s*{_UNIT_TOKEN}\s*")
_RE_PARENS = re.compile(r"\([^)]*\)")
_RE_SPACES = re.compile(r"\s+")

FILLER_WORDS: Sequence[str] = (
    "other", "fresh", "organic", "raw", "whole", "sliced", "chopped", "diced",
    "fillet", "breast", "thigh", "wing", "rinse", "garnish", "dash", "splash",
    "pinch", "style", "flavored", "extract", "essence", "powder", "dried", "ground",
)
_RE_FILLER = re.compile(r"\b(?:" + "|".join(FILLER_WORDS) + r")\b")


# ----------------------------
# Steps
# ----------------------------
def lowercase(text: str) -> str:
    return text.lower()


def strip_leading_slash(text: str) -> str:
    return text[1:] if text.startswith("/") else text


def strip_quantity(text: str) -> str:
    """'2 cups basil' -> 'basil'; '1.5 lb. beef' -> 'beef'. Only a leading quantity."""
    return _RE_LEADING_QTY.sub("", text, count=1)


def strip_all_quantities(text: str) -> str:
    """Bulk variant: drops every quantity/unit run, wherever it sits."""
    return _RE_ANY_QTY.sub("", text)


def strip_parentheticals(text: str) -> str:
    # all runs, not just the first
    return _RE_PARENS.sub("", text)


def trim(text: str) -> str:
    return text.strip()


Step = Callable[[str], str]

PIPELINE: List[Step] = [lowercase, strip_leading_slash, strip_quantity, strip_parentheticals, trim]
BULK_PIPELINE: List[Step] = [lowercase, strip_all_quantities, strip_parentheticals, trim]


def _run(text: str, steps: Sequence[Step]) -> str:
    out = text or ""
    for step in steps:
        out = step(out)
    return out


def normalize(raw: str) -> str:
    """Canonical comparable form. May return '' (callers decide what that means)."""
    return _run(raw, PIPELINE)


def normalize_bulk(raw: str) -> str:
    """Cleanup used when auto-matching a whole recipe ingredient list."""
    return _run(raw, BULK_PIPELINE)


def strip_filler_words(name: str) -> str:
    """'Fresh Tomato' -> 'tomato'. Used for recipe queries, never for matching."""
    t = _RE_FILLER.sub(" ", (name or "").lower())
    return _RE_SPACES.sub(" ", t).strip()
