# nani_assist/core/errors.py
from __future__ import annotations


class SearchUnavailable(RuntimeError):
    """Hosted search index failed (transport error, non-2xx, bad payload)."""


class GenerationFailed(RuntimeError):
    """Hosted language model failed to produce a response."""


class QuotaExceeded(GenerationFailed):
    """Language model rejected the call with HTTP 429."""
