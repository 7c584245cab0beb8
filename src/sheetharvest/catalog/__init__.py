"""Canonical question catalog, index and matcher."""

from .models import CanonicalQuestion, MatchStrategy, CatalogLoadError, normalize_text
from .index import QuestionIndex, MatchResult
from .loader import load_catalog, build_index

__all__ = [
    "CanonicalQuestion",
    "MatchStrategy",
    "CatalogLoadError",
    "normalize_text",
    "QuestionIndex",
    "MatchResult",
    "load_catalog",
    "build_index",
]
