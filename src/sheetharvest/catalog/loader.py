"""Load the question catalog exported by the storage backend."""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from .index import QuestionIndex
from .models import CanonicalQuestion, CatalogLoadError

logger = logging.getLogger(__name__)


def load_catalog(path: Union[str, Path]) -> list[CanonicalQuestion]:
    """
    Read catalog questions from JSON, preserving file order.

    The file holds either a list of question objects or {"questions": [...]}.
    Field names may be snake_case or camelCase.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise CatalogLoadError(f"Cannot read catalog '{path}': {e}") from e

    if isinstance(raw, dict):
        raw = raw.get("questions")
    if not isinstance(raw, list):
        raise CatalogLoadError(f"Catalog '{path}' must contain a list of questions")

    questions = []
    for position, item in enumerate(raw):
        try:
            questions.append(CanonicalQuestion.model_validate(item))
        except ValidationError as e:
            raise CatalogLoadError(f"Invalid question at position {position} in '{path}': {e}") from e

    logger.info(f"Loaded {len(questions)} catalog questions from {path}")
    return questions


def build_index(path: Union[str, Path], fuzzy_threshold: Optional[float] = None) -> QuestionIndex:
    """Load a catalog file and index it."""
    return QuestionIndex(load_catalog(path), fuzzy_threshold=fuzzy_threshold)
