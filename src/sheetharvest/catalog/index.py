"""Normalized-text index over the question catalog and the matcher built on it."""

import logging
from dataclasses import dataclass
from fractions import Fraction
from typing import Iterable, Iterator, Optional

from rapidfuzz.distance import Levenshtein

from ..config import settings
from .models import CanonicalQuestion, MatchStrategy, normalize_text

logger = logging.getLogger(__name__)

TOO_SHORT = "too short"
NO_MATCH = "no match"


@dataclass(frozen=True)
class MatchResult:
    """Outcome of matching one piece of question text."""

    question: Optional[CanonicalQuestion]
    strategy: MatchStrategy
    normalized_input: str
    similarity: Optional[float] = None
    distance: Optional[int] = None
    reason: Optional[str] = None  # set when nothing matched

    @property
    def matched(self) -> bool:
        return self.question is not None

    def confidence_note(self) -> str:
        if self.question is None:
            return self.reason or NO_MATCH
        if self.strategy == MatchStrategy.FUZZY:
            return (
                f"fuzzy similarity {self.similarity:.2f} (distance {self.distance}) "
                f"against {self.question.full_number}"
            )
        if self.strategy == MatchStrategy.CONTAINS:
            return f"contains match against {self.question.full_number}"
        return f"{self.strategy.value} match"


class QuestionIndex:
    """
    Immutable lookup over the catalog, built once per batch.

    Matching order is a fixed contract: exact, then contains, then fuzzy.
    Contains takes the first qualifying entry in catalog order without scoring;
    fuzzy takes the smallest edit distance, ties going to the earlier entry.
    """

    def __init__(
        self,
        questions: Iterable[CanonicalQuestion],
        fuzzy_threshold: Optional[float] = None,
        fuzzy_window: Optional[int] = None,
        max_length_delta: Optional[int] = None,
        min_length: Optional[int] = None,
    ):
        self._questions = tuple(questions)
        self._entries = tuple((q, q.normalized_text) for q in self._questions)

        self.fuzzy_threshold = settings.fuzzy_threshold if fuzzy_threshold is None else fuzzy_threshold
        self.fuzzy_window = settings.fuzzy_window if fuzzy_window is None else fuzzy_window
        self.max_length_delta = settings.fuzzy_max_length_delta if max_length_delta is None else max_length_delta
        self.min_length = settings.min_match_length if min_length is None else min_length
        # Exact rational form so a similarity of exactly the threshold never passes
        self._threshold = Fraction(str(self.fuzzy_threshold))

        self._by_id: dict[str, CanonicalQuestion] = {}
        self._by_full_number: dict[str, CanonicalQuestion] = {}
        self._by_normalized: dict[str, CanonicalQuestion] = {}
        for question, normalized in self._entries:
            if question.id in self._by_id:
                logger.warning(f"Duplicate question id '{question.id}' in catalog, keeping first")
                continue
            self._by_id[question.id] = question
            if question.full_number:
                if question.full_number in self._by_full_number:
                    logger.warning(f"Duplicate full number {question.full_number} in catalog, keeping first")
                else:
                    self._by_full_number[question.full_number] = question
            if normalized:
                self._by_normalized.setdefault(normalized, question)

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self) -> Iterator[CanonicalQuestion]:
        return iter(self._questions)

    def get(self, question_id: str) -> Optional[CanonicalQuestion]:
        return self._by_id.get(question_id)

    def by_full_number(self, full_number: str) -> Optional[CanonicalQuestion]:
        return self._by_full_number.get(full_number.strip())

    def match(self, text: Optional[str], tags: Optional[Iterable[str]] = None) -> MatchResult:
        """
        Match free text to a catalog question.

        Args:
            text: Question label as found in a workbook
            tags: Workbook tags; when any catalog entry carries one of them,
                fuzzy candidates are limited to those entries

        Returns:
            MatchResult; strategy NONE with a reason when nothing matched
        """
        normalized = normalize_text(text)
        if len(normalized) < self.min_length:
            return MatchResult(None, MatchStrategy.NONE, normalized, reason=TOO_SHORT)

        exact = self._by_normalized.get(normalized)
        if exact is not None:
            return MatchResult(exact, MatchStrategy.EXACT, normalized, similarity=1.0, distance=0)

        for question, target in self._entries:
            if target and (target in normalized or normalized in target):
                return MatchResult(question, MatchStrategy.CONTAINS, normalized)

        return self._fuzzy_match(normalized, self._fuzzy_candidates(tags))

    def _fuzzy_candidates(self, tags: Optional[Iterable[str]]) -> tuple:
        if not tags:
            return self._entries
        wanted = set(tags)
        tagged = tuple(entry for entry in self._entries if wanted.intersection(entry[0].tags))
        return tagged or self._entries

    def _fuzzy_match(self, normalized: str, candidates: tuple) -> MatchResult:
        head = normalized[: self.fuzzy_window]
        best: Optional[CanonicalQuestion] = None
        best_distance: Optional[int] = None
        best_similarity: Optional[Fraction] = None

        for question, target in candidates:
            if not target:
                continue
            if abs(len(target) - len(normalized)) > self.max_length_delta:
                continue

            distance = Levenshtein.distance(head, target[: self.fuzzy_window])
            longest = max(len(target), len(normalized), 1)
            similarity = Fraction(longest - distance, longest)
            if similarity <= self._threshold:
                continue
            if best_distance is None or distance < best_distance:
                best, best_distance, best_similarity = question, distance, similarity

        if best is None:
            return MatchResult(None, MatchStrategy.NONE, normalized, reason=NO_MATCH)

        logger.debug(
            f"Fuzzy matched '{normalized[:60]}' to {best.full_number} "
            f"(similarity {float(best_similarity):.3f})"
        )
        return MatchResult(
            best,
            MatchStrategy.FUZZY,
            normalized,
            similarity=float(best_similarity),
            distance=best_distance,
        )
