"""String similarity using RapidFuzz.

Provides the normalized edit-distance ratio used by the registries and
by pattern canonicalization for fuzzy fallback.
"""

from collections.abc import Sequence

from rapidfuzz import process
from rapidfuzz.distance import Levenshtein


class SimilarityMatcher:
    """Normalized Levenshtein similarity.

    similarity = 1 - distance / max(len(a), len(b)), on a 0-1 scale.
    Inputs are compared as given; callers normalize case and whitespace.
    """

    def __init__(self, threshold: float = 0.8):
        """Initialize matcher with similarity threshold.

        Args:
            threshold: A match must strictly exceed this score (0-1)
                      to be returned by best_match.
        """
        self._threshold = threshold

    @property
    def threshold(self) -> float:
        return self._threshold

    def ratio(self, a: str, b: str) -> float:
        """Similarity of two strings (0-1). Two empty strings score 1.0."""
        return Levenshtein.normalized_similarity(a, b)

    def best_match(
        self,
        query: str,
        choices: Sequence[str],
        threshold: float | None = None,
    ) -> tuple[int | None, float]:
        """Find the most similar choice.

        Args:
            query: String to search for
            choices: Candidate strings, in priority order
            threshold: Override the instance threshold

        Returns:
            Tuple of (index into choices, score) or (None, 0.0) if no
            choice strictly exceeds the threshold. Ties resolve to the
            earliest choice.
        """
        if not query or not choices:
            return None, 0.0

        cutoff = self._threshold if threshold is None else threshold

        result = process.extractOne(
            query,
            choices,
            scorer=Levenshtein.normalized_similarity,
            score_cutoff=cutoff,
        )

        if result is None:
            return None, 0.0

        _choice, score, index = result
        # score_cutoff is inclusive; a match must exceed the threshold
        if score <= cutoff:
            return None, 0.0
        return index, score
