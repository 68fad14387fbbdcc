"""Domain service ranking stored embeddings against a query vector."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from domain.exceptions import DimensionMismatchError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from domain.value_objects.embedding_record import EmbeddingRecord


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors of equal length.

    Returns 0.0 when either vector has zero norm instead of dividing by zero.

    Raises:
        DimensionMismatchError: If the vectors differ in length

    """
    if len(a) != len(b):
        msg = f"Vector dimension mismatch: {len(a)} vs {len(b)}"
        raise DimensionMismatchError(msg)

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    denominator = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if denominator == 0.0:
        return 0.0

    # Rounding can push the ratio of near-parallel vectors a hair past +/-1
    return float(np.clip(np.dot(va, vb) / denominator, -1.0, 1.0))


class SimilarityRanker:
    """Full linear-scan top-K ranking by cosine similarity.

    This is a pure domain operation: the application layer fetches the
    candidate records and decides what to do with the ranked result.
    """

    @staticmethod
    def rank(
        query: Sequence[float],
        candidates: Iterable[EmbeddingRecord],
        k: int,
        min_score: float | None = None,
    ) -> list[tuple[EmbeddingRecord, float]]:
        """Return the k candidates most similar to the query.

        Candidates whose dimensionality differs from the query are left out
        silently; a collection holding records of several providers is an
        expected state after the provider is switched.

        Args:
            query: The query vector
            candidates: Stored records to score
            k: Maximum number of results; larger than the candidate count returns all
            min_score: Optional lower bound on the similarity score

        Returns:
            (record, score) pairs sorted by descending score, ties broken by
            ascending note_id

        Raises:
            ValueError: If k is negative

        """
        if k < 0:
            msg = f"k must be non-negative, got {k}"
            raise ValueError(msg)

        dimensions = len(query)
        scored: list[tuple[EmbeddingRecord, float]] = []
        for record in candidates:
            if record.dimensions != dimensions or len(record.vector) != dimensions:
                continue
            score = cosine_similarity(query, record.vector)
            if min_score is not None and score < min_score:
                continue
            scored.append((record, score))

        scored.sort(key=lambda item: (-item[1], item[0].note_id))
        return scored[:k]
