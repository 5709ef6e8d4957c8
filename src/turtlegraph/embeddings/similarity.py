from __future__ import annotations

from typing import Iterable, List, Sequence

import numpy as np


class SimilarityComputer:
    """
    Similarity primitives over embedding vectors.
    """

    @staticmethod
    def cosine(a: Sequence[float], b: Sequence[float]) -> float:
        """
        Cosine similarity; 0.0 for mismatched lengths or zero vectors.
        """
        va = np.asarray(a, dtype=float)
        vb = np.asarray(b, dtype=float)
        if va.shape != vb.shape or va.size == 0:
            return 0.0
        denom = np.linalg.norm(va) * np.linalg.norm(vb)
        if denom == 0.0:
            return 0.0
        return float(np.dot(va, vb) / denom)

    @staticmethod
    def cosine_batch(
        query: Sequence[float],
        candidates: Iterable[Sequence[float]],
    ) -> List[float]:
        return [SimilarityComputer.cosine(query, c) for c in candidates]

    @staticmethod
    def top_k(
        query: Sequence[float],
        candidates: Iterable[Sequence[float]],
        k: int,
    ) -> List[int]:
        """
        Indices of the k candidates most similar to ``query``.
        """
        scores = SimilarityComputer.cosine_batch(query, candidates)
        order = np.argsort(scores, kind="stable")[::-1]
        return [int(i) for i in order[:k]]
