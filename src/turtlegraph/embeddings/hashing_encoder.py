from __future__ import annotations

import numpy as np

from turtlegraph.embeddings.encoder import EmbeddingEncoder


class HashingEmbeddingEncoder(EmbeddingEncoder):
    """
    Deterministic, model-free encoder.

    Each character contributes ``sin(0.1 * code) * cos(0.1 * position)`` to
    the slot ``(code * (position + 1)) % dimension``. Texts with the same
    characters in similar positions land close together. Useful offline
    and in tests; not a semantic model.
    """

    def __init__(self, dimension: int = 384, normalize: bool = True) -> None:
        super().__init__(dimension=dimension)
        self.normalize = normalize

    def _encode_one(self, text: str) -> np.ndarray:
        vec = np.zeros(self.dimension, dtype=float)

        for position, char in enumerate(text):
            code = ord(char)
            index = (code * (position + 1)) % self.dimension
            vec[index] += np.sin(code * 0.1) * np.cos(position * 0.1)

        if self.normalize:
            norm = np.linalg.norm(vec)
            if norm > 0:
                vec = vec / norm

        return vec
