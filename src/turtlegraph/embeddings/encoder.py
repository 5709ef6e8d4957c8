from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterable, List, Sequence

import numpy as np

EmbeddingFn = Callable[[str], Sequence[float]]


class EmbeddingEncoder(ABC):
    """
    Abstract text embedding provider.

    Concrete encoders implement ``_encode_one``; results are cached by a
    key that includes the encoder identity and dimension.
    """

    def __init__(self, dimension: int) -> None:
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self.dimension = dimension
        self._cache: Dict[str, np.ndarray] = {}

    def encode(self, texts: Iterable[str]) -> List[np.ndarray]:
        embeddings: List[np.ndarray] = []

        for text in texts:
            key = self._hash(text)
            if key not in self._cache:
                self._cache[key] = self._encode_one(text)
            embeddings.append(self._cache[key])

        return embeddings

    def encode_one(self, text: str) -> np.ndarray:
        return self.encode([text])[0]

    def as_embedding_fn(self) -> EmbeddingFn:
        """
        Adapt the encoder to the plain ``str -> list[float]`` callable the
        graph store accepts.
        """

        def embed(text: str) -> List[float]:
            return [float(x) for x in self.encode_one(text)]

        return embed

    @abstractmethod
    def _encode_one(self, text: str) -> np.ndarray:
        raise NotImplementedError

    def _hash(self, text: str) -> str:
        payload = f"{self.__class__.__name__}:{self.dimension}:{text}"
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()
