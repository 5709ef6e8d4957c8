"""
Embedding providers for turtlegraph.

The graph store only needs a ``str -> list[float]`` callable; encoders
here produce one via ``as_embedding_fn``. Model-backed encoders are
optional and loaded only when selected.
"""

from turtlegraph.embeddings.encoder import EmbeddingEncoder, EmbeddingFn
from turtlegraph.embeddings.hashing_encoder import HashingEmbeddingEncoder
from turtlegraph.embeddings.similarity import SimilarityComputer
from turtlegraph.embeddings.factory import build_encoder, build_embedding_fn

__all__ = [
    "EmbeddingEncoder",
    "EmbeddingFn",
    "HashingEmbeddingEncoder",
    "SimilarityComputer",
    "build_encoder",
    "build_embedding_fn",
]
