"""
Builds the embedding provider selected by configuration.

Returns None when embedding is disabled (TURTLEGRAPH_EMBEDDING_BACKEND=none).
"""

from __future__ import annotations

import logging
from typing import Optional

from turtlegraph.config.settings import EmbeddingConfig
from turtlegraph.embeddings.encoder import EmbeddingEncoder, EmbeddingFn
from turtlegraph.embeddings.hashing_encoder import HashingEmbeddingEncoder

logger = logging.getLogger(__name__)


def build_encoder(config: EmbeddingConfig) -> Optional[EmbeddingEncoder]:
    if config.backend == "none":
        logger.info("Embedding disabled (backend=none)")
        return None

    if config.backend == "hashing":
        logger.info("Using hashing embedding encoder (dimension=%d)", config.dimension)
        return HashingEmbeddingEncoder(
            dimension=config.dimension,
            normalize=config.normalize,
        )

    if config.backend == "huggingface":
        # torch/transformers are optional; import only when selected
        from turtlegraph.embeddings.hf_encoder import HuggingFaceEmbeddingEncoder

        logger.info(
            "Loading HuggingFace embedding model %s on %s",
            config.model_name,
            config.device,
        )
        return HuggingFaceEmbeddingEncoder(
            model_name=config.model_name,
            device=config.device,
            normalize=config.normalize,
        )

    raise ValueError(f"Unknown embedding backend: {config.backend!r}")


def build_embedding_fn(config: EmbeddingConfig) -> Optional[EmbeddingFn]:
    encoder = build_encoder(config)
    if encoder is None:
        return None
    return encoder.as_embedding_fn()
