from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

# ---------------------------------------------------------------------
# Embedding provider
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class EmbeddingConfig:
    """
    Selects and parameterizes the embedding provider used to tag nodes
    with a similarity vector at creation time.
    """

    backend: Literal["none", "hashing", "huggingface"] = "none"
    model_name: str = "sentence-transformers/all-MiniLM-L6-v2"
    device: str = "cpu"
    dimension: int = 384
    normalize: bool = True


# ---------------------------------------------------------------------
# Root configuration object
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class StoreConfig:
    """
    Policy for a GraphStore instance.

    - embed_on_create: call the embedding provider in ``create_node``
    - embedding_failure_policy: ``propagate`` re-raises provider errors,
      ``skip`` inserts the node without a vector
    - soft_link_threshold: minimum cosine similarity for a suggested link
    """

    embed_on_create: bool = True
    embedding_failure_policy: Literal["propagate", "skip"] = "propagate"
    soft_link_threshold: float = 0.9
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)

    def __post_init__(self) -> None:
        if self.embedding_failure_policy not in ("propagate", "skip"):
            raise ValueError(
                f"embedding_failure_policy must be 'propagate' or 'skip', "
                f"got {self.embedding_failure_policy!r}"
            )
        if not -1.0 <= self.soft_link_threshold <= 1.0:
            raise ValueError("soft_link_threshold must lie in [-1, 1]")
