from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Literal, Optional

from turtlegraph.embeddings.similarity import SimilarityComputer
from turtlegraph.graph.graph_schema import Node


@dataclass(frozen=True)
class SoftLink:
    """
    Suggested relationship between two nodes. Never stored in the graph.
    """

    source_id: str
    target_id: str
    reason: Literal["embedding_similarity", "property_reference"]
    score: Optional[float] = None
    property: Optional[str] = None


def find_soft_links(nodes: Iterable[Node], *, threshold: float = 0.9) -> List[SoftLink]:
    nodes = list(nodes)
    links: List[SoftLink] = []

    # 1. Embedding similarity, each unordered pair once
    embedded = [n for n in nodes if n.embedding is not None]
    for i, a in enumerate(embedded):
        for b in embedded[i + 1 :]:
            score = SimilarityComputer.cosine(a.embedding, b.embedding)
            if score > threshold:
                links.append(
                    SoftLink(
                        source_id=a.id,
                        target_id=b.id,
                        reason="embedding_similarity",
                        score=score,
                    )
                )

    # 2. A string data value equal to another node's id
    ids = {n.id for n in nodes}
    for node in nodes:
        for key, value in node.data.items():
            if isinstance(value, str) and value in ids and value != node.id:
                links.append(
                    SoftLink(
                        source_id=node.id,
                        target_id=value,
                        reason="property_reference",
                        property=key,
                    )
                )

    return links
