from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from turtlegraph.graph.graph_schema import Edge, Node
from turtlegraph.graph.graph_store import GraphStore

logger = logging.getLogger(__name__)


class GraphBuilder:
    """
    Bulk-populates a store through its validating mutation path.

    The first invalid entity raises; entities inserted before it stay.
    """

    def __init__(self, store: GraphStore) -> None:
        self.store = store

    def add_nodes(self, nodes: Iterable[Node]) -> int:
        count = 0
        for node in nodes:
            self.store.add_node(node)
            count += 1
        return count

    def add_edges(self, edges: Iterable[Edge]) -> int:
        count = 0
        for edge in edges:
            self.store.add_edge(edge)
            count += 1
        return count

    def load(self, document: Mapping[str, Any]) -> None:
        """
        Load a ``{"nodes": [...], "edges": [...]}`` document, nodes first.
        """
        nodes = self.add_nodes(Node.from_dict(n) for n in document.get("nodes", []))
        edges = self.add_edges(Edge.from_dict(e) for e in document.get("edges", []))
        logger.info("loaded %d nodes and %d edges", nodes, edges)
