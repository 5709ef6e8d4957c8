from __future__ import annotations

import copy
import json
import logging
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, TypeVar, Union

import networkx as nx

from turtlegraph.config.settings import StoreConfig
from turtlegraph.embeddings.encoder import EmbeddingFn
from turtlegraph.errors import (
    CardinalityViolation,
    DuplicateId,
    GraphError,
    MissingEndpoint,
    UnknownProperty,
)
from turtlegraph.events.event_bus import (
    EdgeUpdate,
    EventBus,
    GraphEvent,
    Listener,
    NodeUpdate,
    Subscription,
)
from turtlegraph.graph.graph_schema import Edge, Node, updatable_fields
from turtlegraph.graph.schema_registry import GraphSchema, SchemaRegistry
from turtlegraph.graph.soft_links import SoftLink, find_soft_links
from turtlegraph.query.fact_export import graph_to_facts

logger = logging.getLogger(__name__)

_Entity = TypeVar("_Entity", Node, Edge)


class GraphStore:
    """
    Authoritative in-memory graph of typed nodes and edges.

    When a schema is attached every mutation is validated in full before
    anything is written, so a failed call leaves the store unchanged.
    Successful mutations are announced synchronously on ``events``.

    All returned entities are copies; the store never hands out the
    objects it holds.
    """

    def __init__(
        self,
        schema: Union[GraphSchema, Mapping[str, Any], None] = None,
        *,
        config: Optional[StoreConfig] = None,
        embedding_fn: Optional[EmbeddingFn] = None,
        events: Optional[EventBus] = None,
    ) -> None:
        self._graph = nx.MultiDiGraph()
        # insertion-ordered edge index; adjacency lives in self._graph
        self._edges: Dict[str, Edge] = {}
        self._registry = SchemaRegistry(schema) if schema is not None else None
        self.config = config or StoreConfig()
        self._embedding_fn = embedding_fn
        self.events = events or EventBus()

    # -------------------- Schema --------------------

    @property
    def schema(self) -> Optional[GraphSchema]:
        return self._registry.schema if self._registry is not None else None

    # -------------------- Events --------------------

    def on(self, event: Union[GraphEvent, str], listener: Listener) -> Subscription:
        return self.events.subscribe(event, listener)

    def off(self, subscription: Subscription) -> bool:
        return self.events.unsubscribe(subscription)

    # -------------------- Nodes --------------------

    def add_node(self, node: Node) -> None:
        if self._graph.has_node(node.id):
            raise DuplicateId("node", node.id)

        if self._registry is not None:
            self._registry.check_node(node.type, node.data)

        stored = node.copy()
        self._graph.add_node(stored.id, data=stored)
        logger.debug("added node %s (%s)", stored.id, stored.type)
        self.events.emit(GraphEvent.NODE_ADDED, stored.copy())

    def update_node(self, node_id: str, changes: Mapping[str, Any]) -> Optional[Node]:
        """
        Shallow-merge ``changes["data"]`` into the node and assign the other
        top-level fields. ``id`` and ``type`` are never changed.

        Returns the updated node, or None if ``node_id`` is not stored.
        """
        current = self._node(node_id)
        if current is None:
            logger.debug("update_node: %s not found, ignoring", node_id)
            return None

        candidate = self._merge(current, changes, "node")
        if self._registry is not None:
            self._registry.check_node(candidate.type, candidate.data)

        self._graph.nodes[node_id]["data"] = candidate
        logger.debug("updated node %s", node_id)
        self.events.emit(
            GraphEvent.NODE_UPDATED,
            NodeUpdate(node=candidate.copy(), changes=dict(changes)),
        )
        return candidate.copy()

    def delete_node(self, node_id: str) -> bool:
        """
        Remove a node and every edge attached to it.

        The node and all of its edges are detached before any listener
        runs. One ``edge:delete`` is then emitted per removed edge, followed
        by ``node:delete``. Listeners of ``edge:delete`` see the node and
        all of its edges already gone, so a listener that calls back into
        the store never finds a dangling edge.
        """
        if not self._graph.has_node(node_id):
            logger.debug("delete_node: %s not found, ignoring", node_id)
            return False

        incident = [
            edge_id
            for edge_id, edge in self._edges.items()
            if edge.source_node_id == node_id or edge.target_node_id == node_id
        ]
        for edge_id in incident:
            del self._edges[edge_id]
        self._graph.remove_node(node_id)
        logger.debug("deleted node %s (cascaded %d edges)", node_id, len(incident))

        for edge_id in incident:
            self.events.emit(GraphEvent.EDGE_DELETED, edge_id)
        self.events.emit(GraphEvent.NODE_DELETED, node_id)
        return True

    def get_node(self, node_id: str) -> Optional[Node]:
        node = self._node(node_id)
        return node.copy() if node is not None else None

    def get_nodes(self) -> List[Node]:
        return [data["data"].copy() for _, data in self._graph.nodes(data=True)]

    def has_node(self, node_id: str) -> bool:
        return self._graph.has_node(node_id)

    # -------------------- Edges --------------------

    def add_edge(self, edge: Edge) -> None:
        if edge.id in self._edges:
            raise DuplicateId("edge", edge.id)

        self._validate_edge(edge)

        stored = edge.copy()
        self._edges[stored.id] = stored
        self._graph.add_edge(
            stored.source_node_id,
            stored.target_node_id,
            key=stored.id,
            data=stored,
        )
        logger.debug(
            "added edge %s (%s) %s -> %s",
            stored.id,
            stored.type,
            stored.source_node_id,
            stored.target_node_id,
        )
        self.events.emit(GraphEvent.EDGE_ADDED, stored.copy())

    def update_edge(self, edge_id: str, changes: Mapping[str, Any]) -> Optional[Edge]:
        """
        Same merge rules as ``update_node``. Moving an edge to new endpoints
        re-runs the endpoint and cardinality checks.
        """
        current = self._edges.get(edge_id)
        if current is None:
            logger.debug("update_edge: %s not found, ignoring", edge_id)
            return None

        candidate = self._merge(current, changes, "edge")
        self._validate_edge(candidate, ignore_id=edge_id)

        self._unlink(current)
        self._graph.add_edge(
            candidate.source_node_id,
            candidate.target_node_id,
            key=edge_id,
            data=candidate,
        )
        self._edges[edge_id] = candidate
        logger.debug("updated edge %s", edge_id)
        self.events.emit(
            GraphEvent.EDGE_UPDATED,
            EdgeUpdate(edge=candidate.copy(), changes=dict(changes)),
        )
        return candidate.copy()

    def delete_edge(self, edge_id: str) -> bool:
        edge = self._edges.pop(edge_id, None)
        if edge is None:
            logger.debug("delete_edge: %s not found, ignoring", edge_id)
            return False

        self._unlink(edge)
        logger.debug("deleted edge %s", edge_id)
        self.events.emit(GraphEvent.EDGE_DELETED, edge_id)
        return True

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        edge = self._edges.get(edge_id)
        return edge.copy() if edge is not None else None

    def get_edges(self) -> List[Edge]:
        return [edge.copy() for edge in self._edges.values()]

    def has_edge(self, edge_id: str) -> bool:
        return edge_id in self._edges

    def edges_of(self, node_id: str) -> List[Edge]:
        """
        Edges where ``node_id`` is source or target, in insertion order.
        """
        return [
            edge.copy()
            for edge in self._edges.values()
            if edge.source_node_id == node_id or edge.target_node_id == node_id
        ]

    # -------------------- Factories --------------------

    def create_node(self, type: str, data: Optional[Dict[str, Any]] = None) -> Node:
        """
        Build a node with a fresh id and timestamps, optionally tag it with
        an embedding of its data, and insert it.
        """
        node = Node.create(type, data)
        if self._embedding_fn is not None and self.config.embed_on_create:
            node = self._attach_embedding(node)
        self.add_node(node)
        return node.copy()

    def create_edge(
        self,
        type: str,
        source_node_id: str,
        target_node_id: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Edge:
        edge = Edge.create(type, source_node_id, target_node_id, data)
        self.add_edge(edge)
        return edge.copy()

    # -------------------- Traversal --------------------

    def neighbors(self, node_id: str) -> List[str]:
        if node_id not in self._graph:
            return []
        return list(self._graph.successors(node_id))

    def predecessors(self, node_id: str) -> List[str]:
        if node_id not in self._graph:
            return []
        return list(self._graph.predecessors(node_id))

    # -------------------- Analytics --------------------

    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    def edge_count(self) -> int:
        return len(self._edges)

    def generate_soft_links(self, threshold: Optional[float] = None) -> List[SoftLink]:
        """
        Suggested (non-persisted) links between nodes, by embedding
        similarity and by data values that name another node's id.
        """
        if threshold is None:
            threshold = self.config.soft_link_threshold
        return find_soft_links(self.get_nodes(), threshold=threshold)

    # -------------------- Export --------------------

    def facts(self) -> List[Dict[str, Any]]:
        """
        Nodes then edges as flat fact records.
        """
        return [n.to_fact() for n in self.get_nodes()] + [
            e.to_fact() for e in self.get_edges()
        ]

    def render_facts(self) -> str:
        if self._registry is None:
            raise GraphError("Rendering facts requires a schema.")
        return graph_to_facts(self.get_nodes(), self.get_edges(), self._registry.schema)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "nodes": [n.to_dict() for n in self.get_nodes()],
            "edges": [e.to_dict() for e in self.get_edges()],
        }

    # -------------------- Utility --------------------

    def clear(self) -> None:
        self._graph.clear()
        self._edges.clear()
        logger.debug("cleared graph")
        self.events.emit(GraphEvent.GRAPH_CLEARED)

    # -------------------- Internals --------------------

    def _node(self, node_id: str) -> Optional[Node]:
        if not self._graph.has_node(node_id):
            return None
        return self._graph.nodes[node_id]["data"]

    def _unlink(self, edge: Edge) -> None:
        # adjacency is already gone when an endpoint node was removed
        if self._graph.has_edge(edge.source_node_id, edge.target_node_id, key=edge.id):
            self._graph.remove_edge(edge.source_node_id, edge.target_node_id, key=edge.id)

    def _validate_edge(self, edge: Edge, *, ignore_id: Optional[str] = None) -> None:
        missing = [
            node_id
            for node_id in (edge.source_node_id, edge.target_node_id)
            if not self._graph.has_node(node_id)
        ]
        if missing:
            raise MissingEndpoint(edge.id, missing)

        if self._registry is None:
            return

        source = self._node(edge.source_node_id)
        target = self._node(edge.target_node_id)
        config = self._registry.check_edge(
            edge.type,
            edge.data,
            source_type=source.type,
            target_type=target.type,
        )

        if not config.source.multiple:
            for _, _, key in self._graph.out_edges(edge.source_node_id, keys=True):
                if key != ignore_id and self._edges[key].type == edge.type:
                    raise CardinalityViolation(
                        edge.type,
                        side="source",
                        node_id=edge.source_node_id,
                        existing_edge_id=key,
                    )

        if not config.target.multiple:
            for _, _, key in self._graph.in_edges(edge.target_node_id, keys=True):
                if key != ignore_id and self._edges[key].type == edge.type:
                    raise CardinalityViolation(
                        edge.type,
                        side="target",
                        node_id=edge.target_node_id,
                        existing_edge_id=key,
                    )

    @staticmethod
    def _merge(entity: _Entity, changes: Mapping[str, Any], entity_class: str) -> _Entity:
        allowed = updatable_fields(type(entity))
        assignments: Dict[str, Any] = {}

        for key, value in changes.items():
            if key in ("id", "type", "data"):
                continue
            if key not in allowed:
                raise UnknownProperty(
                    key, entity_type=entity.type, entity_class=entity_class
                )
            assignments[key] = value

        merged = copy.deepcopy(entity.data)
        data = changes.get("data")
        if isinstance(data, Mapping):
            merged.update(copy.deepcopy(dict(data)))
        assignments["data"] = merged

        if assignments.get("embedding") is not None:
            assignments["embedding"] = tuple(float(x) for x in assignments["embedding"])

        return replace(entity, **assignments)

    def _attach_embedding(self, node: Node) -> Node:
        text = json.dumps(node.data, sort_keys=True, default=str)
        try:
            vector = self._embedding_fn(text)
        except Exception as exc:
            if self.config.embedding_failure_policy == "propagate":
                raise
            logger.warning(
                "embedding failed for %s node %s; inserting without vector: %s",
                node.type,
                node.id,
                exc,
            )
            return node
        return replace(node, embedding=tuple(float(x) for x in vector))
