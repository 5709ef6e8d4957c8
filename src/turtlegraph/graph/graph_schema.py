from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from turtlegraph.utils.ids import new_id
from turtlegraph.utils.time import iso_timestamp

_NODE_FACT_KEYS = ("id", "type", "created_at", "updated_at")
_EDGE_FACT_KEYS = (
    "id",
    "type",
    "source_node_id",
    "target_node_id",
    "created_at",
    "updated_at",
)


@dataclass(frozen=True)
class Node:
    """
    Typed entity in the graph.

    ``data`` holds the schema-governed fields. ``embedding`` is an optional
    similarity vector attached at creation time and lives outside ``data``.
    """

    id: str
    type: str
    data: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    embedding: Optional[Tuple[float, ...]] = None

    @staticmethod
    def create(type: str, data: Optional[Dict[str, Any]] = None) -> "Node":
        now = iso_timestamp()
        return Node(
            id=new_id(),
            type=type,
            data=dict(data or {}),
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def from_dict(payload: Mapping[str, Any]) -> "Node":
        embedding = payload.get("embedding")
        return Node(
            id=payload["id"],
            type=payload["type"],
            data=dict(payload.get("data") or {}),
            created_at=payload.get("created_at"),
            updated_at=payload.get("updated_at"),
            embedding=tuple(embedding) if embedding is not None else None,
        )

    def copy(self) -> "Node":
        return replace(self, data=copy.deepcopy(self.data))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "data": copy.deepcopy(self.data),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "embedding": list(self.embedding) if self.embedding is not None else None,
        }

    def to_fact(self) -> Dict[str, Any]:
        """
        Flat fact record: identity keys plus the data fields.
        """
        return _flatten(self, _NODE_FACT_KEYS)


@dataclass(frozen=True)
class Edge:
    """
    Typed, directed relationship between two stored nodes.
    """

    id: str
    type: str
    source_node_id: str
    target_node_id: str
    data: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @staticmethod
    def create(
        type: str,
        source_node_id: str,
        target_node_id: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> "Edge":
        now = iso_timestamp()
        return Edge(
            id=new_id(),
            type=type,
            source_node_id=source_node_id,
            target_node_id=target_node_id,
            data=dict(data or {}),
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def from_dict(payload: Mapping[str, Any]) -> "Edge":
        return Edge(
            id=payload["id"],
            type=payload["type"],
            source_node_id=payload["source_node_id"],
            target_node_id=payload["target_node_id"],
            data=dict(payload.get("data") or {}),
            created_at=payload.get("created_at"),
            updated_at=payload.get("updated_at"),
        )

    def copy(self) -> "Edge":
        return replace(self, data=copy.deepcopy(self.data))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "source_node_id": self.source_node_id,
            "target_node_id": self.target_node_id,
            "data": copy.deepcopy(self.data),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def to_fact(self) -> Dict[str, Any]:
        return _flatten(self, _EDGE_FACT_KEYS)


def updatable_fields(entity_cls: type) -> frozenset[str]:
    """
    Top-level attributes an update may assign; id and type never change.
    """
    return frozenset(f.name for f in fields(entity_cls)) - {"id", "type"}


def _flatten(entity: Any, keys: Tuple[str, ...]) -> Dict[str, Any]:
    fact = {key: getattr(entity, key) for key in keys}
    for key, value in entity.data.items():
        # identity keys win over data fields of the same name
        if key not in fact:
            fact[key] = copy.deepcopy(value)
    return fact
