from __future__ import annotations

from typing import Any, List, Tuple

import pytest

from turtlegraph.events.event_bus import GraphEvent
from turtlegraph.graph.graph_store import GraphStore


def make_schema() -> dict:
    return {
        "node_types": {
            "member": {
                "name": "member",
                "description": "A user/member of the app",
                "synonyms": ["user", "person"],
                "data": {
                    "firstName": "string",
                    "isActive": "boolean",
                },
            },
            "author": {
                "name": "author",
                "description": "An author of a publication",
                "data": {
                    "firstName": "string",
                    "lastName": "string",
                },
            },
            "publication": {
                "name": "publication",
                "description": "An academic or formal publication",
                "data": {
                    "title": "string",
                    "published": "boolean",
                    "pages": "number",
                    "tags": "array",
                    "meta": "object",
                },
            },
        },
        "edge_types": {
            "wrote": {
                "name": "wrote",
                "description": "Connects an author to a publication they wrote",
                "source": {"node_type": "author", "multiple": True, "required": True},
                "target": {"node_type": "publication", "multiple": False, "required": True},
                "data": {},
            },
            "mentors": {
                "name": "mentors",
                "description": "One mentor per mentee, one mentee per mentor",
                "source": {"node_type": "member", "multiple": False},
                "target": {"node_type": "member", "multiple": False},
                "data": {"since": "number"},
            },
        },
    }


def publication_data(**overrides: Any) -> dict:
    data = {
        "title": "Graph Databases 101",
        "published": True,
        "pages": 12,
        "tags": ["graphs", "databases"],
        "meta": {"venue": "GDB"},
    }
    data.update(overrides)
    return data


class EventRecorder:
    """Subscribes to every event kind and records (kind, payload) pairs."""

    def __init__(self, store: GraphStore) -> None:
        self.events: List[Tuple[GraphEvent, Any]] = []
        for kind in GraphEvent:
            store.on(kind, self._recorder(kind))

    def _recorder(self, kind: GraphEvent):
        def record(*args: Any) -> None:
            self.events.append((kind, args[0] if args else None))

        return record

    def kinds(self) -> List[GraphEvent]:
        return [kind for kind, _ in self.events]


@pytest.fixture()
def schema() -> dict:
    return make_schema()


@pytest.fixture()
def store(schema: dict) -> GraphStore:
    return GraphStore(schema)


@pytest.fixture()
def recorder(store: GraphStore) -> EventRecorder:
    return EventRecorder(store)
