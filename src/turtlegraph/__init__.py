"""
turtlegraph
===========

An in-memory, schema-validated graph store of typed nodes and edges
with synchronous change events and pattern queries over facts.

Public API:
- GraphStore
- SchemaRegistry
- EventBus / GraphEvent
- FactQueryEngine / Variable / Literal
"""

from turtlegraph.graph.graph_schema import Node, Edge
from turtlegraph.graph.schema_registry import SchemaRegistry, GraphSchema, FieldKind
from turtlegraph.graph.graph_store import GraphStore
from turtlegraph.graph.graph_builder import GraphBuilder
from turtlegraph.events.event_bus import EventBus, GraphEvent, Subscription
from turtlegraph.query.fact_engine import FactQueryEngine
from turtlegraph.query.fact_export import graph_to_facts
from turtlegraph.query.terms import Literal, Variable
from turtlegraph.config.settings import StoreConfig

__all__ = [
    "Node",
    "Edge",
    "SchemaRegistry",
    "GraphSchema",
    "FieldKind",
    "GraphStore",
    "GraphBuilder",
    "EventBus",
    "GraphEvent",
    "Subscription",
    "FactQueryEngine",
    "graph_to_facts",
    "Literal",
    "Variable",
    "StoreConfig",
]

__version__ = "0.1.0"
