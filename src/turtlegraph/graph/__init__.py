"""
Graph subsystem for turtlegraph.

Typed nodes and edges held by a schema-enforcing store:
- closed-schema validation of entity data
- endpoint type and cardinality rules for edges
- cascading delete of edges with their endpoint nodes
"""

from turtlegraph.graph.graph_schema import Node, Edge
from turtlegraph.graph.schema_registry import (
    AccessControl,
    EdgeConnectionConfig,
    EdgeTypeConfig,
    FieldKind,
    GraphSchema,
    NodeTypeConfig,
    SchemaRegistry,
)
from turtlegraph.graph.graph_store import GraphStore
from turtlegraph.graph.graph_builder import GraphBuilder
from turtlegraph.graph.soft_links import SoftLink, find_soft_links

__all__ = [
    "Node",
    "Edge",
    "AccessControl",
    "EdgeConnectionConfig",
    "EdgeTypeConfig",
    "FieldKind",
    "GraphSchema",
    "NodeTypeConfig",
    "SchemaRegistry",
    "GraphStore",
    "GraphBuilder",
    "SoftLink",
    "find_soft_links",
]
