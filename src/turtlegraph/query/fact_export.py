"""
Renders graph entities as logic-style fact statements.

Each node becomes ``type("id", v1, v2, ...).`` and each edge
``type("source", "target", v1, ...).`` with the values of the fields
its schema type declares, in declaration order. Entities whose type the
schema does not declare are skipped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, List

if TYPE_CHECKING:
    from turtlegraph.graph.graph_schema import Edge, Node
    from turtlegraph.graph.schema_registry import GraphSchema


def render_value(value: Any) -> str:
    """
    Strings are double-quoted with backslashes and quotes escaped,
    numbers and booleans are written literally, anything else is ``_``.
    """
    if value is None:
        return "_"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return "_"


def graph_to_facts(
    nodes: Iterable["Node"],
    edges: Iterable["Edge"],
    schema: "GraphSchema",
) -> str:
    lines: List[str] = []

    for node in nodes:
        node_cfg = schema.node_types.get(node.type)
        if node_cfg is None:
            continue
        args = [render_value(node.id)]
        args.extend(render_value(node.data.get(key)) for key in node_cfg.data)
        lines.append(f"{node.type}({', '.join(args)}).")

    for edge in edges:
        edge_cfg = schema.edge_types.get(edge.type)
        if edge_cfg is None:
            continue
        args = [render_value(edge.source_node_id), render_value(edge.target_node_id)]
        args.extend(render_value(edge.data.get(key)) for key in edge_cfg.data)
        lines.append(f"{edge.type}({', '.join(args)}).")

    return "\n".join(lines)
