"""
Fact querying over flat records.

Nodes and edges, or any externally supplied records, are treated as
facts and matched against single patterns by unification.
"""

from turtlegraph.query.terms import Literal, Variable
from turtlegraph.query.fact_engine import FactQueryEngine
from turtlegraph.query.fact_export import graph_to_facts, render_value

__all__ = [
    "Literal",
    "Variable",
    "FactQueryEngine",
    "graph_to_facts",
    "render_value",
]
