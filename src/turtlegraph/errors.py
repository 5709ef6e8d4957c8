"""
Error taxonomy for turtlegraph.

Every error is raised synchronously to the caller of the operation that
detected it. Nothing is retried or recovered internally: mutations are
validated in full before any state changes, so a raised error always
means the store was left untouched.
"""

from __future__ import annotations

from typing import Any, Optional


class GraphError(Exception):
    """Base class for all turtlegraph errors."""


# ---------------------------------------------------------------------
# Schema definition
# ---------------------------------------------------------------------


class MalformedSchema(GraphError, ValueError):
    """Raised when a schema definition fails structural validation."""


# ---------------------------------------------------------------------
# Identity and references
# ---------------------------------------------------------------------


class DuplicateId(GraphError):
    """Raised when inserting an entity whose id is already stored."""

    def __init__(self, entity_class: str, entity_id: str) -> None:
        self.entity_class = entity_class
        self.entity_id = entity_id
        super().__init__(
            f"{entity_class.capitalize()} with ID '{entity_id}' already exists."
        )


class MissingEndpoint(GraphError):
    """Raised when an edge references a node that is not in the store."""

    def __init__(self, edge_id: str, missing: list[str]) -> None:
        self.edge_id = edge_id
        self.missing = missing
        super().__init__(
            f"Source or target node not found for edge '{edge_id}': "
            f"{', '.join(missing)}."
        )


# ---------------------------------------------------------------------
# Schema enforcement
# ---------------------------------------------------------------------


class SchemaViolation(GraphError):
    """
    An entity does not conform to the attached schema.

    Carries the offending entity type and class ("node" or "edge").
    """

    def __init__(self, message: str, *, entity_type: str, entity_class: str) -> None:
        self.entity_type = entity_type
        self.entity_class = entity_class
        super().__init__(message)


class UnknownType(SchemaViolation):
    def __init__(self, entity_type: str, entity_class: str) -> None:
        super().__init__(
            f"{entity_class.capitalize()} type '{entity_type}' is not defined in the schema.",
            entity_type=entity_type,
            entity_class=entity_class,
        )


class MissingRequiredProperty(SchemaViolation):
    def __init__(self, prop: str, *, entity_type: str, entity_class: str) -> None:
        self.property = prop
        super().__init__(
            f"Missing required property '{prop}' for {entity_class} type '{entity_type}'.",
            entity_type=entity_type,
            entity_class=entity_class,
        )


class PropertyTypeMismatch(SchemaViolation):
    def __init__(
        self,
        prop: str,
        *,
        expected: str,
        actual: str,
        entity_type: str,
        entity_class: str,
    ) -> None:
        self.property = prop
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Invalid type for property '{prop}' on {entity_class} type "
            f"'{entity_type}'. Expected {expected}, got {actual}.",
            entity_type=entity_type,
            entity_class=entity_class,
        )


class UnknownProperty(SchemaViolation):
    def __init__(self, prop: str, *, entity_type: str, entity_class: str) -> None:
        self.property = prop
        super().__init__(
            f"Unknown property '{prop}' found on {entity_class} type '{entity_type}'.",
            entity_type=entity_type,
            entity_class=entity_class,
        )


class EndpointTypeMismatch(SchemaViolation):
    def __init__(
        self,
        edge_type: str,
        *,
        side: str,
        expected: str,
        actual: str,
    ) -> None:
        self.side = side
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Edge type '{edge_type}' requires {side} node of type '{expected}', "
            f"but got '{actual}'.",
            entity_type=edge_type,
            entity_class="edge",
        )


class CardinalityViolation(SchemaViolation):
    def __init__(
        self,
        edge_type: str,
        *,
        side: str,
        node_id: str,
        existing_edge_id: Optional[str] = None,
    ) -> None:
        self.side = side
        self.node_id = node_id
        self.existing_edge_id = existing_edge_id
        direction = "outgoing" if side == "source" else "incoming"
        super().__init__(
            f"Cardinality error: {side.capitalize()} node {node_id} can only have "
            f"one {direction} edge of type '{edge_type}'.",
            entity_type=edge_type,
            entity_class="edge",
        )


# ---------------------------------------------------------------------
# Fact sources
# ---------------------------------------------------------------------


class FactSourceError(GraphError, ValueError):
    """Raised when an external fact source is not an array of records."""

    def __init__(self, message: str, *, source: Any = None) -> None:
        self.source = source
        super().__init__(message)
