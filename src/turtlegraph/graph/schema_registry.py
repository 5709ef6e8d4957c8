from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
    model_validator,
)

from turtlegraph.errors import (
    EndpointTypeMismatch,
    MalformedSchema,
    MissingRequiredProperty,
    PropertyTypeMismatch,
    UnknownProperty,
    UnknownType,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Field descriptors
# ---------------------------------------------------------------------


class FieldKind(str, Enum):
    """
    Closed set of primitive kinds a schema field may declare.
    """

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"

    def matches(self, value: Any) -> bool:
        if self is FieldKind.STRING:
            return isinstance(value, str)
        if self is FieldKind.NUMBER:
            # bool is an int subclass; it is never a number here
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        if self is FieldKind.BOOLEAN:
            return isinstance(value, bool)
        if self is FieldKind.ARRAY:
            return isinstance(value, (list, tuple))
        return isinstance(value, Mapping)


def kind_of(value: Any) -> str:
    """
    Human-readable kind of a runtime value, used in error messages.
    """
    if value is None:
        return "null"
    for kind in FieldKind:
        if kind.matches(value):
            return kind.value
    return type(value).__name__


# ---------------------------------------------------------------------
# Schema models
# ---------------------------------------------------------------------

_FROZEN = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

AccessRole = Literal["viewer", "editor", "owner"]


class AccessControl(BaseModel):
    model_config = _FROZEN

    public: Optional[StrictBool] = None
    roles: Optional[Dict[str, List[AccessRole]]] = None
    default_authenticated_role: Optional[AccessRole] = Field(
        default=None, alias="defaultAuthenticatedRole"
    )


class NodeTypeConfig(BaseModel):
    model_config = _FROZEN

    name: StrictStr
    description: StrictStr = Field(min_length=1)
    synonyms: List[StrictStr] = Field(default_factory=list)
    data: Dict[str, FieldKind] = Field(default_factory=dict)
    access_control: Optional[AccessControl] = Field(default=None, alias="accessControl")


class EdgeConnectionConfig(BaseModel):
    """
    One side of an edge type: which node type it attaches to and
    whether that node may carry many edges of the type on this side.
    """

    model_config = _FROZEN

    node_type: StrictStr = Field(min_length=1)
    multiple: StrictBool
    required: StrictBool = False


class EdgeTypeConfig(BaseModel):
    model_config = _FROZEN

    name: StrictStr
    description: StrictStr = ""
    source: EdgeConnectionConfig
    target: EdgeConnectionConfig
    synonyms: List[StrictStr] = Field(default_factory=list)
    data: Dict[str, FieldKind] = Field(default_factory=dict)
    access_control: Optional[AccessControl] = Field(default=None, alias="accessControl")


class GraphSchema(BaseModel):
    """
    Validated, immutable graph schema.
    """

    model_config = _FROZEN

    node_types: Dict[str, NodeTypeConfig]
    edge_types: Dict[str, EdgeTypeConfig]

    @model_validator(mode="after")
    def check_consistency(self) -> "GraphSchema":
        for key, node_cfg in self.node_types.items():
            if key != node_cfg.name:
                raise ValueError(
                    f"Node type key '{key}' does not match its name property '{node_cfg.name}'."
                )

        for key, edge_cfg in self.edge_types.items():
            if key != edge_cfg.name:
                raise ValueError(
                    f"Edge type key '{key}' does not match its name property '{edge_cfg.name}'."
                )
            for side, conn in (("source", edge_cfg.source), ("target", edge_cfg.target)):
                if conn.node_type not in self.node_types:
                    raise ValueError(
                        f"Edge type '{key}' {side} refers to unknown node type: '{conn.node_type}'"
                    )
        return self


# ---------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------


class SchemaRegistry:
    """
    Holds a validated schema and enforces it on entity payloads.

    Validation is closed: a data record must carry exactly the declared
    fields, each with a value of the declared kind.
    """

    def __init__(self, schema: Union[GraphSchema, Mapping[str, Any]]) -> None:
        self._schema = self.validate(schema)
        logger.info(
            "Schema loaded and validated: %d node types, %d edge types",
            len(self._schema.node_types),
            len(self._schema.edge_types),
        )

    @staticmethod
    def validate(schema: Union[GraphSchema, Mapping[str, Any]]) -> GraphSchema:
        if isinstance(schema, GraphSchema):
            return schema.model_copy(deep=True)
        if not isinstance(schema, Mapping):
            raise MalformedSchema(
                "Schema must have 'node_types' and 'edge_types' objects."
            )
        try:
            return GraphSchema.model_validate(dict(schema))
        except ValidationError as exc:
            raise MalformedSchema(f"Invalid schema: {exc}") from exc

    @property
    def schema(self) -> GraphSchema:
        """
        A detached copy; changing it never affects what is enforced.
        """
        return self._schema.model_copy(deep=True)

    def node_type(self, name: str) -> Optional[NodeTypeConfig]:
        config = self._schema.node_types.get(name)
        return config.model_copy(deep=True) if config is not None else None

    def edge_type(self, name: str) -> Optional[EdgeTypeConfig]:
        config = self._schema.edge_types.get(name)
        return config.model_copy(deep=True) if config is not None else None

    # ------------------------------------------------------------------
    # Enforcement
    # ------------------------------------------------------------------

    @staticmethod
    def check_data(
        entity_type: str,
        entity_class: str,
        data: Optional[Mapping[str, Any]],
        declared_fields: Mapping[str, FieldKind],
    ) -> None:
        data = data or {}

        for key, kind in declared_fields.items():
            if key not in data:
                raise MissingRequiredProperty(
                    key, entity_type=entity_type, entity_class=entity_class
                )
            if not kind.matches(data[key]):
                raise PropertyTypeMismatch(
                    key,
                    expected=kind.value,
                    actual=kind_of(data[key]),
                    entity_type=entity_type,
                    entity_class=entity_class,
                )

        for key in data:
            if key not in declared_fields:
                raise UnknownProperty(
                    key, entity_type=entity_type, entity_class=entity_class
                )

    def check_node(self, node_type: str, data: Optional[Mapping[str, Any]]) -> NodeTypeConfig:
        config = self._schema.node_types.get(node_type)
        if config is None:
            raise UnknownType(node_type, "node")
        self.check_data(node_type, "node", data, config.data)
        return config.model_copy(deep=True)

    def check_edge(
        self,
        edge_type: str,
        data: Optional[Mapping[str, Any]],
        *,
        source_type: str,
        target_type: str,
    ) -> EdgeTypeConfig:
        config = self._schema.edge_types.get(edge_type)
        if config is None:
            raise UnknownType(edge_type, "edge")
        self.check_data(edge_type, "edge", data, config.data)

        if config.source.node_type != source_type:
            raise EndpointTypeMismatch(
                edge_type,
                side="source",
                expected=config.source.node_type,
                actual=source_type,
            )
        if config.target.node_type != target_type:
            raise EndpointTypeMismatch(
                edge_type,
                side="target",
                expected=config.target.node_type,
                actual=target_type,
            )
        return config.model_copy(deep=True)
