# -*- coding: utf-8 -*-
"""
Save-file document models.

The on-disk format is camelCase JSON. Records hold only plain values;
types and methods are stored in their textual form and re-resolved on
load.

Example:
    {
      "name": "Hello",
      "nodes": [{"id": "...", "type": "Literal", "position": [0.0, 0.0],
                 "pins": [{"id": "...", "name": "Value",
                           "direction": "Output", "kind": "Data"}],
                 "literal": {"literalTypeName": "string", "value": "Hello"}}],
      "connections": [{"sourcePinId": "...", "targetPinId": "..."}],
      "externalLibraries": [],
      "variables": []
    }
"""
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..core.pins import PinDirection, PinKind


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        ser_json_inf_nan="constants"
    )


class PinRecord(_Record):
    id: str
    name: str
    direction: PinDirection
    kind: PinKind


class LiteralRecord(_Record):
    literal_type_name: str
    value: Any = None


class MethodRecord(_Record):
    """Method identity: declaring type, name and parameter types."""
    declaring_type_name: str
    method_name: str
    parameter_type_names: List[str] = Field(default_factory=list)


class NodeRecord(_Record):
    """
    One saved node.

    Attributes:
        id: Node id
        type: Registered node type
        position: Canvas position
        pins: Pin identities, matched by (name, direction, kind) on load
        literal: Literal nodes only
        method: Method call nodes only
        properties: Constructor-relevant state (variable name, output count, ...)
    """
    id: str
    type: str
    position: Tuple[float, float] = (0.0, 0.0)
    pins: List[PinRecord] = Field(default_factory=list)
    literal: Optional[LiteralRecord] = None
    method: Optional[MethodRecord] = None
    properties: Dict[str, Any] = Field(default_factory=dict)


class ConnectionRecord(_Record):
    source_pin_id: str
    target_pin_id: str


class LibraryRecord(_Record):
    """External reference: a module name and, optionally, where it came from."""
    name: str
    file_path: str = ""


class VariableRecord(_Record):
    name: str
    type_name: Optional[str] = None
    default_value: Any = None


class GraphDocument(_Record):
    """Root of a save file."""
    name: str = "New Graph"
    nodes: List[NodeRecord] = Field(default_factory=list)
    connections: List[ConnectionRecord] = Field(default_factory=list)
    external_libraries: List[LibraryRecord] = Field(default_factory=list)
    variables: List[VariableRecord] = Field(default_factory=list)
