# -*- coding: utf-8 -*-
"""
Variable Nodes - Literals and variable access.

- LiteralNode: constant value of a given type (pure)
- GetVariableNode: reads a variable (pure, evaluated on demand)
- SetVariableNode: writes a variable (has execution pins)
"""
from typing import Any, Optional

from ..core.base_node import BaseNode, NodeMetadata
from ..core.pins import DataPin, ExecutionPin, PinDirection
from ..core.types import (
    OBJECT, STRING, PrimitiveKind, PrimitiveType, TypeRef, display_name, is_floating,
    is_integral, parse_type,
)


def default_value_for(t: Optional[TypeRef]) -> Any:
    """Value stored in a fresh literal of type t (None for reference types)."""
    if not isinstance(t, PrimitiveType):
        return None
    if t.kind == PrimitiveKind.BOOL:
        return False
    if is_integral(t):
        return 0
    if is_floating(t):
        return 0.0
    if t.kind == PrimitiveKind.CHAR:
        return "\0"
    return None


class LiteralNode(BaseNode):
    """
    Constant value node.

    Pure node: the translator binds it to a local before anything else runs.

    Properties:
        LiteralType: TypeRef of the value
        Value: The stored value
    """
    node_type = "Literal"
    metadata = NodeMetadata(
        category="Literals",
        display_name="Literal",
        description="Constant value",
        color="#00A0A0"
    )

    def __init__(
        self,
        node_id: Optional[str] = None,
        literal_type: TypeRef = STRING,
        value: Any = None
    ):
        """
        Create Literal node.

        Args:
            node_id: Optional node ID
            literal_type: Type of the constant (a TypeRef or its textual form)
            value: Stored value (zero value of the type if None)
        """
        if isinstance(literal_type, str):
            literal_type = parse_type(literal_type) or OBJECT
        self._literal_type = literal_type
        super().__init__(node_id)
        self.title = f"{display_name(literal_type)} Literal"
        self.properties["LiteralType"] = literal_type
        self.properties["Value"] = value if value is not None else default_value_for(literal_type)

    def _setup_pins(self):
        self.add_output_pin(DataPin("Value", self._literal_type, PinDirection.OUTPUT))

    @property
    def literal_type(self) -> TypeRef:
        return self.properties["LiteralType"]

    @property
    def value(self) -> Any:
        return self.properties.get("Value")

    @value.setter
    def value(self, new_value: Any) -> None:
        self.properties["Value"] = new_value


class GetVariableNode(BaseNode):
    """
    Get value of a variable.

    Pure node (no execution pins) - evaluated on demand.
    """
    node_type = "GetVariable"
    metadata = NodeMetadata(
        category="Variables",
        display_name="Get Variable",
        description="Read value from a variable",
        color="#00CC66"
    )

    def __init__(
        self,
        node_id: Optional[str] = None,
        variable_name: str = "MyVar",
        variable_type: Optional[TypeRef] = None
    ):
        self._variable_name = variable_name
        self._variable_type = variable_type
        super().__init__(node_id)
        self.title = f"Get {variable_name}"
        self.properties["VariableName"] = variable_name
        self.properties["VariableType"] = variable_type

    def _setup_pins(self):
        self.add_output_pin(DataPin(self._variable_name, self._variable_type, PinDirection.OUTPUT))

    @property
    def variable_name(self) -> str:
        return self.properties["VariableName"]


class SetVariableNode(BaseNode):
    """
    Set value of a variable.

    Writes a new value to a graph variable.
    Has execution pins for flow control.
    """
    node_type = "SetVariable"
    metadata = NodeMetadata(
        category="Variables",
        display_name="Set Variable",
        description="Write value to a variable",
        color="#00CC66"
    )

    def __init__(
        self,
        node_id: Optional[str] = None,
        variable_name: str = "MyVar",
        variable_type: Optional[TypeRef] = None
    ):
        self._variable_name = variable_name
        self._variable_type = variable_type
        super().__init__(node_id)
        self.title = f"Set {variable_name}"
        self.properties["VariableName"] = variable_name
        self.properties["VariableType"] = variable_type

    def _setup_pins(self):
        self.add_input_pin(ExecutionPin("Exec"))
        self.add_input_pin(DataPin(self._variable_name, self._variable_type))
        self.add_output_pin(ExecutionPin("Exec", PinDirection.OUTPUT))

    @property
    def variable_name(self) -> str:
        return self.properties["VariableName"]


ALL_NODES = [
    LiteralNode,
    GetVariableNode,
    SetVariableNode,
]
