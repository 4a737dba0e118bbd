# -*- coding: utf-8 -*-
"""
Function Nodes - Method calls and console output.

MethodCallNode wraps a MethodDescriptor resolved against a
ReferenceRegistry when the node is built, so the node never holds a live
callable. PrintNode writes a value to standard output.
"""
from typing import Optional

from ..core.base_node import BaseNode, NodeMetadata
from ..core.pins import DataPin, ExecutionPin, PinDirection
from ..core.references import MethodDescriptor
from ..core.types import OBJECT, NamedType


class MethodCallNode(BaseNode):
    """
    Call a method from a reference module.

    Pins, in order:
    - "Exec" in/out, unless the call is pure
    - "Target" for instance methods, typed as the declaring type
    - one input per parameter (default value taken from the parameter)
    - "Return Value" when the method returns something

    A call that returns a value is treated as pure by default and gets
    no execution pins; pass pure=False to force it into the execution flow.
    """
    node_type = "MethodCall"
    metadata = NodeMetadata(
        category="Methods",
        display_name="Call Method",
        description="Call a method from a reference module",
        color="#3C78D8"
    )

    def __init__(
        self,
        node_id: Optional[str] = None,
        method: Optional[MethodDescriptor] = None,
        pure: Optional[bool] = None
    ):
        """
        Create a method call node.

        Args:
            node_id: Optional node ID
            method: Resolved method descriptor
            pure: Override the pure-call heuristic

        Raises:
            ValueError: If no method descriptor is given
        """
        if method is None:
            raise ValueError("MethodCallNode requires a resolved MethodDescriptor")
        self._method = method
        self._pure = method.returns_value if pure is None else pure
        super().__init__(node_id)

        owner = NamedType(method.declaring_type).simple_name
        self.title = (
            f"{owner}.{method.name}" if method.is_static
            else f"{owner}.{method.name} (inst)"
        )
        self.properties["Method"] = method
        self.properties["Pure"] = self._pure

    def _setup_pins(self):
        if not self._pure:
            self.add_input_pin(ExecutionPin("Exec"))
            self.add_output_pin(ExecutionPin("Exec", PinDirection.OUTPUT))

        if not self._method.is_static:
            self.add_input_pin(DataPin("Target", NamedType(self._method.declaring_type)))

        for param in self._method.parameters:
            self.add_input_pin(DataPin(
                param.name or "param",
                param.type,
                default_value=param.default if param.has_default else None
            ))

        if self._method.returns_value:
            self.add_output_pin(
                DataPin("Return Value", self._method.return_type, PinDirection.OUTPUT)
            )

    @property
    def method(self) -> MethodDescriptor:
        return self._method

    @property
    def is_pure(self) -> bool:
        return self._pure


class PrintNode(BaseNode):
    """
    Print value to console.

    An unconnected Value prints an empty line.
    """
    node_type = "Print"
    metadata = NodeMetadata(
        category="Debug",
        display_name="Print",
        description="Print value to console",
        color="#808080"
    )

    def _setup_pins(self):
        self.add_input_pin(ExecutionPin("Exec"))
        self.add_input_pin(DataPin("Value", OBJECT))
        self.add_output_pin(ExecutionPin("Exec", PinDirection.OUTPUT))


# Export all nodes for registration
ALL_NODES = [
    MethodCallNode,
    PrintNode,
]
