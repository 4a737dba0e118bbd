# -*- coding: utf-8 -*-
"""
Pins - Typed connection points on nodes.

Two kinds of pins:
- ExecutionPin: carries control flow, always compatible with another execution pin
- DataPin: carries a value of an optional declared type (None = wildcard)

Pins belong to exactly one node for their lifetime and are only created
while the node sets itself up.

Example:
    exec_in = ExecutionPin("Exec")
    value_in = DataPin("Value", STRING, default_value="")
    result = DataPin("Result", INT, PinDirection.OUTPUT)
"""
from enum import Enum
from typing import Any, Optional, TYPE_CHECKING
from uuid import uuid4

from .colors import EXECUTION_COLOR, TypeColorMap
from .types import TypeRef, display_name

if TYPE_CHECKING:
    from .compatibility import TypeCompatibilityChecker


class PinKind(Enum):
    """Execution flow or typed data."""
    EXECUTION = "Execution"
    DATA = "Data"


class PinDirection(Enum):
    """Pin direction relative to its node."""
    INPUT = "Input"
    OUTPUT = "Output"


class BasePin:
    """
    Connection point on a node.

    Attributes:
        pin_id: Unique identifier
        name: Pin name, unique per node and direction
        kind: PinKind.EXECUTION or PinKind.DATA
        direction: PinDirection.INPUT or PinDirection.OUTPUT
        data_type: Declared type (data pins only, None = wildcard)
        default_value: Value used when nothing is connected
        node_id: Owning node's id
        is_connected: Maintained by the graph, never set directly
    """
    kind: PinKind = PinKind.DATA

    def __init__(
        self,
        name: str,
        direction: PinDirection = PinDirection.INPUT,
        data_type: Optional[TypeRef] = None,
        default_value: Any = None,
        pin_id: Optional[str] = None
    ):
        self.pin_id = pin_id or str(uuid4())
        self.name = name
        self.direction = direction
        self.data_type = data_type
        self.default_value = default_value
        self.node_id: Optional[str] = None
        self.is_connected = False

    @property
    def is_input(self) -> bool:
        return self.direction == PinDirection.INPUT

    @property
    def is_output(self) -> bool:
        return self.direction == PinDirection.OUTPUT

    @property
    def is_execution(self) -> bool:
        return self.kind == PinKind.EXECUTION

    def can_connect_to(
        self,
        other: 'BasePin',
        checker: Optional['TypeCompatibilityChecker'] = None
    ) -> bool:
        """
        Check if this pin can be connected to another pin.

        Directions must differ, kinds must match and the pins must sit on
        different nodes. Execution pins are then always compatible; data
        pins are compatible if either is untyped or the types are.

        Args:
            other: Pin to connect to
            checker: Type rules to apply (a fresh default checker if None)

        Returns:
            True if connection is valid
        """
        if self.direction == other.direction:
            return False

        if self.node_id == other.node_id:
            return False

        if self.kind != other.kind:
            return False

        if self.kind == PinKind.EXECUTION:
            return True

        if self.data_type is None or other.data_type is None:
            return True

        if checker is None:
            from .compatibility import TypeCompatibilityChecker
            checker = TypeCompatibilityChecker()

        if self.is_output:
            return checker.are_types_compatible(self.data_type, other.data_type)
        return checker.are_types_compatible(other.data_type, self.data_type)

    def color(self, color_map: Optional[TypeColorMap] = None) -> str:
        """Display color for this pin."""
        if self.kind == PinKind.EXECUTION:
            return EXECUTION_COLOR
        return (color_map or TypeColorMap()).color_for(self.data_type)

    def __repr__(self) -> str:
        arrow = "<-" if self.is_input else "->"
        return f"<{type(self).__name__} {arrow} '{self.name}' : {display_name(self.data_type)}>"


class ExecutionPin(BasePin):
    """Control-flow pin. Never carries a type or value."""
    kind = PinKind.EXECUTION

    def __init__(
        self,
        name: str = "Exec",
        direction: PinDirection = PinDirection.INPUT,
        pin_id: Optional[str] = None
    ):
        super().__init__(name, direction, pin_id=pin_id)


class DataPin(BasePin):
    """Value pin with an optional declared type."""
    kind = PinKind.DATA

    def __init__(
        self,
        name: str,
        data_type: Optional[TypeRef] = None,
        direction: PinDirection = PinDirection.INPUT,
        default_value: Any = None,
        pin_id: Optional[str] = None
    ):
        super().__init__(name, direction, data_type, default_value, pin_id)
