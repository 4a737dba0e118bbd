# -*- coding: utf-8 -*-
"""
Flow Control Nodes - Branching and looping constructs.

Provides nodes for controlling execution flow:
- Branch for if/else
- Sequence for ordered multi-output execution
- For and While loops
- Return to leave the generated method
"""
from typing import Optional

from ..core.base_node import BaseNode, NodeMetadata
from ..core.pins import DataPin, ExecutionPin, PinDirection
from ..core.types import BOOL, INT, TypeRef, is_void


class BranchNode(BaseNode):
    """
    Conditional branching (if/else).

    Runs everything reachable from True or from False depending on
    the condition input.
    """
    node_type = "Branch"
    metadata = NodeMetadata(
        category="Flow Control",
        display_name="Branch",
        description="Conditional execution based on boolean condition",
        color="#4A90D9"
    )

    def _setup_pins(self):
        self.add_input_pin(ExecutionPin("Exec"))
        self.add_input_pin(DataPin("Condition", BOOL, default_value=False))
        self.add_output_pin(ExecutionPin("True", PinDirection.OUTPUT))
        self.add_output_pin(ExecutionPin("False", PinDirection.OUTPUT))


class SequenceNode(BaseNode):
    """
    Execute multiple outputs in order.

    All outputs fire sequentially, "Then 0" first.
    """
    node_type = "Sequence"
    metadata = NodeMetadata(
        category="Flow Control",
        display_name="Sequence",
        description="Executes multiple outputs in sequence",
        color="#4A90D9"
    )

    def __init__(self, node_id: Optional[str] = None, output_count: int = 2):
        """
        Create Sequence node.

        Args:
            node_id: Optional node ID
            output_count: Number of "Then N" outputs
        """
        if output_count < 1:
            raise ValueError("Sequence needs at least one output")
        self._output_count = output_count
        super().__init__(node_id)
        self.properties["OutputCount"] = output_count

    def _setup_pins(self):
        self.add_input_pin(ExecutionPin("Exec"))
        for i in range(self._output_count):
            self.add_output_pin(ExecutionPin(f"Then {i}", PinDirection.OUTPUT))


class ForLoopNode(BaseNode):
    """
    Counted loop.

    Runs Loop Body for Index = Start, Start + 1, ... while Index < End,
    reading End again before every pass, then Completed.
    """
    node_type = "ForLoop"
    metadata = NodeMetadata(
        category="Flow Control",
        display_name="For Loop",
        description="Iterate from start to end index",
        color="#4A90D9"
    )

    def _setup_pins(self):
        self.add_input_pin(ExecutionPin("Exec"))
        self.add_input_pin(DataPin("Start", INT, default_value=0))
        self.add_input_pin(DataPin("End", INT, default_value=10))
        self.add_output_pin(ExecutionPin("Loop Body", PinDirection.OUTPUT))
        self.add_output_pin(DataPin("Index", INT, PinDirection.OUTPUT))
        self.add_output_pin(ExecutionPin("Completed", PinDirection.OUTPUT))


class WhileLoopNode(BaseNode):
    """
    While loop.

    Runs Loop Body as long as Condition holds. Nothing guards against
    a condition that never turns false.
    """
    node_type = "WhileLoop"
    metadata = NodeMetadata(
        category="Flow Control",
        display_name="While Loop",
        description="Loop while condition is true",
        color="#4A90D9"
    )

    def _setup_pins(self):
        self.add_input_pin(ExecutionPin("Exec"))
        self.add_input_pin(DataPin("Condition", BOOL))
        self.add_output_pin(ExecutionPin("Loop Body", PinDirection.OUTPUT))
        self.add_output_pin(ExecutionPin("Completed", PinDirection.OUTPUT))


class ReturnNode(BaseNode):
    """Exit the generated method, optionally with a value."""
    node_type = "Return"
    metadata = NodeMetadata(
        category="Flow Control",
        display_name="Return",
        description="Exit function and return value",
        color="#4A90D9"
    )

    def __init__(self, node_id: Optional[str] = None, return_type: Optional[TypeRef] = None):
        self._return_type = return_type
        super().__init__(node_id)
        self.properties["ReturnType"] = return_type

    def _setup_pins(self):
        self.add_input_pin(ExecutionPin("Exec"))
        if not is_void(self._return_type):
            self.add_input_pin(DataPin("Return Value", self._return_type))


ALL_NODES = [
    BranchNode,
    SequenceNode,
    ForLoopNode,
    WhileLoopNode,
    ReturnNode,
]
