# -*- coding: utf-8 -*-
"""
Event Nodes - Entry points for execution.
"""
from ..core.base_node import BaseNode, NodeMetadata
from ..core.pins import ExecutionPin, PinDirection


class StartNode(BaseNode):
    """
    Entry point for execution.

    Has a single execution output and needs no incoming flow.
    """
    node_type = "Start"
    metadata = NodeMetadata(
        category="Flow Control",
        display_name="Start",
        description="Entry point for execution",
        color="#CC3333"
    )

    def _setup_pins(self):
        self.add_output_pin(ExecutionPin("Start", PinDirection.OUTPUT))

    def is_execution_input_required(self, pin) -> bool:
        return False


ALL_NODES = [
    StartNode,
]
