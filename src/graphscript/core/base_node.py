# -*- coding: utf-8 -*-
"""
Base Node - Abstract base class for all nodes.

Provides:
- Unique identification
- Ordered, fixed pin lists
- Presentation metadata
- A property bag for node-specific state (literal value, variable name, ...)

Example:
    class MyNode(BaseNode):
        node_type = "MyNode"
        metadata = NodeMetadata(category="Custom", display_name="My Node")

        def _setup_pins(self):
            self.add_input_pin(ExecutionPin("Exec"))
            self.add_input_pin(DataPin("Value", INT, default_value=42))
            self.add_output_pin(ExecutionPin("Exec", PinDirection.OUTPUT))
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional
from uuid import uuid4

from pydantic import BaseModel

from .pins import BasePin, PinDirection, PinKind


class NodeMetadata(BaseModel):
    """
    Node metadata for the palette and display.

    Attributes:
        category: Category for grouping in palette (e.g., "Flow Control")
        display_name: Human-readable name shown in UI
        description: Tooltip description
        color: Hex color for node header (e.g., "#4A90D9")
    """
    category: str = "General"
    display_name: str = ""
    description: str = ""
    color: str = "#4A90D9"


@dataclass
class ValidationResult:
    """Result of node validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)


class BaseNode(ABC):
    """
    Abstract base class for all nodes.

    Subclasses define:
    - node_type: Unique string identifier used to reconstruct saved nodes
    - metadata: NodeMetadata instance for display
    - _setup_pins(): Creates the node's pins, once

    Attributes:
        node_id: Unique identifier for this node instance
        title: Display title (defaults to metadata.display_name)
        position: (x, y) canvas position, opaque to the core
        properties: Node-specific state
    """
    node_type: str = "BaseNode"
    metadata: NodeMetadata = NodeMetadata()

    def __init__(self, node_id: Optional[str] = None):
        """
        Initialize a new node instance.

        Args:
            node_id: Optional unique ID (generated if not provided)
        """
        self.node_id = node_id or str(uuid4())
        self.title = self.metadata.display_name or self.node_type
        self.position: tuple[float, float] = (0.0, 0.0)
        self.properties: Dict[str, Any] = {}
        self._input_pins: List[BasePin] = []
        self._output_pins: List[BasePin] = []
        self._pins_sealed = False
        self._setup_pins()
        self._pins_sealed = True

    @abstractmethod
    def _setup_pins(self) -> None:
        """Define input/output pins. Must be implemented by subclasses."""

    def add_input_pin(self, pin: BasePin) -> BasePin:
        """
        Add an input pin to this node.

        Args:
            pin: Pin instance to add

        Returns:
            The added pin (for chaining)

        Raises:
            RuntimeError: If called after the node was constructed
        """
        self._attach(pin, PinDirection.INPUT)
        self._input_pins.append(pin)
        return pin

    def add_output_pin(self, pin: BasePin) -> BasePin:
        """Add an output pin to this node. See add_input_pin."""
        self._attach(pin, PinDirection.OUTPUT)
        self._output_pins.append(pin)
        return pin

    def _attach(self, pin: BasePin, direction: PinDirection) -> None:
        if self._pins_sealed:
            raise RuntimeError(
                f"Pins of {self!r} are fixed at construction; cannot add '{pin.name}'"
            )
        pin.node_id = self.node_id
        pin.direction = direction

    # =========================================================================
    # Pin lookup
    # =========================================================================

    @property
    def input_pins(self) -> List[BasePin]:
        """Input pins in declaration order."""
        return list(self._input_pins)

    @property
    def output_pins(self) -> List[BasePin]:
        """Output pins in declaration order."""
        return list(self._output_pins)

    def all_pins(self) -> Iterator[BasePin]:
        yield from self._input_pins
        yield from self._output_pins

    def get_input_pin(self, name: str) -> Optional[BasePin]:
        """Get an input pin by name."""
        return next((p for p in self._input_pins if p.name == name), None)

    def get_output_pin(self, name: str) -> Optional[BasePin]:
        """Get an output pin by name."""
        return next((p for p in self._output_pins if p.name == name), None)

    def find_pin(self, pin_id: str) -> Optional[BasePin]:
        return next((p for p in self.all_pins() if p.pin_id == pin_id), None)

    def data_inputs(self) -> List[BasePin]:
        return [p for p in self._input_pins if p.kind == PinKind.DATA]

    def execution_outputs(self) -> List[BasePin]:
        return [p for p in self._output_pins if p.kind == PinKind.EXECUTION]

    @property
    def has_execution_pins(self) -> bool:
        """False for pure data nodes (literals, operators, getters)."""
        return any(p.kind == PinKind.EXECUTION for p in self.all_pins())

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(self) -> ValidationResult:
        """
        Check the node's current state.

        Every required execution input must be connected.
        """
        errors = [
            f"Execution input '{pin.name}' must be connected"
            for pin in self._input_pins
            if pin.kind == PinKind.EXECUTION
            and self.is_execution_input_required(pin)
            and not pin.is_connected
        ]
        return ValidationResult(not errors, errors)

    def is_execution_input_required(self, pin: BasePin) -> bool:
        return True

    def __repr__(self) -> str:
        return f"<{self.node_type}({self.node_id[:8]})>"
