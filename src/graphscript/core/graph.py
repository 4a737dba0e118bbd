# -*- coding: utf-8 -*-
"""
NodeGraph - Container for nodes and connections.

A NodeGraph is a complete visual program that can be ordered, translated
to source, saved and loaded. All structural mutation goes through its
methods so the invariants hold after every call:
- every connection references pins of nodes currently in the graph
- a data input pin has at most one incoming connection
- pin is_connected flags match the connection set

Example:
    graph = NodeGraph("My Workflow")

    start = graph.add_node(StartNode())
    print_node = graph.add_node(PrintNode())

    graph.add_connection(
        start.get_output_pin("Start").pin_id,
        print_node.get_input_pin("Exec").pin_id,
    )
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from uuid import uuid4

from loguru import logger

from .base_node import BaseNode
from .compatibility import TypeCompatibilityChecker
from .connection import NodeConnection
from .errors import DuplicateIdError
from .ordering import find_execution_cycle, get_execution_order
from .pins import BasePin, PinDirection, PinKind
from .types import TypeRef


class Variable:
    """
    Graph-level variable declaration.

    Get/Set Variable nodes refer to variables by name. Declared variables
    start with their default value; undeclared ones start at their type's
    zero value in generated code.

    Attributes:
        name: Variable name
        var_type: Declared type (None = untyped)
        default_value: Initial value
    """

    def __init__(
        self,
        name: str,
        var_type: Optional[TypeRef] = None,
        default_value: Any = None
    ):
        self.name = name
        self.var_type = var_type
        self.default_value = default_value


@dataclass
class GraphValidationResult:
    """Result of graph validation; the empty key holds graph-wide errors."""
    is_valid: bool
    errors_by_node: Dict[str, List[str]] = field(default_factory=dict)


class NodeGraph:
    """
    Container for nodes and connections.

    Attributes:
        graph_id: Unique identifier
        name: Human-readable graph name
        nodes: node_id -> BaseNode, in insertion (storage) order
        connections: connection_id -> NodeConnection
        metadata: Free-form data owned by collaborators
        checker: Type rules used to validate data connections
    """

    def __init__(
        self,
        name: str = "New Graph",
        checker: Optional[TypeCompatibilityChecker] = None,
        graph_id: Optional[str] = None
    ):
        """
        Create a new node graph.

        Args:
            name: Human-readable name for this graph
            checker: Type compatibility rules (default rules if None)
            graph_id: Optional ID (generated if not provided)
        """
        self.graph_id = graph_id or str(uuid4())
        self.name = name
        self.checker = checker or TypeCompatibilityChecker()
        self.nodes: Dict[str, BaseNode] = {}
        self.connections: Dict[str, NodeConnection] = {}
        self.metadata: Dict[str, Any] = {}
        self._variables: Dict[str, Variable] = {}
        self._pin_owner: Dict[str, str] = {}

    # =========================================================================
    # Node Management
    # =========================================================================

    def add_node(self, node: BaseNode) -> BaseNode:
        """
        Add a node to the graph.

        Args:
            node: Node instance to add

        Returns:
            The added node (for chaining)

        Raises:
            DuplicateIdError: If a node with the same id is already present
        """
        if node.node_id in self.nodes:
            raise DuplicateIdError(node.node_id)

        self.nodes[node.node_id] = node
        for pin in node.all_pins():
            self._pin_owner[pin.pin_id] = node.node_id
        logger.debug(f"Added node: {node}")
        return node

    def remove_node(self, node_id: str) -> None:
        """
        Remove a node and exactly the connections touching its pins.

        Args:
            node_id: ID of node to remove (no-op if absent)
        """
        node = self.nodes.get(node_id)
        if node is None:
            return

        pin_ids = {pin.pin_id for pin in node.all_pins()}
        touching = [
            conn for conn in self.connections.values()
            if conn.source_pin_id in pin_ids or conn.target_pin_id in pin_ids
        ]
        for conn in touching:
            del self.connections[conn.connection_id]

        del self.nodes[node_id]
        for pin_id in pin_ids:
            self._pin_owner.pop(pin_id, None)

        for conn in touching:
            self._refresh_connected_flag(conn.source_pin_id)
            self._refresh_connected_flag(conn.target_pin_id)
        for pin in node.all_pins():
            pin.is_connected = False

        logger.debug(f"Removed node: {node} ({len(touching)} connections)")

    def get_node(self, node_id: str) -> Optional[BaseNode]:
        """Get a node by ID."""
        return self.nodes.get(node_id)

    def get_node_for_pin(self, pin_id: str) -> Optional[BaseNode]:
        """Get the node that owns a pin."""
        node_id = self._pin_owner.get(pin_id)
        return self.nodes.get(node_id) if node_id else None

    def clear(self) -> None:
        """Remove all nodes, connections and variables."""
        for node_id in list(self.nodes.keys()):
            self.remove_node(node_id)
        self._variables.clear()

    # =========================================================================
    # Connection Management
    # =========================================================================

    def add_connection(self, source_pin_id: str, target_pin_id: str) -> Optional[NodeConnection]:
        """
        Connect an output pin to an input pin.

        A refused connection is not an error: the method returns None and
        leaves the graph untouched.

        Args:
            source_pin_id: Output pin id
            target_pin_id: Input pin id

        Returns:
            The new connection, or None if rejected
        """
        source = self.find_pin(source_pin_id)
        target = self.find_pin(target_pin_id)

        if source is None or target is None:
            logger.debug(f"Connection rejected: pin not found ({source_pin_id} -> {target_pin_id})")
            return None

        if not NodeConnection.is_valid(source, target, self.checker):
            logger.debug(f"Connection rejected: {source!r} -> {target!r}")
            return None

        # Data inputs accept a single connection; newest wins
        if target.direction == PinDirection.INPUT and target.kind == PinKind.DATA:
            for existing in self.get_connections_to_pin(target_pin_id):
                self.remove_connection(existing.connection_id)

        connection = NodeConnection(source_pin_id, target_pin_id)
        self.connections[connection.connection_id] = connection
        source.is_connected = True
        target.is_connected = True

        logger.debug(f"Connected: {connection}")
        return connection

    def connect(
        self,
        source_node_id: str,
        source_pin_name: str,
        target_node_id: str,
        target_pin_name: str
    ) -> Optional[NodeConnection]:
        """
        Connect two pins addressed by node id and pin name.

        Raises:
            KeyError: If a node or pin is not found
        """
        source_node = self.nodes.get(source_node_id)
        target_node = self.nodes.get(target_node_id)
        if source_node is None:
            raise KeyError(f"Source node not found: {source_node_id}")
        if target_node is None:
            raise KeyError(f"Target node not found: {target_node_id}")

        source_pin = source_node.get_output_pin(source_pin_name)
        target_pin = target_node.get_input_pin(target_pin_name)
        if source_pin is None:
            raise KeyError(f"Source pin not found: {source_pin_name}")
        if target_pin is None:
            raise KeyError(f"Target pin not found: {target_pin_name}")

        return self.add_connection(source_pin.pin_id, target_pin.pin_id)

    def remove_connection(self, connection_id: str) -> None:
        """
        Remove a connection and refresh both endpoints' connected flags.

        Args:
            connection_id: ID of connection to remove (no-op if absent)
        """
        conn = self.connections.pop(connection_id, None)
        if conn is None:
            return
        self._refresh_connected_flag(conn.source_pin_id)
        self._refresh_connected_flag(conn.target_pin_id)
        logger.debug(f"Disconnected: {conn}")

    def find_pin(self, pin_id: str) -> Optional[BasePin]:
        """Find a pin by id across all nodes."""
        node = self.get_node_for_pin(pin_id)
        return node.find_pin(pin_id) if node else None

    def get_connections_from_pin(self, pin_id: str) -> List[NodeConnection]:
        """All connections with this pin at either end."""
        return [conn for conn in self.connections.values() if conn.touches(pin_id)]

    def get_connections_to_pin(self, pin_id: str) -> List[NodeConnection]:
        return [conn for conn in self.connections.values() if conn.target_pin_id == pin_id]

    def get_incoming_connection(self, pin_id: str) -> Optional[NodeConnection]:
        """The (first) connection feeding an input pin."""
        return next(
            (conn for conn in self.connections.values() if conn.target_pin_id == pin_id),
            None
        )

    def _refresh_connected_flag(self, pin_id: str) -> None:
        pin = self.find_pin(pin_id)
        if pin is not None:
            pin.is_connected = any(conn.touches(pin_id) for conn in self.connections.values())

    # =========================================================================
    # Variable Management
    # =========================================================================

    def add_variable(
        self,
        name: str,
        var_type: Optional[TypeRef] = None,
        default_value: Any = None
    ) -> Variable:
        """
        Declare a graph-level variable.

        Args:
            name: Variable name
            var_type: Declared type
            default_value: Initial value

        Returns:
            The created Variable
        """
        var = Variable(name, var_type, default_value)
        self._variables[name] = var
        return var

    def get_variable(self, name: str) -> Optional[Variable]:
        """Get a variable by name."""
        return self._variables.get(name)

    def remove_variable(self, name: str) -> None:
        """Remove a variable."""
        self._variables.pop(name, None)

    @property
    def variables(self) -> Dict[str, Variable]:
        """Get all variables."""
        return self._variables.copy()

    # =========================================================================
    # Ordering & Validation
    # =========================================================================

    def get_execution_order(self) -> List[BaseNode]:
        """See ordering.get_execution_order."""
        return get_execution_order(self)

    def find_start_nodes(self) -> List[BaseNode]:
        """Nodes with an execution output but no execution input."""
        return [
            node for node in self.nodes.values()
            if any(p.kind == PinKind.EXECUTION for p in node.output_pins)
            and not any(p.kind == PinKind.EXECUTION for p in node.input_pins)
        ]

    def validate(self) -> GraphValidationResult:
        """
        Validate every node and the execution flow.

        Returns:
            Errors keyed by node id; execution cycles are reported under ""
        """
        errors: Dict[str, List[str]] = {}
        for node in self.nodes.values():
            result = node.validate()
            if not result.is_valid:
                errors[node.node_id] = result.errors

        cycle = find_execution_cycle(self)
        if cycle:
            errors[""] = [f"Execution flow contains a cycle through {len(cycle)} node(s)"]

        return GraphValidationResult(not errors, errors)

    def __repr__(self) -> str:
        return f"<NodeGraph '{self.name}' nodes={len(self.nodes)} conn={len(self.connections)}>"
