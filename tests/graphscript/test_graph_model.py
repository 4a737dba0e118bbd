# -*- coding: utf-8 -*-
"""
Tests for the graph model.

Tests cover:
- Node construction and pin lookup
- Pin connectability
- NodeGraph mutations and their invariants
- Variables and validation
"""
import pytest

from src.graphscript.core.base_node import BaseNode, NodeMetadata
from src.graphscript.core.errors import DuplicateIdError, GraphStructureError
from src.graphscript.core.graph import NodeGraph
from src.graphscript.core.pins import DataPin, ExecutionPin, PinDirection, PinKind
from src.graphscript.core.types import BOOL, DOUBLE, INT, OBJECT, STRING
from src.graphscript.nodes.events import StartNode
from src.graphscript.nodes.flow_control import BranchNode, ForLoopNode, SequenceNode
from src.graphscript.nodes.functions import MethodCallNode, PrintNode
from src.graphscript.nodes.operators import AddNode, EqualsNode
from src.graphscript.nodes.variables import LiteralNode, SetVariableNode


# =============================================================================
# Test Fixtures - Sample Node Classes
# =============================================================================

class SampleNumberNode(BaseNode):
    """Test node - produces an int and a string."""
    node_type = "SampleNumber"
    metadata = NodeMetadata(category="Test", display_name="Sample Number")

    def _setup_pins(self):
        self.add_output_pin(DataPin("Number", INT, PinDirection.OUTPUT))
        self.add_output_pin(DataPin("Text", STRING, PinDirection.OUTPUT))
        self.add_output_pin(DataPin("Anything", None, PinDirection.OUTPUT))


# =============================================================================
# Nodes
# =============================================================================

class TestNodeCreation:
    """Tests for BaseNode creation."""

    def test_node_generates_id(self):
        assert StartNode().node_id != StartNode().node_id

    def test_custom_id_propagates_to_pins(self):
        node = PrintNode("print-1")
        assert node.node_id == "print-1"
        assert all(pin.node_id == "print-1" for pin in node.all_pins())

    def test_pins_in_declaration_order(self):
        loop = ForLoopNode()
        assert [p.name for p in loop.input_pins] == ["Exec", "Start", "End"]
        assert [p.name for p in loop.output_pins] == ["Loop Body", "Index", "Completed"]

    def test_pins_fixed_after_construction(self):
        node = PrintNode()
        with pytest.raises(RuntimeError):
            node.add_input_pin(DataPin("Extra", INT))

    def test_pure_nodes_have_no_execution_pins(self):
        assert not LiteralNode().has_execution_pins
        assert not AddNode().has_execution_pins
        assert PrintNode().has_execution_pins

    def test_sequence_output_count(self):
        sequence = SequenceNode(output_count=3)
        assert [p.name for p in sequence.execution_outputs()] == ["Then 0", "Then 1", "Then 2"]
        with pytest.raises(ValueError):
            SequenceNode(output_count=0)

    def test_literal_defaults_to_zero_value(self):
        assert LiteralNode(literal_type=INT).value == 0
        assert LiteralNode(literal_type=BOOL).value is False
        assert LiteralNode(literal_type=STRING).value is None

    def test_literal_accepts_textual_type(self):
        assert LiteralNode(literal_type="double", value=1.5).literal_type == DOUBLE

    def test_set_variable_pin_named_after_variable(self):
        node = SetVariableNode(variable_name="Count", variable_type=INT)
        assert node.get_input_pin("Count").data_type == INT
        assert node.title == "Set Count"

    def test_method_call_pins(self, references):
        sqrt = references.resolve_method("math", "sqrt")
        pure = MethodCallNode(method=sqrt)
        assert not pure.has_execution_pins
        assert [p.name for p in pure.input_pins] == ["x"]
        assert pure.get_output_pin("Return Value").data_type == DOUBLE
        assert pure.title == "math.sqrt"

        flow = MethodCallNode(method=sqrt, pure=False)
        assert flow.get_input_pin("Exec").kind == PinKind.EXECUTION

        randint = references.resolve_method("random.Random", "randint")
        instance = MethodCallNode(method=randint)
        assert instance.get_input_pin("Target") is not None
        assert instance.title == "Random.randint (inst)"

    def test_method_call_requires_method(self):
        with pytest.raises(ValueError):
            MethodCallNode()

    def test_validate_requires_execution_input(self):
        result = PrintNode().validate()
        assert not result.is_valid
        assert "Exec" in result.errors[0]
        assert StartNode().validate().is_valid


# =============================================================================
# Pins
# =============================================================================

class TestPinConnectability:
    """Tests for can_connect_to."""

    def test_opposite_directions_required(self):
        a = SampleNumberNode()
        b = SampleNumberNode()
        assert not a.get_output_pin("Number").can_connect_to(b.get_output_pin("Number"))

    def test_same_node_rejected(self):
        loop = ForLoopNode()
        assert not loop.get_output_pin("Index").can_connect_to(loop.get_input_pin("End"))

    def test_kinds_must_match(self):
        start = StartNode()
        printer = PrintNode()
        assert not start.get_output_pin("Start").can_connect_to(printer.get_input_pin("Value"))

    def test_execution_pins_always_compatible(self):
        start = StartNode()
        branch = BranchNode()
        assert start.get_output_pin("Start").can_connect_to(branch.get_input_pin("Exec"))
        assert branch.get_input_pin("Exec").can_connect_to(start.get_output_pin("Start"))

    def test_data_types_checked(self):
        numbers = SampleNumberNode()
        loop = ForLoopNode()
        assert numbers.get_output_pin("Number").can_connect_to(loop.get_input_pin("End"))
        assert not numbers.get_output_pin("Text").can_connect_to(loop.get_input_pin("End"))

    def test_untyped_pin_connects_to_anything(self):
        numbers = SampleNumberNode()
        loop = ForLoopNode()
        assert numbers.get_output_pin("Anything").can_connect_to(loop.get_input_pin("End"))

    def test_check_is_symmetric_in_argument_order(self):
        numbers = SampleNumberNode()
        loop = ForLoopNode()
        assert not loop.get_input_pin("End").can_connect_to(numbers.get_output_pin("Text"))
        assert loop.get_input_pin("End").can_connect_to(numbers.get_output_pin("Number"))

    def test_execution_pin_carries_no_type(self):
        pin = ExecutionPin("Exec")
        assert pin.data_type is None
        assert pin.kind == PinKind.EXECUTION


# =============================================================================
# Graph
# =============================================================================

class TestNodeGraph:
    """Tests for NodeGraph mutations."""

    def test_add_and_get_node(self, graph):
        node = graph.add_node(StartNode())
        assert graph.get_node(node.node_id) is node
        assert graph.get_node_for_pin(node.get_output_pin("Start").pin_id) is node

    def test_duplicate_id_rejected(self, graph):
        graph.add_node(StartNode("same"))
        with pytest.raises(DuplicateIdError):
            graph.add_node(PrintNode("same"))
        assert issubclass(DuplicateIdError, GraphStructureError)
        assert isinstance(graph.get_node("same"), StartNode)

    def test_add_connection_sets_flags(self, hello_graph):
        assert len(hello_graph.connections) == 2
        for conn in hello_graph.connections.values():
            assert hello_graph.find_pin(conn.source_pin_id).is_connected
            assert hello_graph.find_pin(conn.target_pin_id).is_connected

    def test_rejected_connection_returns_none(self, graph):
        numbers = graph.add_node(SampleNumberNode())
        loop = graph.add_node(ForLoopNode())
        conn = graph.connect(numbers.node_id, "Text", loop.node_id, "End")
        assert conn is None
        assert not graph.connections
        assert not loop.get_input_pin("End").is_connected

    def test_input_to_output_order_rejected(self, graph):
        start = graph.add_node(StartNode())
        printer = graph.add_node(PrintNode())
        assert graph.add_connection(
            printer.get_input_pin("Exec").pin_id, start.get_output_pin("Start").pin_id
        ) is None

    def test_unknown_pin_rejected(self, graph):
        printer = graph.add_node(PrintNode())
        assert graph.add_connection("missing", printer.get_input_pin("Exec").pin_id) is None

    def test_data_input_keeps_newest_connection(self, graph):
        first = graph.add_node(LiteralNode(literal_type=INT, value=1))
        second = graph.add_node(LiteralNode(literal_type=INT, value=2))
        loop = graph.add_node(ForLoopNode())
        graph.connect(first.node_id, "Value", loop.node_id, "End")
        newest = graph.connect(second.node_id, "Value", loop.node_id, "End")

        incoming = graph.get_connections_to_pin(loop.get_input_pin("End").pin_id)
        assert incoming == [newest]
        assert not first.get_output_pin("Value").is_connected
        assert loop.get_input_pin("End").is_connected

    def test_execution_input_accepts_many(self, graph):
        a = graph.add_node(StartNode())
        b = graph.add_node(StartNode())
        printer = graph.add_node(PrintNode())
        graph.connect(a.node_id, "Start", printer.node_id, "Exec")
        graph.connect(b.node_id, "Start", printer.node_id, "Exec")
        assert len(graph.get_connections_to_pin(printer.get_input_pin("Exec").pin_id)) == 2

    def test_connect_by_name_unknown_pin(self, graph):
        start = graph.add_node(StartNode())
        printer = graph.add_node(PrintNode())
        with pytest.raises(KeyError):
            graph.connect(start.node_id, "Nope", printer.node_id, "Exec")

    def test_remove_node_removes_exactly_touching_connections(self, graph):
        start = graph.add_node(StartNode())
        first = graph.add_node(PrintNode())
        second = graph.add_node(PrintNode())
        text = graph.add_node(LiteralNode(value="x"))
        graph.connect(start.node_id, "Start", first.node_id, "Exec")
        keep_exec = graph.connect(first.node_id, "Exec", second.node_id, "Exec")
        graph.connect(text.node_id, "Value", first.node_id, "Value")
        keep_value = graph.connect(text.node_id, "Value", second.node_id, "Value")

        graph.remove_node(first.node_id)

        assert set(graph.connections.values()) == {keep_value}
        assert keep_exec.connection_id not in graph.connections
        assert not start.get_output_pin("Start").is_connected
        assert text.get_output_pin("Value").is_connected
        assert not second.get_input_pin("Exec").is_connected
        assert graph.get_node(first.node_id) is None

    def test_remove_missing_node_is_noop(self, hello_graph):
        hello_graph.remove_node("missing")
        assert len(hello_graph.nodes) == 3

    def test_remove_connection_refreshes_flags(self, hello_graph):
        conn = next(iter(hello_graph.connections.values()))
        hello_graph.remove_connection(conn.connection_id)
        assert not hello_graph.find_pin(conn.source_pin_id).is_connected
        assert not hello_graph.find_pin(conn.target_pin_id).is_connected

    def test_find_start_nodes(self, hello_graph):
        starts = hello_graph.find_start_nodes()
        assert [n.node_type for n in starts] == ["Start"]

    def test_operator_connection_respects_types(self, graph):
        equals = graph.add_node(EqualsNode())
        branch = graph.add_node(BranchNode())
        add = graph.add_node(AddNode())
        assert equals.get_output_pin("Result").data_type == BOOL
        assert equals.get_input_pin("A").data_type == OBJECT
        assert graph.connect(equals.node_id, "Result", branch.node_id, "Condition") is not None
        assert graph.connect(add.node_id, "Result", branch.node_id, "Condition") is None


class TestGraphVariables:
    """Tests for variable management."""

    def test_add_get_remove(self, graph):
        graph.add_variable("Count", INT, 3)
        assert graph.get_variable("Count").default_value == 3
        graph.remove_variable("Count")
        assert graph.get_variable("Count") is None

    def test_variables_returns_copy(self, graph):
        graph.add_variable("Count", INT)
        graph.variables.clear()
        assert "Count" in graph.variables

    def test_clear(self, hello_graph):
        hello_graph.add_variable("Count", INT)
        hello_graph.clear()
        assert not hello_graph.nodes
        assert not hello_graph.connections
        assert not hello_graph.variables
