import pytest

from src.graphscript.core.compatibility import TypeCompatibilityChecker
from src.graphscript.core.graph import NodeGraph
from src.graphscript.core.references import default_registry
from src.graphscript.core.types import BOOL, STRING
from src.graphscript.nodes import create_default_registry
from src.graphscript.nodes.events import StartNode
from src.graphscript.nodes.functions import PrintNode
from src.graphscript.nodes.variables import LiteralNode


@pytest.fixture
def references():
    return default_registry()


@pytest.fixture
def node_registry():
    return create_default_registry()


@pytest.fixture
def graph(references):
    """Empty graph whose type rules know the default references."""
    return NodeGraph("Test Graph", TypeCompatibilityChecker(references))


@pytest.fixture
def hello_graph(graph):
    """Start -> Print("Hello"), the literal feeding Print.Value."""
    start = graph.add_node(StartNode())
    literal = graph.add_node(LiteralNode(literal_type=STRING, value="Hello"))
    printer = graph.add_node(PrintNode())
    graph.connect(start.node_id, "Start", printer.node_id, "Exec")
    graph.connect(literal.node_id, "Value", printer.node_id, "Value")
    return graph


@pytest.fixture
def branch_graph(graph):
    """Branch on a true literal; True prints "A", False is empty."""
    from src.graphscript.nodes.flow_control import BranchNode

    start = graph.add_node(StartNode())
    condition = graph.add_node(LiteralNode(literal_type=BOOL, value=True))
    branch = graph.add_node(BranchNode())
    text = graph.add_node(LiteralNode(literal_type=STRING, value="A"))
    printer = graph.add_node(PrintNode())
    graph.connect(start.node_id, "Start", branch.node_id, "Exec")
    graph.connect(condition.node_id, "Value", branch.node_id, "Condition")
    graph.connect(branch.node_id, "True", printer.node_id, "Exec")
    graph.connect(text.node_id, "Value", printer.node_id, "Value")
    return graph
