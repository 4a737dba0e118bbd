# -*- coding: utf-8 -*-
"""
Tests for the graph-to-source translator.

Tests cover:
- Literal formatting helpers
- Module shape per output kind
- Branches, sequences and loops
- Variables, operators and method calls
- Strict and lenient handling of unresolved inputs
"""
from decimal import Decimal

import pytest

from src.core.config import CodegenSettings
from src.graphscript.codegen.literals import (
    format_literal, quote_string, sanitize_identifier, short_id, zero_value_expression,
)
from src.graphscript.codegen.translator import GraphTranslator, OutputKind, generate_source
from src.graphscript.core.errors import (
    CodeGenerationError, ExecutionCycleError, UnresolvedMemberError,
)
from src.graphscript.core.references import MethodDescriptor, ReferenceRegistry, TypeInfo
from src.graphscript.core.types import (
    BOOL, CHAR, DECIMAL, DOUBLE, INT, STRING, NamedType, nullable,
)
from src.graphscript.nodes.events import StartNode
from src.graphscript.nodes.flow_control import (
    BranchNode, ForLoopNode, ReturnNode, SequenceNode, WhileLoopNode,
)
from src.graphscript.nodes.functions import MethodCallNode, PrintNode
from src.graphscript.nodes.operators import AddNode, DivideNode, LessThanNode, NotNode
from src.graphscript.nodes.variables import GetVariableNode, LiteralNode, SetVariableNode


def _body(source: str):
    """Statements of the generated method, without their indentation."""
    lines = source.splitlines()
    start = next(i for i, line in enumerate(lines) if line.strip().startswith("def execute"))
    body = []
    for line in lines[start + 1:]:
        if line and not line.startswith("        "):
            break
        if line:
            body.append(line[8:])
    return body


# =============================================================================
# Literal formatting
# =============================================================================

class TestLiteralFormatting:
    """Tests for codegen.literals."""

    def test_quote_string_escapes(self):
        assert quote_string('He said "hi"\n') == '"He said \\"hi\\"\\n"'
        assert quote_string("a\\b\t") == '"a\\\\b\\t"'
        assert quote_string("\0") == '"\\x00"'

    def test_typed_literals(self):
        assert format_literal("x", STRING) == '"x"'
        assert format_literal(42, STRING) == '"42"'
        assert format_literal("x", CHAR) == "'x'"
        assert format_literal(True, BOOL) == "True"
        assert format_literal("false", BOOL) == "False"
        assert format_literal(3.0, INT) == "3"
        assert format_literal(2, DOUBLE) == "2.0"
        assert format_literal(float("inf"), DOUBLE) == 'float("inf")'
        assert format_literal(None, STRING) == "None"
        assert format_literal(5, nullable(INT)) == "5"

    def test_decimal_adds_import(self):
        imports = set()
        assert format_literal(Decimal("1.10"), DECIMAL, imports=imports) == 'decimal.Decimal("1.10")'
        assert imports == {"decimal"}

    def test_enum_members_are_qualified(self):
        registry = ReferenceRegistry([TypeInfo("colors.Color", enum_members=("RED", "GREEN"))])
        imports = set()
        assert format_literal("RED", NamedType("colors.Color"), registry, imports) == "colors.Color.RED"
        assert imports == {"colors"}
        with pytest.raises(UnresolvedMemberError):
            format_literal("BLUE", NamedType("colors.Color"), registry)

    def test_untyped_values(self):
        assert format_literal(7, None) == "7"
        assert format_literal("s", None) == '"s"'
        assert format_literal(object(), None) == "None"

    def test_zero_values(self):
        assert zero_value_expression(INT) == "0"
        assert zero_value_expression(DOUBLE) == "0.0"
        assert zero_value_expression(BOOL) == "False"
        assert zero_value_expression(STRING) == '""'
        assert zero_value_expression(nullable(INT)) == "None"
        assert zero_value_expression(NamedType("random.Random")) == "None"
        imports = set()
        assert zero_value_expression(DECIMAL, imports=imports) == "decimal.Decimal(0)"
        assert imports == {"decimal"}

    def test_value_type_zero_is_constructed(self):
        registry = ReferenceRegistry([
            TypeInfo("geometry.Point", is_value_type=True, has_default_constructor=True)
        ])
        assert zero_value_expression(NamedType("geometry.Point"), registry) == "geometry.Point()"

    def test_identifiers(self):
        assert sanitize_identifier("my var") == "my_var"
        assert sanitize_identifier("class") == "class_"
        assert sanitize_identifier("1x") == "_1x"
        assert short_id("3F2A-91bc-77") == "3f2a91bc"


# =============================================================================
# Module shape
# =============================================================================

class TestModuleShape:
    """Tests for the generated module layout."""

    def test_empty_graph(self, graph):
        source = generate_source(graph)
        assert source == "class GeneratedProgram:\n    def execute(self):\n        pass\n"

    def test_console_entry_point(self, hello_graph):
        source = generate_source(hello_graph, target=OutputKind.CONSOLE)
        assert "def main():\n    GeneratedProgram().execute()\n" in source
        assert source.endswith('if __name__ == "__main__":\n    main()\n')

    def test_library_has_no_entry_point(self, hello_graph):
        source = generate_source(hello_graph, target="library")
        assert "def main" not in source
        assert "__main__" not in source

    def test_custom_names_and_indent(self, hello_graph):
        settings = CodegenSettings(class_name="Program", method_name="run", indent=2)
        source = generate_source(hello_graph, settings=settings)
        assert source.startswith("class Program:\n  def run(self):\n    literal_")

    def test_generation_is_repeatable(self, hello_graph):
        translator = GraphTranslator(hello_graph)
        assert translator.generate() == translator.generate()

    def test_cycle_aborts_generation(self, graph):
        a = graph.add_node(PrintNode())
        b = graph.add_node(PrintNode())
        graph.connect(a.node_id, "Exec", b.node_id, "Exec")
        graph.connect(b.node_id, "Exec", a.node_id, "Exec")
        with pytest.raises(ExecutionCycleError):
            generate_source(graph)


# =============================================================================
# Control flow
# =============================================================================

class TestControlFlow:
    """Tests for branch, sequence and loop emission."""

    def test_branch_with_empty_false(self, graph):
        start = graph.add_node(StartNode("start"))
        condition = graph.add_node(LiteralNode("cond0001", BOOL, True))
        branch = graph.add_node(BranchNode("branch"))
        text = graph.add_node(LiteralNode("texta001", STRING, "A"))
        printer = graph.add_node(PrintNode("print"))
        graph.connect(start.node_id, "Start", branch.node_id, "Exec")
        graph.connect(condition.node_id, "Value", branch.node_id, "Condition")
        graph.connect(branch.node_id, "True", printer.node_id, "Exec")
        graph.connect(text.node_id, "Value", printer.node_id, "Value")

        assert _body(generate_source(graph)) == [
            "literal_cond0001 = True",
            'literal_texta001 = "A"',
            "if literal_cond0001:",
            "    print(literal_texta001)",
        ]

    def test_branch_fixture_prints_only_in_true_block(self, branch_graph):
        body = _body(generate_source(branch_graph))
        if_index = next(i for i, line in enumerate(body) if line.startswith("if "))
        assert body[if_index + 1].startswith("    print(literal_")
        assert "else:" not in body
        assert sum(line.strip().startswith("print(") for line in body) == 1

    def test_branch_with_both_blocks(self, graph):
        start = graph.add_node(StartNode())
        branch = graph.add_node(BranchNode())
        yes = graph.add_node(PrintNode())
        no = graph.add_node(PrintNode())
        graph.connect(start.node_id, "Start", branch.node_id, "Exec")
        graph.connect(branch.node_id, "True", yes.node_id, "Exec")
        graph.connect(branch.node_id, "False", no.node_id, "Exec")

        assert _body(generate_source(graph)) == [
            "if False:",
            '    print("")',
            "else:",
            '    print("")',
        ]

    def test_sibling_blocks_are_independent(self, graph):
        start = graph.add_node(StartNode())
        branch = graph.add_node(BranchNode())
        yes = graph.add_node(PrintNode())
        no = graph.add_node(PrintNode())
        join = graph.add_node(PrintNode())
        text = graph.add_node(LiteralNode("join0001", STRING, "joined"))
        graph.connect(start.node_id, "Start", branch.node_id, "Exec")
        graph.connect(branch.node_id, "True", yes.node_id, "Exec")
        graph.connect(branch.node_id, "False", no.node_id, "Exec")
        graph.connect(yes.node_id, "Exec", join.node_id, "Exec")
        graph.connect(no.node_id, "Exec", join.node_id, "Exec")
        graph.connect(text.node_id, "Value", join.node_id, "Value")

        body = _body(generate_source(graph))
        assert body.count("    print(literal_join0001)") == 2
        assert "print(literal_join0001)" not in body

    def test_sequence_runs_outputs_in_order(self, graph):
        start = graph.add_node(StartNode())
        sequence = graph.add_node(SequenceNode())
        first = graph.add_node(PrintNode())
        second = graph.add_node(PrintNode())
        one = graph.add_node(LiteralNode("first001", STRING, "1"))
        two = graph.add_node(LiteralNode("second01", STRING, "2"))
        graph.connect(start.node_id, "Start", sequence.node_id, "Exec")
        graph.connect(sequence.node_id, "Then 1", second.node_id, "Exec")
        graph.connect(sequence.node_id, "Then 0", first.node_id, "Exec")
        graph.connect(one.node_id, "Value", first.node_id, "Value")
        graph.connect(two.node_id, "Value", second.node_id, "Value")

        body = _body(generate_source(graph))
        assert body[-2:] == ["print(literal_first001)", "print(literal_second01)"]

    def test_for_loop(self, graph):
        start = graph.add_node(StartNode())
        loop = graph.add_node(ForLoopNode())
        end = graph.add_node(LiteralNode("end00001", INT, 3))
        body_print = graph.add_node(PrintNode())
        done_print = graph.add_node(PrintNode())
        done = graph.add_node(LiteralNode("done0001", STRING, "done"))
        graph.connect(start.node_id, "Start", loop.node_id, "Exec")
        graph.connect(end.node_id, "Value", loop.node_id, "End")
        graph.connect(loop.node_id, "Loop Body", body_print.node_id, "Exec")
        graph.connect(loop.node_id, "Index", body_print.node_id, "Value")
        graph.connect(loop.node_id, "Completed", done_print.node_id, "Exec")
        graph.connect(done.node_id, "Value", done_print.node_id, "Value")

        assert _body(generate_source(graph)) == [
            "literal_end00001 = 3",
            'literal_done0001 = "done"',
            "index_0 = 0",
            "while index_0 < literal_end00001:",
            "    print(index_0)",
            "    index_0 += 1",
            "print(literal_done0001)",
        ]

    def test_nested_loops_get_distinct_indices(self, graph):
        start = graph.add_node(StartNode())
        outer = graph.add_node(ForLoopNode())
        inner = graph.add_node(ForLoopNode())
        graph.connect(start.node_id, "Start", outer.node_id, "Exec")
        graph.connect(outer.node_id, "Loop Body", inner.node_id, "Exec")

        body = _body(generate_source(graph))
        assert body == [
            "index_0 = 0",
            "while index_0 < 10:",
            "    index_1 = 0",
            "    while index_1 < 10:",
            "        index_1 += 1",
            "    index_0 += 1",
        ]

    def test_loop_end_is_read_every_pass(self, graph):
        graph.add_variable("n", INT, 5)
        start = graph.add_node(StartNode())
        loop = graph.add_node(ForLoopNode())
        getter = graph.add_node(GetVariableNode(variable_name="n", variable_type=INT))
        body_print = graph.add_node(PrintNode())
        setter = graph.add_node(SetVariableNode(variable_name="n", variable_type=INT))
        two = graph.add_node(LiteralNode("two00001", INT, 2))
        graph.connect(start.node_id, "Start", loop.node_id, "Exec")
        graph.connect(getter.node_id, "n", loop.node_id, "End")
        graph.connect(loop.node_id, "Loop Body", body_print.node_id, "Exec")
        graph.connect(loop.node_id, "Index", body_print.node_id, "Value")
        graph.connect(body_print.node_id, "Exec", setter.node_id, "Exec")
        graph.connect(two.node_id, "Value", setter.node_id, "n")

        assert _body(generate_source(graph)) == [
            "n = 5",
            "literal_two00001 = 2",
            "index_0 = 0",
            "while index_0 < n:",
            "    print(index_0)",
            "    n = literal_two00001",
            "    index_0 += 1",
        ]

    def test_completed_results_outlive_the_loop(self, graph, references):
        start = graph.add_node(StartNode())
        sequence = graph.add_node(SequenceNode())
        loop = graph.add_node(ForLoopNode())
        call = graph.add_node(MethodCallNode(
            "powcall1", references.resolve_method("math", "pow"), pure=False
        ))
        printer = graph.add_node(PrintNode())
        graph.connect(start.node_id, "Start", sequence.node_id, "Exec")
        graph.connect(sequence.node_id, "Then 0", loop.node_id, "Exec")
        graph.connect(loop.node_id, "Completed", call.node_id, "Exec")
        graph.connect(sequence.node_id, "Then 1", printer.node_id, "Exec")
        graph.connect(call.node_id, "Return Value", printer.node_id, "Value")

        assert _body(generate_source(graph, references, settings=CodegenSettings(strict_pins=True))) == [
            "index_0 = 0",
            "while index_0 < 10:",
            "    index_0 += 1",
            "result_powcall1 = math.pow(0.0, 0.0)",
            "print(result_powcall1)",
        ]

    def test_while_loop(self, graph):
        start = graph.add_node(StartNode())
        loop = graph.add_node(WhileLoopNode())
        less = graph.add_node(LessThanNode())
        getter = graph.add_node(GetVariableNode(variable_name="n", variable_type=INT))
        graph.connect(start.node_id, "Start", loop.node_id, "Exec")
        graph.connect(less.node_id, "Result", loop.node_id, "Condition")
        graph.connect(getter.node_id, "n", less.node_id, "A")

        body = _body(generate_source(graph))
        assert body == [
            "n = 0",
            "while (n < 0.0):",
            "    pass",
        ]

    def test_return(self, graph):
        start = graph.add_node(StartNode())
        ret = graph.add_node(ReturnNode(return_type=INT))
        seven = graph.add_node(LiteralNode("seven001", INT, 7))
        graph.connect(start.node_id, "Start", ret.node_id, "Exec")
        graph.connect(seven.node_id, "Value", ret.node_id, "Return Value")
        assert _body(generate_source(graph))[-1] == "return literal_seven001"

        bare = ReturnNode()
        assert bare.get_input_pin("Return Value") is None


# =============================================================================
# Data flow
# =============================================================================

class TestDataFlow:
    """Tests for variables, operators and method calls."""

    def test_variable_update(self, graph):
        graph.add_variable("count", INT, 5)
        start = graph.add_node(StartNode())
        setter = graph.add_node(SetVariableNode(variable_name="count", variable_type=INT))
        add = graph.add_node(AddNode())
        getter = graph.add_node(GetVariableNode(variable_name="count", variable_type=INT))
        one = graph.add_node(LiteralNode("one00001", INT, 1))
        printer = graph.add_node(PrintNode())
        graph.connect(start.node_id, "Start", setter.node_id, "Exec")
        graph.connect(setter.node_id, "Exec", printer.node_id, "Exec")
        graph.connect(getter.node_id, "count", add.node_id, "A")
        graph.connect(one.node_id, "Value", add.node_id, "B")
        graph.connect(add.node_id, "Result", setter.node_id, "count")
        graph.connect(getter.node_id, "count", printer.node_id, "Value")

        assert _body(generate_source(graph)) == [
            "count = 5",
            "literal_one00001 = 1",
            "count = (count + literal_one00001)",
            "print(count)",
        ]

    def test_undeclared_variable_gets_zero_value(self, graph):
        start = graph.add_node(StartNode())
        getter = graph.add_node(GetVariableNode(variable_name="total", variable_type=INT))
        printer = graph.add_node(PrintNode())
        graph.connect(start.node_id, "Start", printer.node_id, "Exec")
        graph.connect(getter.node_id, "total", printer.node_id, "Value")

        assert _body(generate_source(graph)) == ["total = 0", "print(total)"]

    def test_variable_name_clashing_with_reserved_name(self, graph):
        start = graph.add_node(StartNode())
        setter = graph.add_node(SetVariableNode(variable_name="print", variable_type=INT))
        graph.connect(start.node_id, "Start", setter.node_id, "Exec")
        body = _body(generate_source(graph))
        assert body == ["print_2 = 0", "print_2 = 0"]

    def test_not_operator(self, graph):
        start = graph.add_node(StartNode())
        branch = graph.add_node(BranchNode())
        negate = graph.add_node(NotNode())
        printer = graph.add_node(PrintNode())
        graph.connect(start.node_id, "Start", branch.node_id, "Exec")
        graph.connect(negate.node_id, "Result", branch.node_id, "Condition")
        graph.connect(branch.node_id, "True", printer.node_id, "Exec")
        assert _body(generate_source(graph))[0] == "if (not False):"

    @pytest.mark.parametrize("operand_type, expected", [
        (INT, "print((literal_seven001 // literal_two0001))"),
        (DOUBLE, "print((literal_seven001 / literal_two0001))"),
    ])
    def test_divide_keeps_integral_results(self, graph, operand_type, expected):
        start = graph.add_node(StartNode())
        divide = graph.add_node(DivideNode(operand_type=operand_type))
        seven = graph.add_node(LiteralNode("seven001", operand_type, 7))
        two = graph.add_node(LiteralNode("two0001", operand_type, 2))
        printer = graph.add_node(PrintNode())
        graph.connect(start.node_id, "Start", printer.node_id, "Exec")
        graph.connect(seven.node_id, "Value", divide.node_id, "A")
        graph.connect(two.node_id, "Value", divide.node_id, "B")
        graph.connect(divide.node_id, "Result", printer.node_id, "Value")

        assert _body(generate_source(graph))[-1] == expected

    def test_pure_static_call_is_inlined(self, graph, references):
        start = graph.add_node(StartNode())
        sqrt = graph.add_node(MethodCallNode(method=references.resolve_method("math", "sqrt")))
        sixteen = graph.add_node(LiteralNode("sixteen1", DOUBLE, 16.0))
        printer = graph.add_node(PrintNode())
        graph.connect(start.node_id, "Start", printer.node_id, "Exec")
        graph.connect(sixteen.node_id, "Value", sqrt.node_id, "x")
        graph.connect(sqrt.node_id, "Return Value", printer.node_id, "Value")

        source = generate_source(graph, references)
        assert source.startswith("import math\n\n\nclass GeneratedProgram:")
        assert _body(source) == [
            "literal_sixteen1 = 16.0",
            "print(math.sqrt(literal_sixteen1))",
        ]

    def test_exec_call_binds_result(self, graph, references):
        start = graph.add_node(StartNode())
        call = graph.add_node(MethodCallNode(
            "powcall1", references.resolve_method("math", "pow"), pure=False
        ))
        printer = graph.add_node(PrintNode())
        graph.connect(start.node_id, "Start", call.node_id, "Exec")
        graph.connect(call.node_id, "Exec", printer.node_id, "Exec")
        graph.connect(call.node_id, "Return Value", printer.node_id, "Value")

        assert _body(generate_source(graph, references)) == [
            "result_powcall1 = math.pow(0.0, 0.0)",
            "print(result_powcall1)",
        ]

    def test_instance_call_without_target_constructs_one(self, graph, references):
        start = graph.add_node(StartNode())
        seed = graph.add_node(MethodCallNode(method=references.resolve_method("random.Random", "seed")))
        graph.connect(start.node_id, "Start", seed.node_id, "Exec")

        source = generate_source(graph, references)
        assert "import random\n" in source
        assert _body(source) == ["random.Random().seed(None)"]

    def test_unknown_method_aborts_generation(self, graph, references):
        start = graph.add_node(StartNode())
        call = graph.add_node(MethodCallNode(method=MethodDescriptor("nowhere", "vanish")))
        graph.connect(start.node_id, "Start", call.node_id, "Exec")
        with pytest.raises(UnresolvedMemberError):
            generate_source(graph, references)


# =============================================================================
# Unresolved inputs
# =============================================================================

class TestUnresolvedInputs:
    """A connected input whose source has not produced a value yet."""

    @pytest.fixture
    def late_source_graph(self, graph, references):
        start = graph.add_node(StartNode())
        printer = graph.add_node(PrintNode())
        call = graph.add_node(MethodCallNode(
            method=references.resolve_method("math", "sqrt"), pure=False
        ))
        graph.connect(start.node_id, "Start", printer.node_id, "Exec")
        graph.connect(printer.node_id, "Exec", call.node_id, "Exec")
        graph.connect(call.node_id, "Return Value", printer.node_id, "Value")
        return graph

    def test_lenient_falls_back_and_warns(self, late_source_graph, references):
        translator = GraphTranslator(late_source_graph, references)
        body = _body(translator.generate())
        assert body[0] == 'print("")'
        assert len(translator.warnings) == 1
        assert "Value" in translator.warnings[0]

    def test_strict_raises(self, late_source_graph, references):
        settings = CodegenSettings(strict_pins=True)
        with pytest.raises(CodeGenerationError):
            GraphTranslator(late_source_graph, references, settings).generate()
