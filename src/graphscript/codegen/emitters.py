# -*- coding: utf-8 -*-
"""
Node Emitters - Source generation for specific node types.

Each node type has an emitter that knows how to turn it into Python.
Execution nodes write statements through the translator; pure data
nodes (operators, getters, pure calls) return an inline expression
for one of their output pins.
"""
from abc import ABC
from typing import TYPE_CHECKING, Dict, List, Optional

from ..core.pins import PinKind
from ..nodes import operators

if TYPE_CHECKING:
    from ..core.base_node import BaseNode
    from ..core.pins import BasePin
    from .translator import GraphTranslator


class BaseNodeEmitter(ABC):
    """
    Base class for node emitters.

    Execution nodes override emit(); pure nodes override expression().
    """

    def emit(self, node: 'BaseNode', translator: 'GraphTranslator') -> None:
        """
        Write the statements for an execution node.

        Args:
            node: Node to emit
            translator: Translator holding the writer and symbol table
        """

    def expression(
        self,
        node: 'BaseNode',
        pin: 'BasePin',
        translator: 'GraphTranslator'
    ) -> Optional[str]:
        """
        Inline expression producing the value of one output pin.

        Returns:
            Source text, or None if the pin cannot be computed inline
        """
        return None


# Registry of emitters
_emitters: Dict[str, BaseNodeEmitter] = {}


def register_emitter(node_type: str, emitter: BaseNodeEmitter):
    """Register an emitter for a node type."""
    _emitters[node_type] = emitter


def get_emitter(node_type: str) -> Optional[BaseNodeEmitter]:
    """Get emitter for a node type."""
    return _emitters.get(node_type)


# =============================================================================
# Event Node Emitters
# =============================================================================

class StartEmitter(BaseNodeEmitter):
    """Start marks the entry point; its successors follow in order."""


# =============================================================================
# Flow Control Emitters
# =============================================================================

class BranchEmitter(BaseNodeEmitter):
    """if/else over everything reachable from True and False."""

    def emit(self, node, translator):
        condition = translator.expression_for(node.get_input_pin("Condition"))
        true_block, false_block = translator.emit_branches(
            [node.get_output_pin("True"), node.get_output_pin("False")],
            share_symbols=False
        )

        writer = translator.writer
        writer.line(f"if {condition}:")
        writer.block(true_block)
        if false_block:
            writer.line("else:")
            writer.block(false_block)


class SequenceEmitter(BaseNodeEmitter):
    """Each "Then N" block in turn, at the current level."""

    def emit(self, node, translator):
        blocks = translator.emit_branches(node.execution_outputs(), share_symbols=True)
        for block in blocks:
            translator.writer.extend(block)


class ForLoopEmitter(BaseNodeEmitter):
    """
    Counted loop, then Completed.

    End is re-evaluated before every pass, so a body that changes the
    value feeding End changes the number of passes.
    """

    def emit(self, node, translator):
        start = translator.expression_for(node.get_input_pin("Start"))
        end = translator.expression_for(node.get_input_pin("End"))

        index = translator.allocate_index_name()
        translator.register(node.get_output_pin("Index"), index)

        body, completed = translator.emit_branches(
            [node.get_output_pin("Loop Body"), node.get_output_pin("Completed")],
            share_symbols=[False, True]
        )

        writer = translator.writer
        writer.line(f"{index} = {start}")
        writer.line(f"while {index} < {end}:")
        writer.block(body + [f"{index} += 1"])
        writer.extend(completed)


class WhileLoopEmitter(BaseNodeEmitter):
    """while loop re-evaluating Condition each pass, then Completed."""

    def emit(self, node, translator):
        condition = translator.expression_for(node.get_input_pin("Condition"))
        body, completed = translator.emit_branches(
            [node.get_output_pin("Loop Body"), node.get_output_pin("Completed")],
            share_symbols=[False, True]
        )

        writer = translator.writer
        writer.line(f"while {condition}:")
        writer.block(body)
        writer.extend(completed)


class ReturnEmitter(BaseNodeEmitter):

    def emit(self, node, translator):
        value_pin = node.get_input_pin("Return Value")
        if value_pin is None:
            translator.writer.line("return")
        else:
            translator.writer.line(f"return {translator.expression_for(value_pin)}")


# =============================================================================
# Variable Emitters
# =============================================================================

class LiteralEmitter(BaseNodeEmitter):
    """
    Literals are bound to locals by the pre-pass.

    The expression is only requested for a literal added after the
    pre-pass ran, so it formats the value in place.
    """

    def expression(self, node, pin, translator):
        return translator.format_literal(node.value, node.literal_type)


class GetVariableEmitter(BaseNodeEmitter):

    def expression(self, node, pin, translator):
        return translator.variable_name(
            node.variable_name, node.properties.get("VariableType")
        )


class SetVariableEmitter(BaseNodeEmitter):

    def emit(self, node, translator):
        var_type = node.properties.get("VariableType")
        target = translator.variable_name(node.variable_name, var_type)
        value_pin = next(iter(node.data_inputs()), None)
        value = translator.expression_for(value_pin) if value_pin else translator.zero_value(var_type)
        translator.writer.line(f"{target} = {value}")


# =============================================================================
# Operator Emitters
# =============================================================================

class BinaryOperatorEmitter(BaseNodeEmitter):
    """Parenthesised infix expression."""

    def expression(self, node, pin, translator):
        left = translator.expression_for(node.get_input_pin("A"))
        right = translator.expression_for(node.get_input_pin("B"))
        return f"({left} {node.properties['OperatorSymbol']} {right})"


class NotEmitter(BaseNodeEmitter):

    def expression(self, node, pin, translator):
        value = translator.expression_for(node.get_input_pin("Value"))
        return f"(not {value})"


# =============================================================================
# Function Emitters
# =============================================================================

class MethodCallEmitter(BaseNodeEmitter):
    """
    Static or instance call.

    Unconnected parameters fall back to the parameter's declared default,
    then to the zero value of its type. An unconnected instance target
    becomes a fresh Type() when the type has a parameterless constructor,
    None otherwise.
    """

    def emit(self, node, translator):
        call = self._call_expression(node, translator)
        return_pin = node.get_output_pin("Return Value")
        if return_pin is None:
            translator.writer.line(call)
            return

        local = translator.allocate_name(f"result_{translator.short_id(node)}")
        translator.writer.line(f"{local} = {call}")
        translator.register(return_pin, local)

    def expression(self, node, pin, translator):
        if node.has_execution_pins:
            return None
        return self._call_expression(node, translator)

    def _call_expression(self, node, translator) -> str:
        method = translator.resolve_method(node.method)
        info = translator.type_info(method.declaring_type)

        args: List[str] = []
        for param in method.parameters:
            pin = node.get_input_pin(param.name or "param")
            expr = translator.resolve_input(pin) if pin is not None else None
            if expr is None:
                if param.has_default:
                    expr = translator.format_literal(param.default, param.type)
                else:
                    expr = translator.zero_value(param.type)
            args.append(expr)
        arg_list = ", ".join(args)

        if method.is_static:
            translator.require_import(info.module)
            return f"{info.qualified_name}.{method.name}({arg_list})"

        target = translator.resolve_input(node.get_input_pin("Target"))
        if target is None:
            if info.has_default_constructor:
                translator.require_import(info.module)
                target = f"{info.qualified_name}()"
            else:
                target = "None"
        return f"{target}.{method.name}({arg_list})"


class PrintEmitter(BaseNodeEmitter):
    """print(value); an unresolved value prints an empty line."""

    def emit(self, node, translator):
        value_pin = next(
            (p for p in node.input_pins if p.kind == PinKind.DATA), None
        )
        value = translator.expression_for(value_pin, fallback='""') if value_pin else '""'
        translator.writer.line(f"print({value})")


# =============================================================================
# Register All Emitters
# =============================================================================

def _register_all():
    """Register all built-in emitters."""
    # Events
    register_emitter("Start", StartEmitter())

    # Flow Control
    register_emitter("Branch", BranchEmitter())
    register_emitter("Sequence", SequenceEmitter())
    register_emitter("ForLoop", ForLoopEmitter())
    register_emitter("WhileLoop", WhileLoopEmitter())
    register_emitter("Return", ReturnEmitter())

    # Variables
    register_emitter("Literal", LiteralEmitter())
    register_emitter("GetVariable", GetVariableEmitter())
    register_emitter("SetVariable", SetVariableEmitter())

    # Operators
    binary = BinaryOperatorEmitter()
    for node_class in operators.ALL_NODES:
        if issubclass(node_class, operators.BinaryOperatorNode):
            register_emitter(node_class.node_type, binary)
    register_emitter("Not", NotEmitter())

    # Functions
    register_emitter("MethodCall", MethodCallEmitter())
    register_emitter("Print", PrintEmitter())


# Auto-register on import
_register_all()
