# -*- coding: utf-8 -*-
"""
Operator Nodes - Arithmetic, comparison and logic.

All operators are pure nodes: two inputs "A" and "B" (one "Value" for Not)
and a "Result" output. The translator inlines them as parenthesised
expressions wherever their result is consumed.
"""
from typing import Optional

from ..core.base_node import BaseNode, NodeMetadata
from ..core.pins import DataPin, PinDirection
from ..core.types import BOOL, DOUBLE, INT, OBJECT, TypeRef, is_integral, unwrap_nullable


class BinaryOperatorNode(BaseNode):
    """
    Base class for binary operators.

    Subclasses set operator_symbol (Python syntax), the default input
    type, and whether the result is boolean.
    """
    node_type = "BinaryOperator"
    operator_symbol: str = "+"
    default_operand_type: TypeRef = DOUBLE
    returns_bool: bool = False

    def __init__(self, node_id: Optional[str] = None, operand_type: Optional[TypeRef] = None):
        self._operand_type = operand_type or self.default_operand_type
        super().__init__(node_id)
        self.properties["OperatorSymbol"] = self.symbol_for(self._operand_type)
        self.properties["OperandType"] = self._operand_type

    def _setup_pins(self):
        result_type = BOOL if self.returns_bool else self._operand_type
        self.add_input_pin(DataPin("A", self._operand_type))
        self.add_input_pin(DataPin("B", self._operand_type))
        self.add_output_pin(DataPin("Result", result_type, PinDirection.OUTPUT))

    @classmethod
    def symbol_for(cls, operand_type: TypeRef) -> str:
        return cls.operator_symbol


def _operator_metadata(name: str, symbol: str, category: str = "Operators") -> NodeMetadata:
    return NodeMetadata(
        category=category,
        display_name=name,
        description=f"{name} operator ({symbol})",
        color="#6C8EBF"
    )


class AddNode(BinaryOperatorNode):
    node_type = "Add"
    metadata = _operator_metadata("Add", "+")
    operator_symbol = "+"


class SubtractNode(BinaryOperatorNode):
    node_type = "Subtract"
    metadata = _operator_metadata("Subtract", "-")
    operator_symbol = "-"


class MultiplyNode(BinaryOperatorNode):
    node_type = "Multiply"
    metadata = _operator_metadata("Multiply", "*")
    operator_symbol = "*"


class DivideNode(BinaryOperatorNode):
    """Divide; integral operands use floor division so the result stays integral."""
    node_type = "Divide"
    metadata = _operator_metadata("Divide", "/")
    operator_symbol = "/"

    @classmethod
    def symbol_for(cls, operand_type: TypeRef) -> str:
        return "//" if is_integral(unwrap_nullable(operand_type) or operand_type) else cls.operator_symbol


class ModuloNode(BinaryOperatorNode):
    node_type = "Modulo"
    metadata = _operator_metadata("Modulo", "%")
    operator_symbol = "%"
    default_operand_type = INT


class EqualsNode(BinaryOperatorNode):
    node_type = "Equals"
    metadata = _operator_metadata("Equals", "==", "Comparison")
    operator_symbol = "=="
    default_operand_type = OBJECT
    returns_bool = True


class NotEqualsNode(BinaryOperatorNode):
    node_type = "NotEquals"
    metadata = _operator_metadata("Not Equals", "!=", "Comparison")
    operator_symbol = "!="
    default_operand_type = OBJECT
    returns_bool = True


class GreaterThanNode(BinaryOperatorNode):
    node_type = "GreaterThan"
    metadata = _operator_metadata("Greater Than", ">", "Comparison")
    operator_symbol = ">"
    returns_bool = True


class LessThanNode(BinaryOperatorNode):
    node_type = "LessThan"
    metadata = _operator_metadata("Less Than", "<", "Comparison")
    operator_symbol = "<"
    returns_bool = True


class GreaterOrEqualNode(BinaryOperatorNode):
    node_type = "GreaterOrEqual"
    metadata = _operator_metadata("Greater Or Equal", ">=", "Comparison")
    operator_symbol = ">="
    returns_bool = True


class LessOrEqualNode(BinaryOperatorNode):
    node_type = "LessOrEqual"
    metadata = _operator_metadata("Less Or Equal", "<=", "Comparison")
    operator_symbol = "<="
    returns_bool = True


class AndNode(BinaryOperatorNode):
    node_type = "And"
    metadata = _operator_metadata("And", "and", "Logic")
    operator_symbol = "and"
    default_operand_type = BOOL
    returns_bool = True


class OrNode(BinaryOperatorNode):
    node_type = "Or"
    metadata = _operator_metadata("Or", "or", "Logic")
    operator_symbol = "or"
    default_operand_type = BOOL
    returns_bool = True


class NotNode(BaseNode):
    """Logical negation."""
    node_type = "Not"
    metadata = _operator_metadata("Not", "not", "Logic")

    def __init__(self, node_id: Optional[str] = None):
        super().__init__(node_id)
        self.properties["OperatorSymbol"] = "not"

    def _setup_pins(self):
        self.add_input_pin(DataPin("Value", BOOL))
        self.add_output_pin(DataPin("Result", BOOL, PinDirection.OUTPUT))


ALL_NODES = [
    AddNode,
    SubtractNode,
    MultiplyNode,
    DivideNode,
    ModuloNode,
    EqualsNode,
    NotEqualsNode,
    GreaterThanNode,
    LessThanNode,
    GreaterOrEqualNode,
    LessOrEqualNode,
    AndNode,
    OrNode,
    NotNode,
]
