# -*- coding: utf-8 -*-
"""
GraphScript Nodes - Built-in node templates.
"""
from ..core.registry import NodeRegistry
from . import events, flow_control, functions, operators, variables
from .events import StartNode
from .flow_control import BranchNode, ForLoopNode, ReturnNode, SequenceNode, WhileLoopNode
from .functions import MethodCallNode, PrintNode
from .operators import (
    AddNode, AndNode, BinaryOperatorNode, DivideNode, EqualsNode, GreaterOrEqualNode,
    GreaterThanNode, LessOrEqualNode, LessThanNode, ModuloNode, MultiplyNode, NotEqualsNode,
    NotNode, OrNode, SubtractNode,
)
from .variables import GetVariableNode, LiteralNode, SetVariableNode

ALL_NODES = (
    events.ALL_NODES
    + flow_control.ALL_NODES
    + variables.ALL_NODES
    + operators.ALL_NODES
    + functions.ALL_NODES
)


def create_default_registry() -> NodeRegistry:
    """NodeRegistry with every built-in node registered."""
    registry = NodeRegistry()
    registry.register_all(ALL_NODES)
    return registry


__all__ = [
    "ALL_NODES",
    "create_default_registry",
    "StartNode",
    "BranchNode",
    "SequenceNode",
    "ForLoopNode",
    "WhileLoopNode",
    "ReturnNode",
    "LiteralNode",
    "GetVariableNode",
    "SetVariableNode",
    "BinaryOperatorNode",
    "AddNode",
    "SubtractNode",
    "MultiplyNode",
    "DivideNode",
    "ModuloNode",
    "EqualsNode",
    "NotEqualsNode",
    "GreaterThanNode",
    "LessThanNode",
    "GreaterOrEqualNode",
    "LessOrEqualNode",
    "AndNode",
    "OrNode",
    "NotNode",
    "MethodCallNode",
    "PrintNode",
]
