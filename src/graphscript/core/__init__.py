# -*- coding: utf-8 -*-
"""
GraphScript Core - Graph model, type rules and ordering.
"""

from .base_node import BaseNode, NodeMetadata, ValidationResult
from .colors import TypeColorMap
from .compatibility import TypeCompatibilityChecker
from .connection import NodeConnection
from .errors import (
    CodeGenerationError, CompilationError, DuplicateIdError, ExecutionCycleError,
    ExecutionFault, GraphScriptError, GraphStructureError, PackagingError,
    PersistenceError, UnresolvedMemberError,
)
from .graph import GraphValidationResult, NodeGraph, Variable
from .ordering import find_execution_cycle, get_execution_order
from .pins import BasePin, DataPin, ExecutionPin, PinDirection, PinKind
from .references import (
    ConversionOperator, MethodDescriptor, ParameterDescriptor, ReferenceRegistry, TypeInfo,
    default_registry,
)
from .registry import NodeRegistry, NodeTemplate

__all__ = [
    "BaseNode",
    "NodeMetadata",
    "ValidationResult",
    "TypeColorMap",
    "TypeCompatibilityChecker",
    "NodeConnection",
    "GraphScriptError",
    "GraphStructureError",
    "DuplicateIdError",
    "ExecutionCycleError",
    "CodeGenerationError",
    "UnresolvedMemberError",
    "CompilationError",
    "ExecutionFault",
    "PackagingError",
    "PersistenceError",
    "NodeGraph",
    "Variable",
    "GraphValidationResult",
    "get_execution_order",
    "find_execution_cycle",
    "PinKind",
    "PinDirection",
    "BasePin",
    "ExecutionPin",
    "DataPin",
    "ReferenceRegistry",
    "TypeInfo",
    "MethodDescriptor",
    "ParameterDescriptor",
    "ConversionOperator",
    "default_registry",
    "NodeRegistry",
    "NodeTemplate",
]
