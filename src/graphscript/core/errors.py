# -*- coding: utf-8 -*-
"""
GraphScript errors.

Hierarchy:
    GraphScriptError
    ├── GraphStructureError      (duplicate id, execution cycle)
    │   ├── DuplicateIdError
    │   └── ExecutionCycleError
    ├── CodeGenerationError      (unresolved type/method identity)
    │   └── UnresolvedMemberError
    ├── CompilationError         (compiler diagnostics)
    ├── ExecutionFault           (generated code raised)
    ├── PackagingError           (external packaging tool failed)
    └── PersistenceError         (save file missing or malformed)

Rejected connections are not exceptions: Graph.add_connection returns None.
"""
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..hosting.diagnostics import Diagnostic


class GraphScriptError(Exception):
    """Base class for all graphscript errors."""


class GraphStructureError(GraphScriptError):
    """Graph structure prevents the requested operation."""


class DuplicateIdError(GraphStructureError):
    """A node with the same id is already in the graph."""

    def __init__(self, node_id: str):
        super().__init__(f"Node with ID {node_id} already exists")
        self.node_id = node_id


class ExecutionCycleError(GraphStructureError):
    """Execution edges form a cycle."""

    def __init__(self, node_id: str):
        super().__init__(f"Cycle detected in execution graph at node {node_id}")
        self.node_id = node_id


class CodeGenerationError(GraphScriptError):
    """Source could not be generated from the graph."""


class UnresolvedMemberError(CodeGenerationError):
    """A type or method identity could not be resolved against the references."""


class CompilationError(GraphScriptError):
    """
    Compilation produced error diagnostics.

    Only raised on request via CompilationResult.raise_for_errors();
    the compiler itself returns diagnostics instead.
    """

    def __init__(self, diagnostics: List['Diagnostic']):
        self.diagnostics = list(diagnostics)
        lines = "; ".join(str(d) for d in self.diagnostics)
        super().__init__(f"Compilation failed: {lines}")


class ExecutionFault(GraphScriptError):
    """
    Generated code raised while running.

    Attributes:
        exception_type: Name of the original exception class
        traceback_text: Formatted traceback of the original exception
    """

    def __init__(
        self,
        message: str,
        exception_type: str = "",
        traceback_text: str = "",
        original: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.message = message
        self.exception_type = exception_type
        self.traceback_text = traceback_text
        self.original = original

    def __str__(self) -> str:
        if self.exception_type:
            return f"{self.exception_type}: {self.message}"
        return self.message


class PackagingError(GraphScriptError):
    """External packaging tool failed or produced no artifact."""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class PersistenceError(GraphScriptError):
    """Save file could not be read, parsed or written."""
