# -*- coding: utf-8 -*-
"""
GraphScript - Visual scripting graphs compiled to Python.

Build a NodeGraph from nodes and connections, translate it to source
with GraphTranslator, compile it into an isolated unit with
GraphCompiler and run the unit with run_unit. GraphWorkflow chains the
three; GraphSerializer saves and loads graphs.
"""
from .codegen import GraphTranslator, OutputKind, generate_source
from .core import NodeGraph, default_registry
from .editing import ConnectionEditor
from .hosting import GraphCompiler, run_unit
from .nodes import create_default_registry
from .persistence import GraphSerializer, LoadReport
from .workflow import GraphWorkflow, WorkflowResult

__all__ = [
    "NodeGraph",
    "default_registry",
    "create_default_registry",
    "GraphTranslator",
    "OutputKind",
    "generate_source",
    "GraphCompiler",
    "run_unit",
    "GraphSerializer",
    "LoadReport",
    "ConnectionEditor",
    "GraphWorkflow",
    "WorkflowResult",
]
