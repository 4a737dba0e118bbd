# -*- coding: utf-8 -*-
"""
GraphScript Codegen - Translates graphs into Python source.
"""
from .emitters import BaseNodeEmitter, get_emitter, register_emitter
from .literals import format_literal, sanitize_identifier, zero_value_expression
from .translator import GraphTranslator, OutputKind, SourceWriter, generate_source

__all__ = [
    "GraphTranslator",
    "OutputKind",
    "SourceWriter",
    "generate_source",
    "BaseNodeEmitter",
    "get_emitter",
    "register_emitter",
    "format_literal",
    "zero_value_expression",
    "sanitize_identifier",
]
