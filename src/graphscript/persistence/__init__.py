# -*- coding: utf-8 -*-
"""
GraphScript Persistence - JSON save files.
"""
from .document import (
    ConnectionRecord, GraphDocument, LibraryRecord, LiteralRecord, MethodRecord, NodeRecord,
    PinRecord, VariableRecord,
)
from .serializer import GraphSerializer, LoadReport

__all__ = [
    "GraphSerializer",
    "LoadReport",
    "GraphDocument",
    "NodeRecord",
    "PinRecord",
    "LiteralRecord",
    "MethodRecord",
    "ConnectionRecord",
    "LibraryRecord",
    "VariableRecord",
]
