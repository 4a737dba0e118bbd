# -*- coding: utf-8 -*-
"""
GraphScript Hosting - Compile, load, run and unload generated code.
"""
from ..codegen.translator import OutputKind
from .compiler import CompilationResult, GraphCompiler, LoadedUnit
from .diagnostics import Diagnostic, Severity, SourceLocation
from .packaging import BuildRequest, BuildResult, Packager, PackagingOutcome, PyInstallerPackager
from .runner import RunResult, run_unit

__all__ = [
    "OutputKind",
    "GraphCompiler",
    "CompilationResult",
    "LoadedUnit",
    "Diagnostic",
    "Severity",
    "SourceLocation",
    "BuildRequest",
    "BuildResult",
    "Packager",
    "PackagingOutcome",
    "PyInstallerPackager",
    "RunResult",
    "run_unit",
]
