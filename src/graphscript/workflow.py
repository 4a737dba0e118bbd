# -*- coding: utf-8 -*-
"""
Graph Workflow - Generate, compile and run a graph in one call.

Wires the translator, compiler and runner together with the settings of
an AppConfig. The loaded unit is always released before run() returns.

Example:
    workflow = GraphWorkflow(AppConfig())
    result = workflow.run(graph)
    if result.success:
        print(result.output)
"""
from dataclasses import dataclass, field
from typing import List, Optional, Union

from loguru import logger

from src.core.config import AppConfig

from .codegen.translator import GraphTranslator, OutputKind
from .core.errors import CodeGenerationError, GraphStructureError
from .core.graph import NodeGraph
from .core.references import ReferenceRegistry, default_registry
from .hosting.compiler import CompilationResult, GraphCompiler
from .hosting.packaging import Packager, PackagingOutcome, PyInstallerPackager
from .hosting.runner import RunResult, run_unit


@dataclass
class WorkflowResult:
    """
    Outcome of GraphWorkflow.run.

    Attributes:
        source: Generated source ("" if generation failed)
        generation_error: Why no source was generated
        codegen_warnings: Lenient-mode pin fallbacks
        compilation: Compiler outcome, None if generation failed
        run: Runner outcome, None if nothing was run
    """
    source: str = ""
    generation_error: Optional[Exception] = None
    codegen_warnings: List[str] = field(default_factory=list)
    compilation: Optional[CompilationResult] = None
    run: Optional[RunResult] = None

    @property
    def success(self) -> bool:
        return self.run is not None and self.run.success

    @property
    def output(self) -> str:
        return self.run.output if self.run is not None else ""


class GraphWorkflow:
    """
    Generate -> compile -> run pipeline.

    Args:
        config: Codegen, build and packaging settings
        references: Reference registry for method calls and references
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        references: Optional[ReferenceRegistry] = None
    ):
        self.config = config or AppConfig()
        self.references = references or default_registry()
        self.compiler = GraphCompiler(self.config.build)
        self._last_warnings: List[str] = []

    def generate(self, graph: NodeGraph, target: Union[OutputKind, str, None] = None) -> str:
        """
        Translate a graph to source.

        Raises:
            GraphStructureError: If execution edges form a cycle
            CodeGenerationError: If a member cannot be resolved
        """
        translator = GraphTranslator(graph, self.references, self.config.codegen)
        source = translator.generate(target or self.config.build.target)
        for warning in translator.warnings:
            logger.warning(warning)
        self._last_warnings = list(translator.warnings)
        return source

    def build(
        self,
        graph: NodeGraph,
        target: Union[OutputKind, str, None] = None,
        output_dir: Optional[str] = None
    ) -> CompilationResult:
        """Generate and compile. Generation errors propagate."""
        target = OutputKind(target or self.config.build.target)
        source = self.generate(graph, target)
        return self.compiler.compile(
            source,
            self.references.modules(),
            target,
            output_dir=output_dir
        )

    def run(
        self,
        graph: NodeGraph,
        target: Union[OutputKind, str, None] = None,
        output_dir: Optional[str] = None,
        execute: bool = True
    ) -> WorkflowResult:
        """
        Generate, compile and (optionally) run. Never raises.

        Args:
            graph: Graph to run
            target: Output kind (config default if None)
            output_dir: Where to persist artifacts
            execute: False to stop after compilation

        Returns:
            WorkflowResult with every stage that was reached
        """
        target = OutputKind(target or self.config.build.target)
        result = WorkflowResult()
        try:
            result.source = self.generate(graph, target)
        except (GraphStructureError, CodeGenerationError) as e:
            logger.error(f"Generation failed for graph '{graph.name}': {e}")
            result.generation_error = e
            return result
        result.codegen_warnings = self._last_warnings

        result.compilation = self.compiler.compile(
            result.source,
            self.references.modules(),
            target,
            output_dir=output_dir
        )
        if not result.compilation.success or not execute:
            result.compilation.unload()
            return result

        with result.compilation.unit as unit:
            result.run = run_unit(
                unit,
                self.config.codegen.class_name,
                self.config.codegen.method_name
            )
        return result

    def package(
        self,
        graph: NodeGraph,
        target: Union[OutputKind, str] = OutputKind.CONSOLE,
        output_dir: Optional[str] = None,
        packager: Optional[Packager] = None
    ) -> PackagingOutcome:
        """
        Generate and build a native executable.

        Raises:
            GraphStructureError: If execution edges form a cycle
            CodeGenerationError: If a member cannot be resolved
        """
        target = OutputKind(target)
        if target == OutputKind.LIBRARY:
            target = OutputKind.CONSOLE
        source = self.generate(graph, target)
        outcome = self.compiler.package(
            source,
            self.references.modules(),
            target,
            output_dir=output_dir,
            packager=packager or PyInstallerPackager(self.config.packaging)
        )
        outcome.compilation.unload()
        return outcome
