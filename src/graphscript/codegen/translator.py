# -*- coding: utf-8 -*-
"""
Graph Translator - Emits Python source for a NodeGraph.

Two passes over one symbol table (output pin id -> source expression):

1. Literal pre-pass: every LiteralNode is bound to a local
   literal_<id> and its output pin registered.
2. Execution pass: nodes are walked in execution order and handed to
   their emitter. Control nodes generate nested blocks for everything
   reachable from one of their execution outputs; a node emitted inside
   a block is not emitted again by the enclosing block or the top-level
   walk, while sibling blocks (True/False, Then 0/Then 1) are independent.

Pure data nodes are never scheduled. Their value is computed on demand
when an input pin needs it: getters give the variable name, operators a
parenthesised expression, pure calls an inline call.

Example:
    translator = GraphTranslator(graph, default_registry())
    source = translator.generate(OutputKind.CONSOLE)
"""
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set, Union

from loguru import logger

from src.core.config import CodegenSettings

from ..core.base_node import BaseNode
from ..core.errors import CodeGenerationError, UnresolvedMemberError
from ..core.graph import NodeGraph
from ..core.pins import BasePin
from ..core.references import MethodDescriptor, ReferenceRegistry, TypeInfo
from ..core.types import TypeRef
from ..nodes.variables import LiteralNode
from . import literals
from .emitters import get_emitter


class OutputKind(Enum):
    """What the generated module is for."""
    LIBRARY = "library"
    CONSOLE = "console"
    WINDOWED = "windowed"


class SourceWriter:
    """Accumulates lines relative to the current block."""

    def __init__(self, indent: int = 4):
        self.lines: List[str] = []
        self._unit = " " * indent

    def line(self, text: str = "") -> None:
        self.lines.append(text)

    def extend(self, lines: Sequence[str]) -> None:
        self.lines.extend(lines)

    def block(self, lines: Sequence[str]) -> None:
        """Append lines one level deeper; an empty block becomes pass."""
        for text in (lines or ["pass"]):
            self.lines.append(f"{self._unit}{text}" if text else text)


class GraphTranslator:
    """
    Translates a graph into the source of one Python module.

    Attributes:
        graph: Graph to translate
        registry: Reference types used to resolve method calls
        settings: Class/method names, indentation and pin policy
        warnings: Connected pins that fell back to a default (lenient mode)
    """

    def __init__(
        self,
        graph: NodeGraph,
        registry: Optional[ReferenceRegistry] = None,
        settings: Optional[CodegenSettings] = None
    ):
        self.graph = graph
        self.registry = registry if registry is not None else graph.checker.registry
        self.settings = settings or CodegenSettings()
        self.warnings: List[str] = []
        self._reset()

    def _reset(self) -> None:
        self._pin_expressions: Dict[str, str] = {}
        self._imports: Set[str] = set()
        self._names: Set[str] = set()
        self._variables: Dict[str, str] = {}
        self._variable_types: Dict[str, Optional[TypeRef]] = {}
        self._emitted: Set[str] = set()
        self._resolving: Set[str] = set()
        self._order_index: Dict[str, int] = {}
        self._index_count = 0
        self.writer = SourceWriter(self.settings.indent)
        self.warnings = []

    # =========================================================================
    # Entry point
    # =========================================================================

    def generate(self, target: Union[OutputKind, str] = OutputKind.LIBRARY) -> str:
        """
        Generate module source.

        Args:
            target: LIBRARY emits the class only; CONSOLE and WINDOWED add
                a main() entry point and a __main__ guard

        Returns:
            Complete module source

        Raises:
            ExecutionCycleError: If execution edges form a cycle
            CodeGenerationError: If a type or method cannot be resolved
        """
        target = OutputKind(target)
        self._reset()

        order = self.graph.get_execution_order()
        self._order_index = {node.node_id: i for i, node in enumerate(order)}

        self._reserve_names()
        declarations = self._declare_variables()
        self._emit_literals()
        for node in order:
            if node.node_id not in self._emitted:
                self._emit_node(node)
        body = self.writer.lines

        # Variables first seen while emitting
        declarations.extend(self._late_declarations(declarations))

        source = self._assemble(declarations + body, target)
        logger.info(
            f"Generated {len(source.splitlines())} lines for graph '{self.graph.name}' "
            f"({target.value}, {len(self.warnings)} warnings)"
        )
        return source

    def _assemble(self, body: List[str], target: OutputKind) -> str:
        cls = literals.sanitize_identifier(self.settings.class_name)
        method = literals.sanitize_identifier(self.settings.method_name)
        out = SourceWriter(self.settings.indent)

        for module in sorted(self._imports):
            out.line(f"import {module}")
        if self._imports:
            out.line()
            out.line()

        method_writer = SourceWriter(self.settings.indent)
        method_writer.line(f"def {method}(self):")
        method_writer.block(body)

        out.line(f"class {cls}:")
        out.block(method_writer.lines)

        if target != OutputKind.LIBRARY:
            out.line()
            out.line()
            out.line("def main():")
            out.block([f"{cls}().{method}()"])
            out.line()
            out.line()
            out.line('if __name__ == "__main__":')
            out.block(["main()"])

        return "\n".join(out.lines) + "\n"

    # =========================================================================
    # Passes
    # =========================================================================

    def _reserve_names(self) -> None:
        self._names.update({"self", "print", "range", "decimal"})
        self._names.update(module.split(".")[0] for module in self.registry.modules())

    def _declare_variables(self) -> List[str]:
        lines = []
        for var in self.graph.variables.values():
            ident = self.variable_name(var.name, var.var_type)
            if var.default_value is not None:
                value = self.format_literal(var.default_value, var.var_type)
            else:
                value = self.zero_value(var.var_type)
            lines.append(f"{ident} = {value}")
        return lines

    def _late_declarations(self, declared: List[str]) -> List[str]:
        declared_names = {line.split(" = ", 1)[0] for line in declared}
        return [
            f"{ident} = {self.zero_value(self._variable_types.get(name))}"
            for name, ident in self._variables.items()
            if ident not in declared_names
        ]

    def _emit_literals(self) -> None:
        for node in self.graph.nodes.values():
            if not isinstance(node, LiteralNode):
                continue
            value_pin = node.get_output_pin("Value")
            if value_pin is None:
                continue
            local = self.allocate_name(f"literal_{self.short_id(node)}")
            value = (
                self.format_literal(node.value, node.literal_type)
                if node.value is not None
                else self.zero_value(node.literal_type)
            )
            self.writer.line(f"{local} = {value}")
            self.register(value_pin, local)

    def _emit_node(self, node: BaseNode) -> None:
        self._emitted.add(node.node_id)
        emitter = get_emitter(node.node_type)
        if emitter is None:
            logger.warning(f"No emitter for node type '{node.node_type}', skipping {node}")
            return
        emitter.emit(node, self)

    # =========================================================================
    # Blocks
    # =========================================================================

    @contextmanager
    def _capture(self) -> Iterator[List[str]]:
        outer = self.writer
        self.writer = SourceWriter(self.settings.indent)
        try:
            yield self.writer.lines
        finally:
            self.writer = outer

    def _reachable_from(self, pin: BasePin) -> List[BaseNode]:
        """Execution nodes reachable from an output pin, in execution order."""
        found: Dict[str, BaseNode] = {}
        pending = [pin]
        while pending:
            current = pending.pop()
            for conn in self.graph.get_connections_from_pin(current.pin_id):
                if conn.source_pin_id != current.pin_id:
                    continue
                node = self.graph.get_node_for_pin(conn.target_pin_id)
                if node is None or node.node_id in found:
                    continue
                found[node.node_id] = node
                pending.extend(node.execution_outputs())
        return sorted(
            found.values(),
            key=lambda n: self._order_index.get(n.node_id, len(self._order_index))
        )

    def emit_block(self, pin: Optional[BasePin]) -> List[str]:
        """Statements for everything reachable from an execution output."""
        if pin is None:
            return []
        with self._capture() as lines:
            for node in self._reachable_from(pin):
                if node.node_id not in self._emitted:
                    self._emit_node(node)
        return lines

    def emit_branches(
        self,
        pins: Sequence[Optional[BasePin]],
        share_symbols: Union[bool, Sequence[bool]]
    ) -> List[List[str]]:
        """
        Emit sibling blocks independently.

        Each block sees only the nodes emitted before the siblings started;
        afterwards, everything any sibling emitted counts as emitted.

        Args:
            pins: Execution outputs, one block each
            share_symbols: Keep locals registered by a block visible to the
                following blocks and to later code. One flag for all blocks,
                or one per pin (a loop body is private, its Completed block
                runs at the enclosing level)

        Returns:
            One list of lines per pin
        """
        if isinstance(share_symbols, bool):
            share_symbols = [share_symbols] * len(pins)

        base_emitted = set(self._emitted)
        kept_symbols = dict(self._pin_expressions)
        claimed: Set[str] = set(base_emitted)
        blocks = []

        for pin, shared in zip(pins, share_symbols):
            self._emitted = set(base_emitted)
            self._pin_expressions = dict(kept_symbols)
            blocks.append(self.emit_block(pin))
            claimed |= self._emitted
            if shared:
                kept_symbols = dict(self._pin_expressions)

        self._emitted = claimed
        self._pin_expressions = kept_symbols
        return blocks

    # =========================================================================
    # Symbols and expressions
    # =========================================================================

    def register(self, pin: Optional[BasePin], expression: str) -> None:
        """Bind an output pin to the expression that holds its value."""
        if pin is not None:
            self._pin_expressions[pin.pin_id] = expression

    def resolve_input(self, pin: Optional[BasePin]) -> Optional[str]:
        """
        Expression feeding an input pin through its connection.

        Returns:
            The source expression, or None if nothing is connected or the
            source has no value at this point

        Raises:
            CodeGenerationError: In strict mode, for a connected pin whose
                source cannot be resolved
        """
        if pin is None:
            return None
        conn = self.graph.get_incoming_connection(pin.pin_id)
        if conn is None:
            return None

        expression = self._pin_expressions.get(conn.source_pin_id)
        if expression is None:
            expression = self._expression_from_pure_source(conn.source_pin_id)
        if expression is not None:
            return expression

        source_node = self.graph.get_node_for_pin(conn.source_pin_id)
        message = (
            f"Input '{pin.name}' of {self.graph.get_node(pin.node_id)} is connected "
            f"to {source_node} but has no value here"
        )
        if self.settings.strict_pins:
            raise CodeGenerationError(message)
        logger.warning(f"{message}; using default")
        self.warnings.append(message)
        return None

    def _expression_from_pure_source(self, source_pin_id: str) -> Optional[str]:
        node = self.graph.get_node_for_pin(source_pin_id)
        if node is None or node.has_execution_pins or source_pin_id in self._resolving:
            return None

        emitter = get_emitter(node.node_type)
        if emitter is None:
            return None

        self._resolving.add(source_pin_id)
        try:
            expression = emitter.expression(node, node.find_pin(source_pin_id), self)
        finally:
            self._resolving.discard(source_pin_id)

        if expression is not None:
            self._pin_expressions[source_pin_id] = expression
        return expression

    def expression_for(self, pin: Optional[BasePin], fallback: Optional[str] = None) -> str:
        """
        Expression for an input pin, never failing in lenient mode.

        Order: connected source, fallback, the pin's default value,
        the zero value of the pin's type.
        """
        expression = self.resolve_input(pin)
        if expression is not None:
            return expression
        if fallback is not None:
            return fallback
        if pin is None:
            return "None"
        if pin.default_value is not None:
            return self.format_literal(pin.default_value, pin.data_type)
        return self.zero_value(pin.data_type)

    # =========================================================================
    # Helpers for emitters
    # =========================================================================

    def format_literal(self, value: Any, t: Optional[TypeRef]) -> str:
        return literals.format_literal(value, t, self.registry, self._imports)

    def zero_value(self, t: Optional[TypeRef]) -> str:
        return literals.zero_value_expression(t, self.registry, self._imports)

    def require_import(self, module: Optional[str]) -> None:
        if module:
            self._imports.add(module)

    def allocate_name(self, base: str) -> str:
        """Unique local name derived from base."""
        base = literals.sanitize_identifier(base)
        name = base
        suffix = 1
        while name in self._names:
            suffix += 1
            name = f"{base}_{suffix}"
        self._names.add(name)
        return name

    def allocate_index_name(self) -> str:
        name = self.allocate_name(f"index_{self._index_count}")
        self._index_count += 1
        return name

    def variable_name(self, name: str, var_type: Optional[TypeRef] = None) -> str:
        """Local identifier of a graph variable, allocated on first use."""
        ident = self._variables.get(name)
        if ident is None:
            ident = self.allocate_name(name)
            self._variables[name] = ident
            self._variable_types[name] = var_type
        elif self._variable_types.get(name) is None and var_type is not None:
            self._variable_types[name] = var_type
        return ident

    @staticmethod
    def short_id(node: BaseNode) -> str:
        return literals.short_id(node.node_id)

    def resolve_method(self, method: MethodDescriptor) -> MethodDescriptor:
        """
        Re-resolve a descriptor against the reference registry.

        Raises:
            UnresolvedMemberError: If the declaring type or overload is unknown
        """
        return self.registry.resolve_method(
            method.declaring_type, method.name, method.parameter_type_names
        )

    def type_info(self, qualified_name: str) -> TypeInfo:
        info = self.registry.get_type(qualified_name)
        if info is None:
            raise UnresolvedMemberError(f"Unknown type: {qualified_name}")
        return info


def generate_source(
    graph: NodeGraph,
    registry: Optional[ReferenceRegistry] = None,
    target: Union[OutputKind, str] = OutputKind.LIBRARY,
    settings: Optional[CodegenSettings] = None
) -> str:
    """Shortcut for GraphTranslator(graph, registry, settings).generate(target)."""
    return GraphTranslator(graph, registry, settings).generate(target)
