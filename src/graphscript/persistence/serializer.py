# -*- coding: utf-8 -*-
"""
Graph Serializer - Save and load graphs as JSON documents.

Nodes are rebuilt from their registered node_type. Literal and method call
nodes are special: the literal's type and value, and the method's identity,
are stored explicitly and resolved again on load. Every other node is
rebuilt from its constructor, fed with the recognised entries of its saved
properties (variable name, output count, return type, ...).

Saved pin ids are re-applied to the rebuilt node by matching
(name, direction, kind), so saved connections find their pins again.
Anything that cannot be restored is skipped and reported in
LoadReport.warnings; loading a damaged file never raises half-way.

Example:
    serializer = GraphSerializer()
    serializer.save(graph, "hello.json", libraries=["math"])

    report = serializer.load("hello.json")
    for warning in report.warnings:
        print(warning)
    graph = report.graph
"""
import inspect
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from loguru import logger
from pydantic import ValidationError

from ..core.base_node import BaseNode
from ..core.compatibility import TypeCompatibilityChecker
from ..core.errors import DuplicateIdError, PersistenceError, UnresolvedMemberError
from ..core.graph import NodeGraph
from ..core.references import ReferenceRegistry, default_registry
from ..core.registry import NodeRegistry
from ..core.types import ArrayType, GenericType, NamedType, PrimitiveType, parse_type, type_name
from ..nodes import create_default_registry
from ..nodes.functions import MethodCallNode
from ..nodes.variables import LiteralNode
from .document import (
    ConnectionRecord, GraphDocument, LibraryRecord, LiteralRecord, MethodRecord, NodeRecord,
    PinRecord, VariableRecord,
)


_TYPE_CLASSES = (PrimitiveType, NamedType, ArrayType, GenericType)

# Saved property -> constructor keyword
_CONSTRUCTOR_PROPERTIES = {
    "VariableName": "variable_name",
    "VariableType": "variable_type",
    "OutputCount": "output_count",
    "ReturnType": "return_type",
    "OperandType": "operand_type",
}
_TYPE_PROPERTIES = {"VariableType", "ReturnType", "OperandType"}

# Stored in dedicated records instead
_SKIPPED_PROPERTIES = {"LiteralType", "Value", "Method"}


@dataclass
class LoadReport:
    """
    Result of GraphSerializer.from_document / load.

    Attributes:
        graph: The rebuilt graph (possibly partial)
        warnings: One message per skipped node, pin, connection or library
        libraries: External libraries listed in the document
    """
    graph: NodeGraph
    warnings: List[str] = field(default_factory=list)
    libraries: List[LibraryRecord] = field(default_factory=list)


class GraphSerializer:
    """
    Converts between NodeGraph and GraphDocument.

    Args:
        node_registry: Node classes by node_type (built-in nodes if None)
        reference_registry: Resolves saved method identities (default references if None)
    """

    def __init__(
        self,
        node_registry: Optional[NodeRegistry] = None,
        reference_registry: Optional[ReferenceRegistry] = None
    ):
        self.node_registry = node_registry or create_default_registry()
        self.reference_registry = reference_registry or default_registry()

    # =========================================================================
    # Save
    # =========================================================================

    def to_document(
        self,
        graph: NodeGraph,
        libraries: Iterable[Union[str, LibraryRecord]] = ()
    ) -> GraphDocument:
        """Snapshot a graph into a document."""
        return GraphDocument(
            name=graph.name,
            nodes=[self._node_record(node) for node in graph.nodes.values()],
            connections=[
                ConnectionRecord(source_pin_id=c.source_pin_id, target_pin_id=c.target_pin_id)
                for c in graph.connections.values()
            ],
            external_libraries=[
                lib if isinstance(lib, LibraryRecord) else LibraryRecord(name=lib)
                for lib in libraries
            ],
            variables=[
                VariableRecord(
                    name=var.name,
                    type_name=type_name(var.var_type),
                    default_value=var.default_value
                )
                for var in graph.variables.values()
            ],
        )

    def _node_record(self, node: BaseNode) -> NodeRecord:
        record = NodeRecord(
            id=node.node_id,
            type=node.node_type,
            position=tuple(node.position),
            pins=[
                PinRecord(id=p.pin_id, name=p.name, direction=p.direction, kind=p.kind)
                for p in node.all_pins()
            ],
            properties={
                key: self._portable(value)
                for key, value in node.properties.items()
                if key not in _SKIPPED_PROPERTIES
            },
        )

        if isinstance(node, LiteralNode):
            record.literal = LiteralRecord(
                literal_type_name=type_name(node.literal_type) or "object",
                value=node.value
            )
        if isinstance(node, MethodCallNode):
            method = node.method
            record.method = MethodRecord(
                declaring_type_name=method.declaring_type,
                method_name=method.name,
                parameter_type_names=method.parameter_type_names
            )
        return record

    @staticmethod
    def _portable(value: Any) -> Any:
        if isinstance(value, _TYPE_CLASSES):
            return type_name(value)
        return value

    def save(
        self,
        graph: NodeGraph,
        path: str,
        libraries: Iterable[Union[str, LibraryRecord]] = ()
    ) -> None:
        """
        Write graph to a JSON file.

        Raises:
            PersistenceError: If the file cannot be written
        """
        document = self.to_document(graph, libraries)
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(document.model_dump_json(by_alias=True, indent=2))
        except OSError as e:
            raise PersistenceError(f"Could not save graph to {path}: {e}") from e
        logger.info(f"Saved graph '{graph.name}' to {path}")

    # =========================================================================
    # Load
    # =========================================================================

    def load(self, path: str) -> LoadReport:
        """
        Read a JSON file and rebuild its graph.

        Raises:
            PersistenceError: If the file is missing or not a valid document
        """
        if not os.path.exists(path):
            raise PersistenceError(f"Save file not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                document = GraphDocument.model_validate_json(f.read())
        except OSError as e:
            raise PersistenceError(f"Could not read {path}: {e}") from e
        except ValidationError as e:
            raise PersistenceError(f"Save file format invalid: {path}: {e}") from e

        report = self.from_document(document)
        logger.info(
            f"Loaded graph '{report.graph.name}' from {path} "
            f"({len(report.warnings)} warnings)"
        )
        return report

    def from_document(self, document: GraphDocument) -> LoadReport:
        """Rebuild a graph; problems become warnings."""
        graph = NodeGraph(document.name, TypeCompatibilityChecker(self.reference_registry))
        report = LoadReport(graph, libraries=list(document.external_libraries))

        for library in document.external_libraries:
            if library.file_path and not os.path.exists(library.file_path):
                report.warnings.append(f"Missing library: {library.file_path}")

        for var in document.variables:
            try:
                var_type = parse_type(var.type_name)
            except ValueError:
                report.warnings.append(f"Variable '{var.name}' has an unreadable type: {var.type_name}")
                var_type = None
            graph.add_variable(var.name, var_type, var.default_value)

        dropped_pins = set()
        for record in document.nodes:
            node = self._instantiate(record, report)
            if node is None:
                dropped_pins.update(p.id for p in record.pins)
                continue
            unmatched = self._apply_pins(node, record, report)
            node.position = tuple(record.position)
            try:
                graph.add_node(node)
            except DuplicateIdError as e:
                report.warnings.append(f"Skipped node '{record.type}': {e}")
                continue
            dropped_pins.update(unmatched)

        for conn in document.connections:
            if conn.source_pin_id in dropped_pins or conn.target_pin_id in dropped_pins:
                report.warnings.append(
                    f"Dropped connection {conn.source_pin_id} -> {conn.target_pin_id}: pin no longer exists"
                )
                continue
            if graph.add_connection(conn.source_pin_id, conn.target_pin_id) is None:
                report.warnings.append(
                    f"Skipped invalid connection {conn.source_pin_id} -> {conn.target_pin_id}"
                )

        for warning in report.warnings:
            logger.warning(warning)
        return report

    def _instantiate(self, record: NodeRecord, report: LoadReport) -> Optional[BaseNode]:
        node_class = self.node_registry.get_node_class(record.type)
        if node_class is None:
            report.warnings.append(f"Unable to recreate node '{record.type}': unknown node type")
            return None

        try:
            if issubclass(node_class, LiteralNode):
                if record.literal is None:
                    report.warnings.append(f"Literal node {record.id} has no literal record")
                    return None
                return node_class(
                    record.id,
                    literal_type=record.literal.literal_type_name,
                    value=record.literal.value
                )

            if issubclass(node_class, MethodCallNode):
                if record.method is None:
                    report.warnings.append(f"Method call node {record.id} has no method record")
                    return None
                method = self.reference_registry.resolve_method(
                    record.method.declaring_type_name,
                    record.method.method_name,
                    record.method.parameter_type_names
                )
                return node_class(record.id, method=method, pure=record.properties.get("Pure"))

            return node_class(record.id, **self._constructor_arguments(node_class, record.properties))
        except UnresolvedMemberError as e:
            report.warnings.append(f"Unable to recreate node '{record.type}': {e}")
        except (TypeError, ValueError) as e:
            report.warnings.append(f"Unable to recreate node '{record.type}' ({record.id}): {e}")
        return None

    @staticmethod
    def _constructor_arguments(node_class: type, properties: Dict[str, Any]) -> Dict[str, Any]:
        accepted = inspect.signature(node_class.__init__).parameters
        arguments = {}
        for key, value in properties.items():
            keyword = _CONSTRUCTOR_PROPERTIES.get(key)
            if keyword is None or keyword not in accepted:
                continue
            if key in _TYPE_PROPERTIES and isinstance(value, str):
                value = parse_type(value)
            arguments[keyword] = value
        return arguments

    @staticmethod
    def _apply_pins(node: BaseNode, record: NodeRecord, report: LoadReport) -> List[str]:
        """Give rebuilt pins their saved ids. Returns ids of saved pins with no match."""
        unmatched = []
        available = list(node.all_pins())
        for saved in record.pins:
            pin = next(
                (p for p in available
                 if p.name == saved.name and p.direction == saved.direction and p.kind == saved.kind),
                None
            )
            if pin is None:
                report.warnings.append(
                    f"Pin '{saved.name}' ({saved.direction.value}) no longer exists on {record.type} {record.id}"
                )
                unmatched.append(saved.id)
                continue
            available.remove(pin)
            pin.pin_id = saved.id
        return unmatched
