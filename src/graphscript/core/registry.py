# -*- coding: utf-8 -*-
"""
Node Registry - Catalog of node classes and palette templates.

Maps node_type strings to node classes so saved graphs can be rebuilt,
and lists NodeTemplates for a palette. Method-call templates are derived
from a ReferenceRegistry; the registry never discovers libraries itself.

Example:
    registry = NodeRegistry()
    registry.register_all(ALL_NODES)

    branch = registry.create_node("Branch")
    for template in registry.templates(default_registry()):
        print(template.category, template.display_name)
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Type

from loguru import logger

from .base_node import BaseNode
from .references import MethodDescriptor, ReferenceRegistry
from .types import NamedType


@dataclass
class NodeTemplate:
    """
    Palette entry: a node class plus the constructor arguments it needs.

    Attributes:
        node_type: Registered node type
        display_name: Name shown in the palette
        category: Palette group
        description: Tooltip
        arguments: Keyword arguments passed to the node constructor
    """
    node_type: str
    display_name: str
    category: str
    description: str = ""
    arguments: Dict[str, Any] = field(default_factory=dict)


class NodeRegistry:
    """Registry of node classes keyed by node_type."""

    def __init__(self):
        self._classes: Dict[str, Type[BaseNode]] = {}

    def register(self, node_class: Type[BaseNode]) -> Type[BaseNode]:
        """
        Register a node class.

        Usable as a decorator.

        Raises:
            ValueError: If another class already uses the same node_type
        """
        existing = self._classes.get(node_class.node_type)
        if existing is not None and existing is not node_class:
            raise ValueError(
                f"node_type '{node_class.node_type}' already registered by {existing.__name__}"
            )
        self._classes[node_class.node_type] = node_class
        return node_class

    def register_all(self, node_classes: Iterable[Type[BaseNode]]) -> None:
        for node_class in node_classes:
            self.register(node_class)

    def get_node_class(self, node_type: str) -> Optional[Type[BaseNode]]:
        """Get a registered class by node_type."""
        return self._classes.get(node_type)

    def create_node(self, node_type: str, node_id: Optional[str] = None, **kwargs) -> BaseNode:
        """
        Instantiate a registered node type.

        Args:
            node_type: Registered node type
            node_id: Optional node ID
            **kwargs: Node-specific constructor arguments

        Returns:
            New node instance

        Raises:
            KeyError: If node_type is unknown
        """
        node_class = self._classes.get(node_type)
        if node_class is None:
            raise KeyError(f"Unknown node type: {node_type}")
        return node_class(node_id, **kwargs)

    def create_from_template(self, template: NodeTemplate) -> BaseNode:
        return self.create_node(template.node_type, **template.arguments)

    @property
    def node_types(self) -> List[str]:
        return list(self._classes.keys())

    def __contains__(self, node_type: str) -> bool:
        return node_type in self._classes

    # =========================================================================
    # Palette
    # =========================================================================

    def templates(self, references: Optional[ReferenceRegistry] = None) -> List[NodeTemplate]:
        """
        Palette templates.

        Method-call nodes are not listed on their own; one template per
        method of the reference registry takes their place.

        Args:
            references: Registry supplying method descriptors (optional)

        Returns:
            Templates sorted by category, then display name
        """
        result = []
        for node_type, node_class in self._classes.items():
            if node_type == "MethodCall":
                continue
            meta = node_class.metadata
            result.append(NodeTemplate(
                node_type=node_type,
                display_name=meta.display_name or node_type,
                category=meta.category,
                description=meta.description,
            ))

        if references is not None and "MethodCall" in self._classes:
            result.extend(self._method_template(m) for m in references.all_methods())

        result.sort(key=lambda t: (t.category, t.display_name))
        logger.debug(f"Built {len(result)} node templates")
        return result

    @staticmethod
    def _method_template(method: MethodDescriptor) -> NodeTemplate:
        owner = NamedType(method.declaring_type).simple_name
        suffix = "" if method.is_static else " (inst)"
        return NodeTemplate(
            node_type="MethodCall",
            display_name=f"{owner}.{method.name}{suffix}",
            category=f"Methods/{owner}",
            description=f"Call {method.signature}",
            arguments={"method": method},
        )
