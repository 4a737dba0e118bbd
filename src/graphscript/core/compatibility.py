# -*- coding: utf-8 -*-
"""
Type Compatibility - Decides whether a value of one type may flow into another.

Rules, any one of which is sufficient:
- exact equality
- target is a supertype/interface of source (arrays are covariant)
- nullable wrappers unwrapped on either or both sides (recursive)
- both numeric (all pairs, narrowing included)
- target is string (anything renders to text)
- target is object (top type)
- a conversion operator source -> target is declared on either type

Example:
    checker = TypeCompatibilityChecker(default_registry())
    assert checker.are_types_compatible(INT, DOUBLE)
    assert not checker.are_types_compatible(STRING, INT)
"""
from typing import Optional

from .references import ReferenceRegistry
from .types import (
    OBJECT, STRING,
    ArrayType, PrimitiveType, TypeRef, is_numeric, unwrap_nullable,
)


_NUMERIC_CONSTRUCTORS = {
    "float": "float",
    "double": "float",
    "decimal": "decimal.Decimal",
}


class TypeCompatibilityChecker:
    """
    Pin type compatibility rules.

    Built once with a reference registry and handed to the graph,
    so independent graphs can use independent type universes.
    """

    def __init__(self, registry: Optional[ReferenceRegistry] = None):
        self.registry = registry if registry is not None else ReferenceRegistry()

    def are_types_compatible(self, source: TypeRef, target: TypeRef) -> bool:
        """
        Check if a value of source type can be assigned to target type.

        Args:
            source: Type produced by the output pin
            target: Type expected by the input pin

        Returns:
            True if the connection is allowed
        """
        if source == target:
            return True

        if self._is_supertype(source, target):
            return True

        source_inner = unwrap_nullable(source)
        target_inner = unwrap_nullable(target)
        if source_inner is not None and target_inner is not None:
            return self.are_types_compatible(source_inner, target_inner)
        if target_inner is not None:
            return self.are_types_compatible(source, target_inner)
        if source_inner is not None:
            return self.are_types_compatible(source_inner, target)

        # Narrowing accepted
        if is_numeric(source) and is_numeric(target):
            return True

        if target == STRING:
            return True

        if target == OBJECT:
            return True

        return self.has_conversion_operator(source, target)

    def _is_supertype(self, source: TypeRef, target: TypeRef) -> bool:
        if isinstance(source, ArrayType) and isinstance(target, ArrayType):
            return (
                source.element == target.element
                or self._is_supertype(source.element, target.element)
            )
        return target in self.registry.supertypes(source)

    def has_conversion_operator(self, source: TypeRef, target: TypeRef) -> bool:
        """Check both types' declared conversions for source -> target."""
        for owner in (source, target):
            info = self.registry.info_for(owner)
            if info is None:
                continue
            for op in info.conversions:
                if op.source == source and op.target == target:
                    return True
        return False

    def conversion_hint(self, source: TypeRef, target: TypeRef) -> Optional[str]:
        """
        Name of the callable that converts source to target, if one is needed.

        Returns:
            "str" for string targets, the numeric constructor for numeric
            pairs, None when no explicit conversion is required
        """
        if not self.are_types_compatible(source, target):
            return None
        if source == target or target == OBJECT:
            return None
        if target == STRING:
            return "str"
        if is_numeric(source) and is_numeric(target) and isinstance(target, PrimitiveType):
            return _NUMERIC_CONSTRUCTORS.get(target.kind.value, "int")
        return None
