# -*- coding: utf-8 -*-
"""
Type Colors - Pin colors by data type (Blueprint-style).

A TypeColorMap is an ordinary object: build one, register overrides on it,
and pass it to whatever renders pins. There is no shared global table.
"""
from typing import Dict, Optional

from .references import ReferenceRegistry
from .types import (
    ArrayType, GenericType, NamedType, PrimitiveKind, PrimitiveType, TypeRef,
    unwrap_nullable,
)

EXECUTION_COLOR = "#FFFFFF"
UNTYPED_COLOR = "#808080"

_INTEGRAL = "#48B0B0"
_FLOATING = "#A3DC74"
_TEXT = "#FC66C4"

_DEFAULT_PRIMITIVE_COLORS: Dict[PrimitiveKind, str] = {
    PrimitiveKind.BOOL: "#DC3030",
    PrimitiveKind.BYTE: _INTEGRAL,
    PrimitiveKind.SBYTE: _INTEGRAL,
    PrimitiveKind.INT16: _INTEGRAL,
    PrimitiveKind.UINT16: _INTEGRAL,
    PrimitiveKind.INT32: _INTEGRAL,
    PrimitiveKind.UINT32: _INTEGRAL,
    PrimitiveKind.INT64: _INTEGRAL,
    PrimitiveKind.UINT64: _INTEGRAL,
    PrimitiveKind.FLOAT: _FLOATING,
    PrimitiveKind.DOUBLE: _FLOATING,
    PrimitiveKind.DECIMAL: _FLOATING,
    PrimitiveKind.STRING: _TEXT,
    PrimitiveKind.CHAR: _TEXT,
    PrimitiveKind.OBJECT: "#4880FF",
    PrimitiveKind.VOID: UNTYPED_COLOR,
}

_COLLECTION_BASES = {"list", "typing.List", "typing.Iterable", "typing.Sequence"}
_MAPPING_BASES = {"dict", "typing.Dict", "typing.Mapping"}


class TypeColorMap:
    """
    Maps type descriptors to hex colors.

    Attributes:
        registry: Optional reference registry (enums and value types get
            their own colors when known)
    """

    def __init__(self, registry: Optional[ReferenceRegistry] = None):
        self.registry = registry
        self._custom: Dict[TypeRef, str] = {}

    def register(self, t: TypeRef, color: str) -> None:
        """Override the color of one type."""
        self._custom[t] = color

    def color_for(self, t: Optional[TypeRef]) -> str:
        if t is None:
            return UNTYPED_COLOR

        custom = self._custom.get(t)
        if custom is not None:
            return custom

        inner = unwrap_nullable(t)
        if inner is not None:
            return self.color_for(inner)

        if isinstance(t, PrimitiveType):
            return _DEFAULT_PRIMITIVE_COLORS[t.kind]

        if isinstance(t, ArrayType):
            return _darken(self.color_for(t.element), 0.8)

        if isinstance(t, GenericType):
            if t.base.qualified_name in _COLLECTION_BASES:
                return "#FFD700"
            if t.base.qualified_name in _MAPPING_BASES:
                return "#FF8C00"
            if t.args:
                return self.color_for(t.args[0])

        if isinstance(t, NamedType) and self.registry is not None:
            info = self.registry.get_type(t.qualified_name)
            if info is not None and info.is_enum:
                return "#7CFC00"
            if info is not None and info.is_value_type:
                return "#C0DC74"

        return "#4880FF"


def _darken(color: str, factor: float) -> str:
    r, g, b = (int(color[i:i + 2], 16) for i in (1, 3, 5))
    return "#{:02X}{:02X}{:02X}".format(int(r * factor), int(g * factor), int(b * factor))
