# -*- coding: utf-8 -*-
"""
Literal Formatting - Values and zero values as Python source text.

Every function takes an optional `imports` set; modules the produced
expression needs (decimal, enum owners, value types) are added to it.

Example:
    imports = set()
    format_literal("say \"hi\"", STRING)        # '"say \\"hi\\""'
    format_literal(2.5, DOUBLE)                 # '2.5'
    format_literal("1.10", DECIMAL, imports=imports)
    # 'decimal.Decimal("1.10")', imports == {"decimal"}
"""
import keyword
import math
import re
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Set

from ..core.errors import UnresolvedMemberError
from ..core.references import ReferenceRegistry
from ..core.types import (
    BOOL, CHAR, DECIMAL, STRING, NamedType, PrimitiveType, TypeRef,
    is_floating, is_integral, unwrap_nullable,
)


_STRING_ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\x00",
}


def quote_string(text: str, quote: str = '"') -> str:
    """Quote text with backslash and quote escaped and control chars spelled out."""
    escaped = "".join(_STRING_ESCAPES.get(ch, ch) for ch in text)
    escaped = escaped.replace(quote, "\\" + quote)
    return f"{quote}{escaped}{quote}"


def format_float(value: Any) -> str:
    number = float(value)
    if math.isnan(number):
        return 'float("nan")'
    if math.isinf(number):
        return 'float("inf")' if number > 0 else 'float("-inf")'
    return repr(number)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _add(imports: Optional[Set[str]], module: Optional[str]) -> None:
    if imports is not None and module:
        imports.add(module)


def format_literal(
    value: Any,
    t: Optional[TypeRef],
    registry: Optional[ReferenceRegistry] = None,
    imports: Optional[Set[str]] = None
) -> str:
    """
    Format a stored value as a Python literal of type t.

    Args:
        value: Stored value (None formats as None)
        t: Declared type; nullable wrappers are unwrapped
        registry: Reference types, needed for enums and value types
        imports: Collects modules the expression refers to

    Returns:
        Source text of the literal

    Raises:
        UnresolvedMemberError: If an enum value names no member of its type
    """
    if value is None:
        return "None"

    inner = unwrap_nullable(t) if t is not None else None
    if inner is not None:
        t = inner

    if t == STRING:
        return quote_string(str(value))

    if t == CHAR:
        text = str(value)
        return quote_string(text[:1] if text else "\0", "'")

    if t == BOOL:
        return "True" if _as_bool(value) else "False"

    if t == DECIMAL:
        _add(imports, "decimal")
        return f'decimal.Decimal("{Decimal(str(value))}")'

    if is_floating(t):
        return format_float(value)

    if is_integral(t):
        return str(int(value))

    if isinstance(t, NamedType) and registry is not None:
        info = registry.info_for(t)
        if info is not None and info.is_enum:
            member = value.name if isinstance(value, Enum) else str(value)
            if member not in info.enum_members:
                raise UnresolvedMemberError(f"{info.qualified_name} has no member '{member}'")
            _add(imports, info.module)
            return f"{info.qualified_name}.{member}"

    return _format_untyped(value, t, registry, imports)


def _format_untyped(
    value: Any,
    t: Optional[TypeRef],
    registry: Optional[ReferenceRegistry],
    imports: Optional[Set[str]]
) -> str:
    """Format by the value's own Python type (object/untyped slots)."""
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_float(value)
    if isinstance(value, Decimal):
        _add(imports, "decimal")
        return f'decimal.Decimal("{value}")'
    if isinstance(value, str):
        return quote_string(value)
    return zero_value_expression(t, registry, imports)


def zero_value_expression(
    t: Optional[TypeRef],
    registry: Optional[ReferenceRegistry] = None,
    imports: Optional[Set[str]] = None
) -> str:
    """
    Zero value of a type as source text.

    Numbers give 0 / 0.0 / decimal.Decimal(0), bool False, string "",
    char "\\0". Value types with a parameterless constructor give Type().
    Everything else, nullables included, gives None.
    """
    if t is None or unwrap_nullable(t) is not None:
        return "None"

    if isinstance(t, PrimitiveType):
        if t == BOOL:
            return "False"
        if t == DECIMAL:
            _add(imports, "decimal")
            return "decimal.Decimal(0)"
        if is_floating(t):
            return "0.0"
        if is_integral(t):
            return "0"
        if t == STRING:
            return '""'
        if t == CHAR:
            return '"\\0"'
        return "None"

    if isinstance(t, NamedType) and registry is not None:
        info = registry.info_for(t)
        if info is not None and info.is_value_type and info.has_default_constructor:
            _add(imports, info.module)
            return f"{info.qualified_name}()"

    return "None"


# =============================================================================
# Identifiers
# =============================================================================

_INVALID_IDENT_CHARS = re.compile(r"\W")


def sanitize_identifier(name: str) -> str:
    """Turn an arbitrary name into a valid, non-keyword Python identifier."""
    ident = _INVALID_IDENT_CHARS.sub("_", name.strip()) or "_"
    if ident[0].isdigit():
        ident = f"_{ident}"
    if keyword.iskeyword(ident):
        ident = f"{ident}_"
    return ident


def short_id(node_id: str) -> str:
    """First 8 alphanumeric characters of an id, lower-cased."""
    compact = re.sub(r"[^0-9A-Za-z]", "", node_id).lower()
    return compact[:8] or "node"
