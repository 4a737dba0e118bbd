# -*- coding: utf-8 -*-
"""
Type Descriptors - Closed set of types carried by data pins.

Four variants cover everything a pin can declare:
- PrimitiveType: built-in scalar kinds (bool, numerics, char, string, object, void)
- NamedType: a type supplied by a reference module ("random.Random")
- ArrayType: homogeneous array of an element type
- GenericType: a base applied to type arguments ("typing.Optional[int]")

Descriptors are frozen and hashable, so equality is structural.

Example:
    int_t = PrimitiveType(PrimitiveKind.INT32)
    maybe_int = nullable(int_t)
    assert unwrap_nullable(maybe_int) == int_t
    assert parse_type(type_name(maybe_int)) == maybe_int
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class PrimitiveKind(Enum):
    """Scalar kinds with their display names."""
    BOOL = "bool"
    BYTE = "byte"
    SBYTE = "sbyte"
    INT16 = "short"
    UINT16 = "ushort"
    INT32 = "int"
    UINT32 = "uint"
    INT64 = "long"
    UINT64 = "ulong"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    CHAR = "char"
    STRING = "string"
    OBJECT = "object"
    VOID = "void"


_INTEGRAL_KINDS = frozenset({
    PrimitiveKind.BYTE, PrimitiveKind.SBYTE,
    PrimitiveKind.INT16, PrimitiveKind.UINT16,
    PrimitiveKind.INT32, PrimitiveKind.UINT32,
    PrimitiveKind.INT64, PrimitiveKind.UINT64,
})

_FLOATING_KINDS = frozenset({
    PrimitiveKind.FLOAT, PrimitiveKind.DOUBLE, PrimitiveKind.DECIMAL,
})


@dataclass(frozen=True)
class PrimitiveType:
    kind: PrimitiveKind

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class NamedType:
    qualified_name: str

    @property
    def simple_name(self) -> str:
        return self.qualified_name.rsplit(".", 1)[-1]

    def __str__(self) -> str:
        return self.qualified_name


@dataclass(frozen=True)
class ArrayType:
    element: 'TypeRef'

    def __str__(self) -> str:
        return f"{self.element}[]"


@dataclass(frozen=True)
class GenericType:
    base: NamedType
    args: Tuple['TypeRef', ...] = ()

    def __str__(self) -> str:
        inner = ", ".join(str(a) for a in self.args)
        return f"{self.base}[{inner}]"


TypeRef = Union[PrimitiveType, NamedType, ArrayType, GenericType]


# Shorthands used throughout node templates and tests
BOOL = PrimitiveType(PrimitiveKind.BOOL)
INT = PrimitiveType(PrimitiveKind.INT32)
LONG = PrimitiveType(PrimitiveKind.INT64)
FLOAT = PrimitiveType(PrimitiveKind.FLOAT)
DOUBLE = PrimitiveType(PrimitiveKind.DOUBLE)
DECIMAL = PrimitiveType(PrimitiveKind.DECIMAL)
CHAR = PrimitiveType(PrimitiveKind.CHAR)
STRING = PrimitiveType(PrimitiveKind.STRING)
OBJECT = PrimitiveType(PrimitiveKind.OBJECT)
VOID = PrimitiveType(PrimitiveKind.VOID)

OPTIONAL_BASE = NamedType("typing.Optional")


# =============================================================================
# Queries
# =============================================================================

def is_numeric(t: Optional[TypeRef]) -> bool:
    """True for integral and floating primitive kinds."""
    return isinstance(t, PrimitiveType) and (
        t.kind in _INTEGRAL_KINDS or t.kind in _FLOATING_KINDS
    )


def is_integral(t: Optional[TypeRef]) -> bool:
    return isinstance(t, PrimitiveType) and t.kind in _INTEGRAL_KINDS


def is_floating(t: Optional[TypeRef]) -> bool:
    return isinstance(t, PrimitiveType) and t.kind in _FLOATING_KINDS


def is_void(t: Optional[TypeRef]) -> bool:
    return t is None or t == VOID


def nullable(inner: TypeRef) -> GenericType:
    """Wrap a type as nullable. Wrapping twice is a no-op."""
    if is_nullable(inner):
        return inner  # type: ignore[return-value]
    return GenericType(OPTIONAL_BASE, (inner,))


def is_nullable(t: Optional[TypeRef]) -> bool:
    return isinstance(t, GenericType) and t.base == OPTIONAL_BASE and len(t.args) == 1


def unwrap_nullable(t: TypeRef) -> Optional[TypeRef]:
    """Return the wrapped type of a nullable, or None if t is not nullable."""
    if is_nullable(t):
        return t.args[0]  # type: ignore[union-attr]
    return None


def display_name(t: Optional[TypeRef]) -> str:
    """Human-readable name ("int?" for nullable int, "any" for untyped)."""
    if t is None:
        return "any"
    inner = unwrap_nullable(t)
    if inner is not None:
        return f"{display_name(inner)}?"
    if isinstance(t, NamedType):
        return t.simple_name
    if isinstance(t, ArrayType):
        return f"{display_name(t.element)}[]"
    if isinstance(t, GenericType):
        inner_names = ", ".join(display_name(a) for a in t.args)
        return f"{t.base.simple_name}[{inner_names}]"
    return str(t)


# =============================================================================
# Textual form (persistence)
# =============================================================================

_PRIMITIVES_BY_NAME = {kind.value: PrimitiveType(kind) for kind in PrimitiveKind}


def type_name(t: Optional[TypeRef]) -> Optional[str]:
    """Serialize a descriptor to its textual form; None stays None."""
    if t is None:
        return None
    return str(t)


def parse_type(text: Optional[str]) -> Optional[TypeRef]:
    """
    Parse the textual form produced by type_name().

    Args:
        text: "int", "random.Random", "int[]", "typing.Optional[int]", ...

    Returns:
        The descriptor, or None for empty input

    Raises:
        ValueError: If brackets are unbalanced
    """
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None

    if text.endswith("[]"):
        element = parse_type(text[:-2])
        if element is None:
            raise ValueError(f"Array type without element: {text!r}")
        return ArrayType(element)

    if text.endswith("]"):
        open_idx = text.find("[")
        if open_idx <= 0:
            raise ValueError(f"Malformed generic type: {text!r}")
        base = NamedType(text[:open_idx])
        args = tuple(
            arg for arg in (parse_type(part) for part in _split_args(text[open_idx + 1:-1]))
            if arg is not None
        )
        return GenericType(base, args)

    primitive = _PRIMITIVES_BY_NAME.get(text)
    if primitive is not None:
        return primitive
    return NamedType(text)


def _split_args(body: str):
    depth = 0
    current = []
    for ch in body:
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth < 0:
                raise ValueError(f"Unbalanced brackets in {body!r}")
        if ch == "," and depth == 0:
            yield "".join(current)
            current = []
        else:
            current.append(ch)
    if depth != 0:
        raise ValueError(f"Unbalanced brackets in {body!r}")
    if current:
        yield "".join(current)
