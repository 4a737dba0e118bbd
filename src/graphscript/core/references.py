# -*- coding: utf-8 -*-
"""
Reference Registry - Types and methods of loaded reference modules.

Method-call nodes never hold live callables. They hold a MethodDescriptor
resolved at construction time against this registry, so a graph can be
translated, saved and loaded without importing anything.

Example:
    registry = ReferenceRegistry()
    registry.register_type(TypeInfo(
        qualified_name="math",
        is_module=True,
        methods=(MethodDescriptor("math", "sqrt", True,
                                  (ParameterDescriptor("x", DOUBLE),), DOUBLE),),
    ))
    sqrt = registry.resolve_method("math", "sqrt", ["double"])
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from .errors import UnresolvedMemberError
from .types import (
    BOOL, DOUBLE, INT, STRING, VOID,
    ArrayType, GenericType, NamedType, TypeRef, is_void, parse_type, type_name,
)


@dataclass(frozen=True)
class ParameterDescriptor:
    """A single method parameter."""
    name: str
    type: Optional[TypeRef]
    has_default: bool = False
    default: Any = None


@dataclass(frozen=True)
class MethodDescriptor:
    """
    Language-neutral description of a callable member.

    Attributes:
        declaring_type: Qualified name of the type (or module) that owns it
        name: Method name
        is_static: False for instance methods (node gets a "Target" pin)
        parameters: Ordered parameters
        return_type: Return type; VOID or None for no result
    """
    declaring_type: str
    name: str
    is_static: bool = True
    parameters: Tuple[ParameterDescriptor, ...] = ()
    return_type: Optional[TypeRef] = VOID

    @property
    def returns_value(self) -> bool:
        return not is_void(self.return_type)

    @property
    def parameter_type_names(self) -> List[str]:
        return [type_name(p.type) or "object" for p in self.parameters]

    @property
    def signature(self) -> str:
        params = ", ".join(self.parameter_type_names)
        return f"{self.declaring_type}.{self.name}({params})"


@dataclass(frozen=True)
class ConversionOperator:
    """User-visible conversion declared on a type."""
    source: TypeRef
    target: TypeRef
    implicit: bool = True


@dataclass
class TypeInfo:
    """
    Everything the core needs to know about a reference type.

    Attributes:
        qualified_name: Dotted name used in generated code ("random.Random")
        module: Module to import; derived from qualified_name when omitted
        is_module: The name denotes a module of free functions (static only)
        bases: Direct supertypes and implemented interfaces
        is_value_type: Zero value is a default-constructed instance, not None
        has_default_constructor: Type() is valid
        enum_members: Member names when the type is an enumeration
        conversions: Conversion operators declared on this type
        methods: Callable members
    """
    qualified_name: str
    module: Optional[str] = None
    is_module: bool = False
    bases: Tuple[TypeRef, ...] = ()
    is_value_type: bool = False
    has_default_constructor: bool = False
    enum_members: Tuple[str, ...] = ()
    conversions: Tuple[ConversionOperator, ...] = ()
    methods: Tuple[MethodDescriptor, ...] = ()

    def __post_init__(self):
        if self.module is None:
            if self.is_module or "." not in self.qualified_name:
                self.module = self.qualified_name
            else:
                self.module = self.qualified_name.rsplit(".", 1)[0]

    @property
    def descriptor(self) -> NamedType:
        return NamedType(self.qualified_name)

    @property
    def is_enum(self) -> bool:
        return bool(self.enum_members)


class ReferenceRegistry:
    """
    Registry of types from loaded reference modules.

    Constructed once and passed by reference to the compatibility checker,
    the translator and the serializer, so tests can use isolated instances.
    """

    def __init__(self, types: Iterable[TypeInfo] = ()):
        self._types: Dict[str, TypeInfo] = {}
        for info in types:
            self.register_type(info)

    # =========================================================================
    # Registration
    # =========================================================================

    def register_type(self, info: TypeInfo) -> TypeInfo:
        """Add or replace a type."""
        self._types[info.qualified_name] = info
        logger.debug(f"Registered reference type: {info.qualified_name}")
        return info

    def get_type(self, qualified_name: str) -> Optional[TypeInfo]:
        return self._types.get(qualified_name)

    def info_for(self, t: Optional[TypeRef]) -> Optional[TypeInfo]:
        """TypeInfo for a Named (or Generic base) descriptor."""
        if isinstance(t, NamedType):
            return self._types.get(t.qualified_name)
        if isinstance(t, GenericType):
            return self._types.get(t.base.qualified_name)
        return None

    @property
    def types(self) -> List[TypeInfo]:
        return list(self._types.values())

    def modules(self) -> List[str]:
        """Import names of every registered type, in registration order."""
        seen: List[str] = []
        for info in self._types.values():
            if info.module and info.module not in seen:
                seen.append(info.module)
        return seen

    # =========================================================================
    # Queries
    # =========================================================================

    def supertypes(self, t: TypeRef) -> List[TypeRef]:
        """All transitive supertypes of t (excluding t itself)."""
        result: List[TypeRef] = []
        pending = list(self._direct_bases(t))
        while pending:
            base = pending.pop(0)
            if base in result or base == t:
                continue
            result.append(base)
            pending.extend(self._direct_bases(base))
        return result

    def _direct_bases(self, t: TypeRef) -> Sequence[TypeRef]:
        info = self.info_for(t)
        if info is not None:
            return info.bases
        return ()

    def all_methods(self) -> List[MethodDescriptor]:
        return [m for info in self._types.values() for m in info.methods]

    def resolve_method(
        self,
        declaring_type: str,
        method_name: str,
        parameter_type_names: Optional[Sequence[str]] = None
    ) -> MethodDescriptor:
        """
        Find a method by declaring type, name and parameter types.

        Args:
            declaring_type: Qualified name of the owning type
            method_name: Method name
            parameter_type_names: Textual parameter types; None matches the
                first overload with that name

        Returns:
            The matching descriptor

        Raises:
            UnresolvedMemberError: If the type or a matching overload is unknown
        """
        info = self._types.get(declaring_type)
        if info is None:
            raise UnresolvedMemberError(f"Unknown type: {declaring_type}")

        wanted = None
        if parameter_type_names is not None:
            wanted = [type_name(parse_type(name)) or "object" for name in parameter_type_names]

        for method in info.methods:
            if method.name != method_name:
                continue
            if wanted is None or method.parameter_type_names == wanted:
                return method

        params = ", ".join(parameter_type_names or [])
        raise UnresolvedMemberError(
            f"Method not found: {declaring_type}.{method_name}({params})"
        )

    def __contains__(self, qualified_name: str) -> bool:
        return qualified_name in self._types

    def __repr__(self) -> str:
        return f"<ReferenceRegistry types={len(self._types)}>"


def default_registry() -> ReferenceRegistry:
    """
    Registry with a few standard-library references.

    Returns:
        A new registry containing math (static functions) and
        random.Random (instance type with a parameterless constructor)
    """
    math_methods = (
        MethodDescriptor("math", "sqrt", True, (ParameterDescriptor("x", DOUBLE),), DOUBLE),
        MethodDescriptor(
            "math", "pow", True,
            (ParameterDescriptor("x", DOUBLE), ParameterDescriptor("y", DOUBLE)),
            DOUBLE,
        ),
        MethodDescriptor("math", "floor", True, (ParameterDescriptor("x", DOUBLE),), INT),
        MethodDescriptor("math", "isclose", True, (
            ParameterDescriptor("a", DOUBLE),
            ParameterDescriptor("b", DOUBLE),
        ), BOOL),
    )
    random_t = "random.Random"
    random_methods = (
        MethodDescriptor(random_t, "seed", False, (
            ParameterDescriptor("a", INT, has_default=True, default=None),
        ), VOID),
        MethodDescriptor(random_t, "randint", False, (
            ParameterDescriptor("a", INT),
            ParameterDescriptor("b", INT),
        ), INT),
        MethodDescriptor(random_t, "random", False, (), DOUBLE),
        MethodDescriptor(random_t, "choice", False, (
            ParameterDescriptor("seq", ArrayType(STRING)),
        ), STRING),
    )
    return ReferenceRegistry([
        TypeInfo(qualified_name="math", is_module=True, methods=math_methods),
        TypeInfo(
            qualified_name=random_t,
            has_default_constructor=True,
            methods=random_methods,
        ),
    ])
